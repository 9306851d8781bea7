from datetime import datetime

from pydantic import BaseModel

from models.schemas.analysis import AnalysisResult
from models.schemas.generation import GenerationResult


class TaskStatusResponse(BaseModel):
    task_id: str
    status: str
    analysis_type: str
    result: AnalysisResult | None = None
    error: str | None = None
    created_at: datetime
    completed_at: datetime | None = None


class CoverLetterResponse(BaseModel):
    versions: list[GenerationResult] = []


class TemplateInfo(BaseModel):
    id: str
    name: str
    description: str
