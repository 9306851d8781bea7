from typing import Literal

from pydantic import BaseModel, Field


class AnalyzeRequest(BaseModel):
    resume_text: str = Field(..., max_length=50000, description="Plain text resume content")
    analysis_type: Literal["general", "ats", "jd_match"] = "general"
    job_description: str | None = Field(None, max_length=10000, description="Job description text")


class CoverLetterRequest(BaseModel):
    resume_text: str = Field(..., max_length=50000, description="Plain text resume content")
    job_description: str = Field(..., max_length=10000, description="Job description text")
    job_title: str = Field(..., max_length=200)
    company_name: str = Field(..., max_length=200)
    tone: str = "professional"
    template: str = "traditional"
    versions: int = Field(1, ge=1, le=2, description="Number of versions to generate")
