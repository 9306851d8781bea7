import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_analyzer, get_cover_letter_generator, get_task_manager
from config import settings
from models.requests import AnalyzeRequest, CoverLetterRequest
from models.responses import CoverLetterResponse, TaskStatusResponse, TemplateInfo
from models.schemas.analysis import AnalysisResult
from services.analysis_tasks import AnalysisTask, AnalysisTaskManager
from services.cover_letter import CoverLetterGenerator, GenerationInputError, get_available_templates
from services.providers import ProviderBadRequestError
from services.resume_analyzer import AnalysisInputError, ResumeAnalyzer

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


def _task_response(task: AnalysisTask) -> TaskStatusResponse:
    return TaskStatusResponse(
        task_id=task.id,
        status=task.status.value,
        analysis_type=task.analysis_type,
        result=task.result,
        error=task.error,
        created_at=task.created_at,
        completed_at=task.completed_at,
    )


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "gemini_configured": bool(settings.gemini_api_key),
        "embedding_backend": settings.embedding_backend,
        "cache": "redis" if settings.redis_url else "memory",
    }


@router.post("/analyze/quick", response_model=AnalysisResult)
@limiter.limit("10/minute")
async def analyze_quick(
    request: Request,
    body: AnalyzeRequest,
    analyzer: ResumeAnalyzer = Depends(get_analyzer),
):
    try:
        return await analyzer.analyze(body.resume_text, body.analysis_type, body.job_description)
    except AnalysisInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProviderBadRequestError as e:
        logger.error("Analysis rejected by provider: %s", e)
        raise HTTPException(status_code=502, detail="AI provider rejected the request")


@router.post("/analyze/tasks", response_model=TaskStatusResponse, status_code=202)
@limiter.limit("10/minute")
async def submit_analysis(
    request: Request,
    body: AnalyzeRequest,
    manager: AnalysisTaskManager = Depends(get_task_manager),
):
    try:
        task = manager.submit(body.resume_text, body.analysis_type, body.job_description)
    except AnalysisInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _task_response(task)


@router.get("/analyze/tasks/{task_id}", response_model=TaskStatusResponse)
async def get_analysis_task(
    task_id: str,
    manager: AnalysisTaskManager = Depends(get_task_manager),
):
    task = manager.get(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return _task_response(task)


@router.post("/cover-letter", response_model=CoverLetterResponse)
@limiter.limit("5/minute")
async def cover_letter(
    request: Request,
    body: CoverLetterRequest,
    generator: CoverLetterGenerator = Depends(get_cover_letter_generator),
):
    try:
        if body.versions > 1:
            versions = await generator.generate_multiple_versions(
                body.resume_text, body.job_description, body.job_title, body.company_name,
                count=body.versions,
            )
        else:
            versions = [
                await generator.generate(
                    body.resume_text, body.job_description, body.job_title, body.company_name,
                    tone=body.tone, template=body.template,
                )
            ]
    except GenerationInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProviderBadRequestError as e:
        logger.error("Cover letter rejected by provider: %s", e)
        raise HTTPException(status_code=502, detail="AI provider rejected the request")
    return CoverLetterResponse(versions=versions)


@router.get("/cover-letter/templates", response_model=list[TemplateInfo])
async def cover_letter_templates():
    return get_available_templates()
