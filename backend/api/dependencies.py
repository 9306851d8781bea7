"""Shared dependencies for API routes.

The pipelines are built once per process from ``settings``; tests replace
them through ``app.dependency_overrides``.
"""

from functools import lru_cache

from config import settings
from services.analysis_tasks import AnalysisTaskManager
from services.cache import CacheBackend, build_cache
from services.cover_letter import CoverLetterGenerator
from services.gemini_client import (
    build_embedding_provider,
    build_moderation_provider,
    build_text_provider,
)
from services.resume_analyzer import ResumeAnalyzer
from services.safety.pipeline import SafetyPipeline


@lru_cache
def get_cache() -> CacheBackend:
    return build_cache(settings.redis_url, max_entries=settings.memory_cache_max_entries)


@lru_cache
def get_analyzer() -> ResumeAnalyzer:
    return ResumeAnalyzer(
        settings,
        text_provider=build_text_provider(settings),
        embedding_provider=build_embedding_provider(settings),
        cache=get_cache(),
    )


@lru_cache
def get_cover_letter_generator() -> CoverLetterGenerator:
    safety = SafetyPipeline(
        moderation_provider=build_moderation_provider(settings),
        moderation_enabled=settings.moderation_enabled,
        timeout=settings.moderation_timeout_seconds,
    )
    return CoverLetterGenerator(
        settings,
        text_provider=build_text_provider(settings),
        cache=get_cache(),
        safety_pipeline=safety,
    )


@lru_cache
def get_task_manager() -> AnalysisTaskManager:
    return AnalysisTaskManager(
        get_analyzer(),
        retention_seconds=settings.task_retention_seconds,
        max_tasks=settings.max_tasks,
    )
