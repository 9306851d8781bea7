"""Orchestrator: hybrid rule-based + AI resume analysis.

Pipeline:
1. Sanitize and validate input
2. Cache lookup (content hash of resume, analysis type, job description)
3. Section parsing
4. Rule-based scores for contact info, skills and formatting
5. Embedding-based skill relevance (feeds the skills score)
6. Gemini scores for summary, experience, education and achievements
7. Merge, validate/normalize, cache and return

If the provider is unconfigured, unavailable, over quota or times out the
pipeline returns the heuristic fallback analysis instead.
"""

import logging
import time

from pydantic import ValidationError

from config import Settings
from models.schemas.analysis import (
    AI_SECTIONS,
    ANALYSIS_TYPES,
    DETERMINISTIC_SECTIONS,
    AnalysisResult,
    SectionScores,
)
from services import prompt_builder
from services.analysis_validator import normalize_analysis, validate_analysis
from services.cache import CacheBackend, InMemoryCache, content_hash
from services.fallback_analysis import generate_fallback_analysis
from services.gemini_client import parse_json_response
from services.outcome import OutcomeStatus, capture
from services.providers import EmbeddingProvider, GenerationOptions, TextProvider
from services.rule_based_scoring import (
    calculate_overall_score,
    score_contact_info,
    score_formatting,
    score_skills,
)
from services.sanitizer import sanitize_text, truncate
from services.section_parser import find_missing_skills, segment_resume
from services.similarity import SemanticRelevanceEngine

logger = logging.getLogger(__name__)


class AnalysisInputError(ValueError):
    """The request cannot be analyzed as given."""


class ResumeAnalyzer:
    def __init__(
        self,
        settings: Settings,
        text_provider: TextProvider | None = None,
        embedding_provider: EmbeddingProvider | None = None,
        cache: CacheBackend | None = None,
    ):
        self.settings = settings
        self.text_provider = text_provider
        self.cache = cache if cache is not None else InMemoryCache()
        self.relevance_engine = SemanticRelevanceEngine(
            embedding_provider,
            chunk_size=settings.relevance_chunk_size,
            timeout=settings.embedding_timeout_seconds,
        )

    def _prepare(
        self, resume_text: str, analysis_type: str, job_description: str | None
    ) -> tuple[str, str, list[str]]:
        if analysis_type not in ANALYSIS_TYPES:
            raise AnalysisInputError(
                f"Unsupported analysis type '{analysis_type}'. Expected one of: {', '.join(ANALYSIS_TYPES)}"
            )

        warnings: list[str] = []
        resume, cut = truncate(sanitize_text(resume_text), self.settings.max_resume_length)
        if cut:
            warnings.append(f"Resume truncated to {self.settings.max_resume_length} characters")
        jd, cut = truncate(sanitize_text(job_description), self.settings.max_job_description_length)
        if cut:
            warnings.append(
                f"Job description truncated to {self.settings.max_job_description_length} characters"
            )

        if len(resume) < self.settings.min_resume_length:
            raise AnalysisInputError(
                f"Resume text is too short (minimum {self.settings.min_resume_length} characters)"
            )
        if analysis_type == "jd_match" and not jd:
            raise AnalysisInputError("A job description is required for jd_match analysis")
        return resume, jd, warnings

    def validate_input(
        self, resume_text: str, analysis_type: str = "general", job_description: str | None = None
    ) -> None:
        """Raise AnalysisInputError if the request cannot be analyzed."""
        self._prepare(resume_text, analysis_type, job_description)

    async def _cached(self, key: str) -> AnalysisResult | None:
        raw = await self.cache.get(key)
        if raw is None:
            return None
        try:
            result = AnalysisResult.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding unreadable cache entry %s: %s", key[:8], e)
            return None
        return result.model_copy(update={"cached": True})

    async def analyze(
        self,
        resume_text: str,
        analysis_type: str = "general",
        job_description: str | None = None,
    ) -> AnalysisResult:
        """Run the full analysis pipeline for one resume."""
        started = time.perf_counter()
        resume, jd, warnings = self._prepare(resume_text, analysis_type, job_description)

        cache_key = content_hash(resume, analysis_type, jd)
        hit = await self._cached(cache_key)
        if hit is not None:
            logger.info("Analysis cache hit %s", cache_key[:8])
            return hit

        if self.text_provider is None:
            logger.warning("No text provider configured, using fallback analysis")
            return generate_fallback_analysis(analysis_type, resume, reason="provider not configured")

        # --- Deterministic layer ---
        sections = segment_resume(resume)
        relevance = await self.relevance_engine.score(sections.skills, resume)
        rule_scores = {
            "contact_info": score_contact_info(sections.contact),
            "skills": score_skills(sections.skills, resume, relevance_score=relevance.score),
            "formatting": score_formatting(sections.detected_sections, resume),
        }

        # --- AI layer ---
        prompt = prompt_builder.build_analysis_prompt(
            analysis_type,
            sections,
            resume,
            job_description=jd,
            rule_scores=rule_scores,
            relevance_score=relevance.score if relevance.metadata.embeddings_used else None,
        )
        outcome = await capture(
            self.text_provider.generate(
                prompt_builder.ANALYSIS_SYSTEM_PROMPT,
                prompt,
                GenerationOptions(
                    temperature=self.settings.analysis_temperature,
                    max_tokens=self.settings.analysis_max_output_tokens,
                    response_format="json",
                ),
            ),
            timeout=self.settings.analysis_timeout_seconds,
        )
        if outcome.status is OutcomeStatus.DEGRADED:
            return generate_fallback_analysis(analysis_type, resume, reason=outcome.reason)
        if outcome.status is OutcomeStatus.FATAL:
            raise outcome.error

        response = outcome.value
        payload = parse_json_response(response.text)
        if payload is None:
            warnings.append("AI response was not valid JSON; AI-scored sections default to 0")
            payload = {}
        report = validate_analysis(payload, analysis_type)
        if not report.valid:
            logger.warning("AI analysis failed schema validation: %s", report.errors[:5])
            warnings.append(f"AI response normalized ({len(report.errors)} schema issue(s))")
        analysis = normalize_analysis(payload, analysis_type)

        # --- Merge: AI never overrides the rule-based dimensions ---
        ai_scores = analysis.section_scores.present()
        merged = {name: ai_scores.get(name, 0) for name in AI_SECTIONS}
        merged.update({name: rule_scores[name] for name in DETERMINISTIC_SECTIONS})
        if "ats_optimization" in ai_scores:
            merged["ats_optimization"] = ai_scores["ats_optimization"]

        skills_analysis = analysis.skills_analysis.model_copy(
            update={
                "detected": analysis.skills_analysis.detected or sections.skills,
                "missing": analysis.skills_analysis.missing or find_missing_skills(jd, sections.skills),
                "relevance_score": round(relevance.score),
                "relevance_metadata": relevance.metadata,
            }
        )
        analysis = analysis.model_copy(
            update={
                "overall_score": calculate_overall_score(merged),
                "section_scores": SectionScores(**merged),
                "skills_analysis": skills_analysis,
            }
        )

        result = AnalysisResult(
            analysis=analysis,
            model=response.model or self.settings.gemini_model,
            tokens_used=response.input_tokens + response.output_tokens,
            processing_time_ms=int((time.perf_counter() - started) * 1000),
            warnings=warnings,
            raw_response=response.text,
        )
        await self.cache.set_with_ttl(
            cache_key, result.model_dump_json(), self.settings.analysis_cache_ttl_seconds
        )
        logger.info(
            "Analysis %s complete: overall=%d tokens=%d", cache_key[:8],
            result.overall_score, result.tokens_used,
        )
        return result
