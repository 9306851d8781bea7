"""Cover letter generation with retry, truncation, caching and safety checks.

Pipeline:
1. Sanitize and validate input (both texts at least 50 characters)
2. Truncate to the per-field caps, then to the prompt token budget
3. Cache lookup (resume, job description, title, company, tone, template)
4. Gemini call, retried with exponential backoff on transient errors
5. Cost, safety and quality checks, cache and return

If the provider is unconfigured, unavailable, or keeps failing, a generic
template personalized with the job title and company is returned instead.
"""

import asyncio
import logging
import math
import time

from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config import Settings
from models.schemas.generation import CostBreakdown, GenerationMetadata, GenerationResult
from services import prompt_builder
from services.cache import CacheBackend, InMemoryCache, content_hash
from services.providers import (
    GenerationOptions,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    TextProvider,
    TextResponse,
    TransientProviderError,
)
from services.safety.pipeline import SafetyPipeline
from services.sanitizer import sanitize_text, truncate

logger = logging.getLogger(__name__)

FALLBACK_MODEL = "fallback"
MAX_VERSIONS = 2


class GenerationInputError(ValueError):
    """The cover letter request cannot be generated as given."""


def estimate_tokens(text: str) -> int:
    """Rough token count, about 4 characters per token."""
    return math.ceil(len(text or "") / 4)


def calculate_cost(input_tokens: int, output_tokens: int, cfg: Settings) -> CostBreakdown:
    input_cost = input_tokens / 1_000_000 * cfg.input_cost_per_million
    output_cost = output_tokens / 1_000_000 * cfg.output_cost_per_million
    return CostBreakdown(
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        input_cost=round(input_cost, 4),
        output_cost=round(output_cost, 4),
        total_cost=round(input_cost + output_cost, 4),
    )


def fallback_cover_letter(job_title: str, company_name: str) -> str:
    """Generic letter that only uses the job title and company name."""
    return f"""Dear Hiring Manager,

I am writing to express my strong interest in the {job_title} position at {company_name}. I am excited about the opportunity to contribute to your team and believe my skills and experience align well with your requirements.

Throughout my career, I have developed a strong foundation in my field and have consistently delivered results. I am confident that I can bring value to {company_name} and help achieve your organizational goals.

I would welcome the opportunity to discuss how my background, skills, and enthusiasm can contribute to your team. Thank you for considering my application.

Sincerely,
[Your Name]"""


def get_available_templates() -> list[dict[str, str]]:
    return [{"id": key, **info} for key, info in prompt_builder.TEMPLATES.items()]


class CoverLetterGenerator:
    def __init__(
        self,
        settings: Settings,
        text_provider: TextProvider | None = None,
        cache: CacheBackend | None = None,
        safety_pipeline: SafetyPipeline | None = None,
    ):
        self.settings = settings
        self.text_provider = text_provider
        self.cache = cache if cache is not None else InMemoryCache()
        self.safety_pipeline = safety_pipeline or SafetyPipeline(
            moderation_enabled=settings.moderation_enabled,
            timeout=settings.moderation_timeout_seconds,
        )

    def _prepare(
        self,
        resume_text: str,
        job_description: str,
        job_title: str,
        company_name: str,
        tone: str,
        template: str,
    ) -> tuple[str, str, str, str, list[str]]:
        cfg = self.settings
        if tone not in prompt_builder.TONES:
            raise GenerationInputError(
                f"Unsupported tone '{tone}'. Expected one of: {', '.join(prompt_builder.TONES)}"
            )
        if template not in prompt_builder.TEMPLATES:
            raise GenerationInputError(
                f"Unsupported template '{template}'. Expected one of: {', '.join(prompt_builder.TEMPLATES)}"
            )

        resume = sanitize_text(resume_text)
        jd = sanitize_text(job_description)
        title = sanitize_text(job_title)
        company = sanitize_text(company_name)
        if len(resume) < cfg.cover_letter_min_input_length:
            raise GenerationInputError(
                f"Resume text must be at least {cfg.cover_letter_min_input_length} characters"
            )
        if len(jd) < cfg.cover_letter_min_input_length:
            raise GenerationInputError(
                f"Job description must be at least {cfg.cover_letter_min_input_length} characters"
            )
        if not title or not company:
            raise GenerationInputError("Job title and company name are required")

        warnings: list[str] = []
        original = len(resume)
        resume, cut = truncate(resume, cfg.cover_letter_max_resume_length)
        if cut:
            warnings.append(
                f"Resume text was truncated from {original} to {cfg.cover_letter_max_resume_length} characters"
            )
        original = len(jd)
        jd, cut = truncate(jd, cfg.cover_letter_max_job_description_length)
        if cut:
            warnings.append(
                f"Job description was truncated from {original} to "
                f"{cfg.cover_letter_max_job_description_length} characters"
            )

        resume, jd = self._fit_token_budget(resume, jd, warnings)
        return resume, jd, title, company, warnings

    def _fit_token_budget(self, resume: str, jd: str, warnings: list[str]) -> tuple[str, str]:
        """Shrink both texts proportionally when the prompt would exceed the budget."""
        cfg = self.settings
        fixed = estimate_tokens("x" * prompt_builder.prompt_overhead_chars()) + cfg.estimated_output_tokens
        variable = estimate_tokens(resume) + estimate_tokens(jd)
        if fixed + variable <= cfg.max_prompt_tokens:
            return resume, jd

        ratio = max(0.0, (cfg.max_prompt_tokens - fixed) / variable) * 0.9
        new_resume = resume[: int(len(resume) * ratio)]
        new_jd = jd[: int(len(jd) * ratio)]
        warnings.append(
            f"Resume text was truncated from {len(resume)} to {len(new_resume)} characters to fit the token limit"
        )
        warnings.append(
            f"Job description was truncated from {len(jd)} to {len(new_jd)} characters to fit the token limit"
        )
        logger.warning("Prompt over token budget (%d tokens), truncated by %.2f", fixed + variable, ratio)
        return new_resume, new_jd

    async def _cached(self, key: str) -> GenerationResult | None:
        raw = await self.cache.get(key)
        if raw is None:
            return None
        try:
            result = GenerationResult.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding unreadable cache entry %s: %s", key[:8], e)
            return None
        return result.model_copy(update={"cached": True})

    async def _call_with_retry(self, system_prompt: str, user_prompt: str) -> TextResponse:
        cfg = self.settings
        options = GenerationOptions(
            temperature=cfg.cover_letter_temperature,
            max_tokens=cfg.cover_letter_max_output_tokens,
        )
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(cfg.cover_letter_max_retries),
            wait=wait_exponential(multiplier=cfg.cover_letter_retry_delay_seconds),
            retry=retry_if_exception_type(TransientProviderError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                try:
                    return await asyncio.wait_for(
                        self.text_provider.generate(system_prompt, user_prompt, options),
                        timeout=cfg.cover_letter_timeout_seconds,
                    )
                except asyncio.TimeoutError:
                    raise ProviderTimeoutError(
                        f"cover letter generation timed out after {cfg.cover_letter_timeout_seconds}s"
                    )

    def _fallback(
        self, job_title: str, company_name: str, tone: str, template: str,
        warnings: list[str], reason: str, started: float,
    ) -> GenerationResult:
        logger.warning("Using fallback cover letter: %s", reason)
        content = fallback_cover_letter(job_title, company_name)
        return GenerationResult(
            content=content,
            template=template,
            tone=tone,
            fallback=True,
            warnings=warnings + [f"AI generation unavailable ({reason}); a generic template was used"],
            metadata=GenerationMetadata(
                word_count=len(content.split()),
                character_count=len(content),
                ai_model=FALLBACK_MODEL,
                processing_time_ms=int((time.perf_counter() - started) * 1000),
            ),
        )

    async def generate(
        self,
        resume_text: str,
        job_description: str,
        job_title: str,
        company_name: str,
        tone: str = "professional",
        template: str = "traditional",
    ) -> GenerationResult:
        """Generate one cover letter for the given resume and job."""
        started = time.perf_counter()
        resume, jd, title, company, warnings = self._prepare(
            resume_text, job_description, job_title, company_name, tone, template
        )

        cache_key = content_hash(resume, jd, title, company, tone, template)
        hit = await self._cached(cache_key)
        if hit is not None:
            logger.info("Cover letter cache hit %s", cache_key[:8])
            return hit

        if self.text_provider is None:
            return self._fallback(title, company, tone, template, warnings, "provider not configured", started)

        user_prompt = prompt_builder.build_cover_letter_prompt(resume, jd, title, company, tone, template)
        estimated = (
            estimate_tokens(prompt_builder.COVER_LETTER_SYSTEM_PROMPT)
            + estimate_tokens(user_prompt)
            + self.settings.estimated_output_tokens
        )
        try:
            response = await self._call_with_retry(prompt_builder.COVER_LETTER_SYSTEM_PROMPT, user_prompt)
        except ProviderUnavailableError as e:
            logger.error("Cover letter generation failed: %s", e)
            return self._fallback(title, company, tone, template, warnings, str(e) or type(e).__name__, started)

        content = (response.text or "").strip()
        if len(content) < self.settings.cover_letter_min_content_length:
            logger.warning("Generated cover letter too short (%d chars)", len(content))
            return self._fallback(title, company, tone, template, warnings, "generated content too short", started)

        cost = calculate_cost(response.input_tokens, response.output_tokens, self.settings)
        safety = await self.safety_pipeline.run(content, resume, jd, title, company)

        result = GenerationResult(
            content=content,
            template=template,
            tone=tone,
            warnings=warnings + safety.warnings,
            issues=safety.issues,
            metadata=GenerationMetadata(
                word_count=len(content.split()),
                character_count=len(content),
                ai_model=response.model or self.settings.gemini_model,
                tokens_used=response.input_tokens + response.output_tokens,
                estimated_tokens=estimated,
                processing_time_ms=int((time.perf_counter() - started) * 1000),
                cost=cost.total_cost,
                cost_breakdown=cost,
                quality_score=safety.quality.overall_score,
                quality_grade=safety.quality.grade,
                safety=safety,
            ),
        )
        await self.cache.set_with_ttl(
            cache_key, result.model_dump_json(), self.settings.cover_letter_cache_ttl_seconds
        )
        logger.info(
            "Cover letter %s generated: words=%d tokens=%d cost=$%.4f",
            cache_key[:8], result.metadata.word_count, result.metadata.tokens_used, cost.total_cost,
        )
        return result

    async def generate_multiple_versions(
        self,
        resume_text: str,
        job_description: str,
        job_title: str,
        company_name: str,
        count: int = 2,
    ) -> list[GenerationResult]:
        """Generate up to two versions, varying template and tone.

        A version whose provider call is rejected is logged and skipped.
        """
        templates = list(prompt_builder.TEMPLATES)
        tones = list(prompt_builder.TONES)
        versions = []
        for i in range(min(count, MAX_VERSIONS)):
            try:
                versions.append(
                    await self.generate(
                        resume_text,
                        job_description,
                        job_title,
                        company_name,
                        tone=tones[i % len(tones)],
                        template=templates[i % len(templates)],
                    )
                )
            except ProviderError as e:
                logger.error("Failed to generate version %d: %s", i + 1, e)
        return versions
