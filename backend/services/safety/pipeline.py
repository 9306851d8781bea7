"""Runs every post-generation check on a cover letter and merges the results."""

import logging

from models.schemas.safety import SafetyReport
from services.providers import ModerationProvider
from services.safety.bias import detect_bias
from services.safety.hallucination import detect_hallucinations
from services.safety.moderation import moderate_content
from services.safety.quality import calculate_quality_score

logger = logging.getLogger(__name__)


class SafetyPipeline:
    def __init__(
        self,
        moderation_provider: ModerationProvider | None = None,
        moderation_enabled: bool = True,
        timeout: float | None = 15.0,
    ):
        self.moderation_provider = moderation_provider
        self.moderation_enabled = moderation_enabled
        self.timeout = timeout

    async def run(
        self,
        content: str,
        resume_text: str,
        job_description: str = "",
        job_title: str = "",
        company_name: str = "",
    ) -> SafetyReport:
        moderation = await moderate_content(
            content,
            provider=self.moderation_provider,
            timeout=self.timeout,
            use_classifier=self.moderation_enabled,
        )
        hallucination = detect_hallucinations(
            content, resume_text, job_description, job_title, company_name
        )
        bias = detect_bias(content)
        quality = calculate_quality_score(content, job_title, company_name, job_description)

        warnings = moderation.warnings + hallucination.warnings
        if bias.has_bias:
            warnings.append(bias.recommendation)
        issues = moderation.issues + hallucination.issues + bias.issues + quality.issues

        logger.info(
            "Safety checks: safety=%d confidence=%d bias=%d quality=%d",
            moderation.safety_score, hallucination.overall_confidence,
            bias.overall_score, quality.overall_score,
        )
        return SafetyReport(
            pii=moderation.pii,
            moderation=moderation,
            hallucination=hallucination,
            bias=bias,
            quality=quality,
            safety_score=moderation.safety_score,
            confidence=hallucination.overall_confidence,
            is_reliable=hallucination.is_reliable,
            grade=quality.grade,
            recommendation=hallucination.recommendation,
            warnings=warnings,
            issues=issues,
        )
