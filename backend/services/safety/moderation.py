"""Content moderation: PII, harmful-content classification and profanity."""

import logging
import re

from models.schemas.safety import ModerationReport, ToxicityReport
from services.outcome import capture
from services.providers import ModerationProvider
from services.safety.pii import detect_pii

logger = logging.getLogger(__name__)

PROFANITY_RE = re.compile(r"\b(?:fuck|shit|damn|hell|asshole|bitch|bastard)\b", re.IGNORECASE)


def check_toxicity(content: str) -> ToxicityReport:
    if not content:
        return ToxicityReport()
    matches = PROFANITY_RE.findall(content)
    if not matches:
        return ToxicityReport()
    return ToxicityReport(
        is_toxic=True,
        issues=[f"Inappropriate language detected: {len(matches)} instance(s)"],
        severity="high" if len(matches) > 2 else "medium",
    )


def safety_status(score: int) -> str:
    if score >= 80:
        return "safe"
    if score >= 50:
        return "warning"
    return "unsafe"


async def moderate_content(
    content: str,
    provider: ModerationProvider | None = None,
    timeout: float | None = 15.0,
    use_classifier: bool = True,
) -> ModerationReport:
    """Run PII, classifier and profanity checks and combine them.

    Without a classifier (or with use_classifier False) the classifier
    check is marked skipped and treated as passing. Classifier failures
    are recorded in ``error`` and also treated as passing.
    """
    issues: list[str] = []
    warnings: list[str] = []

    pii = detect_pii(content)
    if pii.has_pii:
        issues.extend(pii.issues)
        warnings.append(
            f"Personal information detected: {len(pii.findings)} item(s). "
            "Please review and remove sensitive data before sharing."
        )

    flagged = False
    categories: dict[str, bool] = {}
    skipped = False
    error = None
    if provider is None or not use_classifier:
        skipped = True
    else:
        outcome = await capture(provider.classify(content), timeout=timeout)
        if outcome.ok:
            flagged = outcome.value.flagged
            categories = outcome.value.categories
        else:
            logger.error("Content moderation failed: %s", outcome.reason)
            error = outcome.reason or "Moderation check failed"

    flagged_categories = [c for c, hit in categories.items() if hit]
    if flagged or flagged_categories:
        flagged = True
        issues.append("Harmful or inappropriate content detected")
        warnings.append(
            "Content may contain harmful, hateful, or inappropriate material. "
            "Please review and revise before sharing."
        )

    toxicity = check_toxicity(content)
    if toxicity.is_toxic:
        issues.extend(toxicity.issues)
        warnings.append("Inappropriate language detected. Please use professional language.")

    score = 100
    if pii.has_pii:
        score -= 30
    if flagged:
        score -= 50
    if toxicity.is_toxic:
        score -= 20
    score = max(0, score)

    return ModerationReport(
        flagged=flagged,
        categories=categories,
        flagged_categories=flagged_categories,
        skipped=skipped,
        error=error,
        pii=pii,
        toxicity=toxicity,
        safety_score=score,
        status=safety_status(score),
        issues=issues,
        warnings=warnings,
    )
