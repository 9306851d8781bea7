"""Validation and normalization of analysis JSON returned by the provider.

``validate_analysis`` reports whether a payload already satisfies the
schema of its analysis type. ``normalize_analysis`` always produces a
complete, schema-valid record from whatever usable data the payload has.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import TypeAdapter, ValidationError

from models.schemas.analysis import (
    ANALYSIS_TYPES,
    AnalysisVariant,
    SectionScores,
)

logger = logging.getLogger(__name__)

_variant_adapter: TypeAdapter = TypeAdapter(AnalysisVariant)

_PRIORITIES = {"high", "medium", "low"}
_ATS_ISSUE_TYPES = {"keyword", "formatting", "structure", "content"}
_ATS_SEVERITIES = {"critical", "high", "medium", "low"}


@dataclass
class ValidationReport:
    valid: bool
    errors: list[dict[str, str]] = field(default_factory=list)


def validate_analysis(payload: Any, analysis_type: str) -> ValidationReport:
    """Check payload against the schema for analysis_type without altering it."""
    if not isinstance(payload, dict):
        return ValidationReport(False, [{"path": "", "message": "Analysis response must be an object"}])
    if analysis_type not in ANALYSIS_TYPES:
        analysis_type = "general"
    try:
        _variant_adapter.validate_python({**payload, "analysis_type": analysis_type})
    except ValidationError as e:
        return ValidationReport(
            False,
            [
                {"path": ".".join(str(p) for p in err["loc"][1:]), "message": err["msg"]}
                for err in e.errors()
            ],
        )
    return ValidationReport(True)


def clamp_score(value: Any, default: int | None = 0) -> int | None:
    """Coerce to an int in [0, 100]. Unparseable values become default."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number:  # NaN
        return default
    return max(0, min(100, round(number)))


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _str_list(value: Any) -> list[str]:
    return [str(v) for v in _as_list(value) if isinstance(v, (str, int, float)) and str(v).strip()]


def _number_or_none(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def normalize_section_scores(raw: Any) -> dict[str, int]:
    scores = {}
    for name in SectionScores.model_fields:
        if name in _as_dict(raw):
            score = clamp_score(raw[name], default=None)
            if score is not None:
                scores[name] = score
    return scores


def _normalize_strengths(items: Any) -> list[dict]:
    result = []
    for item in _as_list(items):
        if isinstance(item, str):
            item = {"description": item}
        if not isinstance(item, dict) or not item.get("description"):
            continue
        result.append({
            "category": str(item.get("category") or "General"),
            "description": str(item["description"]),
            "examples": _str_list(item.get("examples")),
        })
    return result


def _normalize_weaknesses(items: Any) -> list[dict]:
    result = []
    for item in _as_list(items):
        if isinstance(item, str):
            item = {"description": item}
        if not isinstance(item, dict) or not item.get("description"):
            continue
        result.append({
            "category": str(item.get("category") or "General"),
            "description": str(item["description"]),
            "impact": str(item.get("impact") or ""),
            "suggestions": _str_list(item.get("suggestions")),
        })
    return result


def _normalize_recommendations(items: Any) -> list[dict]:
    result = []
    for item in _as_list(items):
        if isinstance(item, str):
            item = {"title": item, "description": item}
        if not isinstance(item, dict):
            continue
        title = item.get("title") or item.get("description")
        if not title:
            continue
        priority = str(item.get("priority", "")).lower()
        result.append({
            "priority": priority if priority in _PRIORITIES else "medium",
            "category": str(item.get("category") or "General"),
            "title": str(title),
            "description": str(item.get("description") or title),
            "action_items": _str_list(item.get("action_items") or item.get("actionItems")),
        })
    return result


def _normalize_skills_analysis(raw: Any) -> dict:
    raw = _as_dict(raw)
    categorized = _as_dict(raw.get("categorized"))
    return {
        "detected": _str_list(raw.get("detected")),
        "missing": _str_list(raw.get("missing")),
        "recommendations": _str_list(raw.get("recommendations")),
        "categorized": {k: _str_list(categorized.get(k)) for k in ("technical", "soft", "industry", "other")},
    }


def _normalize_ats(raw: Any) -> dict:
    raw = _as_dict(raw)
    issues = []
    for item in _as_list(raw.get("issues")):
        if not isinstance(item, dict):
            continue
        issues.append({
            "type": item.get("type") if item.get("type") in _ATS_ISSUE_TYPES else None,
            "severity": item.get("severity") if item.get("severity") in _ATS_SEVERITIES else None,
            "description": str(item.get("description") or ""),
            "location": str(item.get("location") or ""),
            "fix": str(item.get("fix") or ""),
        })
    optimizations = [
        {
            "category": str(o.get("category") or ""),
            "suggestion": str(o.get("suggestion") or ""),
            "impact": str(o.get("impact") or ""),
        }
        for o in _as_list(raw.get("optimizations"))
        if isinstance(o, dict)
    ]
    keywords = _as_dict(raw.get("keywords"))
    return {
        "score": clamp_score(raw.get("score"), default=None),
        "issues": issues,
        "optimizations": optimizations,
        "keywords": {
            "found": _str_list(keywords.get("found")),
            "missing": _str_list(keywords.get("missing")),
            "density": _number_or_none(keywords.get("density")),
        },
    }


def _normalize_match_block(raw: Any, positive: str, negative: str) -> dict:
    raw = _as_dict(raw)
    return {
        positive: _str_list(raw.get(positive)),
        negative: _str_list(raw.get(negative)),
        "percentage": _number_or_none(raw.get("percentage")),
    }


def _normalize_jd_match(raw: Any) -> dict:
    raw = _as_dict(raw)
    return {
        "score": clamp_score(raw.get("score"), default=None),
        "skills_match": _normalize_match_block(raw.get("skills_match"), "matched", "missing"),
        "requirements_match": _normalize_match_block(raw.get("requirements_match"), "met", "unmet"),
        "recommendations": _str_list(raw.get("recommendations")),
    }


def normalize_analysis(payload: Any, analysis_type: str) -> AnalysisVariant:
    """Coerce payload into a complete analysis record of the given type.

    Scores are clamped, missing arrays default to [] and missing maps to
    empty objects. Items that cannot be repaired are dropped.
    """
    payload = _as_dict(payload)
    if analysis_type not in ANALYSIS_TYPES:
        analysis_type = "general"

    data: dict[str, Any] = {
        "analysis_type": analysis_type,
        "overall_score": clamp_score(payload.get("overall_score"), default=0),
        "section_scores": normalize_section_scores(payload.get("section_scores")),
        "strengths": _normalize_strengths(payload.get("strengths")),
        "weaknesses": _normalize_weaknesses(payload.get("weaknesses")),
        "recommendations": _normalize_recommendations(payload.get("recommendations")),
        "skills_analysis": _normalize_skills_analysis(payload.get("skills_analysis")),
    }
    if analysis_type == "ats":
        data["ats_analysis"] = _normalize_ats(payload.get("ats_analysis"))
    elif analysis_type == "jd_match":
        data["job_description_match"] = _normalize_jd_match(payload.get("job_description_match"))

    return _variant_adapter.validate_python(data)
