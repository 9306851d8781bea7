"""Heuristic analysis used when the AI provider cannot be reached.

Never calls a provider and never raises; always returns a complete
AnalysisResult of the requested type.
"""

import re

from models.schemas.analysis import AnalysisResult
from services.analysis_validator import normalize_analysis
from services.rule_based_scoring import calculate_overall_score

FALLBACK_MODEL = "fallback"
MAX_FALLBACK_SCORE = 85

_EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
_PHONE_RE = re.compile(r"\(?\b\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b")
_EXPERIENCE_RE = re.compile(r"experience|work|employment|position|role", re.IGNORECASE)
_EDUCATION_RE = re.compile(r"education|degree|university|college|bachelor|master", re.IGNORECASE)
_SKILLS_RE = re.compile(r"skills|technical|proficient|expert", re.IGNORECASE)


def heuristic_section_scores(resume_text: str) -> dict[str, int]:
    word_count = len(resume_text.split())
    has_contact = bool(_EMAIL_RE.search(resume_text) and _PHONE_RE.search(resume_text))
    return {
        "contact_info": 80 if has_contact else 40,
        "summary": 70 if word_count > 200 else 50,
        "experience": 75 if _EXPERIENCE_RE.search(resume_text) else 40,
        "education": 70 if _EDUCATION_RE.search(resume_text) else 40,
        "skills": 70 if _SKILLS_RE.search(resume_text) else 40,
        "achievements": 60,
        "formatting": 65,
        "ats_optimization": 60,
    }


def generate_fallback_analysis(
    analysis_type: str,
    resume_text: str,
    reason: str = "",
) -> AnalysisResult:
    """Build a complete, clearly degraded analysis from simple text heuristics."""
    section_scores = heuristic_section_scores(resume_text)
    overall = min(MAX_FALLBACK_SCORE, calculate_overall_score(section_scores))

    payload = {
        "overall_score": overall,
        "section_scores": section_scores,
        "strengths": [
            {"category": "Content", "description": "Resume contains key sections", "examples": []},
        ],
        "weaknesses": [
            {
                "category": "Analysis",
                "description": "Detailed analysis requires AI service",
                "impact": "Limited insights available",
                "suggestions": ["Try again when AI service is available"],
            },
        ],
        "recommendations": [
            {
                "priority": "medium",
                "category": "System",
                "title": "AI Analysis Unavailable",
                "description": "AI-powered analysis is currently unavailable. Please try again later for detailed insights.",
                "action_items": [],
            },
        ],
    }

    warnings = ["AI analysis unavailable; scores are heuristic estimates"]
    if reason:
        warnings.append(f"Fallback reason: {reason}")

    return AnalysisResult(
        analysis=normalize_analysis(payload, analysis_type),
        model=FALLBACK_MODEL,
        tokens_used=0,
        cached=False,
        degraded=True,
        warnings=warnings,
    )
