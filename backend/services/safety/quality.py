"""Structural quality score for a cover letter."""

import re

from models.schemas.safety import QualityMetrics, QualityReport

GREETING_RE = re.compile(r"^(?:Dear|Hello|Hi|To)\s+", re.IGNORECASE)
CLOSING_RE = re.compile(r"Sincerely|Best regards|Regards|Yours truly|Thank you", re.IGNORECASE)
PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")

ACTION_VERBS = [
    "achieved", "managed", "developed", "created", "improved", "increased", "led",
    "implemented", "designed", "built", "delivered", "executed", "optimized",
    "transformed", "established", "collaborated", "analyzed", "resolved",
]
ACTION_VERB_RE = re.compile(r"\b(?:" + "|".join(ACTION_VERBS) + r")\w*\b", re.IGNORECASE)

GENERIC_PHRASES = [
    "i am writing to apply",
    "i am interested in",
    "i believe i would be",
    "i am confident that",
]


def score_structure(content: str, job_title: str = "", company_name: str = "") -> QualityReport:
    """Start at 100 and deduct for each structural problem."""
    text = (content or "").strip()
    if not text:
        return QualityReport(valid=False, issues=["Cover letter content is missing or invalid"])

    issues: list[str] = []
    strengths: list[str] = []
    score = 100
    lowered = text.lower()

    word_count = len(text.split())
    if word_count < 150:
        issues.append("Cover letter is too short (minimum 150 words recommended)")
        score -= 20
    elif word_count > 600:
        issues.append("Cover letter is too long (maximum 600 words recommended)")
        score -= 10
    elif 250 <= word_count <= 400:
        strengths.append("Optimal length (250-400 words)")

    if GREETING_RE.match(text):
        strengths.append("Includes proper greeting")
    else:
        issues.append("Missing proper greeting (Dear Hiring Manager, etc.)")
        score -= 10

    if CLOSING_RE.search(text):
        strengths.append("Includes professional closing")
    else:
        issues.append("Missing professional closing")
        score -= 10

    paragraphs = [p for p in PARAGRAPH_SPLIT_RE.split(text) if p.strip()]
    if len(paragraphs) < 2:
        issues.append("Too few paragraphs (recommended: 3-4 paragraphs)")
        score -= 15
    elif len(paragraphs) > 5:
        issues.append("Too many paragraphs (recommended: 3-4 paragraphs)")
        score -= 5
    else:
        strengths.append("Good paragraph structure")

    if job_title:
        if job_title.lower() in lowered:
            strengths.append("Mentions job title")
        else:
            issues.append("Job title not mentioned in cover letter")
            score -= 10

    if company_name:
        if company_name.lower() in lowered:
            strengths.append("Mentions company name")
        else:
            issues.append("Company name not mentioned in cover letter")
            score -= 10

    if ACTION_VERB_RE.search(text):
        strengths.append("Uses action verbs effectively")
    else:
        issues.append("Limited use of action verbs")
        score -= 5

    if re.search(r"\d", text):
        strengths.append("Includes quantifiable achievements")
    else:
        issues.append("No quantifiable achievements mentioned")
        score -= 5

    if sum(1 for phrase in GENERIC_PHRASES if phrase in lowered) > 2:
        issues.append("Contains too many generic phrases")
        score -= 10

    sentences = [s for s in SENTENCE_SPLIT_RE.split(text) if s.strip()]
    avg_sentence = sum(len(s.split()) for s in sentences) / len(sentences) if sentences else 0.0
    if avg_sentence > 25:
        issues.append("Sentences are too long (affects readability)")
        score -= 5
    elif 15 <= avg_sentence <= 20:
        strengths.append("Good sentence length for readability")

    score = max(0, score)
    return QualityReport(
        valid=not issues or score >= 60,
        structure_score=score,
        issues=issues,
        strengths=strengths,
        metrics=QualityMetrics(
            word_count=word_count,
            char_count=len(text),
            paragraph_count=len(paragraphs),
            sentence_count=len(sentences),
            avg_sentence_length=round(avg_sentence, 1),
        ),
    )


def keyword_relevance(content: str, job_description: str) -> int:
    """Share of the first 20 meaningful job description words found in content."""
    if not job_description:
        return 0
    words = [w for w in job_description.lower().split() if len(w) > 4][:20]
    if not words:
        return 0
    lowered = (content or "").lower()
    matched = sum(1 for w in words if w in lowered)
    return round(min(100.0, matched / len(words) * 100))


def quality_grade(score: int) -> str:
    if score >= 95:
        return "A+"
    if score >= 90:
        return "A"
    if score >= 85:
        return "B+"
    if score >= 80:
        return "B"
    if score >= 70:
        return "C"
    if score >= 60:
        return "D"
    return "F"


def calculate_quality_score(
    content: str,
    job_title: str = "",
    company_name: str = "",
    job_description: str = "",
) -> QualityReport:
    """overall = 0.7 * structure + 0.3 * job description keyword relevance."""
    report = score_structure(content, job_title, company_name)
    relevance = keyword_relevance(content, job_description)
    overall = round(report.structure_score * 0.7 + relevance * 0.3)
    return report.model_copy(
        update={
            "relevance_score": relevance,
            "overall_score": overall,
            "grade": quality_grade(overall),
        }
    )
