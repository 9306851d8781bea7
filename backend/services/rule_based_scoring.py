"""Deterministic section scoring. Every function returns an int in 0-100."""

import re

from models.schemas.analysis import SECTION_WEIGHTS
from models.schemas.sections import ContactInfo
from services.section_parser import EMAIL_RE, PHONE_RE

# Whole-skill matches for well-known named technologies
SPECIFIC_TECH_PATTERNS = [
    re.compile(r"^(?:javascript|typescript|python|java|c\+\+|c#|go|rust|swift|kotlin|php|ruby|scala|r)$"),
    re.compile(r"^(?:react|vue|angular|svelte|next\.js|nuxt\.js|gatsby)$"),
    re.compile(r"^(?:node\.js|express|django|flask|fastapi|spring|laravel|rails|asp\.net)$"),
    re.compile(r"^(?:aws|azure|gcp|docker|kubernetes|terraform|ansible)$"),
    re.compile(r"^(?:mongodb|postgresql|mysql|redis|elasticsearch|dynamodb)$"),
    re.compile(r"^(?:git|jenkins|ci/cd|gitlab|github actions|circleci)$"),
]

PROCESS_KEYWORDS = [
    "agile", "scrum", "devops", "microservices", "api", "rest", "graphql",
    "test", "testing", "tdd", "bdd", "ci/cd", "deployment", "scalable",
    "performance", "optimization", "security", "authentication", "authorization",
]

STANDARD_SECTIONS = ("experience", "education", "skills", "summary")

NUMERIC_DATE_RE = re.compile(r"\d{1,2}[/-]\d{1,2}[/-]\d{2,4}")
MONTH_DATE_RE = re.compile(
    r"\b(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?\s+\d{4}\b",
    re.IGNORECASE,
)
BULLET_RE = re.compile(r"^\s*[-•*]\s", re.MULTILINE)
BLANK_LINE_RE = re.compile(r"\n\s*\n")


def _tier(count: int, tiers: list[tuple[int, int]]) -> int:
    """Points for the first (threshold, points) pair that count reaches."""
    for threshold, points in tiers:
        if count >= threshold:
            return points
    return 0


def score_contact_info(contact: ContactInfo) -> int:
    """25 points each for email, phone, profile link and location."""
    score = 0
    if contact.email and EMAIL_RE.search(contact.email):
        score += 25
    if contact.phone and PHONE_RE.search(contact.phone):
        score += 25
    if contact.has_profile_link:
        score += 25
    if contact.location:
        score += 25
    return min(100, score)


def count_specific_skills(skills: list[str]) -> int:
    count = 0
    for skill in skills:
        normalized = skill.lower().strip()
        if any(p.match(normalized) for p in SPECIFIC_TECH_PATTERNS):
            count += 1
    return count


def score_skills(
    skills: list[str],
    resume_text: str,
    relevance_score: float | None = None,
) -> int:
    """Score the skills section out of 100.

    Diversity (25) + specificity (20) + relevance (35) + process
    keywords (20). Relevance uses the semantic score when one is given,
    else the share of skills literally mentioned in the resume.
    """
    if not skills:
        return 0

    lower_text = resume_text.lower()
    score = 0.0

    score += _tier(len(skills), [(10, 25), (7, 20), (5, 15), (3, 10), (0, 5)])
    score += _tier(count_specific_skills(skills), [(5, 20), (3, 15), (2, 10), (1, 5)])

    if relevance_score is not None:
        score += (max(0.0, min(100.0, relevance_score)) / 100) * 35
    else:
        mentioned = sum(1 for s in skills if s.lower() in lower_text)
        score += (mentioned / len(skills)) * 35

    keyword_count = sum(1 for k in PROCESS_KEYWORDS if k in lower_text)
    score += _tier(keyword_count, [(5, 20), (3, 15), (2, 10), (1, 5)])

    return min(100, round(score))


def _find_dates(text: str) -> list[str]:
    dates = NUMERIC_DATE_RE.findall(text)
    if not dates:
        dates = MONTH_DATE_RE.findall(text)
    return dates


def score_formatting(detected_sections: list[str], text: str) -> int:
    """Structure (40) + readability (30) + date consistency (30)."""
    lowered = [s.lower() for s in detected_sections]
    standard_count = sum(
        1 for section in STANDARD_SECTIONS if any(section in d for d in lowered)
    )
    score = standard_count * 10

    if BULLET_RE.search(text) or re.search(r"[•\-*]\s", text):
        score += 10
    if BLANK_LINE_RE.search(text):
        score += 10
    if len(text.split("\n")) > 10:
        score += 10

    dates = _find_dates(text)
    if dates:
        score += 30 if len({len(d) for d in dates}) <= 2 else 15
    else:
        head = "\n".join(line for line in text.split("\n") if line.strip())[:100]
        if re.match(r"[A-Z]", head):
            score += 15

    return min(100, score)


def calculate_overall_score(
    section_scores: dict[str, int | None],
    weights: dict[str, float] | None = None,
) -> int:
    """Weighted average of the sections present in section_scores.

    A section missing from the map (or None) is left out of both the
    numerator and the denominator.
    """
    weights = weights or SECTION_WEIGHTS
    weighted_sum = 0.0
    total_weight = 0.0
    for section, weight in weights.items():
        score = section_scores.get(section)
        if score is None:
            continue
        weighted_sum += score * weight
        total_weight += weight

    overall = weighted_sum / total_weight if total_weight > 0 else 0
    return min(100, max(0, round(overall)))
