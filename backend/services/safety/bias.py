"""Term-list bias detection (gender, age, cultural, socioeconomic) and inclusivity."""

import re

from models.schemas.safety import (
    AgeBias,
    BiasIndicator,
    BiasReport,
    GenderBias,
    InclusivityCheck,
    TermBias,
)


def _terms(*words: str) -> re.Pattern:
    return re.compile(r"\b(?:" + "|".join(re.escape(w) for w in words) + r")\b", re.IGNORECASE)


MASCULINE_RE = _terms(
    "aggressive", "assertive", "dominant", "ambitious", "competitive", "decisive",
    "independent", "leader", "powerful", "strong", "forceful", "confident", "driven",
    "focused", "analytical", "logical", "rational", "technical", "engineering",
    "building", "creating", "developing",
)
FEMININE_RE = _terms(
    "nurturing", "empathetic", "collaborative", "supportive", "gentle", "caring",
    "compassionate", "emotional", "sensitive", "warm", "friendly", "helpful",
    "understanding", "patient", "cooperative", "harmonious", "team-oriented",
    "inclusive", "open-minded",
)
NEUTRAL_RE = _terms(
    "skilled", "experienced", "professional", "capable", "effective", "successful",
    "excellent", "outstanding", "qualified", "competent", "talented", "accomplished",
)
YOUNG_RE = _terms(
    "fresh", "energetic", "dynamic", "tech-savvy", "digital native", "young talent",
    "recent graduate", "entry-level", "junior", "new generation", "modern",
    "cutting-edge", "up-and-coming",
)
OLD_RE = _terms(
    "seasoned", "veteran", "experienced", "mature", "established", "traditional",
    "old-school", "overqualified", "set in ways", "outdated", "legacy", "senior", "elderly",
)
CULTURAL_RE = _terms("native speaker", "native English", "fluent English", "American", "Western", "European")
LANGUAGE_REQUIREMENT_RE = re.compile(
    r"\b(?:must|required|native|fluent)\s+(?:speak|speaking|English|language)\b", re.IGNORECASE
)
SOCIOECONOMIC_RE = _terms(
    "prestigious", "elite", "ivy league", "top-tier", "exclusive", "premium", "luxury", "high-end",
)
INCLUSIVE_RE = _terms(
    "diverse", "inclusive", "welcoming", "respectful", "equitable", "accessible",
    "collaborative", "team-oriented", "supportive", "open", "accommodating",
)
EXCLUSIVE_RE = _terms("only", "must", "required", "exclusively", "not", "cannot", "unable", "unsuitable")


def detect_gender_bias(content: str) -> GenderBias:
    """Flag a one-sided lean toward masculine- or feminine-coded words.

    Biased when one side has more than 3 occurrences and more than twice
    the other side's count. ``bias_score`` is the share of coded words
    among coded + neutral words and is reported for information only.
    """
    if not content:
        return GenderBias()

    masculine = len(MASCULINE_RE.findall(content))
    feminine = len(FEMININE_RE.findall(content))
    neutral = len(NEUTRAL_RE.findall(content))
    coded = masculine + feminine
    total = coded + neutral
    bias_score = round(coded / total * 100) if total else 0

    issues = []
    has_bias = False
    if masculine > feminine * 2 and masculine > 3:
        issues.append("Content leans toward masculine-biased language")
        has_bias = True
    elif feminine > masculine * 2 and feminine > 3:
        issues.append("Content leans toward feminine-biased language")
        has_bias = True

    if coded and neutral < coded:
        issues.append("Consider using more neutral, inclusive language")

    return GenderBias(
        has_bias=has_bias,
        bias_score=bias_score,
        masculine_terms=masculine,
        feminine_terms=feminine,
        neutral_terms=neutral,
        issues=issues,
    )


def detect_age_bias(content: str) -> AgeBias:
    if not content:
        return AgeBias()
    young = len(YOUNG_RE.findall(content))
    old = len(OLD_RE.findall(content))
    issues = []
    if young > 2:
        issues.append("Content may favor younger candidates")
    if old > 2:
        issues.append("Content may favor more experienced/older candidates")
    return AgeBias(has_bias=bool(issues), young_terms=young, old_terms=old, issues=issues)


def detect_cultural_bias(content: str) -> TermBias:
    if not content:
        return TermBias()
    issues = []
    match = CULTURAL_RE.search(content)
    if match:
        issues.append(f'Cultural bias indicator found: "{match.group()}"')
    if LANGUAGE_REQUIREMENT_RE.search(content):
        issues.append("Language requirements may exclude qualified candidates")
    return TermBias(has_bias=bool(issues), issues=issues)


def detect_socioeconomic_bias(content: str) -> TermBias:
    if not content:
        return TermBias()
    match = SOCIOECONOMIC_RE.search(content)
    if not match:
        return TermBias()
    return TermBias(has_bias=True, issues=[f'Socioeconomic bias indicator: "{match.group()}"'])


def check_inclusivity(content: str) -> InclusivityCheck:
    if not content:
        return InclusivityCheck(is_inclusive=False, score=0)

    inclusive = len(INCLUSIVE_RE.findall(content))
    exclusive = len(EXCLUSIVE_RE.findall(content))
    score = 100
    suggestions = []
    if exclusive > inclusive * 2 and exclusive > 3:
        suggestions.append("Consider using more inclusive language")
        score -= 20
    if inclusive == 0 and len(content) > 500:
        suggestions.append("Consider adding inclusive language to welcome diverse candidates")
        score -= 10

    score = max(0, min(100, score))
    return InclusivityCheck(
        is_inclusive=score >= 70,
        score=score,
        inclusive_terms=inclusive,
        exclusive_terms=exclusive,
        suggestions=suggestions,
    )


def _grade(score: int) -> str:
    if score >= 90:
        return "A"
    if score >= 75:
        return "B"
    if score >= 60:
        return "C"
    return "D"


def detect_bias(content: str) -> BiasReport:
    """Run every bias check and combine them into one report."""
    if not content:
        return BiasReport(recommendation="Content appears unbiased and inclusive")

    gender = detect_gender_bias(content)
    age = detect_age_bias(content)
    cultural = detect_cultural_bias(content)
    socioeconomic = detect_socioeconomic_bias(content)
    inclusivity = check_inclusivity(content)

    score = 100
    indicators: list[BiasIndicator] = []
    for category, result, penalty in (
        ("gender", gender, 20),
        ("age", age, 15),
        ("cultural", cultural, 20),
        ("socioeconomic", socioeconomic, 15),
    ):
        if result.has_bias:
            score -= penalty
            indicators.extend(BiasIndicator(category=category, message=m) for m in result.issues)
    score = max(0, min(100, score))

    if score >= 90:
        recommendation = "Content appears unbiased and inclusive"
    elif score >= 75:
        recommendation = "Content is mostly unbiased but could be improved"
    else:
        recommendation = "Content may contain bias - review recommended"

    return BiasReport(
        has_bias=bool(indicators),
        overall_score=score,
        grade=_grade(score),
        gender=gender,
        age=age,
        cultural=cultural,
        socioeconomic=socioeconomic,
        inclusivity=inclusivity,
        indicators=indicators,
        issues=gender.issues + age.issues + cultural.issues + socioeconomic.issues + inclusivity.suggestions,
        recommendation=recommendation,
    )
