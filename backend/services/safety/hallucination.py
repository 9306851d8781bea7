"""Cross-checks claims in generated text against the resume and job description."""

import re
from dataclasses import dataclass, field

from models.schemas.safety import HallucinationReport, JobDetailsCheck, UnmatchedClaim

SENTENCE_SPLIT_RE = re.compile(r"[.!?]+(?:\s+|$)")

METRIC_RE = re.compile(
    r"\b\d+(?:\.\d+)?\s*(?:%|percent|years? of experience|years?|months?|people|"
    r"team members?|projects?|companies|company|dollars?|million|billion)(?!\w)",
    re.IGNORECASE,
)
NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")
SKILL_RE = re.compile(
    r"(?<![\w.+#])(?:JavaScript|TypeScript|Python|Java|React|Node\.?js|AWS|Azure|GCP|Docker|"
    r"Kubernetes|SQL|MongoDB|PostgreSQL|Git|Agile|Scrum|Angular|Vue|PHP|Ruby|Go|Rust|"
    r"C\+\+|C#|\.NET|Swift|Kotlin|Machine Learning|AI|Data Science|DevOps|CI/CD)(?![\w+#])",
)
TITLE_RE = re.compile(
    r"\b(?:Engineer|Developer|Manager|Director|Lead|Senior|Junior|Intern|Consultant|"
    r"Analyst|Specialist|Architect|Designer|Programmer)\b",
    re.IGNORECASE,
)
COMPANY_RE = re.compile(
    r"\b[A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)*(?:[ \t]+(?:Inc|LLC|Corp|Ltd|Company|Technologies|Systems|Solutions))?\b"
)
OVERLY_SPECIFIC_RE = re.compile(
    r"\b(?:specifically|exactly|precisely|I have been|I was|I worked at|I managed a team of)\b",
    re.IGNORECASE,
)

# Capitalized words that are not company names
COMMON_WORDS = {
    "Dear", "Hello", "Hi", "Thank", "Thanks", "Sincerely", "Best", "Regards", "The",
    "Hiring", "Manager", "Team", "Yours", "Truly", "Warm", "Kind", "Respectfully",
    "I", "My", "In", "As", "At", "With", "This", "That", "These", "Throughout",
    "Additionally", "Furthermore", "Moreover", "Your", "Our", "We", "It", "Please",
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "January", "February",
    "March", "April", "May", "June", "July", "August", "September", "October",
    "November", "December", "Name", "Your Name",
}


@dataclass
class Fact:
    sentence: str
    metrics: list[str] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)
    titles: list[str] = field(default_factory=list)
    companies: list[str] = field(default_factory=list)

    @property
    def kinds(self) -> int:
        return sum(1 for group in (self.metrics, self.skills, self.titles, self.companies) if group)


def split_sentences(text: str) -> list[str]:
    return [s.strip() for s in SENTENCE_SPLIT_RE.split(text or "") if s.strip()]


def _company_candidates(sentence: str, skills: list[str]) -> list[str]:
    skill_set = {s.lower() for s in skills}
    candidates = []
    for match in COMPANY_RE.finditer(sentence):
        words = match.group().split()
        while words and words[0] in COMMON_WORDS:
            words.pop(0)
        name = " ".join(words)
        if not name or name in COMMON_WORDS or name.lower() in skill_set:
            continue
        # A lone capitalized word at the start of a sentence is just grammar
        if match.start() == 0 and " " not in name:
            continue
        if TITLE_RE.fullmatch(name):
            continue
        candidates.append(name)
    return candidates


def extract_facts(text: str) -> list[Fact]:
    """Per-sentence metrics, technologies, role titles and company names."""
    facts = []
    for sentence in split_sentences(text):
        skills = SKILL_RE.findall(sentence)
        fact = Fact(
            sentence=sentence,
            metrics=METRIC_RE.findall(sentence),
            skills=skills,
            titles=TITLE_RE.findall(sentence),
            companies=_company_candidates(sentence, skills),
        )
        if fact.kinds:
            facts.append(fact)
    return facts


def verify_job_details(content: str, job_title: str = "", company_name: str = "") -> JobDetailsCheck:
    """Check that the target job title and company are named in the content."""
    issues = []
    score = 100
    lowered = (content or "").lower()

    if job_title and job_title.strip():
        title = job_title.lower().strip()
        words = [w for w in title.split() if len(w) > 3]
        if title not in lowered and not (words and all(w in lowered for w in words)):
            issues.append(f'Job title "{job_title}" not clearly mentioned in content')
            score -= 15

    if company_name and company_name.strip():
        if company_name.lower().strip() not in lowered:
            issues.append(f'Company name "{company_name}" not mentioned in content')
            score -= 15

    score = max(0, score)
    return JobDetailsCheck(accurate=score >= 85, accuracy_score=score, issues=issues)


def _recommendation(confidence: float) -> str:
    if confidence >= 90:
        return "Content appears reliable and factually grounded"
    if confidence >= 75:
        return "Content is mostly reliable but review recommended"
    return "Content should be carefully reviewed for accuracy"


def detect_hallucinations(
    content: str,
    resume_text: str,
    job_description: str = "",
    job_title: str = "",
    company_name: str = "",
) -> HallucinationReport:
    """Flag claims in content that cannot be found in the source texts.

    Sources are the resume, the job description, the target job title and
    the company name.

    Unverified technologies and companies are high severity (-20 each),
    unverified metrics medium (-10 each). The overall confidence blends
    the claim score (70%) with job title/company verification (30%).
    """
    job_details = verify_job_details(content, job_title, company_name)
    if not content:
        return HallucinationReport(job_details=job_details)

    source = f"{resume_text or ''} {job_description or ''} {job_title or ''} {company_name or ''}".lower()
    facts = extract_facts(content)
    unmatched: list[UnmatchedClaim] = []
    warnings: list[str] = []
    issues: list[str] = []

    for fact in facts:
        metrics = [
            m for m in fact.metrics
            if m.lower() not in source
            and not any(n in source for n in NUMBER_RE.findall(m))
        ]
        if metrics:
            unmatched.append(UnmatchedClaim(type="metric", claim=fact.sentence, terms=metrics, severity="medium"))

        skills = [s for s in fact.skills if s.lower() not in source]
        if skills:
            unmatched.append(UnmatchedClaim(type="skill", claim=fact.sentence, terms=skills, severity="high"))

        companies = [c for c in fact.companies if c.lower() not in source]
        if companies:
            unmatched.append(UnmatchedClaim(type="company", claim=fact.sentence, terms=companies, severity="high"))

        if fact.titles and fact.sentence.lower()[:20] not in source:
            titles = [t for t in fact.titles if t.lower() not in source]
            if titles:
                warnings.append(f'Position claim may not be directly from resume: "{fact.sentence[:50]}"')

    confidence = 100
    high = sum(1 for c in unmatched if c.severity == "high")
    medium = sum(1 for c in unmatched if c.severity == "medium")
    confidence -= high * 20 + medium * 10
    if unmatched:
        issues.append(f"{len(unmatched)} claim(s) could not be verified in source materials")

    if len(OVERLY_SPECIFIC_RE.findall(content)) > 3:
        warnings.append("Content contains many specific claims - verify against resume for accuracy")
        confidence -= 5
    confidence = max(0, min(100, confidence))

    word_count = len(content.split())
    if word_count > 200 and len(re.findall(r"\b\d+\b", content)) / word_count < 0.01:
        warnings.append("Content may be too generic - consider adding specific examples from resume")

    verified = max(0, len(facts) - len(unmatched))
    overall = round(confidence * 0.7 + job_details.accuracy_score * 0.3)
    issues.extend(job_details.issues)
    return HallucinationReport(
        has_hallucinations=bool(unmatched) or confidence < 70,
        confidence=confidence,
        overall_confidence=overall,
        is_reliable=overall >= 75,
        total_facts=len(facts),
        verified_facts=verified,
        verification_rate=round(verified / len(facts) * 100, 1) if facts else 100.0,
        unmatched_claims=unmatched,
        job_details=job_details,
        issues=issues,
        warnings=warnings,
        recommendation=_recommendation(overall),
    )
