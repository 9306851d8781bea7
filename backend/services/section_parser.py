"""Resume section segmentation and contact extraction."""

import re

from models.schemas.sections import ContactInfo, SectionBundle, SectionValidation

# Section header patterns and their canonical names
SECTION_PATTERNS: dict[str, list[str]] = {
    "experience": [
        r"(?:work|professional|employment)\s*(?:experience|history)",
        r"experience",
        r"career\s*(?:history|path)",
        r"(?:positions?\s*held|roles)",
    ],
    "education": [
        r"education(?:al)?\s*(?:background|qualifications|history)?",
        r"academic\s*(?:background|qualifications)",
    ],
    "skills": [
        r"(?:technical|core|key|professional)?\s*skills",
        r"(?:technical|core)?\s*(?:competencies|proficiencies|expertise)",
        r"technologies",
        r"(?:technical\s+)?(?:stack|toolkit|tooling)",
        r"(?:programming\s+)?languages",
    ],
    "summary": [
        r"(?:professional|executive|career)?\s*summary",
        r"(?:career|professional)?\s*objective",
        r"profile",
        r"about\s*me",
    ],
    "projects": [
        r"(?:key|notable|selected|personal)?\s*projects",
        r"portfolio",
    ],
    "certifications": [
        r"certific(?:ations?|ates?)",
        r"licen[sc]es?\s*(?:&|and)?\s*certific(?:ations?|ates?)",
    ],
    "achievements": [
        r"(?:key\s+)?achievements?",
        r"(?:awards?|honors?|accomplishments)",
    ],
}

# Compile all patterns into a single regex per section. A header line may
# carry inline content after a colon ("Skills: Python, Go").
_COMPILED: dict[str, re.Pattern] = {}
for section, patterns in SECTION_PATTERNS.items():
    combined = "|".join(patterns)
    _COMPILED[section] = re.compile(
        rf"^\s*(?:{combined})\s*(?::\s*(?P<rest>.*))?$", re.IGNORECASE
    )

# Contact info patterns
EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
PHONE_RE = re.compile(
    r"(?<![\d\w])(?:\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}(?!\d)"
)
LINKEDIN_RE = re.compile(r"linkedin\.com/in/[\w-]+", re.IGNORECASE)
GITHUB_RE = re.compile(r"github\.com/[\w-]+", re.IGNORECASE)
WEBSITE_RE = re.compile(r"\b(?:https?://|www\.)[\w.-]+\.[a-z]{2,}(?:/[\w./-]*)?", re.IGNORECASE)
# "City, ST" or "City Name, Country"; single-line only
LOCATION_RE = re.compile(r"\b[A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)*,[ \t]*(?:[A-Z]{2}|[A-Z][a-z]+)\b")

_BULLET_RE = re.compile(r"^[\s•·*\-–]+")
_SKILL_SPLIT_RE = re.compile(r"[,;|•·]")
_LABEL_RE = re.compile(r"^[A-Za-z &/]{2,30}:\s*")

# Matched across the whole text when a resume has no skills section
COMMON_SKILLS = [
    "JavaScript", "Python", "Java", "React", "Node.js", "SQL", "AWS", "Docker",
    "Kubernetes", "Git", "MongoDB", "PostgreSQL", "TypeScript", "Angular", "Vue",
    "Express", "Django", "Flask", "Spring", "C++", "C#", "PHP", "Ruby", "Go",
    "Swift", "Kotlin", "HTML", "CSS", "SASS", "LESS", "Redux", "GraphQL",
    "REST", "API", "Microservices", "Agile", "Scrum", "CI/CD", "Jenkins",
    "GitLab", "GitHub", "Jira", "Confluence", "Figma", "Adobe", "Photoshop",
]


def _skill_pattern(skill: str) -> re.Pattern:
    # Short names like "Go" or "LESS" only count with their usual casing
    flags = 0 if len(skill) <= 4 else re.IGNORECASE
    return re.compile(rf"(?<![\w+#]){re.escape(skill)}(?![\w+#])", flags)


_COMMON_SKILL_PATTERNS = [(s, _skill_pattern(s)) for s in COMMON_SKILLS]


def _match_header(line: str) -> tuple[str | None, str]:
    stripped = line.strip()
    if not stripped:
        return None, ""
    for section_name, pattern in _COMPILED.items():
        m = pattern.match(stripped)
        if m:
            return section_name, (m.group("rest") or "").strip()
    return None, ""


def parse_sections(text: str) -> dict[str, str]:
    """Split resume text into named sections.

    Returns a dict mapping section name -> section text content.
    Unmatched text at the top goes into 'header'. A repeated header
    appends to the earlier section.
    """
    sections: dict[str, str] = {}
    current_section = "header"
    current_lines: list[str] = []

    def _flush():
        body = "\n".join(current_lines).strip()
        if body:
            previous = sections.get(current_section)
            sections[current_section] = f"{previous}\n{body}" if previous else body
        elif current_section != "header":
            sections.setdefault(current_section, "")

    for line in text.split("\n"):
        matched_section, inline = _match_header(line)
        if matched_section:
            _flush()
            current_section = matched_section
            current_lines = [inline] if inline else []
        else:
            current_lines.append(line)

    _flush()
    return sections


def detect_section_headers(text: str) -> list[str]:
    """Canonical names of the section headers present, in document order."""
    found: list[str] = []
    for line in text.split("\n"):
        name, _ = _match_header(line)
        if name and name not in found:
            found.append(name)
    return found


def extract_location(text: str) -> str | None:
    match = LOCATION_RE.search(text)
    return match.group().strip() if match else None


def extract_contact_info(text: str, header_block: str | None = None) -> ContactInfo:
    """Extract contact information from resume text.

    Location is looked up in header_block (the text above the first
    section header) when given, since "Title, Company" lines further down
    look like "City, State".
    """
    email_match = EMAIL_RE.search(text)
    phone_match = PHONE_RE.search(text)
    linkedin_match = LINKEDIN_RE.search(text)
    github_match = GITHUB_RE.search(text)

    website = None
    for match in WEBSITE_RE.finditer(text):
        url = match.group()
        if "linkedin.com" not in url.lower() and "github.com" not in url.lower():
            website = url
            break

    return ContactInfo(
        email=email_match.group() if email_match else None,
        phone=phone_match.group().strip() if phone_match else None,
        linkedin=linkedin_match.group() if linkedin_match else None,
        github=github_match.group() if github_match else None,
        website=website,
        location=extract_location(header_block if header_block is not None else text),
    )


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for item in items:
        key = item.lower()
        if key not in seen:
            seen.add(key)
            result.append(item)
    return result


def split_skills(skills_text: str) -> list[str]:
    """Split a skills section body on commas, bullets, pipes and newlines."""
    skills: list[str] = []
    for line in skills_text.split("\n"):
        line = _BULLET_RE.sub("", line).strip()
        line = _LABEL_RE.sub("", line)
        for part in _SKILL_SPLIT_RE.split(line):
            part = part.strip().rstrip(".")
            if 0 < len(part) < 50:
                skills.append(part)
    return _dedupe(skills)


def find_common_skills(text: str) -> list[str]:
    return [skill for skill, pattern in _COMMON_SKILL_PATTERNS if pattern.search(text)]


def _split_items(body: str) -> list[str]:
    items = []
    for line in body.split("\n"):
        line = _BULLET_RE.sub("", line).strip()
        if line:
            items.append(line)
    return items


def validate_sections(bundle: SectionBundle) -> SectionValidation:
    errors: list[str] = []
    warnings: list[str] = []
    contact = bundle.contact

    if not contact.email and not contact.phone:
        warnings.append("Contact information is incomplete (missing email and phone)")
    elif not contact.email:
        warnings.append("Email address not found")
    elif not contact.phone:
        warnings.append("Phone number not found")

    if not bundle.summary:
        warnings.append("Summary/Objective section not found")
    elif len(bundle.summary) < 50:
        warnings.append("Summary is too short (should be 50-500 characters)")

    if not bundle.experience:
        errors.append("Experience section not found")

    if not bundle.education:
        warnings.append("Education section not found")

    if not bundle.skills:
        warnings.append("Skills section not found or empty")

    return SectionValidation(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        has_required_sections={
            "contact": bool(contact.email or contact.phone),
            "summary": bool(bundle.summary),
            "experience": bool(bundle.experience),
            "education": bool(bundle.education),
            "skills": bool(bundle.skills),
        },
    )


def segment_resume(text: str) -> SectionBundle:
    """Parse raw resume text into a SectionBundle. Never raises on odd input."""
    text = text or ""
    sections = parse_sections(text)

    skills_body = sections.get("skills")
    skills = split_skills(skills_body) if skills_body else find_common_skills(text)
    achievements_body = sections.get("achievements")

    bundle = SectionBundle(
        contact=extract_contact_info(text, header_block=sections.get("header", "")),
        summary=sections.get("summary") or None,
        experience=sections.get("experience") or None,
        education=sections.get("education") or None,
        skills=skills,
        achievements=_split_items(achievements_body) if achievements_body else [],
        detected_sections=detect_section_headers(text),
    )
    return bundle.model_copy(update={"validation": validate_sections(bundle)})


def find_missing_skills(job_description: str, resume_skills: list[str]) -> list[str]:
    """Well-known technologies named in the job description but not in resume_skills."""
    if not job_description:
        return []
    resume_lower = [s.lower() for s in resume_skills]
    missing = []
    for skill in find_common_skills(job_description):
        lowered = skill.lower()
        if not any(lowered in rs or rs in lowered for rs in resume_lower):
            missing.append(skill)
    return missing
