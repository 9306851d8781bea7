from services.section_parser import (
    detect_section_headers,
    extract_contact_info,
    find_common_skills,
    find_missing_skills,
    parse_sections,
    segment_resume,
    split_skills,
)


SAMPLE_RESUME = """John Doe
john.doe@email.com | (555) 123-4567
linkedin.com/in/johndoe | github.com/johndoe
Seattle, WA

Summary
Experienced software engineer with 5+ years building web applications.

Experience
Senior Software Engineer | TechCorp | 2021 - Present
• Built REST APIs serving 1M requests/day
• Led team of 5 engineers

Software Engineer | StartupXYZ | 2019 - 2021
• Developed React frontend components
• Implemented CI/CD pipelines

Education
B.S. Computer Science | State University | 2019

Skills
Python, JavaScript, React, Docker, AWS, PostgreSQL, Git

Awards
• Hackathon winner 2020
"""


def test_parse_sections_detects_all():
    sections = parse_sections(SAMPLE_RESUME)
    assert "summary" in sections
    assert "experience" in sections
    assert "education" in sections
    assert "skills" in sections
    assert "achievements" in sections
    assert "header" in sections


def test_parse_sections_content():
    sections = parse_sections(SAMPLE_RESUME)
    assert "REST APIs" in sections["experience"]
    assert "Computer Science" in sections["education"]
    assert "Python" in sections["skills"]


def test_parse_sections_empty():
    sections = parse_sections("")
    assert len(sections) <= 1  # At most 'header' with empty content


def test_parse_sections_inline_header_content():
    sections = parse_sections("Skills: Python, Go\nExperience\nBuilt things")
    assert sections["skills"] == "Python, Go"
    assert sections["experience"] == "Built things"


def test_parse_sections_repeated_header_appends():
    sections = parse_sections("Experience\nFirst job\nSkills\nPython\nExperience\nSecond job")
    assert "First job" in sections["experience"]
    assert "Second job" in sections["experience"]


def test_detect_section_headers_in_document_order():
    assert detect_section_headers(SAMPLE_RESUME) == [
        "summary", "experience", "education", "skills", "achievements",
    ]


def test_extract_contact_info():
    contact = extract_contact_info(SAMPLE_RESUME)
    assert contact.email == "john.doe@email.com"
    assert contact.phone == "(555) 123-4567"
    assert contact.linkedin == "linkedin.com/in/johndoe"
    assert contact.github == "github.com/johndoe"
    assert contact.website is None


def test_extract_contact_info_website_excludes_profiles():
    contact = extract_contact_info("https://linkedin.com/in/jd and https://janedoe.dev/blog")
    assert contact.website == "https://janedoe.dev/blog"


def test_location_only_from_header_block():
    text = "Jane Roe\njane@roe.io\n\nExperience\nEngineer, Acme\n"
    contact = extract_contact_info(text, header_block="Jane Roe\njane@roe.io")
    assert contact.location is None


def test_split_skills_handles_bullets_labels_and_separators():
    body = "Languages: Python, Go; Rust\n• Docker | Kubernetes\n- .NET\n- python"
    assert split_skills(body) == ["Python", "Go", "Rust", "Docker", "Kubernetes", ".NET"]


def test_find_common_skills_respects_short_name_casing():
    skills = find_common_skills("We go fast with Go and python scripts")
    assert "Go" in skills
    assert "Python" in skills
    assert skills.count("Go") == 1


def test_segment_resume():
    bundle = segment_resume(SAMPLE_RESUME)
    assert bundle.contact.email == "john.doe@email.com"
    assert bundle.contact.location == "Seattle, WA"
    assert bundle.summary.startswith("Experienced software engineer")
    assert "TechCorp" in bundle.experience
    assert bundle.skills == ["Python", "JavaScript", "React", "Docker", "AWS", "PostgreSQL", "Git"]
    assert bundle.achievements == ["Hackathon winner 2020"]
    assert bundle.validation.is_valid
    assert bundle.validation.has_required_sections["experience"]


def test_segment_resume_without_skills_section_scans_text():
    bundle = segment_resume("Experience\nBuilt services in Python and Docker on AWS.")
    assert set(bundle.skills) >= {"Python", "Docker", "AWS"}


def test_segment_resume_missing_sections():
    bundle = segment_resume("Just a short note with no sections at all.")
    assert bundle.experience is None
    assert bundle.skills == []
    assert not bundle.validation.is_valid
    assert "Experience section not found" in bundle.validation.errors
    assert "Contact information is incomplete (missing email and phone)" in bundle.validation.warnings


def test_segment_resume_never_raises_on_odd_input():
    for text in ("", "\n\n\n", "Skills:", "•••", "Experience\n\n\nEducation"):
        bundle = segment_resume(text)
        assert bundle.contact is not None


def test_find_missing_skills():
    jd = "Requirements: Python, Docker, Kubernetes and GraphQL"
    assert find_missing_skills(jd, ["Python", "Docker"]) == ["Kubernetes", "GraphQL"]
    assert find_missing_skills("", ["Python"]) == []
