"""All prompt templates for Gemini API calls."""

from models.schemas.sections import SectionBundle

ANALYSIS_SYSTEM_PROMPT = """You are an expert resume analyst with 15+ years of experience in recruitment, ATS systems, and career counseling. You understand industry standards across tech, finance, healthcare, marketing, and other sectors. Your analysis is based on current hiring practices, ATS optimization, and recruiter expectations.

IMPORTANT CONSTRAINTS:
- If a section is missing, score it 0 and note it in weaknesses with specific impact
- Always provide at least 3 strengths (even if weak resume - find what's working)
- Always provide at least 3 weaknesses with actionable, specific fixes
- Prioritize recommendations: high = blocks job opportunities, medium = improves chances significantly, low = nice to have
- Use specific, actionable language (say "Use standard section headers like 'Work Experience'" rather than "improve formatting")
- Detect the target industry/role from resume content and apply appropriate standards
- Always return complete JSON, using empty arrays where data is not available"""

_SCORE_ITEMS_JSON = """  "strengths": [
    {"category": "<string>", "description": "<string>", "examples": ["<string>"]}
  ],
  "weaknesses": [
    {"category": "<string>", "description": "<string>", "impact": "<string>", "suggestions": ["<string>"]}
  ],
  "recommendations": [
    {"priority": "high|medium|low", "category": "<string>", "title": "<string>", "description": "<string>", "action_items": ["<string>"]}
  ],
  "skills_analysis": {
    "detected": ["<string>"],
    "missing": ["<string>"],
    "recommendations": ["<string>"],
    "categorized": {"technical": ["<string>"], "soft": ["<string>"], "industry": ["<string>"], "other": ["<string>"]}
  }"""

_SECTION_RUBRIC = """SECTION SCORES (0-100) for sections requiring contextual understanding:
- summary: presence (20pts), relevance to role (30pts), impact/value proposition (30pts), length/readability (20pts)
- experience: relevance to target role (30pts), quantifiable results (30pts), career progression (20pts), action verbs (10pts), formatting (10pts)
- education: degree level/relevance (40pts), GPA if recent grad (20pts), certifications (20pts), coursework relevance (20pts)
- achievements: quantifiable metrics (50pts), impact demonstration (30pts), uniqueness (20pts)"""

_TYPE_INSTRUCTIONS = {
    "general": f"""Provide a comprehensive analysis of this resume.

{_SECTION_RUBRIC}

Then list 3-5 strengths with concrete examples from the resume, 3-5 weaknesses with actionable suggestions, 5-10 prioritized recommendations, and categorize the detected skills.

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "section_scores": {{"summary": <int>, "experience": <int>, "education": <int>, "achievements": <int>}},
{_SCORE_ITEMS_JSON}
}}""",
    "ats": f"""Analyze this resume for ATS (Applicant Tracking System) optimization, as a specialist familiar with Taleo, Workday, Greenhouse, Lever and iCIMS.

Check for: tables or text boxes that break parsing, non-standard section headers, special characters, inconsistent date formats, missing or stuffed keywords. For every issue give the section it occurs in, what is wrong, and how to fix it.

{_SECTION_RUBRIC}
- ats_optimization: formatting compliance (40%), structure (30%), keyword optimization (20%), parseability (10%)

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "section_scores": {{"summary": <int>, "experience": <int>, "education": <int>, "achievements": <int>, "ats_optimization": <int>}},
  "ats_analysis": {{
    "score": <int 0-100>,
    "issues": [
      {{"type": "keyword|formatting|structure|content", "severity": "critical|high|medium|low", "description": "<string>", "location": "<string>", "fix": "<string>"}}
    ],
    "optimizations": [{{"category": "<string>", "suggestion": "<string>", "impact": "<string>"}}],
    "keywords": {{"found": ["<string>"], "missing": ["<string>"], "density": <number>}}
  }},
{_SCORE_ITEMS_JSON}
}}""",
    "jd_match": f"""Compare this resume against the job description and assess how well the candidate matches the role using semantic understanding, not just keyword matching. Recognize synonyms and related technologies, weight explicit must-have requirements above preferred ones, and credit transferable experience.

{_SECTION_RUBRIC}

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "section_scores": {{"summary": <int>, "experience": <int>, "education": <int>, "achievements": <int>}},
  "job_description_match": {{
    "score": <int 0-100>,
    "skills_match": {{"matched": ["<string>"], "missing": ["<string>"], "percentage": <number>}},
    "requirements_match": {{"met": ["<string>"], "unmet": ["<string>"], "percentage": <number>}},
    "recommendations": ["<string>"]
  }},
{_SCORE_ITEMS_JSON}
}}""",
}


def build_analysis_prompt(
    analysis_type: str,
    sections: SectionBundle,
    resume_text: str,
    job_description: str = "",
    rule_scores: dict[str, int] | None = None,
    relevance_score: float | None = None,
) -> str:
    """User prompt for the AI half of an analysis.

    The rule-based scores are passed as context; the model is asked only
    for the sections that need contextual judgment.
    """
    rule_scores = rule_scores or {}
    contact = sections.contact
    relevance_line = (
        f"- Semantic skill relevance: {relevance_score:.0f}/100\n"
        if relevance_score is not None else ""
    )

    jd_section = ""
    if analysis_type == "jd_match" and job_description:
        jd_section = f"""
JOB DESCRIPTION:
---
{job_description[:5000]}
---
"""

    return f"""The following scores have already been calculated with rule-based methods. Do NOT return scores for contact_info, skills or formatting.
- Contact info score: {rule_scores.get("contact_info", "N/A")}
- Skills score: {rule_scores.get("skills", "N/A")}
- Formatting score: {rule_scores.get("formatting", "N/A")}
{relevance_line}
PARSED RESUME SECTIONS:
- Contact: {"Email found" if contact.email else "No email"} | {"Phone found" if contact.phone else "No phone"} | {"Profile links found" if contact.has_profile_link else "No profile links"}
- Summary: {f"Present ({len(sections.summary)} chars)" if sections.summary else "Missing"}
- Experience: {"Present" if sections.experience else "Missing"}
- Education: {"Present" if sections.education else "Missing"}
- Skills: {len(sections.skills)} skills detected
- Achievements: {len(sections.achievements)} achievements detected

{_TYPE_INSTRUCTIONS.get(analysis_type, _TYPE_INSTRUCTIONS["general"])}

RESUME:
---
{resume_text[:8000]}
---
{jd_section}"""


COVER_LETTER_SYSTEM_PROMPT = """You are an expert career counselor and professional writer specializing in compelling, personalized cover letters.

ACCURACY (no fabrication):
- ONLY mention information explicitly stated in the resume or job description
- DO NOT add numbers, metrics, achievements, company names, job titles or experiences that are not in the resume
- If information is missing, use general professional language rather than inventing specifics

INCLUSIVE LANGUAGE:
- Use neutral, inclusive language; avoid gender-coded words ("skilled professional", not "assertive leader")
- Make no assumptions about age, culture or socioeconomic status
- Focus on skills, qualifications and achievements

PROFESSIONAL STANDARDS:
- Keep a professional, respectful tone suitable for a business context
- Do not include personal information (emails, phone numbers, addresses, ID numbers)
- Avoid any harmful, hateful or inappropriate language"""

TONES: dict[str, str] = {
    "professional": "Use a professional, confident tone. Be respectful and demonstrate competence.",
    "friendly": "Use a warm, approachable tone while maintaining professionalism. Show enthusiasm and personality.",
    "formal": "Use a formal, traditional business tone. Be very respectful and conservative in language.",
    "enthusiastic": "Use an energetic, passionate tone. Show excitement and genuine interest in the role.",
}

TEMPLATES: dict[str, dict[str, str]] = {
    "traditional": {
        "name": "Traditional",
        "description": "Classic business format, conservative and professional",
        "instructions": "Use a traditional business letter format with formal language. Follow standard business letter conventions.",
    },
    "modern": {
        "name": "Modern",
        "description": "Contemporary style with engaging opening and clear value proposition",
        "instructions": "Use a modern, engaging style. Start with a compelling hook. Be concise and results-focused.",
    },
    "creative": {
        "name": "Creative",
        "description": "Stand out with a unique approach while remaining professional",
        "instructions": "Use a creative, memorable approach while staying professional. Show personality and originality.",
    },
    "technical": {
        "name": "Technical",
        "description": "For technical roles, emphasize skills and achievements",
        "instructions": "Focus on technical skills, projects, and quantifiable achievements. Be specific about technologies and tools.",
    },
    "executive": {
        "name": "Executive",
        "description": "For senior roles, emphasize leadership and strategic impact",
        "instructions": "Emphasize leadership experience, strategic thinking, and high-level achievements. Use executive-level language.",
    },
}


def build_cover_letter_prompt(
    resume_text: str,
    job_description: str,
    job_title: str,
    company_name: str,
    tone: str = "professional",
    template: str = "traditional",
) -> str:
    """User prompt for cover letter generation."""
    template_info = TEMPLATES.get(template, TEMPLATES["traditional"])
    tone_instructions = TONES.get(tone, TONES["professional"])

    return f"""Generate a compelling cover letter for the following position:

JOB TITLE: {job_title}
COMPANY: {company_name}

JOB DESCRIPTION:
---
{job_description}
---

CANDIDATE'S RESUME:
---
{resume_text}
---

INSTRUCTIONS:
1. Address the hiring manager ("Dear Hiring Manager" if no name is available), open with interest in the specific role and company, highlight 2-3 qualifications from the resume that match the job requirements, and close by requesting an interview.
2. Tone: {tone_instructions}
3. Template style: {template_info["name"]} - {template_info["description"]}
   {template_info["instructions"]}
4. Length: 250-400 words in 3-4 paragraphs.
5. Use action verbs and the job description's own keywords. Mention the job title and company by name.
6. Do NOT include salary expectations, negative comments about previous employers, or anything not stated in the resume or job description.

Return ONLY the cover letter text (no headers, no explanations)."""


def prompt_overhead_chars() -> int:
    """Length of the cover letter prompts with empty inputs."""
    return len(COVER_LETTER_SYSTEM_PROMPT) + len(build_cover_letter_prompt("", "", "", ""))
