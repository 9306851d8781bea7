"""Analysis result records, one variant per analysis type.

The variants share the base fields of ``BaseAnalysis`` and are told apart
by ``analysis_type``. ``AnalysisVariant`` is the discriminated union used
to validate provider JSON.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from models.schemas.relevance import RelevanceMetadata

Score = Annotated[int, Field(ge=0, le=100)]

ANALYSIS_TYPES = ("general", "ats", "jd_match")

# Section weights for the overall score. Sums to 1.0.
SECTION_WEIGHTS: dict[str, float] = {
    "contact_info": 0.10,
    "summary": 0.15,
    "experience": 0.30,
    "education": 0.15,
    "skills": 0.20,
    "achievements": 0.05,
    "formatting": 0.05,
}

# Dimensions owned by the deterministic scorer; the provider never overrides them.
DETERMINISTIC_SECTIONS = ("contact_info", "skills", "formatting")
AI_SECTIONS = ("summary", "experience", "education", "achievements")


class SectionScores(BaseModel):
    contact_info: Score | None = None
    summary: Score | None = None
    experience: Score | None = None
    education: Score | None = None
    skills: Score | None = None
    achievements: Score | None = None
    formatting: Score | None = None
    ats_optimization: Score | None = None

    def present(self) -> dict[str, int]:
        """Only the scores that were actually set."""
        return {k: v for k, v in self.model_dump().items() if v is not None}


class Strength(BaseModel):
    category: str
    description: str
    examples: list[str] = []


class Weakness(BaseModel):
    category: str
    description: str
    impact: str = ""
    suggestions: list[str] = []


class Recommendation(BaseModel):
    priority: Literal["high", "medium", "low"] = "medium"
    category: str
    title: str
    description: str
    action_items: list[str] = []


class CategorizedSkills(BaseModel):
    technical: list[str] = []
    soft: list[str] = []
    industry: list[str] = []
    other: list[str] = []


class SkillsAnalysis(BaseModel):
    detected: list[str] = []
    missing: list[str] = []
    recommendations: list[str] = []
    categorized: CategorizedSkills = CategorizedSkills()
    relevance_score: int | None = None
    relevance_metadata: RelevanceMetadata | None = None


class AtsIssue(BaseModel):
    type: Literal["keyword", "formatting", "structure", "content"] | None = None
    severity: Literal["critical", "high", "medium", "low"] | None = None
    description: str = ""
    location: str = ""
    fix: str = ""


class AtsOptimization(BaseModel):
    category: str = ""
    suggestion: str = ""
    impact: str = ""


class KeywordReport(BaseModel):
    found: list[str] = []
    missing: list[str] = []
    density: float | None = None


class AtsDetails(BaseModel):
    score: Score | None = None
    issues: list[AtsIssue] = []
    optimizations: list[AtsOptimization] = []
    keywords: KeywordReport = KeywordReport()


class SkillsMatch(BaseModel):
    matched: list[str] = []
    missing: list[str] = []
    percentage: float | None = None


class RequirementsMatch(BaseModel):
    met: list[str] = []
    unmet: list[str] = []
    percentage: float | None = None


class JobDescriptionMatch(BaseModel):
    score: Score | None = None
    skills_match: SkillsMatch = SkillsMatch()
    requirements_match: RequirementsMatch = RequirementsMatch()
    recommendations: list[str] = []


class BaseAnalysis(BaseModel):
    overall_score: Score
    section_scores: SectionScores = SectionScores()
    strengths: list[Strength] = []
    weaknesses: list[Weakness] = []
    recommendations: list[Recommendation] = []
    skills_analysis: SkillsAnalysis = SkillsAnalysis()


class GeneralAnalysis(BaseAnalysis):
    analysis_type: Literal["general"] = "general"


class ATSAnalysis(BaseAnalysis):
    analysis_type: Literal["ats"] = "ats"
    ats_analysis: AtsDetails = AtsDetails()


class JDMatchAnalysis(BaseAnalysis):
    analysis_type: Literal["jd_match"] = "jd_match"
    job_description_match: JobDescriptionMatch = JobDescriptionMatch()


AnalysisVariant = Annotated[
    Union[GeneralAnalysis, ATSAnalysis, JDMatchAnalysis],
    Field(discriminator="analysis_type"),
]


class AnalysisResult(BaseModel):
    """Output of one orchestrator call. Copies are made for cache hits."""

    model_config = ConfigDict(frozen=True)

    analysis: AnalysisVariant
    model: str = ""
    tokens_used: int = 0
    processing_time_ms: int = 0
    cached: bool = False
    degraded: bool = False
    warnings: list[str] = []
    raw_response: str | None = None

    @property
    def overall_score(self) -> int:
        return self.analysis.overall_score

    @property
    def section_scores(self) -> SectionScores:
        return self.analysis.section_scores
