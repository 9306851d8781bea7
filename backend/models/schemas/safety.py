"""Reports produced by the post-generation checks."""

from typing import Literal

from pydantic import BaseModel

Severity = Literal["high", "medium", "low"]


class PIIFinding(BaseModel):
    type: Literal["email", "phone", "ssn", "credit_card", "dob"]
    value: str


class PIIReport(BaseModel):
    has_pii: bool = False
    findings: list[PIIFinding] = []
    issues: list[str] = []

    @property
    def types(self) -> list[str]:
        return sorted({f.type for f in self.findings})


class ToxicityReport(BaseModel):
    is_toxic: bool = False
    issues: list[str] = []
    severity: Severity = "low"


class ModerationReport(BaseModel):
    flagged: bool = False
    categories: dict[str, bool] = {}
    flagged_categories: list[str] = []
    skipped: bool = False
    error: str | None = None
    pii: PIIReport = PIIReport()
    toxicity: ToxicityReport = ToxicityReport()
    safety_score: int = 100
    status: Literal["safe", "warning", "unsafe"] = "safe"
    issues: list[str] = []
    warnings: list[str] = []

    @property
    def safe(self) -> bool:
        return not self.issues


class UnmatchedClaim(BaseModel):
    type: Literal["metric", "skill", "company"]
    claim: str  # the sentence the claim came from
    terms: list[str] = []  # the unverified metric/skill/company strings
    severity: Severity


class JobDetailsCheck(BaseModel):
    accurate: bool = True
    accuracy_score: int = 100
    issues: list[str] = []


class HallucinationReport(BaseModel):
    has_hallucinations: bool = False
    confidence: int = 100
    overall_confidence: int = 100
    is_reliable: bool = True
    total_facts: int = 0
    verified_facts: int = 0
    verification_rate: float = 100.0
    unmatched_claims: list[UnmatchedClaim] = []
    job_details: JobDetailsCheck = JobDetailsCheck()
    issues: list[str] = []
    warnings: list[str] = []
    recommendation: str = ""


class GenderBias(BaseModel):
    has_bias: bool = False
    bias_score: int = 0  # share of gender-coded terms among coded + neutral terms
    masculine_terms: int = 0
    feminine_terms: int = 0
    neutral_terms: int = 0
    issues: list[str] = []


class AgeBias(BaseModel):
    has_bias: bool = False
    young_terms: int = 0
    old_terms: int = 0
    issues: list[str] = []


class TermBias(BaseModel):
    has_bias: bool = False
    issues: list[str] = []


class InclusivityCheck(BaseModel):
    is_inclusive: bool = True
    score: int = 100
    inclusive_terms: int = 0
    exclusive_terms: int = 0
    suggestions: list[str] = []


class BiasIndicator(BaseModel):
    category: Literal["gender", "age", "cultural", "socioeconomic"]
    message: str


class BiasReport(BaseModel):
    has_bias: bool = False
    overall_score: int = 100
    grade: Literal["A", "B", "C", "D"] = "A"
    gender: GenderBias = GenderBias()
    age: AgeBias = AgeBias()
    cultural: TermBias = TermBias()
    socioeconomic: TermBias = TermBias()
    inclusivity: InclusivityCheck = InclusivityCheck()
    indicators: list[BiasIndicator] = []
    issues: list[str] = []
    recommendation: str = ""


class QualityMetrics(BaseModel):
    word_count: int = 0
    char_count: int = 0
    paragraph_count: int = 0
    sentence_count: int = 0
    avg_sentence_length: float = 0.0


class QualityReport(BaseModel):
    valid: bool = True
    structure_score: int = 0
    relevance_score: int = 0
    overall_score: int = 0
    grade: str = "F"
    issues: list[str] = []
    strengths: list[str] = []
    metrics: QualityMetrics = QualityMetrics()


class SafetyReport(BaseModel):
    """Combined result of every post-generation check for one letter."""

    pii: PIIReport = PIIReport()
    moderation: ModerationReport = ModerationReport()
    hallucination: HallucinationReport = HallucinationReport()
    bias: BiasReport = BiasReport()
    quality: QualityReport = QualityReport()
    safety_score: int = 100
    confidence: int = 100
    is_reliable: bool = True
    grade: str = "F"
    recommendation: str = ""
    warnings: list[str] = []
    issues: list[str] = []

    @property
    def pii_findings(self) -> list[PIIFinding]:
        return self.pii.findings

    @property
    def moderation_flags(self) -> list[str]:
        return self.moderation.flagged_categories

    @property
    def hallucination_claims(self) -> list[UnmatchedClaim]:
        return self.hallucination.unmatched_claims

    @property
    def bias_indicators(self) -> list[BiasIndicator]:
        return self.bias.indicators
