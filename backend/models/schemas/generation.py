"""Cover letter generation result."""

from pydantic import BaseModel, ConfigDict, computed_field

from models.schemas.safety import BiasReport, HallucinationReport, ModerationReport, SafetyReport

AI_DISCLAIMER = (
    "This cover letter was generated with AI assistance. Review it carefully, "
    "verify every claim against your own experience, and personalize it "
    "before sending."
)


class CostBreakdown(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0
    input_cost: float = 0.0
    output_cost: float = 0.0
    total_cost: float = 0.0


class GenerationMetadata(BaseModel):
    word_count: int = 0
    character_count: int = 0
    ai_model: str = ""
    tokens_used: int = 0
    estimated_tokens: int = 0
    processing_time_ms: int = 0
    cost: float = 0.0
    cost_breakdown: CostBreakdown = CostBreakdown()
    quality_score: int | None = None
    quality_grade: str | None = None
    safety: SafetyReport | None = None

    # Shortcuts into the safety report, serialized alongside it
    @computed_field
    @property
    def moderation(self) -> ModerationReport | None:
        return self.safety.moderation if self.safety is not None else None

    @computed_field
    @property
    def hallucination(self) -> HallucinationReport | None:
        return self.safety.hallucination if self.safety is not None else None

    @computed_field
    @property
    def bias(self) -> BiasReport | None:
        return self.safety.bias if self.safety is not None else None

    @computed_field
    @property
    def structure_score(self) -> int | None:
        return self.safety.quality.structure_score if self.safety is not None else None

    @computed_field
    @property
    def relevance_score(self) -> int | None:
        return self.safety.quality.relevance_score if self.safety is not None else None

    @computed_field
    @property
    def validation(self) -> bool | None:
        return self.safety.quality.valid if self.safety is not None else None


class GenerationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str
    template: str = "traditional"
    tone: str = "professional"
    metadata: GenerationMetadata = GenerationMetadata()
    cached: bool = False
    fallback: bool = False
    warnings: list[str] = []
    issues: list[str] = []
    disclaimer: str = AI_DISCLAIMER
