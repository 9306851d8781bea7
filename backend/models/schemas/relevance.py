"""Diagnostics attached to the skills relevance score."""

from pydantic import BaseModel


class SkillMatch(BaseModel):
    skill: str
    similarity: float
    relevance: float


class RelevanceMetadata(BaseModel):
    method: str = "fallback"  # "embeddings" | "fallback"
    embeddings_used: bool = False
    skills_count: int = 0
    resume_chunks: int = 0
    similarity_calculations: int = 0
    average_similarity: float = 0.0
    top_matches: list[SkillMatch] = []
    processing_time_ms: int = 0
    error: str | None = None


class RelevanceResult(BaseModel):
    score: float = 0.0  # 0-100
    metadata: RelevanceMetadata = RelevanceMetadata()
