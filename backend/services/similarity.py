"""Embedding-based skill relevance scoring."""

import asyncio
import logging
import re
import time

import numpy as np

from models.schemas.relevance import RelevanceMetadata, RelevanceResult, SkillMatch
from services.outcome import capture
from services.providers import EmbeddingProvider, ProviderUnavailableError

logger = logging.getLogger(__name__)

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")

# Lazy-loaded sentence-transformers model (loaded on first use)
_sbert_model = None


def _get_sbert_model(model_name: str):
    """Load the sentence-transformers model lazily on first call."""
    global _sbert_model
    if _sbert_model is None:
        try:
            from sentence_transformers import SentenceTransformer

            _sbert_model = SentenceTransformer(model_name)
            logger.info("Embedding model %s loaded successfully", model_name)
        except Exception as e:
            logger.warning("Failed to load embedding model %s: %s", model_name, e)
    return _sbert_model


class LocalEmbeddingProvider:
    """EmbeddingProvider backed by a local sentence-transformers model."""

    def __init__(self, model_name: str = "all-MiniLM-L6-v2"):
        self.model_name = model_name

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        model = _get_sbert_model(self.model_name)
        if model is None:
            raise ProviderUnavailableError(f"embedding model {self.model_name} unavailable")
        vectors = await asyncio.to_thread(model.encode, texts, convert_to_numpy=True)
        return vectors.tolist()


def cosine_similarity(a, b) -> float:
    """Cosine similarity in [-1, 1]. 0.0 for zero vectors or length mismatch."""
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    if va.shape != vb.shape or va.size == 0:
        return 0.0
    denom = np.linalg.norm(va) * np.linalg.norm(vb)
    if denom == 0:
        return 0.0
    return float(np.clip(np.dot(va, vb) / denom, -1.0, 1.0))


def similarity_matrix(rows: np.ndarray, cols: np.ndarray) -> np.ndarray:
    """Pairwise cosine similarity between the rows of two matrices."""
    row_norms = np.linalg.norm(rows, axis=1, keepdims=True)
    col_norms = np.linalg.norm(cols, axis=1, keepdims=True)
    # Zero vectors normalize to zero and so score 0 against everything
    rows_n = np.divide(rows, row_norms, out=np.zeros_like(rows), where=row_norms != 0)
    cols_n = np.divide(cols, col_norms, out=np.zeros_like(cols), where=col_norms != 0)
    return np.clip(rows_n @ cols_n.T, -1.0, 1.0)


def split_into_chunks(text: str, chunk_size: int = 500) -> list[str]:
    """Group sentences into chunks of at most chunk_size characters.

    Sentences are never split; one longer than chunk_size becomes its own
    chunk.
    """
    sentences = [s.strip() for s in _SENTENCE_SPLIT_RE.split(text or "") if s.strip()]
    chunks: list[str] = []
    current = ""
    for sentence in sentences:
        if not current:
            current = sentence
        elif len(current) + 1 + len(sentence) <= chunk_size:
            current = f"{current} {sentence}"
        else:
            chunks.append(current)
            current = sentence
    if current:
        chunks.append(current)
    return chunks


def keyword_relevance(skills: list[str], resume_text: str) -> float:
    """Percentage of skills literally mentioned in the resume text."""
    if not skills:
        return 0.0
    lower_text = resume_text.lower()
    mentioned = sum(1 for s in skills if s.lower() in lower_text)
    return mentioned / len(skills) * 100


class SemanticRelevanceEngine:
    """Scores how strongly each listed skill is backed by the resume body.

    One batched embedding call covers the skills and the resume chunks.
    Any provider problem falls back to literal keyword matching.
    """

    def __init__(
        self,
        provider: EmbeddingProvider | None,
        chunk_size: int = 500,
        timeout: float | None = 30.0,
    ):
        self.provider = provider
        self.chunk_size = chunk_size
        self.timeout = timeout

    def _fallback(
        self, skills: list[str], resume_text: str, started: float, error: str | None
    ) -> RelevanceResult:
        metadata = RelevanceMetadata(
            method="fallback",
            skills_count=len(skills),
            processing_time_ms=int((time.perf_counter() - started) * 1000),
            error=error,
        )
        return RelevanceResult(score=keyword_relevance(skills, resume_text), metadata=metadata)

    async def score(self, skills: list[str], resume_text: str) -> RelevanceResult:
        started = time.perf_counter()
        if not skills:
            return RelevanceResult(score=0.0, metadata=RelevanceMetadata())

        if self.provider is None:
            logger.info("No embedding provider configured, using keyword matching")
            return self._fallback(skills, resume_text, started, None)

        chunks = split_into_chunks(resume_text, self.chunk_size)
        if not chunks:
            return self._fallback(skills, resume_text, started, "empty resume text")

        outcome = await capture(self.provider.embed(skills + chunks), timeout=self.timeout)
        if not outcome.ok:
            logger.warning("Embeddings unavailable (%s), using keyword matching", outcome.reason)
            return self._fallback(skills, resume_text, started, outcome.reason)

        vectors = outcome.value or []
        if len(vectors) < len(skills) + len(chunks):
            logger.warning(
                "Embedding batch returned %d vectors for %d texts, using keyword matching",
                len(vectors), len(skills) + len(chunks),
            )
            return self._fallback(skills, resume_text, started, "incomplete embedding batch")

        try:
            skill_vecs = np.asarray(vectors[: len(skills)], dtype=float)
            chunk_vecs = np.asarray(vectors[len(skills): len(skills) + len(chunks)], dtype=float)
            sims = similarity_matrix(skill_vecs, chunk_vecs)
        except ValueError as e:
            logger.warning("Malformed embedding vectors: %s", e)
            return self._fallback(skills, resume_text, started, "malformed embedding vectors")

        matches: list[SkillMatch] = []
        for i, skill in enumerate(skills):
            best = max(0.0, float(sims[i].max()))
            # Skills with no positive similarity are left out of the average
            if best > 0:
                relevance = min(100.0, (best + 1) * 50)
                matches.append(SkillMatch(skill=skill, similarity=best, relevance=relevance))

        score = sum(m.relevance for m in matches) / len(matches) if matches else 0.0
        top = sorted(matches, key=lambda m: m.similarity, reverse=True)[:3]
        metadata = RelevanceMetadata(
            method="embeddings",
            embeddings_used=True,
            skills_count=len(skills),
            resume_chunks=len(chunks),
            similarity_calculations=len(skills) * len(chunks),
            average_similarity=(
                round(sum(m.similarity for m in matches) / len(matches), 4) if matches else 0.0
            ),
            top_matches=[
                SkillMatch(
                    skill=m.skill,
                    similarity=round(m.similarity, 2),
                    relevance=round(m.relevance),
                )
                for m in top
            ],
            processing_time_ms=int((time.perf_counter() - started) * 1000),
        )
        logger.info(
            "Skill relevance %.0f/100 (%d/%d skills matched, %d chunks)",
            score, len(matches), len(skills), len(chunks),
        )
        return RelevanceResult(score=score, metadata=metadata)
