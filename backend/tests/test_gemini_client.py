from types import SimpleNamespace

import httpx
import pytest

from services import gemini_client
from services.gemini_client import (
    GeminiEmbeddingProvider,
    GeminiTextProvider,
    parse_json_response,
)
from services.providers import GenerationOptions, TransientProviderError
from services.resume_analyzer import ResumeAnalyzer

from conftest import SAMPLE_RESUME, FakeTextProvider


def _offline_client():
    async def fail(**kwargs):
        raise httpx.ConnectError("network down")

    return SimpleNamespace(
        aio=SimpleNamespace(models=SimpleNamespace(generate_content=fail, embed_content=fail))
    )


@pytest.fixture
def offline(monkeypatch):
    client = _offline_client()
    monkeypatch.setattr(gemini_client, "get_client", lambda api_key=None: client)
    return client


def test_parse_json_response_strips_fences():
    assert parse_json_response('```json\n{"a": 1}\n```') == {"a": 1}
    assert parse_json_response("not json") is None
    assert parse_json_response("[1, 2]") is None


@pytest.mark.asyncio
async def test_text_transport_error_is_transient(offline):
    with pytest.raises(TransientProviderError):
        await GeminiTextProvider("k").generate("system", "user", GenerationOptions())


@pytest.mark.asyncio
async def test_embedding_transport_error_is_transient(offline):
    with pytest.raises(TransientProviderError):
        await GeminiEmbeddingProvider("k").embed(["python"])


@pytest.mark.asyncio
async def test_unreachable_text_provider_yields_fallback_analysis(offline, settings):
    analyzer = ResumeAnalyzer(settings, text_provider=GeminiTextProvider("k"))
    result = await analyzer.analyze(SAMPLE_RESUME)
    assert result.degraded is True


@pytest.mark.asyncio
async def test_unreachable_embeddings_use_keyword_relevance(offline, settings):
    analyzer = ResumeAnalyzer(
        settings,
        text_provider=FakeTextProvider("{}"),
        embedding_provider=GeminiEmbeddingProvider("k"),
    )
    result = await analyzer.analyze(SAMPLE_RESUME)
    assert result.degraded is False
    metadata = result.analysis.skills_analysis.relevance_metadata
    assert metadata.method == "fallback"
    assert "unreachable" in metadata.error
