import json

import pytest

from models.schemas.analysis import SECTION_WEIGHTS
from services.cache import InMemoryCache
from services.fallback_analysis import FALLBACK_MODEL, MAX_FALLBACK_SCORE
from services.providers import (
    ProviderBadRequestError,
    ProviderUnavailableError,
    TransientProviderError,
)
from services.resume_analyzer import AnalysisInputError, ResumeAnalyzer
from services.rule_based_scoring import calculate_overall_score, count_specific_skills
from services.section_parser import segment_resume

from conftest import (
    SAMPLE_JOB_DESCRIPTION,
    SAMPLE_RESUME,
    FakeEmbeddingProvider,
    FakeTextProvider,
)


AI_RESPONSE = json.dumps({
    "overall_score": 10,
    "section_scores": {
        "summary": 80,
        "experience": 85,
        "education": 70,
        "achievements": 60,
        # the model must not override deterministic dimensions
        "contact_info": 5,
        "skills": 5,
        "formatting": 5,
    },
    "strengths": [{"category": "Experience", "description": "Clear impact metrics"}],
    "weaknesses": ["Summary could be more specific"],
    "recommendations": [{"priority": "high", "title": "Add a projects section", "description": "Show side work"}],
    "skills_analysis": {"detected": [], "missing": []},
})


def _check_weighted_overall(result):
    scores = result.section_scores.present()
    assert result.overall_score == calculate_overall_score(scores)
    assert 0 <= result.overall_score <= 100
    for name in SECTION_WEIGHTS:
        if name in scores:
            assert 0 <= scores[name] <= 100


class TestResumeAnalyzer:
    @pytest.mark.asyncio
    async def test_merges_ai_and_rule_based_scores(self, settings):
        provider = FakeTextProvider(AI_RESPONSE)
        analyzer = ResumeAnalyzer(settings, text_provider=provider, embedding_provider=FakeEmbeddingProvider())
        result = await analyzer.analyze(SAMPLE_RESUME, "general")

        scores = result.section_scores.present()
        assert scores["summary"] == 80
        assert scores["experience"] == 85
        # rule-based values win
        assert scores["contact_info"] == 100
        assert scores["formatting"] == 100
        assert scores["skills"] > 5
        _check_weighted_overall(result)
        assert result.overall_score != 10
        assert not result.degraded
        assert result.model == "fake-model"
        assert result.tokens_used == 1600
        assert result.analysis.skills_analysis.detected[0] == "Python"
        assert result.analysis.skills_analysis.relevance_metadata.embeddings_used

    @pytest.mark.asyncio
    async def test_second_call_is_cached(self, settings):
        provider = FakeTextProvider(AI_RESPONSE)
        analyzer = ResumeAnalyzer(settings, text_provider=provider, cache=InMemoryCache())

        first = await analyzer.analyze(SAMPLE_RESUME, "general")
        second = await analyzer.analyze(SAMPLE_RESUME, "general")

        assert first.cached is False
        assert second.cached is True
        assert provider.calls == 1
        assert second.overall_score == first.overall_score

    @pytest.mark.asyncio
    async def test_cache_key_includes_type_and_job_description(self, settings):
        provider = FakeTextProvider(AI_RESPONSE)
        analyzer = ResumeAnalyzer(settings, text_provider=provider)

        await analyzer.analyze(SAMPLE_RESUME, "general")
        await analyzer.analyze(SAMPLE_RESUME, "ats")
        await analyzer.analyze(SAMPLE_RESUME, "jd_match", SAMPLE_JOB_DESCRIPTION)
        assert provider.calls == 3

    @pytest.mark.asyncio
    async def test_unavailable_provider_returns_fallback(self, settings):
        provider = FakeTextProvider(ProviderUnavailableError("quota exceeded"))
        cache = InMemoryCache()
        analyzer = ResumeAnalyzer(settings, text_provider=provider, cache=cache)

        result = await analyzer.analyze(SAMPLE_RESUME, "ats")

        assert result.degraded
        assert result.model == FALLBACK_MODEL
        assert result.analysis.analysis_type == "ats"
        assert result.overall_score <= MAX_FALLBACK_SCORE
        assert any("quota exceeded" in w for w in result.warnings)
        _check_weighted_overall(result)
        # degraded results are not cached
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_transient_provider_error_returns_fallback(self, settings):
        provider = FakeTextProvider(TransientProviderError("503 Service Unavailable"))
        analyzer = ResumeAnalyzer(settings, text_provider=provider)
        result = await analyzer.analyze(SAMPLE_RESUME)
        assert result.degraded
        assert result.analysis.recommendations[0].title == "AI Analysis Unavailable"

    @pytest.mark.asyncio
    async def test_unconfigured_provider_returns_fallback(self, settings):
        result = await ResumeAnalyzer(settings).analyze(SAMPLE_RESUME)
        assert result.degraded
        assert result.tokens_used == 0

    @pytest.mark.asyncio
    async def test_bad_request_propagates(self, settings):
        provider = FakeTextProvider(ProviderBadRequestError("API key not valid", status_code=400))
        analyzer = ResumeAnalyzer(settings, text_provider=provider)
        with pytest.raises(ProviderBadRequestError):
            await analyzer.analyze(SAMPLE_RESUME)

    @pytest.mark.asyncio
    async def test_invalid_json_is_normalized(self, settings):
        provider = FakeTextProvider("Sorry, I cannot help with that.")
        analyzer = ResumeAnalyzer(settings, text_provider=provider)
        result = await analyzer.analyze(SAMPLE_RESUME)

        scores = result.section_scores.present()
        assert scores["summary"] == 0
        assert scores["experience"] == 0
        assert scores["contact_info"] == 100
        assert any("not valid JSON" in w for w in result.warnings)
        _check_weighted_overall(result)

    @pytest.mark.asyncio
    async def test_jd_match_reports_missing_skills(self, settings):
        provider = FakeTextProvider(AI_RESPONSE)
        analyzer = ResumeAnalyzer(settings, text_provider=provider)
        result = await analyzer.analyze(SAMPLE_RESUME, "jd_match", SAMPLE_JOB_DESCRIPTION)

        assert result.analysis.analysis_type == "jd_match"
        missing = result.analysis.skills_analysis.missing
        assert "GraphQL" in missing
        assert "React" in missing
        assert "Python" not in missing
        assert "JOB DESCRIPTION:" in provider.prompts[0][1]
        assert "GraphQL" in provider.prompts[0][1]

    @pytest.mark.asyncio
    async def test_long_resume_is_truncated_with_warning(self, settings):
        provider = FakeTextProvider(AI_RESPONSE)
        analyzer = ResumeAnalyzer(settings, text_provider=provider)
        long_resume = SAMPLE_RESUME + ("Additional project detail. " * 3000)
        result = await analyzer.analyze(long_resume)
        assert any("truncated" in w for w in result.warnings)

    @pytest.mark.asyncio
    async def test_input_errors(self, settings):
        provider = FakeTextProvider(AI_RESPONSE)
        analyzer = ResumeAnalyzer(settings, text_provider=provider)

        with pytest.raises(AnalysisInputError):
            await analyzer.analyze("Too short", "general")
        with pytest.raises(AnalysisInputError):
            await analyzer.analyze(SAMPLE_RESUME, "unknown")
        with pytest.raises(AnalysisInputError):
            await analyzer.analyze(SAMPLE_RESUME, "jd_match")
        with pytest.raises(AnalysisInputError):
            await analyzer.analyze("<script>" + "x" * 200 + "</script>", "general")
        assert provider.calls == 0


TEN_SKILL_RESUME = """Sam Rivera
sam.rivera@example.com | 555-987-6543
Denver, CO

Summary
Platform engineer who builds reliable backend services and deployment tooling.

Experience
Platform Engineer, Northwind
Jan 2020 - Present
- Cut deployment time from 40 to 8 minutes
- Moved 30 services onto managed infrastructure

Backend Developer, Contoso
Jun 2017 - Dec 2019
- Built order APIs handling 2 million requests a day

Education
B.S. Computer Engineering, Colorado State University

Skills
Python, Go, Django, React, PostgreSQL, Redis, Docker, Kubernetes, AWS, Terraform
"""


@pytest.mark.asyncio
async def test_well_formed_resume_scores_full_formatting(settings):
    bundle = segment_resume(TEN_SKILL_RESUME)
    assert len({s.lower() for s in bundle.skills}) == 10
    assert count_specific_skills(bundle.skills) == 10

    analyzer = ResumeAnalyzer(settings, text_provider=FakeTextProvider("{}"))
    result = await analyzer.analyze(TEN_SKILL_RESUME, "general")

    scores = result.section_scores.present()
    assert scores["formatting"] == 100
    assert scores["contact_info"] >= 75
    _check_weighted_overall(result)
