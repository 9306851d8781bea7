import time

from fastapi.testclient import TestClient

from api.dependencies import get_analyzer, get_cover_letter_generator, get_task_manager
from config import Settings
from main import app
from services.analysis_tasks import AnalysisTaskManager
from services.cover_letter import CoverLetterGenerator
from services.providers import ProviderBadRequestError
from services.resume_analyzer import ResumeAnalyzer

from conftest import SAMPLE_JOB_DESCRIPTION, SAMPLE_RESUME, FakeTextProvider

client = TestClient(app)

test_settings = Settings(gemini_api_key="", cover_letter_retry_delay_seconds=0, _env_file=None)

LETTER = (
    "Dear Hiring Manager,\n\nI am applying for the Backend Engineer role at Globex. "
    "I built Python services on AWS and led a migration to Kubernetes.\n\n"
    "Thank you for your time.\n\nSincerely,\nJane Doe"
)


def _use(dependency, value):
    app.dependency_overrides[dependency] = lambda: value


def teardown_function():
    app.dependency_overrides.clear()


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "gemini_configured" in data


def test_analyze_quick_fallback_without_provider():
    _use(get_analyzer, ResumeAnalyzer(test_settings))
    response = client.post("/analyze/quick", json={"resume_text": SAMPLE_RESUME})
    assert response.status_code == 200
    data = response.json()
    assert data["degraded"] is True
    assert data["analysis"]["analysis_type"] == "general"
    assert 0 <= data["analysis"]["overall_score"] <= 100
    assert "section_scores" in data["analysis"]


def test_analyze_quick_rejects_short_resume():
    _use(get_analyzer, ResumeAnalyzer(test_settings))
    response = client.post("/analyze/quick", json={"resume_text": "too short"})
    assert response.status_code == 400


def test_analyze_quick_rejects_unknown_type():
    response = client.post(
        "/analyze/quick", json={"resume_text": SAMPLE_RESUME, "analysis_type": "vibes"}
    )
    assert response.status_code == 422


def test_analyze_quick_provider_rejection_is_502():
    provider = FakeTextProvider(ProviderBadRequestError("API key not valid", status_code=400))
    _use(get_analyzer, ResumeAnalyzer(test_settings, text_provider=provider))
    response = client.post("/analyze/quick", json={"resume_text": SAMPLE_RESUME})
    assert response.status_code == 502


def test_analysis_task_lifecycle():
    _use(get_task_manager, AnalysisTaskManager(ResumeAnalyzer(test_settings)))
    with TestClient(app) as live_client:
        response = live_client.post(
            "/analyze/tasks",
            json={
                "resume_text": SAMPLE_RESUME,
                "analysis_type": "jd_match",
                "job_description": SAMPLE_JOB_DESCRIPTION,
            },
        )
        assert response.status_code == 202
        task_id = response.json()["task_id"]

        data = {}
        for _ in range(100):
            data = live_client.get(f"/analyze/tasks/{task_id}").json()
            if data["status"] in ("completed", "failed"):
                break
            time.sleep(0.02)

        assert data["status"] == "completed"
        assert data["result"]["analysis"]["analysis_type"] == "jd_match"


def test_unknown_task_is_404():
    _use(get_task_manager, AnalysisTaskManager(ResumeAnalyzer(test_settings)))
    assert client.get("/analyze/tasks/does-not-exist").status_code == 404


def test_cover_letter():
    generator = CoverLetterGenerator(test_settings, text_provider=FakeTextProvider(LETTER))
    _use(get_cover_letter_generator, generator)
    response = client.post(
        "/cover-letter",
        json={
            "resume_text": SAMPLE_RESUME,
            "job_description": SAMPLE_JOB_DESCRIPTION,
            "job_title": "Backend Engineer",
            "company_name": "Globex",
            "tone": "friendly",
        },
    )
    assert response.status_code == 200
    versions = response.json()["versions"]
    assert len(versions) == 1
    assert versions[0]["content"] == LETTER
    assert versions[0]["tone"] == "friendly"
    assert versions[0]["disclaimer"]
    assert "safety" in versions[0]["metadata"]


def test_cover_letter_two_versions():
    generator = CoverLetterGenerator(test_settings, text_provider=FakeTextProvider(LETTER))
    _use(get_cover_letter_generator, generator)
    response = client.post(
        "/cover-letter",
        json={
            "resume_text": SAMPLE_RESUME,
            "job_description": SAMPLE_JOB_DESCRIPTION,
            "job_title": "Backend Engineer",
            "company_name": "Globex",
            "versions": 2,
        },
    )
    assert response.status_code == 200
    assert [v["template"] for v in response.json()["versions"]] == ["traditional", "modern"]


def test_cover_letter_rejects_short_job_description():
    provider = FakeTextProvider(LETTER)
    _use(get_cover_letter_generator, CoverLetterGenerator(test_settings, text_provider=provider))
    response = client.post(
        "/cover-letter",
        json={
            "resume_text": SAMPLE_RESUME,
            "job_description": "Too short.",
            "job_title": "Backend Engineer",
            "company_name": "Globex",
        },
    )
    assert response.status_code == 400
    assert provider.calls == 0


def test_cover_letter_templates():
    response = client.get("/cover-letter/templates")
    assert response.status_code == 200
    ids = [t["id"] for t in response.json()]
    assert ids == ["traditional", "modern", "creative", "technical", "executive"]


def test_analysis_task_rejects_short_resume_immediately():
    manager = AnalysisTaskManager(ResumeAnalyzer(test_settings))
    _use(get_task_manager, manager)
    response = client.post("/analyze/tasks", json={"resume_text": "too short"})
    assert response.status_code == 400
    assert "too short" in response.json()["detail"]
    assert len(manager) == 0
