from models.schemas.analysis import ATSAnalysis, GeneralAnalysis, JDMatchAnalysis
from services.analysis_validator import (
    clamp_score,
    normalize_analysis,
    normalize_section_scores,
    validate_analysis,
)
from services.gemini_client import parse_json_response


VALID_GENERAL = {
    "overall_score": 72,
    "section_scores": {"summary": 70, "experience": 80, "education": 60, "achievements": 50},
    "strengths": [{"category": "Experience", "description": "Strong backend work", "examples": ["APIs"]}],
    "weaknesses": [],
    "recommendations": [
        {"priority": "high", "category": "Summary", "title": "Tighten summary", "description": "Shorter"}
    ],
    "skills_analysis": {"detected": ["Python"], "missing": [], "recommendations": []},
}


def test_validate_accepts_well_formed_payload():
    report = validate_analysis(VALID_GENERAL, "general")
    assert report.valid
    assert report.errors == []


def test_validate_rejects_out_of_range_scores():
    payload = {**VALID_GENERAL, "overall_score": 140}
    report = validate_analysis(payload, "general")
    assert not report.valid
    assert any(e["path"] == "overall_score" for e in report.errors)


def test_validate_rejects_non_object():
    assert not validate_analysis(["not", "an", "object"], "general").valid


def test_clamp_score():
    assert clamp_score(150) == 100
    assert clamp_score(-3) == 0
    assert clamp_score("87.6") == 88
    assert clamp_score("n/a") == 0
    assert clamp_score(None, default=None) is None
    assert clamp_score(True) == 0
    assert clamp_score(float("nan")) == 0


def test_normalize_section_scores_drops_unknown_and_unparseable():
    scores = normalize_section_scores({"summary": "90", "experience": "bad", "hobbies": 50, "skills": 120})
    assert scores == {"summary": 90, "skills": 100}


def test_normalize_empty_payload_is_complete():
    analysis = normalize_analysis({}, "general")
    assert isinstance(analysis, GeneralAnalysis)
    assert analysis.overall_score == 0
    assert analysis.strengths == []
    assert analysis.recommendations == []
    assert analysis.skills_analysis.detected == []
    assert analysis.section_scores.present() == {}


def test_normalize_repairs_items():
    payload = {
        "overall_score": "65",
        "strengths": ["Clear layout", {"description": ""}, 42],
        "weaknesses": ["No metrics"],
        "recommendations": [
            "Add numbers",
            {"priority": "URGENT", "title": "Quantify", "actionItems": ["Add %"]},
            {"priority": "Low", "description": "Reorder sections"},
        ],
    }
    analysis = normalize_analysis(payload, "general")
    assert analysis.overall_score == 65
    assert [s.description for s in analysis.strengths] == ["Clear layout"]
    assert analysis.weaknesses[0].description == "No metrics"
    recs = analysis.recommendations
    assert recs[0].title == "Add numbers"
    assert recs[0].priority == "medium"
    assert recs[1].priority == "medium"
    assert recs[1].action_items == ["Add %"]
    assert recs[2].priority == "low"
    assert recs[2].title == "Reorder sections"


def test_normalize_ats_variant():
    payload = {
        "overall_score": 70,
        "ats_analysis": {
            "score": 64,
            "issues": [{"type": "keyword", "severity": "bogus", "description": "Missing keywords"}, "x"],
            "keywords": {"found": ["Python"], "missing": ["Go"], "density": "2.5"},
        },
    }
    analysis = normalize_analysis(payload, "ats")
    assert isinstance(analysis, ATSAnalysis)
    assert analysis.ats_analysis.score == 64
    assert len(analysis.ats_analysis.issues) == 1
    assert analysis.ats_analysis.issues[0].severity is None
    assert analysis.ats_analysis.keywords.density == 2.5


def test_normalize_jd_match_variant_with_missing_block():
    analysis = normalize_analysis({"overall_score": 50}, "jd_match")
    assert isinstance(analysis, JDMatchAnalysis)
    assert analysis.job_description_match.skills_match.matched == []
    assert analysis.job_description_match.score is None


def test_normalized_payload_passes_validation():
    messy = {"overall_score": 999, "section_scores": {"summary": -5}, "strengths": "oops"}
    analysis = normalize_analysis(messy, "general")
    report = validate_analysis(analysis.model_dump(exclude={"analysis_type"}), "general")
    assert report.valid


def test_parse_json_response_strips_fences():
    assert parse_json_response('```json\n{"overall_score": 5}\n```') == {"overall_score": 5}
    assert parse_json_response('{"a": 1}') == {"a": 1}


def test_parse_json_response_invalid():
    assert parse_json_response("not json") is None
    assert parse_json_response("[1, 2]") is None
    assert parse_json_response("") is None
