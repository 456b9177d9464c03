import json

import pytest

from hiring.core.exceptions import AIError
from hiring.services.scoring_oracle import FullResponse, ScoringOracleClient, parse_full_response


def test_camel_case_fields_are_mapped():
    response = FullResponse.model_validate({
        "overallScore": 77,
        "technicalSkillsScore": "88%",
        "matchSummary": "Good fit",
        "strengthsHighlights": ["Python"],
        "disqualificationReason": None,
    })
    assert response.overall_score == 77
    assert response.technical_skills_score == 88
    assert response.match_summary == "Good fit"
    assert response.strengths_highlights == ["Python"]


def test_scores_are_clamped():
    response = FullResponse.model_validate({"overallScore": 140, "experienceScore": -3})
    assert response.overall_score == 100
    assert response.experience_score == 0


def test_unparseable_scores_become_none():
    response = FullResponse.model_validate({"overallScore": "high", "culturalFitScore": True})
    assert response.overall_score is None
    assert response.cultural_fit_score is None


def test_missing_summary_gets_default():
    assert FullResponse.model_validate({"matchSummary": "  "}).match_summary == "No match summary available"
    assert FullResponse.model_validate({}).match_summary == "No match summary available"


def test_scalar_lists_are_wrapped():
    response = FullResponse.model_validate({"redFlags": "Gap in employment", "improvementAreas": None})
    assert response.red_flags == ["Gap in employment"]
    assert response.improvement_areas == []


@pytest.mark.parametrize("raw,expected", [(True, True), ("yes", True), ("false", False), (0, False), (None, False)])
def test_disqualified_coercion(raw, expected):
    assert FullResponse.model_validate({"disqualified": raw}).disqualified is expected


def test_numeric_section_becomes_object():
    response = FullResponse.model_validate({"sectionA": 24, "sectionB": {"score": "20", "explanation": "ok"}})
    assert response.section_a.score == 24
    assert response.section_b.score == 20
    assert response.section_b.explanation == "ok"


def test_verdict_decision_is_uppercased():
    response = FullResponse.model_validate({"verdict": {"decision": " interview ", "dealbreakers": "none"}})
    assert response.verdict.decision == "INTERVIEW"
    assert response.verdict.dealbreakers == ["none"]


def test_unknown_keys_are_kept_in_storage():
    response = FullResponse.model_validate({"overallScore": 60, "salaryBand": "B2"})
    stored = response.to_storage()
    assert stored["overallScore"] == 60
    assert stored["salaryBand"] == "B2"
    assert "technicalSkillsScore" not in stored


def test_parse_full_response_rejects_non_object():
    with pytest.raises(AIError):
        parse_full_response(["not", "a", "dict"])


def test_oracle_client_scores_through_orchestrator(fake_llm):
    fake_llm.score_result = {"overallScore": 64, "matchSummary": "Decent"}
    response = ScoringOracleClient().score("system", "JOB TITLE: Dev")
    assert response.overall_score == 64
    assert fake_llm.calls[0]["messages"][0] == {"role": "system", "content": "system"}


def test_oracle_client_wraps_bad_json(monkeypatch):
    from hiring.services.ai_orchestrator import AIOrchestrator

    def fake(messages, model_name, temperature=0.2, json_output=True):
        return {"content": "I cannot score this candidate.", "usage": {}}

    monkeypatch.setattr(AIOrchestrator, "_do_call", staticmethod(fake))
    with pytest.raises(AIError) as exc:
        ScoringOracleClient().score("system", "user")
    assert exc.value.message == "Failed to parse AI response."


def test_parse_full_response_requires_a_score():
    with pytest.raises(AIError):
        parse_full_response({"verdict": {"decision": "INTERVIEW"}, "matchSummary": "Looks good"})


def test_parse_full_response_accepts_section_scores_only():
    response = parse_full_response({"sectionC": {"score": 12}, "sectionD": 6})
    assert response.section_c.score == 12
    assert response.section_d.score == 6


def test_oracle_client_rejects_broken_reply(fake_llm):
    fake_llm.score_raw = '{"overallScore": 88, "verdict": {"decision": "INTERVIEW"}, oops}'
    with pytest.raises(AIError):
        ScoringOracleClient().score("system", "JOB TITLE: Dev")
