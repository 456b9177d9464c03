import io

import pytest
from fastapi import status

from hiring.models.ai_request_log import AIRequestLog
from hiring.models.job_posting import JobPosting
from hiring.models.job_scoring import InvitationStatus, JobScoring
from hiring.models.resume_profile import ResumeProfile

RESUME = (
    "Jane Doe\njane.doe@acme.com\nSenior Engineer at Acme (2020-2024)\n"
    "Skills: Python, FastAPI, PostgreSQL. Built hiring platform APIs."
)


def test_process_resume_scores_and_auto_invites(client, db_session, recruiter, job, fake_llm, auth_headers):
    response = client.post(
        "/api/resume-profiles/process",
        json={"resume_text": RESUME, "job_id": job.id},
        headers=auth_headers(recruiter),
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["profile"]["name"] == "Jane Doe"
    assert data["profile"]["skills"] == ["Python", "FastAPI", "PostgreSQL"]
    assert data["failures"] == []

    score = data["job_scores"][0]
    assert score["overall_score"] == 82
    assert score["oracle_overall_score"] == 81
    assert score["match_label"] == "Strong Match"
    assert score["badge_color"] == "green"
    assert score["qualification_status"] == "qualified"
    assert score["invitation_status"] == "invited"
    assert score["full_response"]["verdict"]["decision"] == "INTERVIEW"

    assert db_session.query(AIRequestLog).filter(AIRequestLog.status == "success").count() == 2


def test_scoring_prompt_carries_job_and_profile(client, recruiter, job, fake_llm, auth_headers):
    job.screening_rules = "Must be able to work in EU time zones"
    client.post(
        "/api/resume-profiles/process",
        json={"resume_text": RESUME, "job_id": job.id},
        headers=auth_headers(recruiter),
    )
    user_prompt = fake_llm.scoring_calls[0]["messages"][1]["content"]
    assert "JOB TITLE: Backend Engineer" in user_prompt
    assert "Skills: Python, FastAPI, PostgreSQL" in user_prompt
    assert "Must be able to work in EU time zones" in user_prompt


def test_below_threshold_is_not_invited(client, db_session, recruiter, job, fake_llm, auth_headers):
    job.score_matching_threshold = 90
    db_session.commit()
    response = client.post(
        "/api/resume-profiles/process",
        json={"resume_text": RESUME, "job_id": job.id},
        headers=auth_headers(recruiter),
    )
    score = response.json()["job_scores"][0]
    assert score["qualification_status"] == "not_qualified"
    assert score["invitation_status"] is None


def test_candidate_without_email_is_not_invited(client, recruiter, job, fake_llm, auth_headers):
    fake_llm.parse_result["email"] = ""
    response = client.post(
        "/api/resume-profiles/process",
        json={"resume_text": RESUME, "job_id": job.id},
        headers=auth_headers(recruiter),
    )
    score = response.json()["job_scores"][0]
    assert score["qualification_status"] == "qualified"
    assert score["invitation_status"] is None


def test_disqualified_candidate(client, recruiter, job, fake_llm, auth_headers):
    fake_llm.score_result["disqualified"] = True
    fake_llm.score_result["disqualificationReason"] = "No work permit"
    response = client.post(
        "/api/resume-profiles/process",
        json={"resume_text": RESUME, "job_id": job.id},
        headers=auth_headers(recruiter),
    )
    score = response.json()["job_scores"][0]
    assert score["qualification_status"] == "disqualified"
    assert score["disqualification_reason"] == "No work permit"
    assert score["invitation_status"] is None


def test_process_without_job_scores_all_active_jobs(client, db_session, org, recruiter, job, fake_llm, auth_headers):
    db_session.add(JobPosting(title="Frontend Engineer", description="React", organization_id=org.id))
    db_session.add(JobPosting(title="Closed", organization_id=org.id, is_active=False))
    db_session.commit()

    response = client.post(
        "/api/resume-profiles/process", json={"resume_text": RESUME}, headers=auth_headers(recruiter)
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert len(response.json()["job_scores"]) == 2
    assert len(fake_llm.scoring_calls) == 2


def test_scoring_failure_keeps_profile(client, db_session, recruiter, job, fake_llm, auth_headers):
    fake_llm.fail_scoring = True
    response = client.post(
        "/api/resume-profiles/process",
        json={"resume_text": RESUME, "job_id": job.id},
        headers=auth_headers(recruiter),
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["job_scores"] == []
    assert data["failures"][0]["job_id"] == job.id
    assert data["failures"][0]["code"] == "AI_SERVICE_UNAVAILABLE"
    assert db_session.query(ResumeProfile).filter(ResumeProfile.id == data["profile"]["id"]).count() == 1
    assert db_session.query(JobScoring).count() == 0


def test_short_resume_rejected(client, recruiter, job, fake_llm, auth_headers):
    response = client.post(
        "/api/resume-profiles/process",
        json={"resume_text": "too short", "job_id": job.id},
        headers=auth_headers(recruiter),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert fake_llm.calls == []


def test_process_against_unknown_job(client, recruiter, fake_llm, auth_headers):
    response = client.post(
        "/api/resume-profiles/process",
        json={"resume_text": RESUME, "job_id": 4242},
        headers=auth_headers(recruiter),
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert fake_llm.calls == []


def test_upload_text_file(client, recruiter, job, fake_llm, auth_headers):
    files = {"file": ("jane.txt", io.BytesIO(RESUME.encode()), "text/plain")}
    response = client.post(
        "/api/resume-profiles/upload",
        files=files,
        data={"job_id": str(job.id)},
        headers=auth_headers(recruiter),
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["profile"]["source_filename"] == "jane.txt"


def test_upload_unsupported_file(client, recruiter, fake_llm, auth_headers):
    files = {"file": ("jane.exe", io.BytesIO(b"MZ"), "application/octet-stream")}
    response = client.post("/api/resume-profiles/upload", files=files, headers=auth_headers(recruiter))
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_bulk_processing(client, recruiter, job, fake_llm, auth_headers):
    text = "\n---\n".join([RESUME, "tiny", RESUME.replace("Jane", "John")])
    response = client.post(
        "/api/resume-profiles/bulk",
        json={"resumes_text": text, "job_id": job.id},
        headers=auth_headers(recruiter),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["processed"] == 2
    assert data["errors"] == []


def test_list_and_get_profile(client, recruiter, job, profile, make_scoring, auth_headers):
    make_scoring(job, profile, overall_score=70)
    response = client.get("/api/resume-profiles", headers=auth_headers(recruiter))
    assert response.status_code == 200
    items = response.json()
    assert items[0]["name"] == "Jane Doe"
    assert items[0]["job_scores"][0]["job_title"] == "Backend Engineer"

    response = client.get(f"/api/resume-profiles/{profile.id}", headers=auth_headers(recruiter))
    detail = response.json()
    assert detail["resume_text"].startswith("Jane Doe")
    assert detail["job_scores"][0]["overall_score"] == 70


def test_list_filtered_by_job(client, db_session, org, recruiter, job, profile, make_scoring, auth_headers):
    other = ResumeProfile(name="Unscored", resume_text="x" * 60, organization_id=org.id)
    db_session.add(other)
    db_session.commit()
    make_scoring(job, profile)

    response = client.get(f"/api/resume-profiles?job_id={job.id}", headers=auth_headers(recruiter))
    assert [p["name"] for p in response.json()] == ["Jane Doe"]


def test_rescore_pending_candidate(client, db_session, recruiter, job, profile, make_scoring, fake_llm, auth_headers):
    scoring = make_scoring(job, profile, overall_score=10)
    response = client.post(f"/api/resume-profiles/{profile.id}/score/{job.id}", headers=auth_headers(recruiter))
    assert response.status_code == 200
    assert response.json()["id"] == scoring.id
    assert response.json()["overall_score"] == 82
    assert db_session.query(JobScoring).filter(JobScoring.job_id == job.id).count() == 1


def test_rescore_actioned_candidate_is_locked(client, recruiter, job, profile, make_scoring, fake_llm, auth_headers):
    make_scoring(job, profile, invitation_status=InvitationStatus.accepted)
    response = client.post(f"/api/resume-profiles/{profile.id}/score/{job.id}", headers=auth_headers(recruiter))
    assert response.status_code == status.HTTP_409_CONFLICT
    assert fake_llm.scoring_calls == []


def test_score_against_closed_job(client, db_session, recruiter, job, profile, fake_llm, auth_headers):
    job.is_active = False
    db_session.commit()
    response = client.post(f"/api/resume-profiles/{profile.id}/score/{job.id}", headers=auth_headers(recruiter))
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_malformed_scoring_reply_is_not_stored(client, db_session, recruiter, job, profile, fake_llm, auth_headers):
    fake_llm.score_raw = '{"overallScore": 88, "technicalSkillsScore": 90, "verdict": {"decision": "INTERVIEW"}, oops}'
    response = client.post(f"/api/resume-profiles/{profile.id}/score/{job.id}", headers=auth_headers(recruiter))
    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json()["success"] is False
    assert db_session.query(JobScoring).filter(JobScoring.profile_id == profile.id).count() == 0


def test_scoreless_reply_is_not_stored(client, db_session, recruiter, job, profile, fake_llm, auth_headers):
    fake_llm.score_result = {"verdict": {"decision": "INTERVIEW"}, "matchSummary": "Great"}
    response = client.post(f"/api/resume-profiles/{profile.id}/score/{job.id}", headers=auth_headers(recruiter))
    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert db_session.query(JobScoring).count() == 0


def test_reparse_updates_profile(client, recruiter, profile, fake_llm, auth_headers):
    fake_llm.parse_result["skills"] = "Go, Rust"
    response = client.post(f"/api/resume-profiles/{profile.id}/reparse", headers=auth_headers(recruiter))
    assert response.status_code == 200
    assert response.json()["skills"] == ["Go", "Rust"]


def test_delete_profile_removes_scorings(client, db_session, recruiter, job, profile, make_scoring, auth_headers):
    make_scoring(job, profile)
    response = client.delete(f"/api/resume-profiles/{profile.id}", headers=auth_headers(recruiter))
    assert response.status_code == 200
    assert db_session.query(JobScoring).filter(JobScoring.job_id == job.id).count() == 0

    response = client.get(f"/api/resume-profiles/{profile.id}", headers=auth_headers(recruiter))
    assert response.status_code == status.HTTP_404_NOT_FOUND
