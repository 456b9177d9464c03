import pytest
from fastapi import status

from hiring.core.exceptions import ConflictError, InvalidTransitionError
from hiring.models.audit_log import AuditLog
from hiring.models.interview import Interview
from hiring.models.job_scoring import InvitationStatus, JobScoring
from hiring.services.candidate_pipeline import apply_transition, can_transition


def test_transition_table():
    assert can_transition(None, InvitationStatus.invited)
    assert can_transition(None, InvitationStatus.declined)
    assert can_transition(InvitationStatus.invited, InvitationStatus.accepted)
    assert not can_transition(InvitationStatus.accepted, InvitationStatus.declined)
    assert not can_transition(InvitationStatus.declined, InvitationStatus.invited)
    assert not can_transition(InvitationStatus.accepted, InvitationStatus.invited)


def test_apply_transition_sets_token_on_invite():
    scoring = JobScoring(disqualified=False)
    assert apply_transition(scoring, InvitationStatus.invited) is True
    assert scoring.invitation_status == InvitationStatus.invited
    assert scoring.invitation_token


def test_apply_transition_is_idempotent():
    scoring = JobScoring(disqualified=False, invitation_status=InvitationStatus.accepted)
    assert apply_transition(scoring, InvitationStatus.accepted) is False


def test_apply_transition_rejects_terminal_moves():
    scoring = JobScoring(disqualified=False, invitation_status=InvitationStatus.declined)
    with pytest.raises(InvalidTransitionError):
        apply_transition(scoring, InvitationStatus.accepted)


def test_disqualified_cannot_be_invited():
    scoring = JobScoring(disqualified=True)
    with pytest.raises(ConflictError):
        apply_transition(scoring, InvitationStatus.invited)
    # Declining a disqualified candidate is fine
    assert apply_transition(scoring, InvitationStatus.declined) is True


def _url(job, profile, action):
    return f"/api/job-postings/{job.id}/candidates/{profile.id}/{action}"


def test_invite_then_accept(client, db_session, recruiter, job, profile, make_scoring, auth_headers):
    scoring = make_scoring(job, profile)
    headers = auth_headers(recruiter)

    response = client.post(_url(job, profile, "invite"), headers=headers)
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["success"] is True
    assert body["data"]["invitation_status"] == "invited"
    assert body["data"]["changed"] is True

    response = client.post(_url(job, profile, "accept"), headers=headers)
    assert response.json()["data"]["invitation_status"] == "accepted"

    db_session.refresh(scoring)
    assert scoring.invitation_status == InvitationStatus.accepted
    assert scoring.reviewed_by_id == recruiter.id
    actions = [a.action for a in db_session.query(AuditLog).filter(AuditLog.entity_type == "job_scoring")]
    assert "candidate_invited" in actions
    assert "candidate_accepted" in actions


def test_repeated_action_is_a_noop(client, recruiter, job, profile, make_scoring, auth_headers):
    make_scoring(job, profile, invitation_status=InvitationStatus.declined)
    response = client.post(_url(job, profile, "decline"), headers=auth_headers(recruiter))
    assert response.status_code == 200
    assert response.json()["data"]["changed"] is False


def test_invalid_transition_returns_409(client, recruiter, job, profile, make_scoring, auth_headers):
    make_scoring(job, profile, invitation_status=InvitationStatus.accepted)
    response = client.post(_url(job, profile, "decline"), headers=auth_headers(recruiter))
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["errors"][0]["code"] == "INVALID_STATUS_TRANSITION"


def test_invite_disqualified_returns_409(client, recruiter, job, profile, make_scoring, auth_headers):
    make_scoring(job, profile, overall_score=90, disqualified=True)
    response = client.post(_url(job, profile, "invite"), headers=auth_headers(recruiter))
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["errors"][0]["code"] == "CONFLICT"


def test_unknown_candidate_returns_404(client, recruiter, job, profile, auth_headers):
    response = client.post(_url(job, profile, "invite"), headers=auth_headers(recruiter))
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_other_org_cannot_act(client, db_session, job, profile, make_scoring, auth_headers):
    from hiring.models.organization import Organization
    from hiring.models.user import User, UserRole
    from hiring.services import auth as auth_service

    make_scoring(job, profile)
    other_org = Organization(name="Initech", slug="initech")
    db_session.add(other_org)
    db_session.commit()
    outsider = User(
        email="peter@initech.com",
        hashed_password=auth_service.get_password_hash("Password123!"),
        role=UserRole.EMPLOYER_ADMIN,
        organization_id=other_org.id,
        is_active=True,
    )
    db_session.add(outsider)
    db_session.commit()

    response = client.post(_url(job, profile, "invite"), headers=auth_headers(outsider))
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_schedule_interview_requires_accepted(client, recruiter, job, profile, make_scoring, auth_headers):
    make_scoring(job, profile, invitation_status=InvitationStatus.invited)
    payload = {"scheduled_date": "2026-11-02", "scheduled_time": "14:30"}
    response = client.post(_url(job, profile, "schedule-interview"), json=payload, headers=auth_headers(recruiter))
    assert response.status_code == status.HTTP_409_CONFLICT


def test_schedule_interview(client, db_session, recruiter, job, profile, make_scoring, auth_headers):
    scoring = make_scoring(job, profile, invitation_status=InvitationStatus.accepted)
    payload = {
        "scheduled_date": "2026-11-02",
        "scheduled_time": "14:30",
        "meeting_link": "https://meet.acme.com/abc",
        "notes": "Panel of two",
    }
    response = client.post(_url(job, profile, "schedule-interview"), json=payload, headers=auth_headers(recruiter))
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()["data"]
    assert data["candidate_name"] == "Jane Doe"
    assert data["status"] == "scheduled"
    assert data["interview_type"] == "video"

    db_session.refresh(scoring)
    assert scoring.interview_date == "2026-11-02"
    assert scoring.interview_link == "https://meet.acme.com/abc"
    assert db_session.query(Interview).filter(Interview.job_scoring_id == scoring.id).count() == 1

    listing = client.get(f"/api/job-postings/{job.id}/interviews", headers=auth_headers(recruiter))
    assert [i["scheduled_time"] for i in listing.json()] == ["14:30"]


def test_schedule_interview_validates_format(client, recruiter, job, profile, make_scoring, auth_headers):
    make_scoring(job, profile, invitation_status=InvitationStatus.accepted)
    payload = {"scheduled_date": "02/11/2026", "scheduled_time": "2pm"}
    response = client.post(_url(job, profile, "schedule-interview"), json=payload, headers=auth_headers(recruiter))
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
