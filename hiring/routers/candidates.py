"""
Candidate pipeline actions on a (job, resume profile) pair.
"""
from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from hiring.core.schemas import ApiResponse
from hiring.database import get_db
from hiring.models.user import User
from hiring.routers.auth_deps import require_employer, get_current_org
from hiring.schemas.candidate import CandidateActionResult, InterviewResponse, ScheduleInterviewRequest
from hiring.services.airtable_sync import sync_scoring_in_background
from hiring.services.candidate_pipeline import CandidatePipelineService

router = APIRouter(
    prefix="/job-postings/{job_id}/candidates/{profile_id}",
    tags=["Candidates"],
)


def _respond(scoring, changed: bool, job_id: int, profile_id: int, background_tasks: BackgroundTasks):
    if changed:
        background_tasks.add_task(sync_scoring_in_background, scoring.id)
    result = CandidateActionResult(
        job_id=job_id,
        profile_id=profile_id,
        invitation_status=scoring.invitation_status.value if scoring.invitation_status else None,
        changed=changed,
    )
    message = f"Candidate {result.invitation_status}" if changed else f"Candidate already {result.invitation_status}"
    return ApiResponse.ok(result, message=message)


@router.post("/invite", response_model=ApiResponse[CandidateActionResult])
def invite_candidate(
    job_id: int,
    profile_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    scoring, changed = CandidatePipelineService(db, org_id).invite(job_id, profile_id, current_user)
    return _respond(scoring, changed, job_id, profile_id, background_tasks)


@router.post("/accept", response_model=ApiResponse[CandidateActionResult])
def accept_candidate(
    job_id: int,
    profile_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    scoring, changed = CandidatePipelineService(db, org_id).accept(job_id, profile_id, current_user)
    return _respond(scoring, changed, job_id, profile_id, background_tasks)


@router.post("/decline", response_model=ApiResponse[CandidateActionResult])
def decline_candidate(
    job_id: int,
    profile_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    scoring, changed = CandidatePipelineService(db, org_id).decline(job_id, profile_id, current_user)
    return _respond(scoring, changed, job_id, profile_id, background_tasks)


@router.post(
    "/schedule-interview",
    response_model=ApiResponse[InterviewResponse],
    status_code=status.HTTP_201_CREATED,
)
def schedule_interview(
    job_id: int,
    profile_id: int,
    request: ScheduleInterviewRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    interview = CandidatePipelineService(db, org_id).schedule_interview(
        job_id,
        profile_id,
        current_user,
        scheduled_date=request.scheduled_date,
        scheduled_time=request.scheduled_time,
        interview_type=request.interview_type,
        meeting_link=request.meeting_link,
        notes=request.notes,
    )
    background_tasks.add_task(sync_scoring_in_background, interview.job_scoring_id)
    return ApiResponse.ok(InterviewResponse.model_validate(interview), message="Interview scheduled")
