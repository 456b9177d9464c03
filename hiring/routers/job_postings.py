from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from hiring.core.exceptions import ConflictError, NotFoundError
from hiring.database import get_db
from hiring.models.interview import Interview
from hiring.models.job_posting import JobPosting
from hiring.models.job_scoring import InvitationStatus, JobScoring
from hiring.models.user import User
from hiring.routers.auth_deps import require_employer, require_employer_admin, get_current_org
from hiring.schemas.candidate import CandidateSummary, InterviewResponse
from hiring.schemas.job_posting import (
    JobPostingCreate, JobPostingUpdate, JobPostingResponse, JobPostingCount
)
from hiring.services.audit import AuditService

router = APIRouter(
    prefix="/job-postings",
    tags=["Job Postings"],
)


def _get_job(db: Session, job_id: int, org_id: int) -> JobPosting:
    job = db.query(JobPosting).filter(
        JobPosting.id == job_id,
        JobPosting.organization_id == org_id
    ).first()
    if not job:
        raise NotFoundError("Job posting", job_id)
    return job


@router.post("", response_model=JobPostingResponse, status_code=status.HTTP_201_CREATED)
def create_job_posting(
    job_in: JobPostingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    job = JobPosting(
        **job_in.model_dump(),
        organization_id=org_id,
        created_by_id=current_user.id
    )
    db.add(job)
    db.flush()

    AuditService.log(
        db,
        action="create_job_posting",
        entity_type="job_posting",
        entity_id=job.id,
        user_id=current_user.id,
        user_role=current_user.role,
        details={"title": job.title},
        organization_id=org_id,
        after_state=job_in.model_dump()
    )
    db.commit()
    db.refresh(job)
    return job


@router.get("", response_model=List[JobPostingResponse])
def list_job_postings(
    skip: int = 0,
    limit: int = 100,
    active_only: bool = True,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    query = db.query(JobPosting).filter(JobPosting.organization_id == org_id)
    if active_only:
        query = query.filter(JobPosting.is_active == True)
    return query.order_by(JobPosting.created_at.desc(), JobPosting.id.desc()).offset(skip).limit(limit).all()


@router.get("/count", response_model=JobPostingCount)
def count_job_postings(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    query = db.query(JobPosting).filter(JobPosting.organization_id == org_id)
    return JobPostingCount(
        active=query.filter(JobPosting.is_active == True).count(),
        total=query.count(),
    )


@router.get("/{job_id}", response_model=JobPostingResponse)
def get_job_posting(
    job_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    return _get_job(db, job_id, org_id)


@router.put("/{job_id}", response_model=JobPostingResponse)
def update_job_posting(
    job_id: int,
    job_in: JobPostingUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    """
    Update a job posting. Content is frozen once any candidate has been
    scored against it; only open/close is still allowed.
    """
    job = _get_job(db, job_id, org_id)
    update_data = job_in.model_dump(exclude_unset=True)

    content_fields = set(update_data) - {"is_active"}
    if content_fields:
        scored = db.query(JobScoring.id).filter(JobScoring.job_id == job.id).first()
        if scored:
            raise ConflictError(
                "Job posting has scored candidates and can no longer be edited",
                details={"fields": sorted(content_fields)}
            )

    before_state = {field: getattr(job, field) for field in update_data}
    for field, value in update_data.items():
        setattr(job, field, value)

    AuditService.log(
        db,
        action="update_job_posting",
        entity_type="job_posting",
        entity_id=job.id,
        user_id=current_user.id,
        user_role=current_user.role,
        details={"fields": sorted(update_data)},
        organization_id=org_id,
        before_state=before_state,
        after_state=update_data
    )
    db.commit()
    db.refresh(job)
    return job


@router.delete("/{job_id}")
def delete_job_posting(
    job_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer_admin),
    org_id: int = Depends(get_current_org)
):
    """Soft delete: the posting is closed, scorings and history are kept."""
    job = _get_job(db, job_id, org_id)
    job.is_active = False

    AuditService.log(
        db,
        action="delete_job_posting",
        entity_type="job_posting",
        entity_id=job.id,
        user_id=current_user.id,
        user_role=current_user.role,
        details={"title": job.title},
        organization_id=org_id
    )
    db.commit()
    return {"message": "Job posting deleted successfully", "id": job_id}


@router.get("/{job_id}/candidates", response_model=List[CandidateSummary])
def list_job_candidates(
    job_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    """Scored candidates for a job, best first. Declined candidates are hidden."""
    _get_job(db, job_id, org_id)
    scorings = (
        db.query(JobScoring)
        .filter(
            JobScoring.job_id == job_id,
            JobScoring.organization_id == org_id,
            (JobScoring.invitation_status.is_(None)) | (JobScoring.invitation_status != InvitationStatus.declined)
        )
        .order_by(JobScoring.overall_score.desc(), JobScoring.id)
        .all()
    )
    return [
        CandidateSummary.model_validate(s).model_copy(update={
            "candidate_name": s.profile.name if s.profile else None,
            "candidate_email": s.profile.email if s.profile else None,
        })
        for s in scorings
    ]


@router.get("/{job_id}/interviews", response_model=List[InterviewResponse])
def list_job_interviews(
    job_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    _get_job(db, job_id, org_id)
    return (
        db.query(Interview)
        .filter(Interview.job_id == job_id, Interview.organization_id == org_id)
        .order_by(Interview.scheduled_date, Interview.scheduled_time)
        .all()
    )
