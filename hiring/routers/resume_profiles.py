from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from sqlalchemy.orm import Session
from typing import List, Optional

from hiring.core.config import settings
from hiring.core.limiter import limiter
from hiring.database import get_db
from hiring.models.resume_profile import ResumeProfile
from hiring.models.user import User
from hiring.routers.auth_deps import require_employer, get_current_org
from hiring.schemas.resume_profile import (
    BulkResumeRequest, BulkResumeResponse, JobScoringResponse, ProcessResumeResponse,
    ProfileJobScore, ReparseRequest, ResumeProcessRequest, ResumeProfileDetail,
    ResumeProfileListItem, ResumeProfileResponse,
)
from hiring.services.resume_parser import extract_text
from hiring.services.resume_profile_service import ResumeProfileService

router = APIRouter(
    prefix="/resume-profiles",
    tags=["Resume Profiles"],
)


def _job_scores(service: ResumeProfileService, profile: ResumeProfile, job_id: Optional[int] = None) -> List[ProfileJobScore]:
    return [
        ProfileJobScore.model_validate(s).model_copy(update={"job_title": s.job.title if s.job else None})
        for s in service.scorings_for(profile, job_id)
    ]


def _process_response(result: dict) -> ProcessResumeResponse:
    return ProcessResumeResponse(
        profile=ResumeProfileResponse.model_validate(result["profile"]),
        job_scores=[JobScoringResponse.model_validate(s) for s in result["scorings"]],
        failures=result["failures"],
    )


@router.get("", response_model=List[ResumeProfileListItem])
def list_resume_profiles(
    job_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    """Profiles with their job scores; `job_id` narrows both to one posting."""
    service = ResumeProfileService(db, org_id)
    profiles = service.list_profiles(job_id=job_id, skip=skip, limit=limit)
    return [
        ResumeProfileListItem.model_validate(p).model_copy(update={"job_scores": _job_scores(service, p, job_id)})
        for p in profiles
    ]


@router.post("/process", response_model=ProcessResumeResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.resume_process_rate_limit)
def process_resume(
    request: Request,
    payload: ResumeProcessRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    """
    Parse pasted resume text into a profile and score it against one job,
    or against every active job when no job_id is given.
    """
    result = ResumeProfileService(db, org_id).process(
        payload.resume_text,
        current_user,
        job_id=payload.job_id,
        custom_rules=payload.custom_rules,
    )
    return _process_response(result)


@router.post("/upload", response_model=ProcessResumeResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.resume_process_rate_limit)
def upload_resume(
    request: Request,
    file: UploadFile = File(...),
    job_id: Optional[int] = Form(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    text = extract_text(file.filename, file.file.read())
    result = ResumeProfileService(db, org_id).process(
        text, current_user, job_id=job_id, filename=file.filename
    )
    return _process_response(result)


@router.post("/bulk", response_model=BulkResumeResponse)
@limiter.limit(settings.resume_process_rate_limit)
def process_bulk_resumes(
    request: Request,
    payload: BulkResumeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    outcome = ResumeProfileService(db, org_id).process_bulk(payload.resumes_text, current_user, job_id=payload.job_id)
    return BulkResumeResponse(
        total=outcome["total"],
        processed=len(outcome["results"]),
        results=[_process_response(r) for r in outcome["results"]],
        errors=outcome["errors"],
    )


@router.get("/{profile_id}", response_model=ResumeProfileDetail)
def get_resume_profile(
    profile_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    service = ResumeProfileService(db, org_id)
    profile = service.get(profile_id)
    return ResumeProfileDetail.model_validate(profile).model_copy(
        update={"job_scores": _job_scores(service, profile)}
    )


@router.post("/{profile_id}/reparse", response_model=ResumeProfileResponse)
def reparse_resume_profile(
    profile_id: int,
    payload: Optional[ReparseRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    custom_rules = payload.custom_rules if payload else None
    return ResumeProfileService(db, org_id).reparse(profile_id, current_user, custom_rules=custom_rules)


@router.post("/{profile_id}/score/{job_id}", response_model=JobScoringResponse)
def score_resume_profile(
    profile_id: int,
    job_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    """Score (or re-score a still pending) candidate against one job."""
    return ResumeProfileService(db, org_id).score(profile_id, job_id, current_user)


@router.delete("/{profile_id}")
def delete_resume_profile(
    profile_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    org_id: int = Depends(get_current_org)
):
    ResumeProfileService(db, org_id).delete(profile_id, current_user)
    return {"message": "Resume profile deleted successfully", "id": profile_id}
