"""
Unauthenticated endpoints: job posting pages and the plan catalogue.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from hiring.core.exceptions import NotFoundError
from hiring.database import get_db
from hiring.models.job_posting import JobPosting
from hiring.schemas.job_posting import PublicJobPostingResponse
from hiring.schemas.subscription_plan import SubscriptionPlanDetail
from hiring.services.subscription_plan_service import SubscriptionPlanService

router = APIRouter(tags=["Public"])


@router.get("/public/job-postings/{job_id}", response_model=PublicJobPostingResponse)
def view_job_posting(job_id: int, db: Session = Depends(get_db)):
    """Public job page. Each view is counted."""
    job = db.query(JobPosting).filter(
        JobPosting.id == job_id,
        JobPosting.is_active == True
    ).first()
    if not job:
        raise NotFoundError("Job posting", job_id)
    job.views = (job.views or 0) + 1
    db.commit()
    db.refresh(job)
    return job


@router.get("/subscription-plans", response_model=List[SubscriptionPlanDetail])
def list_active_plans(db: Session = Depends(get_db)):
    return SubscriptionPlanService(db).active_plans()
