from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime

from hiring.models.interview import InterviewStatus
from hiring.schemas.resume_profile import JobScoringResponse

class CandidateSummary(JobScoringResponse):
    """A scored candidate as listed under a job posting."""
    candidate_name: Optional[str] = None
    candidate_email: Optional[str] = None

class CandidateActionResult(BaseModel):
    job_id: int
    profile_id: int
    invitation_status: Optional[str] = None
    changed: bool

class ScheduleInterviewRequest(BaseModel):
    scheduled_date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD")
    scheduled_time: str = Field(..., pattern=r"^\d{2}:\d{2}$", description="HH:MM")
    interview_type: str = "video"
    meeting_link: Optional[str] = None
    notes: Optional[str] = None

class InterviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    job_scoring_id: int
    job_id: int
    profile_id: int
    candidate_name: Optional[str] = None
    candidate_email: Optional[str] = None
    scheduled_date: str
    scheduled_time: str
    interview_type: str
    meeting_link: Optional[str] = None
    notes: Optional[str] = None
    status: InterviewStatus
    created_at: Optional[datetime] = None
