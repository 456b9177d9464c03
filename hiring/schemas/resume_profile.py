from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field
from datetime import datetime

from hiring.models.job_scoring import InvitationStatus, QualificationStatus
from hiring.services import score_aggregator

class ResumeProcessRequest(BaseModel):
    resume_text: str
    job_id: Optional[int] = None
    file_type: Optional[str] = "text"
    custom_rules: Optional[str] = None

class BulkResumeRequest(BaseModel):
    resumes_text: str = Field(..., description="Resumes separated by lines of '---'")
    job_id: Optional[int] = None

class ReparseRequest(BaseModel):
    custom_rules: Optional[str] = None

class JobScoringResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    profile_id: int
    job_id: int
    overall_score: int
    technical_skills_score: Optional[int] = None
    experience_score: Optional[int] = None
    cultural_fit_score: Optional[int] = None
    education_score: Optional[int] = None
    projects_score: Optional[int] = None
    oracle_overall_score: Optional[int] = None
    match_label: Optional[str] = None
    qualification_status: Optional[QualificationStatus] = None
    match_summary: Optional[str] = None
    strengths_highlights: List[Any] = []
    improvement_areas: List[Any] = []
    red_flags: List[Any] = []
    disqualified: bool = False
    disqualification_reason: Optional[str] = None
    invitation_status: Optional[InvitationStatus] = None
    interview_date: Optional[str] = None
    interview_time: Optional[str] = None
    interview_link: Optional[str] = None
    scored_at: Optional[datetime] = None
    full_response: Optional[Dict[str, Any]] = None

    @computed_field
    @property
    def badge_color(self) -> str:
        return score_aggregator.badge_color(self.overall_score)

class ResumeProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    summary: Optional[str] = None
    skills: List[str] = []
    experience: List[str] = []
    education: List[str] = []
    certifications: List[str] = []
    languages: List[str] = []
    source_filename: Optional[str] = None
    organization_id: int
    created_at: Optional[datetime] = None

class ProfileJobScore(JobScoringResponse):
    job_title: Optional[str] = None

class ResumeProfileDetail(ResumeProfileResponse):
    resume_text: str
    job_scores: List[ProfileJobScore] = []

class ResumeProfileListItem(ResumeProfileResponse):
    job_scores: List[ProfileJobScore] = []

class ScoringFailure(BaseModel):
    job_id: int
    error: str
    code: str

class ProcessResumeResponse(BaseModel):
    profile: ResumeProfileResponse
    job_scores: List[JobScoringResponse]
    failures: List[ScoringFailure] = []

class BulkResumeError(BaseModel):
    index: int
    error: str
    code: str

class BulkResumeResponse(BaseModel):
    total: int
    processed: int
    results: List[ProcessResumeResponse]
    errors: List[BulkResumeError] = []
