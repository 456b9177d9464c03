from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from hiring.core.config import settings
from hiring.core.schemas import reject_null
from datetime import datetime

class JobPostingBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    requirements: Optional[str] = None
    location: Optional[str] = None
    employment_type: Optional[str] = "Full-time"
    screening_rules: Optional[str] = None
    score_matching_threshold: int = Field(default=settings.default_score_threshold, ge=0, le=100)

class JobPostingCreate(JobPostingBase):
    pass

class JobPostingUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    requirements: Optional[str] = None
    location: Optional[str] = None
    employment_type: Optional[str] = None
    screening_rules: Optional[str] = None
    score_matching_threshold: Optional[int] = Field(default=None, ge=0, le=100)
    is_active: Optional[bool] = None

    @field_validator("title", "score_matching_threshold", "is_active")
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)

class JobPostingResponse(JobPostingBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_id: int
    is_active: bool
    views: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class PublicJobPostingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    requirements: Optional[str] = None
    location: Optional[str] = None
    employment_type: Optional[str] = None
    views: int = 0
    created_at: Optional[datetime] = None

class JobPostingCount(BaseModel):
    active: int
    total: int
