from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON, Enum, UniqueConstraint
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from hiring.database import Base


class InvitationStatus(str, enum.Enum):
    """Employer action on a scored candidate. NULL in the database means pending."""
    invited = "invited"
    accepted = "accepted"
    declined = "declined"


class QualificationStatus(str, enum.Enum):
    qualified = "qualified"
    not_qualified = "not_qualified"
    disqualified = "disqualified"


class JobScoring(Base):
    __tablename__ = "job_scorings"
    __table_args__ = (
        UniqueConstraint("profile_id", "job_id", name="uq_job_scoring_profile_job"),
    )

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("resume_profiles.id"), nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("job_postings.id"), nullable=False, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)

    # Aggregated 0-100
    overall_score = Column(Integer, nullable=False, default=0)
    oracle_overall_score = Column(Integer, nullable=True)
    technical_skills_score = Column(Integer, nullable=True)
    experience_score = Column(Integer, nullable=True)
    cultural_fit_score = Column(Integer, nullable=True)
    education_score = Column(Integer, nullable=True)
    projects_score = Column(Integer, nullable=True)
    match_label = Column(String, nullable=True)
    qualification_status = Column(Enum(QualificationStatus), nullable=True)

    match_summary = Column(Text, nullable=True)
    strengths_highlights = Column(JSON, default=list)
    improvement_areas = Column(JSON, default=list)
    red_flags = Column(JSON, default=list)
    disqualified = Column(Boolean, default=False, nullable=False)
    disqualification_reason = Column(Text, nullable=True)
    full_response = Column(JSON, nullable=True)

    invitation_status = Column(Enum(InvitationStatus), nullable=True, index=True)
    invitation_token = Column(String, nullable=True, unique=True)
    interview_date = Column(String, nullable=True)
    interview_time = Column(String, nullable=True)
    interview_link = Column(String, nullable=True)
    reviewed_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    scored_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    profile = relationship("ResumeProfile", back_populates="scorings")
    job = relationship("JobPosting", back_populates="scorings")
    interviews = relationship("Interview", back_populates="scoring", cascade="all, delete-orphan")

    @property
    def status_label(self) -> str:
        return self.invitation_status.value if self.invitation_status else "pending"
