from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from hiring.database import Base

class InterviewStatus(str, enum.Enum):
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"

class Interview(Base):
    __tablename__ = "interviews"

    id = Column(Integer, primary_key=True, index=True)
    job_scoring_id = Column(Integer, ForeignKey("job_scorings.id"), nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("job_postings.id"), nullable=False, index=True)
    profile_id = Column(Integer, ForeignKey("resume_profiles.id"), nullable=False)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)

    candidate_name = Column(String, index=True)
    candidate_email = Column(String, nullable=True)
    scheduled_date = Column(String, nullable=False)
    scheduled_time = Column(String, nullable=False)
    interview_type = Column(String, default="video")
    meeting_link = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(SQLEnum(InterviewStatus), default=InterviewStatus.scheduled, index=True)

    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    scoring = relationship("JobScoring", back_populates="interviews")
