from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hiring.database import Base


class JobPosting(Base):
    __tablename__ = "job_postings"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, index=True, nullable=False)
    description = Column(Text, nullable=True)
    requirements = Column(Text, nullable=True)
    location = Column(String, nullable=True)
    employment_type = Column(String, default="Full-time")
    # Free-text rules passed to the scoring prompt as {{customRules}}
    screening_rules = Column(Text, nullable=True)
    # Candidates scoring at or above this are auto-invited
    score_matching_threshold = Column(Integer, default=30, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    views = Column(Integer, default=0, nullable=False)

    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    scorings = relationship("JobScoring", back_populates="job", cascade="all, delete-orphan")
