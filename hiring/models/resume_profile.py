from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hiring.database import Base


class ResumeProfile(Base):
    """Structured candidate profile parsed from a resume. Only re-parsing mutates it."""
    __tablename__ = "resume_profiles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, default="Unknown")
    email = Column(String, nullable=True, index=True)
    phone = Column(String, nullable=True)
    summary = Column(Text, nullable=True)
    skills = Column(JSON, default=list)
    experience = Column(JSON, default=list)
    education = Column(JSON, default=list)
    certifications = Column(JSON, default=list)
    languages = Column(JSON, default=list)
    resume_text = Column(Text, nullable=False)
    source_filename = Column(String, nullable=True)

    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    scorings = relationship("JobScoring", back_populates="profile", cascade="all, delete-orphan")
