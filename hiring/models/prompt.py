from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hiring.database import Base


class Prompt(Base):
    """Admin-configurable LLM prompt. `version` increases on every content change."""
    __tablename__ = "prompts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String, nullable=False, index=True)  # job_scoring | resume_parsing
    system_prompt = Column(Text, nullable=False)
    user_prompt = Column(Text, nullable=False)
    variables = Column(JSON, default=list)
    model_id = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)
    version = Column(Integer, default=1, nullable=False)

    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    versions = relationship(
        "PromptVersion", back_populates="prompt", cascade="all, delete-orphan",
        order_by="PromptVersion.version.desc()"
    )


class PromptVersion(Base):
    """Snapshot of a prompt's content taken before each change. Append-only."""
    __tablename__ = "prompt_versions"

    id = Column(Integer, primary_key=True, index=True)
    prompt_id = Column(Integer, ForeignKey("prompts.id"), nullable=False, index=True)
    version = Column(Integer, nullable=False)
    system_prompt = Column(Text, nullable=False)
    user_prompt = Column(Text, nullable=False)
    variables = Column(JSON, default=list)
    model_id = Column(String, nullable=True)
    change_note = Column(Text, nullable=True)
    changed_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    prompt = relationship("Prompt", back_populates="versions")
