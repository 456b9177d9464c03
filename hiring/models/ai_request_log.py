from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Float
from sqlalchemy.sql import func
from hiring.database import Base


class AIRequestLog(Base):
    """One row per LLM call, successful or not."""
    __tablename__ = "ai_request_logs"

    id = Column(Integer, primary_key=True, index=True)
    request_type = Column(String, nullable=False, index=True)
    model = Column(String, nullable=False)
    prompt_tokens = Column(Integer, default=0)
    completion_tokens = Column(Integer, default=0)
    total_tokens = Column(Integer, default=0)
    status = Column(String, nullable=False)  # success | error
    error_message = Column(Text, nullable=True)
    latency_ms = Column(Float, nullable=True)
    request_id = Column(String, nullable=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
