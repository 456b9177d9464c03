from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON, Numeric, UniqueConstraint
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from hiring.database import Base


class SupportLevel(str, enum.Enum):
    standard = "standard"
    priority = "priority"
    dedicated = "dedicated"


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    monthly_price = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    yearly_price = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    monthly_cv_credits = Column(Integer, nullable=False, default=0)
    monthly_interview_credits = Column(Integer, nullable=False, default=0)
    job_posts_limit = Column(Integer, nullable=True)  # NULL = unlimited
    support_level = Column(String, nullable=False, default=SupportLevel.standard.value)
    features = Column(JSON, default=list)
    stripe_price_id_monthly = Column(String, nullable=True)
    stripe_price_id_yearly = Column(String, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    pricing = relationship("SubscriptionPlanPricing", back_populates="plan", cascade="all, delete-orphan")


class SubscriptionPlanPricing(Base):
    """Regional price override for a plan, keyed by ISO country code."""
    __tablename__ = "subscription_plan_pricing"
    __table_args__ = (
        UniqueConstraint("plan_id", "country_code", name="uq_plan_pricing_country"),
    )

    id = Column(Integer, primary_key=True, index=True)
    plan_id = Column(Integer, ForeignKey("subscription_plans.id"), nullable=False, index=True)
    country_code = Column(String(2), nullable=False)
    currency = Column(String(3), nullable=False)
    monthly_price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    yearly_price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    stripe_price_id_monthly = Column(String, nullable=True)
    stripe_price_id_yearly = Column(String, nullable=True)
    is_default = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    plan = relationship("SubscriptionPlan", back_populates="pricing")
