from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime

from hiring.core.schemas import Pagination, reject_null
from hiring.models.subscription_plan import SupportLevel

class SubscriptionPlanBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = None
    monthly_price: float = Field(default=0, ge=0)
    yearly_price: float = Field(default=0, ge=0)
    monthly_cv_credits: int = Field(default=0, ge=0)
    monthly_interview_credits: int = Field(default=0, ge=0)
    job_posts_limit: Optional[int] = Field(default=None, ge=0)
    support_level: SupportLevel = SupportLevel.standard
    features: List[Any] = []
    stripe_price_id_monthly: Optional[str] = None
    stripe_price_id_yearly: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True

class SubscriptionPlanCreate(SubscriptionPlanBase):
    pass

class SubscriptionPlanUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = None
    monthly_price: Optional[float] = Field(default=None, ge=0)
    yearly_price: Optional[float] = Field(default=None, ge=0)
    monthly_cv_credits: Optional[int] = Field(default=None, ge=0)
    monthly_interview_credits: Optional[int] = Field(default=None, ge=0)
    job_posts_limit: Optional[int] = Field(default=None, ge=0)
    support_level: Optional[SupportLevel] = None
    features: Optional[List[Any]] = None
    stripe_price_id_monthly: Optional[str] = None
    stripe_price_id_yearly: Optional[str] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None

    @field_validator(
        "name", "monthly_price", "yearly_price", "monthly_cv_credits", "monthly_interview_credits",
        "support_level", "sort_order", "is_active"
    )
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)

class PlanPricingBase(BaseModel):
    country_code: str = Field(..., pattern=r"^[A-Z]{2}$")
    currency: str = Field(..., pattern=r"^[A-Z]{3}$")
    monthly_price: float = Field(..., ge=0)
    yearly_price: float = Field(..., ge=0)
    stripe_price_id_monthly: Optional[str] = None
    stripe_price_id_yearly: Optional[str] = None
    is_default: bool = False
    is_active: bool = True

    @field_validator("country_code", "currency", mode="before")
    @classmethod
    def _upper(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

class PlanPricingCreate(PlanPricingBase):
    pass

class PlanPricingUpdate(BaseModel):
    country_code: Optional[str] = Field(default=None, pattern=r"^[A-Z]{2}$")
    currency: Optional[str] = Field(default=None, pattern=r"^[A-Z]{3}$")
    monthly_price: Optional[float] = Field(default=None, ge=0)
    yearly_price: Optional[float] = Field(default=None, ge=0)
    stripe_price_id_monthly: Optional[str] = None
    stripe_price_id_yearly: Optional[str] = None
    is_default: Optional[bool] = None
    is_active: Optional[bool] = None

    @field_validator("country_code", "currency", mode="before")
    @classmethod
    def _upper(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("country_code", "currency", "monthly_price", "yearly_price", "is_default", "is_active")
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)

class PlanPricingResponse(PlanPricingBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    plan_id: int

class SubscriptionPlanResponse(SubscriptionPlanBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class SubscriptionPlanDetail(SubscriptionPlanResponse):
    pricing: List[PlanPricingResponse] = []

class SubscriptionPlanList(BaseModel):
    items: List[SubscriptionPlanResponse]
    pagination: Pagination
