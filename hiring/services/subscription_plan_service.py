from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_

from hiring.core.exceptions import NotFoundError, ValidationFailedError
from hiring.models.subscription_plan import SubscriptionPlan, SubscriptionPlanPricing
from hiring.models.user import User
from hiring.services.audit import AuditService
from hiring.services.base import BaseService


class SubscriptionPlanService(BaseService):
    def list_plans(
        self, page: int = 1, limit: int = 10, search: Optional[str] = None, active_only: bool = False
    ) -> Tuple[List[SubscriptionPlan], int]:
        query = self.db.query(SubscriptionPlan)
        if search:
            like = f"%{search}%"
            query = query.filter(or_(SubscriptionPlan.name.ilike(like), SubscriptionPlan.description.ilike(like)))
        if active_only:
            query = query.filter(SubscriptionPlan.is_active == True)
        total = query.count()
        plans = (
            query.order_by(SubscriptionPlan.sort_order, SubscriptionPlan.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return plans, total

    def active_plans(self) -> List[SubscriptionPlan]:
        return (
            self.db.query(SubscriptionPlan)
            .filter(SubscriptionPlan.is_active == True)
            .order_by(SubscriptionPlan.sort_order, SubscriptionPlan.id)
            .all()
        )

    def get(self, plan_id: int) -> SubscriptionPlan:
        plan = self.db.query(SubscriptionPlan).filter(SubscriptionPlan.id == plan_id).first()
        if not plan:
            raise NotFoundError("Subscription plan", plan_id)
        return plan

    def create(self, data: Dict[str, Any], user: User) -> SubscriptionPlan:
        plan = SubscriptionPlan(**data)
        self.db.add(plan)
        self.db.flush()
        self._audit("create_subscription_plan", plan.id, user, {"name": plan.name})
        self.commit()
        self.db.refresh(plan)
        return plan

    def update(self, plan_id: int, data: Dict[str, Any], user: User) -> SubscriptionPlan:
        plan = self.get(plan_id)
        before = {field: getattr(plan, field) for field in data}
        for field, value in data.items():
            setattr(plan, field, value)
        self._audit("update_subscription_plan", plan.id, user, {"fields": sorted(data.keys())}, before, data)
        self.commit()
        self.db.refresh(plan)
        return plan

    def delete(self, plan_id: int, user: User) -> Dict[str, Any]:
        """Active plans are deactivated; inactive plans are removed with their regional pricing."""
        plan = self.get(plan_id)
        name = plan.name
        if plan.is_active:
            plan.is_active = False
            hard = False
        else:
            self.db.delete(plan)
            hard = True
        self._audit(
            "delete_subscription_plan" if hard else "deactivate_subscription_plan",
            plan_id, user, {"name": name, "permanent": hard}
        )
        self.commit()
        return {"id": plan_id, "deleted": hard, "deactivated": not hard}

    def duplicate(self, plan_id: int, user: User) -> SubscriptionPlan:
        source = self.get(plan_id)
        copy = SubscriptionPlan(
            name=f"{source.name} (Copy)",
            description=source.description,
            monthly_price=source.monthly_price,
            yearly_price=source.yearly_price,
            monthly_cv_credits=source.monthly_cv_credits,
            monthly_interview_credits=source.monthly_interview_credits,
            job_posts_limit=source.job_posts_limit,
            support_level=source.support_level,
            features=list(source.features or []),
            stripe_price_id_monthly=None,
            stripe_price_id_yearly=None,
            sort_order=(source.sort_order or 0) + 1,
            is_active=False,
        )
        self.db.add(copy)
        self.db.flush()
        self._audit("duplicate_subscription_plan", copy.id, user, {"source_id": source.id})
        self.commit()
        self.db.refresh(copy)
        return copy

    # --- regional pricing ---
    def list_pricing(self, plan_id: int) -> List[SubscriptionPlanPricing]:
        self.get(plan_id)
        return (
            self.db.query(SubscriptionPlanPricing)
            .filter(SubscriptionPlanPricing.plan_id == plan_id)
            .order_by(SubscriptionPlanPricing.country_code)
            .all()
        )

    def _get_pricing(self, plan_id: int, pricing_id: int) -> SubscriptionPlanPricing:
        pricing = self.db.query(SubscriptionPlanPricing).filter(
            SubscriptionPlanPricing.id == pricing_id,
            SubscriptionPlanPricing.plan_id == plan_id
        ).first()
        if not pricing:
            raise NotFoundError("Regional pricing", pricing_id)
        return pricing

    def _unset_default_pricing(self, plan_id: int, keep_id: Optional[int] = None):
        query = self.db.query(SubscriptionPlanPricing).filter(
            SubscriptionPlanPricing.plan_id == plan_id,
            SubscriptionPlanPricing.is_default == True
        )
        if keep_id is not None:
            query = query.filter(SubscriptionPlanPricing.id != keep_id)
        for other in query.all():
            other.is_default = False

    def _ensure_country_free(self, plan_id: int, country_code: str, exclude_id: Optional[int] = None):
        query = self.db.query(SubscriptionPlanPricing).filter(
            SubscriptionPlanPricing.plan_id == plan_id,
            SubscriptionPlanPricing.country_code == country_code
        )
        if exclude_id is not None:
            query = query.filter(SubscriptionPlanPricing.id != exclude_id)
        if query.first():
            raise ValidationFailedError(f"Pricing for country {country_code} already exists for this plan")

    def create_pricing(self, plan_id: int, data: Dict[str, Any], user: User) -> SubscriptionPlanPricing:
        self.get(plan_id)
        self._ensure_country_free(plan_id, data["country_code"])
        if data.get("is_default"):
            self._unset_default_pricing(plan_id)
        pricing = SubscriptionPlanPricing(plan_id=plan_id, **data)
        self.db.add(pricing)
        self.db.flush()
        self._audit("create_plan_pricing", plan_id, user, {"country_code": pricing.country_code})
        self.commit()
        self.db.refresh(pricing)
        return pricing

    def update_pricing(self, plan_id: int, pricing_id: int, data: Dict[str, Any], user: User) -> SubscriptionPlanPricing:
        pricing = self._get_pricing(plan_id, pricing_id)
        if data.get("country_code") and data["country_code"] != pricing.country_code:
            self._ensure_country_free(plan_id, data["country_code"], exclude_id=pricing.id)
        if data.get("is_default"):
            self._unset_default_pricing(plan_id, keep_id=pricing.id)
        for field, value in data.items():
            setattr(pricing, field, value)
        self._audit("update_plan_pricing", plan_id, user, {"pricing_id": pricing_id, "fields": sorted(data.keys())})
        self.commit()
        self.db.refresh(pricing)
        return pricing

    def delete_pricing(self, plan_id: int, pricing_id: int, user: User):
        pricing = self._get_pricing(plan_id, pricing_id)
        country = pricing.country_code
        self.db.delete(pricing)
        self._audit("delete_plan_pricing", plan_id, user, {"pricing_id": pricing_id, "country_code": country})
        self.commit()

    def _audit(self, action: str, entity_id: int, user: User, details: dict,
               before: Optional[dict] = None, after: Optional[dict] = None):
        AuditService.log(
            self.db,
            action=action,
            entity_type="subscription_plan",
            entity_id=entity_id,
            user_id=user.id,
            user_role=user.role,
            details=details,
            before_state=before,
            after_state=after
        )
