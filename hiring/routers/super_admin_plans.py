from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from hiring.core.schemas import Pagination
from hiring.database import get_db
from hiring.models.user import User
from hiring.routers.auth_deps import require_super_admin
from hiring.schemas.prompt import DeleteResult
from hiring.schemas.subscription_plan import (
    PlanPricingCreate, PlanPricingResponse, PlanPricingUpdate, SubscriptionPlanCreate,
    SubscriptionPlanDetail, SubscriptionPlanList, SubscriptionPlanResponse, SubscriptionPlanUpdate,
)
from hiring.services.subscription_plan_service import SubscriptionPlanService

router = APIRouter(
    prefix="/super-admin/subscription-plans",
    tags=["Super Admin: Subscription Plans"],
    dependencies=[Depends(require_super_admin)]
)


@router.get("", response_model=SubscriptionPlanList)
def list_plans(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    db: Session = Depends(get_db)
):
    plans, total = SubscriptionPlanService(db).list_plans(page=page, limit=limit, search=search)
    return SubscriptionPlanList(
        items=[SubscriptionPlanResponse.model_validate(p) for p in plans],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{plan_id}", response_model=SubscriptionPlanDetail)
def get_plan(plan_id: int, db: Session = Depends(get_db)):
    return SubscriptionPlanService(db).get(plan_id)


@router.post("", response_model=SubscriptionPlanResponse, status_code=status.HTTP_201_CREATED)
def create_plan(
    plan_in: SubscriptionPlanCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin)
):
    return SubscriptionPlanService(db).create(plan_in.model_dump(mode="json"), current_user)


@router.put("/{plan_id}", response_model=SubscriptionPlanResponse)
def update_plan(
    plan_id: int,
    plan_in: SubscriptionPlanUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin)
):
    data = plan_in.model_dump(mode="json", exclude_unset=True)
    return SubscriptionPlanService(db).update(plan_id, data, current_user)


@router.delete("/{plan_id}", response_model=DeleteResult)
def delete_plan(
    plan_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin)
):
    """Active plans are deactivated. Deleting an inactive plan removes it with its regional pricing."""
    return SubscriptionPlanService(db).delete(plan_id, current_user)


@router.post("/{plan_id}/duplicate", response_model=SubscriptionPlanResponse, status_code=status.HTTP_201_CREATED)
def duplicate_plan(
    plan_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin)
):
    return SubscriptionPlanService(db).duplicate(plan_id, current_user)


@router.get("/{plan_id}/pricing", response_model=List[PlanPricingResponse])
def list_plan_pricing(plan_id: int, db: Session = Depends(get_db)):
    return SubscriptionPlanService(db).list_pricing(plan_id)


@router.post("/{plan_id}/pricing", response_model=PlanPricingResponse, status_code=status.HTTP_201_CREATED)
def create_plan_pricing(
    plan_id: int,
    pricing_in: PlanPricingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin)
):
    return SubscriptionPlanService(db).create_pricing(plan_id, pricing_in.model_dump(), current_user)


@router.put("/{plan_id}/pricing/{pricing_id}", response_model=PlanPricingResponse)
def update_plan_pricing(
    plan_id: int,
    pricing_id: int,
    pricing_in: PlanPricingUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin)
):
    data = pricing_in.model_dump(exclude_unset=True)
    return SubscriptionPlanService(db).update_pricing(plan_id, pricing_id, data, current_user)


@router.delete("/{plan_id}/pricing/{pricing_id}")
def delete_plan_pricing(
    plan_id: int,
    pricing_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin)
):
    SubscriptionPlanService(db).delete_pricing(plan_id, pricing_id, current_user)
    return {"message": "Regional pricing deleted successfully", "id": pricing_id}
