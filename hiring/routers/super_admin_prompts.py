from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from hiring.core import prompts
from hiring.core.schemas import Pagination
from hiring.database import get_db
from hiring.models.user import User
from hiring.routers.auth_deps import require_super_admin
from hiring.schemas.prompt import (
    DeleteResult, PromptCreate, PromptDetail, PromptList, PromptPreviewRequest,
    PromptPreviewResponse, PromptResponse, PromptTypeInfo, PromptUpdate, PromptVersionList,
    PromptVersionResponse,
)
from hiring.services.prompt_service import PromptService
from hiring.services.prompt_template import get_variable_schema

router = APIRouter(
    prefix="/super-admin/prompts",
    tags=["Super Admin: Prompts"],
    dependencies=[Depends(require_super_admin)]
)


def _detail(prompt) -> PromptDetail:
    return PromptDetail.model_validate(prompt).model_copy(
        update={"variable_schema": get_variable_schema(prompt.type)}
    )


@router.get("", response_model=PromptList)
def list_prompts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    type: Optional[str] = None,
    db: Session = Depends(get_db)
):
    items, total = PromptService(db).list_prompts(page=page, limit=limit, search=search, prompt_type=type)
    return PromptList(
        items=[PromptResponse.model_validate(p) for p in items],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/types", response_model=List[PromptTypeInfo])
def list_prompt_types():
    return prompts.PROMPT_TYPES


@router.get("/type/{prompt_type}", response_model=PromptDetail)
def get_active_prompt(prompt_type: str, db: Session = Depends(get_db)):
    """The prompt the scoring/parsing pipeline will use for this type."""
    return _detail(PromptService(db).get_active(prompt_type))


@router.post("/preview", response_model=PromptPreviewResponse)
def preview_prompt(request: PromptPreviewRequest, db: Session = Depends(get_db)):
    return PromptService(db).preview(
        request.system_prompt, request.user_prompt, request.type, request.custom_sample_data
    )


@router.get("/{prompt_id}", response_model=PromptDetail)
def get_prompt(prompt_id: int, db: Session = Depends(get_db)):
    return _detail(PromptService(db).get(prompt_id))


@router.post("", response_model=PromptDetail, status_code=status.HTTP_201_CREATED)
def create_prompt(
    prompt_in: PromptCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin)
):
    data = prompt_in.model_dump(mode="json", exclude_none=True)
    return _detail(PromptService(db).create(data, current_user))


@router.put("/{prompt_id}", response_model=PromptDetail)
def update_prompt(
    prompt_id: int,
    prompt_in: PromptUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin)
):
    """Content changes snapshot the previous version before bumping `version`."""
    data = prompt_in.model_dump(mode="json", exclude_unset=True)
    change_note = data.pop("change_note", None)
    return _detail(PromptService(db).update(prompt_id, data, current_user, change_note=change_note))


@router.delete("/{prompt_id}", response_model=DeleteResult)
def delete_prompt(
    prompt_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin)
):
    """Active prompts are deactivated. Deleting an inactive prompt removes it and its history."""
    return PromptService(db).delete(prompt_id, current_user)


@router.post("/{prompt_id}/duplicate", response_model=PromptDetail, status_code=status.HTTP_201_CREATED)
def duplicate_prompt(
    prompt_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin)
):
    return _detail(PromptService(db).duplicate(prompt_id, current_user))


@router.post("/{prompt_id}/set-default", response_model=PromptDetail)
def set_default_prompt(
    prompt_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin)
):
    return _detail(PromptService(db).set_default(prompt_id, current_user))


@router.get("/{prompt_id}/versions", response_model=PromptVersionList)
def list_prompt_versions(
    prompt_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    prompt, versions, total = PromptService(db).list_versions(prompt_id, page=page, limit=limit)
    return PromptVersionList(
        current_version=prompt.version,
        items=[PromptVersionResponse.model_validate(v) for v in versions],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("/{prompt_id}/rollback/{version_id}", response_model=PromptDetail)
def rollback_prompt(
    prompt_id: int,
    version_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin)
):
    """Restores an old version's content as a new version. History is kept."""
    return _detail(PromptService(db).rollback(prompt_id, version_id, current_user))
