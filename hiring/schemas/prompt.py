from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime

from hiring.core.schemas import Pagination, reject_null

class PromptVariable(BaseModel):
    name: str
    description: Optional[str] = None
    example: Optional[str] = None
    required: bool = False

class PromptCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    type: str
    system_prompt: str = Field(..., min_length=1)
    user_prompt: str = Field(..., min_length=1)
    variables: Optional[List[PromptVariable]] = None
    model_id: Optional[str] = None
    is_active: bool = True
    is_default: bool = False
    sort_order: int = 0

class PromptUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    type: Optional[str] = None
    system_prompt: Optional[str] = Field(default=None, min_length=1)
    user_prompt: Optional[str] = Field(default=None, min_length=1)
    variables: Optional[List[PromptVariable]] = None
    model_id: Optional[str] = None
    is_active: Optional[bool] = None
    is_default: Optional[bool] = None
    sort_order: Optional[int] = None
    change_note: Optional[str] = None

    @field_validator("name", "type", "system_prompt", "user_prompt", "is_active", "is_default", "sort_order")
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)

class PromptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    type: str
    system_prompt: str
    user_prompt: str
    variables: List[Dict[str, Any]] = []
    model_id: Optional[str] = None
    is_active: bool
    is_default: bool
    sort_order: int
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class PromptDetail(PromptResponse):
    variable_schema: List[Dict[str, Any]] = []

class PromptList(BaseModel):
    items: List[PromptResponse]
    pagination: Pagination

class PromptVersionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    prompt_id: int
    version: int
    system_prompt: str
    user_prompt: str
    variables: List[Dict[str, Any]] = []
    model_id: Optional[str] = None
    change_note: Optional[str] = None
    changed_by_id: Optional[int] = None
    created_at: Optional[datetime] = None

class PromptVersionList(BaseModel):
    current_version: int
    items: List[PromptVersionResponse]
    pagination: Pagination

class PromptPreviewRequest(BaseModel):
    system_prompt: str
    user_prompt: str
    type: str
    custom_sample_data: Optional[Dict[str, Any]] = None

class PromptPreviewResponse(BaseModel):
    rendered_system_prompt: str
    rendered_user_prompt: str
    system_variables: List[str]
    user_variables: List[str]
    sample_data: Dict[str, Any]
    variable_schema: List[Dict[str, Any]]
    missing_variables: List[str] = []

class PromptTypeInfo(BaseModel):
    value: str
    label: str
    description: str

class DeleteResult(BaseModel):
    id: int
    deleted: bool
    deactivated: bool
