"""
Versioned prompt management for super admins.

Every content change snapshots the previous content into prompt_versions and
bumps Prompt.version. Rollback is itself a content change, so history is
never rewritten.
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_

from hiring.core import prompts
from hiring.core.exceptions import NotFoundError, ValidationFailedError
from hiring.models.prompt import Prompt, PromptVersion
from hiring.models.user import User
from hiring.services.audit import AuditService
from hiring.services.base import BaseService
from hiring.services.prompt_template import (
    extract_variables, get_sample_data, get_variable_schema, render_prompt, validate_variables
)

VALID_PROMPT_TYPES = {t["value"] for t in prompts.PROMPT_TYPES}
CONTENT_FIELDS = ("system_prompt", "user_prompt", "variables", "model_id")


def _check_type(prompt_type: str):
    if prompt_type not in VALID_PROMPT_TYPES:
        raise ValidationFailedError(
            f"Invalid prompt type '{prompt_type}'",
            details={"allowed": sorted(VALID_PROMPT_TYPES)}
        )


class PromptService(BaseService):
    # --- queries ---
    def list_prompts(
        self, page: int = 1, limit: int = 10, search: Optional[str] = None, prompt_type: Optional[str] = None
    ) -> Tuple[List[Prompt], int]:
        query = self.db.query(Prompt)
        if search:
            like = f"%{search}%"
            query = query.filter(or_(Prompt.name.ilike(like), Prompt.description.ilike(like)))
        if prompt_type:
            query = query.filter(Prompt.type == prompt_type)
        total = query.count()
        items = (
            query.order_by(Prompt.type, Prompt.sort_order, Prompt.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    def get(self, prompt_id: int) -> Prompt:
        prompt = self.db.query(Prompt).filter(Prompt.id == prompt_id).first()
        if not prompt:
            raise NotFoundError("Prompt", prompt_id)
        return prompt

    def find_active(self, prompt_type: str) -> Optional[Prompt]:
        """Default active prompt of a type, else the most recently updated active one."""
        default = self.db.query(Prompt).filter(
            Prompt.type == prompt_type,
            Prompt.is_active == True,
            Prompt.is_default == True
        ).first()
        if default:
            return default
        return (
            self.db.query(Prompt)
            .filter(Prompt.type == prompt_type, Prompt.is_active == True)
            .order_by(func.coalesce(Prompt.updated_at, Prompt.created_at).desc(), Prompt.id.desc())
            .first()
        )

    def get_active(self, prompt_type: str) -> Prompt:
        _check_type(prompt_type)
        prompt = self.find_active(prompt_type)
        if not prompt:
            raise NotFoundError(f"Active prompt of type '{prompt_type}'")
        return prompt

    def resolve_templates(self, prompt_type: str) -> Tuple[str, str, Optional[Prompt]]:
        """(system, user, prompt) for a type, falling back to the built-in defaults."""
        prompt = self.find_active(prompt_type)
        if prompt:
            return prompt.system_prompt, prompt.user_prompt, prompt
        default = prompts.DEFAULT_PROMPTS[prompt_type]
        self.log_warning(f"No active '{prompt_type}' prompt configured, using built-in default")
        return default["system_prompt"], default["user_prompt"], None

    def list_versions(self, prompt_id: int, page: int = 1, limit: int = 10) -> Tuple[Prompt, List[PromptVersion], int]:
        prompt = self.get(prompt_id)
        query = self.db.query(PromptVersion).filter(PromptVersion.prompt_id == prompt_id)
        total = query.count()
        versions = (
            query.order_by(PromptVersion.version.desc(), PromptVersion.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return prompt, versions, total

    def preview(
        self,
        system_prompt: str,
        user_prompt: str,
        prompt_type: str,
        custom_sample_data: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        _check_type(prompt_type)
        data = custom_sample_data or get_sample_data(prompt_type)
        schema = get_variable_schema(prompt_type)
        _, missing = validate_variables(f"{system_prompt}\n{user_prompt}", data, schema)
        return {
            "rendered_system_prompt": render_prompt(system_prompt, data),
            "rendered_user_prompt": render_prompt(user_prompt, data),
            "system_variables": extract_variables(system_prompt),
            "user_variables": extract_variables(user_prompt),
            "sample_data": data,
            "variable_schema": schema,
            "missing_variables": missing,
        }

    # --- mutations ---
    def _unset_defaults(self, prompt_type: str, keep_id: Optional[int] = None):
        query = self.db.query(Prompt).filter(Prompt.type == prompt_type, Prompt.is_default == True)
        if keep_id is not None:
            query = query.filter(Prompt.id != keep_id)
        for other in query.all():
            other.is_default = False

    def _snapshot(self, prompt: Prompt, user: Optional[User], note: Optional[str]) -> PromptVersion:
        snapshot = PromptVersion(
            prompt_id=prompt.id,
            version=prompt.version,
            system_prompt=prompt.system_prompt,
            user_prompt=prompt.user_prompt,
            variables=prompt.variables,
            model_id=prompt.model_id,
            change_note=note,
            changed_by_id=user.id if user else None,
        )
        self.db.add(snapshot)
        return snapshot

    def create(self, data: Dict[str, Any], user: Optional[User]) -> Prompt:
        _check_type(data["type"])
        if data.get("is_default"):
            self._unset_defaults(data["type"])
        if not data.get("variables"):
            data["variables"] = get_variable_schema(data["type"])

        prompt = Prompt(**data, version=1, created_by_id=user.id if user else None)
        self.db.add(prompt)
        self.db.flush()
        AuditService.log(
            self.db,
            action="create_prompt",
            entity_type="prompt",
            entity_id=prompt.id,
            user_id=user.id if user else None,
            user_role=user.role if user else "system",
            details={"name": prompt.name, "type": prompt.type},
        )
        self.commit()
        self.db.refresh(prompt)
        return prompt

    def update(self, prompt_id: int, data: Dict[str, Any], user: User, change_note: Optional[str] = None) -> Prompt:
        prompt = self.get(prompt_id)
        if "type" in data and data["type"] is not None:
            _check_type(data["type"])

        content_changed = any(
            field in data and data[field] != getattr(prompt, field) for field in CONTENT_FIELDS
        )
        before = {"version": prompt.version, "name": prompt.name}
        if content_changed:
            self._snapshot(prompt, user, change_note or f"Updated from version {prompt.version}")
            prompt.version = prompt.version + 1

        target_type = data.get("type") or prompt.type
        if data.get("is_default"):
            self._unset_defaults(target_type, keep_id=prompt.id)

        for field, value in data.items():
            setattr(prompt, field, value)

        AuditService.log(
            self.db,
            action="update_prompt",
            entity_type="prompt",
            entity_id=prompt.id,
            user_id=user.id,
            user_role=user.role,
            details={"fields": sorted(data.keys()), "change_note": change_note},
            before_state=before,
            after_state={"version": prompt.version, "name": prompt.name}
        )
        self.commit()
        self.db.refresh(prompt)
        return prompt

    def delete(self, prompt_id: int, user: User) -> Dict[str, Any]:
        """Deactivates an active prompt; hard-deletes an inactive one with its history."""
        prompt = self.get(prompt_id)
        if prompt.is_active:
            prompt.is_active = False
            prompt.is_default = False
            hard = False
        else:
            self.db.delete(prompt)
            hard = True

        AuditService.log(
            self.db,
            action="delete_prompt" if hard else "deactivate_prompt",
            entity_type="prompt",
            entity_id=prompt_id,
            user_id=user.id,
            user_role=user.role,
            details={"name": prompt.name, "permanent": hard}
        )
        self.commit()
        return {"id": prompt_id, "deleted": hard, "deactivated": not hard}

    def duplicate(self, prompt_id: int, user: User) -> Prompt:
        source = self.get(prompt_id)
        copy = Prompt(
            name=f"{source.name} (Copy)",
            description=source.description,
            type=source.type,
            system_prompt=source.system_prompt,
            user_prompt=source.user_prompt,
            variables=source.variables,
            model_id=source.model_id,
            is_active=False,
            is_default=False,
            sort_order=source.sort_order,
            version=1,
            created_by_id=user.id,
        )
        self.db.add(copy)
        self.db.flush()
        AuditService.log(
            self.db,
            action="duplicate_prompt",
            entity_type="prompt",
            entity_id=copy.id,
            user_id=user.id,
            user_role=user.role,
            details={"source_id": source.id}
        )
        self.commit()
        self.db.refresh(copy)
        return copy

    def set_default(self, prompt_id: int, user: User) -> Prompt:
        prompt = self.get(prompt_id)
        self._unset_defaults(prompt.type, keep_id=prompt.id)
        prompt.is_default = True
        prompt.is_active = True
        AuditService.log(
            self.db,
            action="set_default_prompt",
            entity_type="prompt",
            entity_id=prompt.id,
            user_id=user.id,
            user_role=user.role,
            details={"type": prompt.type}
        )
        self.commit()
        self.db.refresh(prompt)
        return prompt

    def rollback(self, prompt_id: int, version_id: int, user: User) -> Prompt:
        prompt = self.get(prompt_id)
        target = self.db.query(PromptVersion).filter(PromptVersion.id == version_id).first()
        if not target:
            raise NotFoundError("Prompt version", version_id)
        if target.prompt_id != prompt.id:
            raise ValidationFailedError("Version does not belong to this prompt")

        new_version = prompt.version + 1
        self._snapshot(
            prompt, user, f"Rollback from version {prompt.version} to version {target.version}"
        )
        prompt.system_prompt = target.system_prompt
        prompt.user_prompt = target.user_prompt
        prompt.variables = target.variables
        prompt.model_id = target.model_id
        prompt.version = new_version

        AuditService.log(
            self.db,
            action="rollback_prompt",
            entity_type="prompt",
            entity_id=prompt.id,
            user_id=user.id,
            user_role=user.role,
            details={"restored_version": target.version, "new_version": new_version}
        )
        self.commit()
        self.db.refresh(prompt)
        return prompt

    def seed_defaults(self) -> int:
        """Create the built-in prompts for any type that has none. Returns how many were created."""
        created = 0
        for prompt_type, default in prompts.DEFAULT_PROMPTS.items():
            exists = self.db.query(Prompt).filter(Prompt.type == prompt_type).first()
            if exists:
                continue
            self.db.add(Prompt(
                name=default["name"],
                description=default["description"],
                type=prompt_type,
                system_prompt=default["system_prompt"],
                user_prompt=default["user_prompt"],
                variables=get_variable_schema(prompt_type),
                is_active=True,
                is_default=True,
                version=1,
            ))
            created += 1
        if created:
            self.commit()
        return created
