import enum
from datetime import date, datetime
from typing import Any, Optional

from hiring.core.logging import request_id_var
from hiring.models.audit_log import AuditLog
from hiring.services.base import BaseService


def _sanitize(obj: Any) -> Any:
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if isinstance(obj, enum.Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(i) for i in obj]
    return obj


class AuditService(BaseService):
    def log_action(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        user_id: Optional[int],
        user_role: Optional[Any],
        details: dict,
        ai_recommended: bool = False,
        organization_id: Optional[int] = None,
        before_state: Optional[dict] = None,
        after_state: Optional[dict] = None
    ):
        """
        Create an audit log entry. Strictly append-only.
        The entry is flushed, not committed: it lands together with the caller's transaction.
        """
        try:
            db_log = AuditLog(
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                user_id=user_id,
                user_role=_sanitize(user_role),
                details=_sanitize(details),
                ai_recommended=ai_recommended,
                organization_id=organization_id or self.org_id,
                request_id=request_id_var.get() or None,
                before_state=_sanitize(before_state),
                after_state=_sanitize(after_state)
            )
            self.db.add(db_log)
            self.db.flush()
            return db_log
        except Exception as e:
            # Never break the main flow because of an audit failure
            self._logger.error(f"FAILED TO AUDIT LOG: {e}", exc_info=True)
            return None

    @staticmethod
    def log(db, *args, **kwargs):
        service = AuditService(db)
        return service.log_action(*args, **kwargs)
