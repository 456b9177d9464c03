import logging
from typing import Optional
from sqlalchemy.orm import Session


class BaseService:
    """Common plumbing for services bound to a session and, optionally, an organization."""

    def __init__(self, db: Session, org_id: Optional[int] = None):
        self.db = db
        self.org_id = org_id
        self._logger = logging.getLogger(self.__class__.__module__)

    def log_info(self, message: str, **extra):
        self._logger.info(message, extra={"org_id": self.org_id, **extra})

    def log_warning(self, message: str, **extra):
        self._logger.warning(message, extra={"org_id": self.org_id, **extra})

    def commit(self):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
