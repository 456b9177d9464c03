import logging
from hiring.core.config import settings
from hiring.database import SessionLocal
from hiring.models.user import User, UserRole
from hiring.services import auth as auth_service
from hiring.services.prompt_service import PromptService

logger = logging.getLogger(__name__)


def _ensure_super_admin(db):
    email = settings.super_admin_email
    password = settings.super_admin_password
    if not (email and password):
        return
    if db.query(User).filter(User.email == email).first():
        return
    db.add(User(
        email=email,
        hashed_password=auth_service.get_password_hash(password),
        full_name="Platform Admin",
        role=UserRole.SUPER_ADMIN,
        organization_id=None,
        is_active=True
    ))
    db.commit()
    logger.info(f"Created super admin {email}")


def init_system_data():
    """
    Idempotent startup bootstrap: built-in prompts for every prompt type,
    plus a super admin when SUPER_ADMIN_EMAIL and SUPER_ADMIN_PASSWORD are set.
    """
    db = SessionLocal()
    try:
        created = PromptService(db).seed_defaults()
        if created:
            logger.info(f"Seeded {created} default prompt(s)")
        _ensure_super_admin(db)
    except Exception as e:
        db.rollback()
        logger.error(f"Error during system initialization: {str(e)}", exc_info=True)
    finally:
        db.close()
