"""
Create (or reset) a platform super admin and a demo employer organization.

Usage: python -m scripts.seed_admin
"""
import os

from hiring.database import SessionLocal, init_db
from hiring.models.organization import Organization
from hiring.models.user import User, UserRole
from hiring.services import auth as auth_service
from hiring.services.prompt_service import PromptService


def _upsert_user(db, email, password, role, full_name, organization_id=None):
    user = db.query(User).filter(User.email == email).first()
    if not user:
        user = User(
            email=email,
            hashed_password=auth_service.get_password_hash(password),
            role=role,
            full_name=full_name,
            organization_id=organization_id,
            is_active=True
        )
        db.add(user)
        db.commit()
        print(f"User {email} created ({role.value})")
    else:
        user.hashed_password = auth_service.get_password_hash(password)
        db.commit()
        print(f"User {email} already exists. Password reset.")
    return user


def seed():
    init_db()
    db = SessionLocal()
    try:
        PromptService(db).seed_defaults()

        _upsert_user(
            db,
            os.getenv("SUPER_ADMIN_EMAIL", "superadmin@hiring.dev"),
            os.getenv("SUPER_ADMIN_PASSWORD", "ChangeMe123!"),
            UserRole.SUPER_ADMIN,
            "Platform Admin",
        )

        org = db.query(Organization).filter(Organization.slug == "demo").first()
        if not org:
            org = Organization(name="Demo Employer", slug="demo")
            db.add(org)
            db.commit()
            db.refresh(org)
            print(f"Created organization: {org.name}")

        _upsert_user(
            db,
            "employer@hiring.dev",
            "ChangeMe123!",
            UserRole.EMPLOYER_ADMIN,
            "Demo Employer Admin",
            organization_id=org.id,
        )
    finally:
        db.close()


if __name__ == "__main__":
    seed()
