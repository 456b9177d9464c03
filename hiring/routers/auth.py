import logging
import re
import uuid
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from hiring.database import get_db
from hiring.models.organization import Organization
from hiring.models.user import User, UserRole
from hiring.services import auth as auth_service
from hiring.services.audit import AuditService
from hiring.schemas.auth import LoginRequest, RegisterRequest, Token, UserResponse
from hiring.routers.auth_deps import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


def _slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return f"{slug or 'org'}-{uuid.uuid4().hex[:6]}"


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Create an employer organization together with its first admin user."""
    if db.query(User).filter(User.email == data.email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    org = Organization(name=data.organization_name, slug=_slugify(data.organization_name))
    db.add(org)
    db.flush()

    user = User(
        email=data.email,
        hashed_password=auth_service.get_password_hash(data.password),
        full_name=data.full_name,
        role=UserRole.EMPLOYER_ADMIN,
        organization_id=org.id,
        is_active=True,
    )
    db.add(user)
    db.flush()

    AuditService.log(
        db,
        action="register",
        entity_type="organization",
        entity_id=org.id,
        user_id=user.id,
        user_role=user.role,
        details={"email": user.email, "organization": org.name},
        organization_id=org.id
    )
    db.commit()
    db.refresh(user)
    logger.info(f"Registered organization {org.slug} with admin {user.email}")

    return Token(
        access_token=auth_service.create_access_token(auth_service.build_token_claims(user)),
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=Token)
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == login_data.email).first()
    if not user or not auth_service.verify_password(login_data.password, user.hashed_password):
        AuditService.log(
            db,
            action="failed_login",
            entity_type="user",
            entity_id=None,
            user_id=None,
            user_role=None,
            details={"email": login_data.email, "reason": "invalid_credentials"}
        )
        db.commit()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(status_code=400, detail="User is inactive")

    AuditService.log(
        db,
        action="login",
        entity_type="user",
        entity_id=user.id,
        user_id=user.id,
        user_role=user.role,
        details={"email": user.email},
        organization_id=user.organization_id
    )
    db.commit()

    return Token(
        access_token=auth_service.create_access_token(auth_service.build_token_claims(user)),
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user
