import pytest
from hiring.services import auth as auth_service
from hiring.models.user import User, UserRole

def test_password_hashing():
    """Test that password hashing and verification works correctly."""
    password = "MySecurePassword123!"
    hashed = auth_service.get_password_hash(password)
    assert hashed != password
    assert auth_service.verify_password(password, hashed)
    assert not auth_service.verify_password("WrongPassword", hashed)

def test_token_round_trip(employer_admin):
    token = auth_service.create_access_token(auth_service.build_token_claims(employer_admin))
    payload = auth_service.decode_access_token(token)
    assert payload["sub"] == employer_admin.email
    assert payload["role"] == "employer_admin"
    assert payload["org_id"] == employer_admin.organization_id
    assert payload["type"] == "access"

def test_decode_garbage_token():
    assert auth_service.decode_access_token("not-a-jwt") is None

def test_create_user(db_session):
    email = "newuser@acme.com"
    password = "Password123!"

    user = User(
        email=email,
        hashed_password=auth_service.get_password_hash(password),
        role=UserRole.RECRUITER,
        is_active=True
    )
    db_session.add(user)
    db_session.commit()

    saved_user = db_session.query(User).filter(User.email == email).first()
    assert saved_user is not None
    assert saved_user.is_super_admin is False
    assert auth_service.verify_password(password, saved_user.hashed_password)
