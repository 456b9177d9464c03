import pytest
from fastapi import status
from hiring.models.audit_log import AuditLog
from hiring.models.organization import Organization
from hiring.models.user import User, UserRole
from hiring.services import auth as auth_service
from datetime import timedelta

PASSWORD = "Password123!"

def test_login_success(client, employer_admin):
    """Test successful login with valid credentials."""
    response = client.post("/api/auth/login", json={"email": employer_admin.email, "password": PASSWORD})
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"
    assert data["user"]["role"] == "employer_admin"

def test_login_invalid_credentials(client, db_session):
    """Test login failure with wrong password."""
    response = client.post("/api/auth/login", json={"email": "nobody@acme.com", "password": "wrong"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    body = response.json()
    assert body["success"] is False
    assert db_session.query(AuditLog).filter(AuditLog.action == "failed_login").count() == 1

def test_register_creates_org_and_admin(client, db_session):
    payload = {
        "organization_name": "Globex Corp",
        "email": "owner@globex.com",
        "password": "SuperSecret1",
        "full_name": "Hank Scorpio",
    }
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["user"]["role"] == "employer_admin"

    user = db_session.query(User).filter(User.email == "owner@globex.com").first()
    org = db_session.query(Organization).filter(Organization.id == user.organization_id).first()
    assert org.name == "Globex Corp"
    assert org.slug.startswith("globex-corp-")

def test_register_duplicate_email(client, employer_admin):
    payload = {
        "organization_name": "Other Corp",
        "email": employer_admin.email,
        "password": "SuperSecret1",
    }
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == status.HTTP_400_BAD_REQUEST

def test_register_short_password_is_rejected(client):
    payload = {"organization_name": "Tiny", "email": "a@tiny.com", "password": "short"}
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["errors"][0]["field"] == "password"

def test_me(client, recruiter, auth_headers):
    response = client.get("/api/auth/me", headers=auth_headers(recruiter))
    assert response.status_code == 200
    assert response.json()["email"] == recruiter.email

def test_me_without_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

def test_expired_token(client, recruiter):
    token = auth_service.create_access_token(
        auth_service.build_token_claims(recruiter), expires_delta=timedelta(minutes=-5)
    )
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["errors"][0]["msg"] == "TOKEN_EXPIRED"

def test_inactive_user_is_forbidden(client, db_session, recruiter, auth_headers):
    recruiter.is_active = False
    db_session.commit()
    response = client.get("/api/auth/me", headers=auth_headers(recruiter))
    assert response.status_code == status.HTTP_403_FORBIDDEN
