import json
import os
import uuid

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["OPENROUTER_API_KEY"] = "test-key"
os.environ["AI_KILL_SWITCH"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["AIRTABLE_API_KEY"] = ""
os.environ["AIRTABLE_BASE_ID"] = ""
os.environ["SUPER_ADMIN_EMAIL"] = ""

from hiring.database import Base, get_db
from hiring.main import app
from hiring.services.ai_orchestrator import AIOrchestrator
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "Password123!"

PARSED_RESUME = {
    "name": "Jane Doe",
    "email": "jane.doe@acme.com",
    "phone": "+1 555 0100",
    "summary": "Backend engineer with 7 years of Python.",
    "experience": ["Senior Engineer at Acme (2020-2024)"],
    "skills": ["Python", "FastAPI", "PostgreSQL"],
    "education": ["BSc Computer Science"],
    "certifications": [],
    "languages": ["English"],
}

SCORING_RESPONSE = {
    "overallScore": 81,
    "technicalSkillsScore": 90,
    "experienceScore": 80,
    "culturalFitScore": 70,
    "matchSummary": "Strong backend match.",
    "strengthsHighlights": ["7 years of Python"],
    "improvementAreas": ["No Kubernetes"],
    "disqualified": False,
    "redFlags": [],
    "sectionA": {"score": 25, "explanation": "Skills"},
    "sectionC": {"score": 16, "explanation": "Projects"},
    "sectionD": {"score": 8, "explanation": "Education"},
    "verdict": {"decision": "interview"},
}

SAMPLE_RESUME = (
    "Jane Doe\njane.doe@acme.com\nSenior Engineer at Acme (2020-2024)\n"
    "Skills: Python, FastAPI, PostgreSQL. Built hiring platform APIs."
)


class FakeLLM:
    """Stands in for the model provider. Answers parsing and scoring prompts with canned JSON."""

    def __init__(self):
        self.parse_result = dict(PARSED_RESUME)
        self.score_result = dict(SCORING_RESPONSE)
        self.calls = []
        self.fail_scoring = False
        self.score_raw = None

    def __call__(self, messages, model_name, temperature=0.2, json_output=True):
        self.calls.append({"messages": messages, "model": model_name})
        user_message = messages[-1]["content"]
        if "JOB TITLE:" in user_message:
            if self.fail_scoring:
                from hiring.core.exceptions import AIError
                raise AIError("AI service returned error: 500")
            content = self.score_raw if self.score_raw is not None else json.dumps(self.score_result)
        else:
            content = json.dumps(self.parse_result)
        return {"content": content, "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15}}

    @property
    def scoring_calls(self):
        return [c for c in self.calls if "JOB TITLE:" in c["messages"][-1]["content"]]


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def org(db_session):
    from hiring.models.organization import Organization
    org = Organization(name=f"Acme {uuid.uuid4().hex[:6]}", slug=f"acme-{uuid.uuid4()}")
    db_session.add(org)
    db_session.commit()
    return org


def _make_user(db_session, email, role, org_id):
    from hiring.models.user import User
    from hiring.services import auth as auth_service

    user = User(
        email=email,
        hashed_password=auth_service.get_password_hash(PASSWORD),
        role=role,
        organization_id=org_id,
        is_active=True,
        full_name=email.split("@")[0].title()
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope="function")
def employer_admin(db_session, org):
    from hiring.models.user import UserRole
    return _make_user(db_session, "admin@acme.com", UserRole.EMPLOYER_ADMIN, org.id)


@pytest.fixture(scope="function")
def recruiter(db_session, org):
    from hiring.models.user import UserRole
    return _make_user(db_session, "recruiter@acme.com", UserRole.RECRUITER, org.id)


@pytest.fixture(scope="function")
def super_admin(db_session):
    from hiring.models.user import UserRole
    return _make_user(db_session, "root@platform.com", UserRole.SUPER_ADMIN, None)


@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens with org_id."""
    from hiring.services.auth import build_token_claims, create_access_token

    def _get_token(user):
        return create_access_token(data=build_token_claims(user))
    return _get_token


@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _headers(user):
        return {"Authorization": f"Bearer {get_token(user)}"}
    return _headers


@pytest.fixture(scope="function")
def job(db_session, org, employer_admin):
    from hiring.models.job_posting import JobPosting
    job = JobPosting(
        title="Backend Engineer",
        description="Build APIs for the hiring platform.",
        requirements="5+ years Python, SQL",
        location="Remote",
        score_matching_threshold=30,
        organization_id=org.id,
        created_by_id=employer_admin.id,
        is_active=True,
    )
    db_session.add(job)
    db_session.commit()
    return job


@pytest.fixture(scope="function")
def profile(db_session, org, employer_admin):
    from hiring.models.resume_profile import ResumeProfile
    profile = ResumeProfile(
        name="Jane Doe",
        email="jane.doe@acme.com",
        summary="Backend engineer with 7 years of Python.",
        skills=["Python", "FastAPI", "PostgreSQL"],
        experience=["Senior Engineer at Acme (2020-2024)"],
        education=["BSc Computer Science"],
        certifications=[],
        languages=["English"],
        resume_text=SAMPLE_RESUME,
        organization_id=org.id,
        created_by_id=employer_admin.id,
    )
    db_session.add(profile)
    db_session.commit()
    return profile


@pytest.fixture(scope="function")
def make_scoring(db_session, org):
    """Persist a JobScoring row directly, bypassing the oracle."""
    from hiring.models.job_scoring import JobScoring, QualificationStatus

    def _make(job, profile, overall_score=75, invitation_status=None, disqualified=False):
        scoring = JobScoring(
            job_id=job.id,
            profile_id=profile.id,
            organization_id=org.id,
            overall_score=overall_score,
            match_label="Strong Match",
            qualification_status=QualificationStatus.disqualified if disqualified else QualificationStatus.qualified,
            disqualified=disqualified,
            invitation_status=invitation_status,
        )
        db_session.add(scoring)
        db_session.commit()
        return scoring
    return _make


@pytest.fixture(scope="function")
def fake_llm(monkeypatch):
    fake = FakeLLM()
    monkeypatch.setattr(AIOrchestrator, "_do_call", staticmethod(fake))
    return fake


@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
