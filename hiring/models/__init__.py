# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    organization, user, job_posting, resume_profile, job_scoring, interview,
    prompt, subscription_plan, audit_log, ai_request_log
)

# Explicit class exports for cleaner imports
from .organization import Organization
from .user import User, UserRole
from .job_posting import JobPosting
from .resume_profile import ResumeProfile
from .job_scoring import JobScoring, InvitationStatus, QualificationStatus
from .interview import Interview, InterviewStatus
from .prompt import Prompt, PromptVersion
from .subscription_plan import SubscriptionPlan, SubscriptionPlanPricing, SupportLevel
from .audit_log import AuditLog
from .ai_request_log import AIRequestLog

__all__ = [
    "Organization",
    "User",
    "UserRole",
    "JobPosting",
    "ResumeProfile",
    "JobScoring",
    "InvitationStatus",
    "QualificationStatus",
    "Interview",
    "InterviewStatus",
    "Prompt",
    "PromptVersion",
    "SubscriptionPlan",
    "SubscriptionPlanPricing",
    "SupportLevel",
    "AuditLog",
    "AIRequestLog",
]
