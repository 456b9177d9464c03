"""
Candidate pipeline state machine.

invitation_status moves one way only:

    pending (NULL) -> invited | accepted | declined
    invited        -> accepted | declined

accepted and declined are terminal. Repeating the current status is a no-op.
"""
import secrets
from datetime import datetime, timezone
from typing import Dict, Optional, Set, Tuple

from hiring.core.exceptions import ConflictError, InvalidTransitionError, NotFoundError
from hiring.models.interview import Interview
from hiring.models.job_posting import JobPosting
from hiring.models.job_scoring import InvitationStatus, JobScoring
from hiring.models.user import User
from hiring.services.audit import AuditService
from hiring.services.base import BaseService

ALLOWED_TRANSITIONS: Dict[Optional[InvitationStatus], Set[InvitationStatus]] = {
    None: {InvitationStatus.invited, InvitationStatus.accepted, InvitationStatus.declined},
    InvitationStatus.invited: {InvitationStatus.accepted, InvitationStatus.declined},
    InvitationStatus.accepted: set(),
    InvitationStatus.declined: set(),
}


def can_transition(current: Optional[InvitationStatus], target: InvitationStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


def apply_transition(scoring: JobScoring, target: InvitationStatus) -> bool:
    """
    Move `scoring` to `target`. Returns False when it already was there.
    Raises InvalidTransitionError or ConflictError when the move is not allowed.
    """
    current = scoring.invitation_status
    if current == target:
        return False
    if not can_transition(current, target):
        raise InvalidTransitionError(current.value if current else None, target.value)
    if target == InvitationStatus.invited and scoring.disqualified:
        raise ConflictError("Disqualified candidates cannot be invited")

    scoring.invitation_status = target
    if target == InvitationStatus.invited and not scoring.invitation_token:
        scoring.invitation_token = secrets.token_urlsafe(32)
    return True


class CandidatePipelineService(BaseService):
    def get_scoring(self, job_id: int, profile_id: int) -> JobScoring:
        job = self.db.query(JobPosting).filter(
            JobPosting.id == job_id,
            JobPosting.organization_id == self.org_id
        ).first()
        if not job:
            raise NotFoundError("Job posting", job_id)

        scoring = self.db.query(JobScoring).filter(
            JobScoring.job_id == job_id,
            JobScoring.profile_id == profile_id,
            JobScoring.organization_id == self.org_id
        ).first()
        if not scoring:
            raise NotFoundError("Candidate scoring for this job")
        return scoring

    def transition(
        self, job_id: int, profile_id: int, target: InvitationStatus, user: User
    ) -> Tuple[JobScoring, bool]:
        scoring = self.get_scoring(job_id, profile_id)
        before = scoring.status_label
        changed = apply_transition(scoring, target)
        if not changed:
            self.log_info(f"Candidate {profile_id} already {target.value} for job {job_id}")
            return scoring, False

        scoring.reviewed_by_id = user.id
        scoring.reviewed_at = datetime.now(timezone.utc)
        AuditService.log(
            self.db,
            action=f"candidate_{target.value}",
            entity_type="job_scoring",
            entity_id=scoring.id,
            user_id=user.id,
            user_role=user.role,
            details={"job_id": job_id, "profile_id": profile_id},
            organization_id=self.org_id,
            before_state={"invitation_status": before},
            after_state={"invitation_status": target.value}
        )
        self.commit()
        self.db.refresh(scoring)
        self.log_info(f"Candidate {profile_id} moved {before} -> {target.value} for job {job_id}")
        return scoring, True

    def invite(self, job_id: int, profile_id: int, user: User) -> Tuple[JobScoring, bool]:
        return self.transition(job_id, profile_id, InvitationStatus.invited, user)

    def accept(self, job_id: int, profile_id: int, user: User) -> Tuple[JobScoring, bool]:
        return self.transition(job_id, profile_id, InvitationStatus.accepted, user)

    def decline(self, job_id: int, profile_id: int, user: User) -> Tuple[JobScoring, bool]:
        return self.transition(job_id, profile_id, InvitationStatus.declined, user)

    def schedule_interview(
        self,
        job_id: int,
        profile_id: int,
        user: User,
        scheduled_date: str,
        scheduled_time: str,
        interview_type: str = "video",
        meeting_link: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Interview:
        scoring = self.get_scoring(job_id, profile_id)
        if scoring.invitation_status != InvitationStatus.accepted:
            raise ConflictError(
                "Only accepted candidates can be scheduled for an interview",
                details={"current_status": scoring.status_label}
            )

        profile = scoring.profile
        interview = Interview(
            job_scoring_id=scoring.id,
            job_id=job_id,
            profile_id=profile_id,
            organization_id=self.org_id,
            candidate_name=profile.name if profile else None,
            candidate_email=profile.email if profile else None,
            scheduled_date=scheduled_date,
            scheduled_time=scheduled_time,
            interview_type=interview_type or "video",
            meeting_link=meeting_link,
            notes=notes,
            created_by_id=user.id,
        )
        self.db.add(interview)

        scoring.interview_date = scheduled_date
        scoring.interview_time = scheduled_time
        scoring.interview_link = meeting_link
        self.db.flush()

        AuditService.log(
            self.db,
            action="schedule_interview",
            entity_type="interview",
            entity_id=interview.id,
            user_id=user.id,
            user_role=user.role,
            details={"job_id": job_id, "profile_id": profile_id, "date": scheduled_date, "time": scheduled_time},
            organization_id=self.org_id
        )
        self.commit()
        self.db.refresh(interview)
        return interview
