"""
Candidate-job match scoring.

Resolves the active job_scoring prompt, renders it for one (profile, job)
pair, asks the scoring oracle, aggregates the result and upserts the
JobScoring row. Qualified candidates with an email are auto-invited.
"""
from typing import Any, Dict, List, Optional, Tuple

from hiring.core import prompts
from hiring.core.exceptions import AppException, ConflictError, ValidationFailedError
from hiring.models.job_posting import JobPosting
from hiring.models.job_scoring import InvitationStatus, JobScoring, QualificationStatus
from hiring.models.resume_profile import ResumeProfile
from hiring.models.user import User
from hiring.services.audit import AuditService
from hiring.services.base import BaseService
from hiring.services.candidate_pipeline import apply_transition
from hiring.services.prompt_service import PromptService
from hiring.services.prompt_template import build_scoring_context, render_prompt
from hiring.services.score_aggregator import AggregatedScore, aggregate
from hiring.services.scoring_oracle import FullResponse, ScoringOracleClient


class ScoringService(BaseService):
    def __init__(self, db, org_id: int, oracle: Optional[ScoringOracleClient] = None):
        super().__init__(db, org_id)
        self.oracle = oracle or ScoringOracleClient(db=db, organization_id=org_id)

    def render_prompts(self, job: JobPosting, profile: ResumeProfile) -> Tuple[str, str]:
        system_template, user_template, prompt = PromptService(self.db).resolve_templates(
            prompts.PROMPT_TYPE_JOB_SCORING
        )
        context = build_scoring_context(job, profile, job.screening_rules)
        if prompt is not None:
            self.log_info(f"Scoring with prompt {prompt.id} v{prompt.version}")
        return render_prompt(system_template, context), render_prompt(user_template, context)

    def score(
        self,
        profile: ResumeProfile,
        job: JobPosting,
        user: Optional[User] = None,
        auto_invite: bool = True,
    ) -> JobScoring:
        if not job.is_active:
            raise ValidationFailedError("Cannot score against a closed job posting")

        existing = self.db.query(JobScoring).filter(
            JobScoring.profile_id == profile.id,
            JobScoring.job_id == job.id
        ).first()
        if existing and existing.invitation_status is not None:
            raise ConflictError(
                "Candidate has already been actioned for this job; the score is locked",
                details={"invitation_status": existing.status_label}
            )

        system_prompt, user_prompt = self.render_prompts(job, profile)
        response = self.oracle.score(system_prompt, user_prompt)
        result = aggregate(response, job.score_matching_threshold)

        scoring = existing or JobScoring(
            profile_id=profile.id,
            job_id=job.id,
            organization_id=self.org_id,
        )
        self._apply(scoring, response, result)
        if existing is None:
            self.db.add(scoring)

        invited = False
        if auto_invite and self._should_auto_invite(profile, result):
            invited = apply_transition(scoring, InvitationStatus.invited)
            if invited:
                self.log_info(f"Auto-invited {profile.email} for job {job.id} (score {result.overall_score})")

        self.db.flush()
        AuditService.log(
            self.db,
            action="rescore_candidate" if existing else "score_candidate",
            entity_type="job_scoring",
            entity_id=scoring.id,
            user_id=user.id if user else None,
            user_role=user.role if user else "system",
            details={
                "job_id": job.id,
                "profile_id": profile.id,
                "overall_score": result.overall_score,
                "qualification_status": result.qualification_status.value,
                "auto_invited": invited,
            },
            ai_recommended=True,
            organization_id=self.org_id
        )
        self.commit()
        self.db.refresh(scoring)
        return scoring

    def score_against_jobs(
        self, profile: ResumeProfile, jobs: List[JobPosting], user: Optional[User] = None
    ) -> Tuple[List[JobScoring], List[Dict[str, Any]]]:
        """Score one profile against many jobs. A failing job is recorded and skipped."""
        scorings: List[JobScoring] = []
        failures: List[Dict[str, Any]] = []
        for job in jobs:
            try:
                scorings.append(self.score(profile, job, user=user))
            except AppException as e:
                self.log_warning(f"Scoring profile {profile.id} against job {job.id} failed: {e.message}")
                failures.append({"job_id": job.id, "error": e.message, "code": e.error_code})
        return scorings, failures

    @staticmethod
    def _should_auto_invite(profile: ResumeProfile, result: AggregatedScore) -> bool:
        return (
            bool(profile.email)
            and not result.disqualified
            and result.qualification_status == QualificationStatus.qualified
        )

    @staticmethod
    def _apply(scoring: JobScoring, response: FullResponse, result: AggregatedScore):
        scoring.overall_score = result.overall_score
        scoring.oracle_overall_score = result.oracle_overall_score
        scoring.technical_skills_score = result.technical_skills_score
        scoring.experience_score = result.experience_score
        scoring.cultural_fit_score = result.cultural_fit_score
        scoring.education_score = result.education_score
        scoring.projects_score = result.projects_score
        scoring.match_label = result.match_label
        scoring.qualification_status = result.qualification_status
        scoring.match_summary = response.match_summary
        scoring.strengths_highlights = response.strengths_highlights
        scoring.improvement_areas = response.improvement_areas
        scoring.red_flags = response.red_flags
        scoring.disqualified = response.disqualified
        scoring.disqualification_reason = response.disqualification_reason
        scoring.full_response = response.to_storage()
