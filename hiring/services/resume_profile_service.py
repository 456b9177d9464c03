from typing import Any, Dict, List, Optional

from hiring.core.exceptions import AppException, NotFoundError
from hiring.models.job_posting import JobPosting
from hiring.models.job_scoring import JobScoring
from hiring.models.resume_profile import ResumeProfile
from hiring.models.user import User
from hiring.services.audit import AuditService
from hiring.services.base import BaseService
from hiring.services.resume_parser import ParsedResume, ResumeParser, ensure_min_length, split_bulk_text
from hiring.services.scoring_service import ScoringService

PROFILE_FIELDS = ("name", "email", "phone", "summary", "skills", "experience", "education", "certifications", "languages")


class ResumeProfileService(BaseService):
    def __init__(
        self,
        db,
        org_id: int,
        parser: Optional[ResumeParser] = None,
        scoring: Optional[ScoringService] = None,
    ):
        super().__init__(db, org_id)
        self.parser = parser or ResumeParser(db=db, organization_id=org_id)
        self.scoring = scoring or ScoringService(db, org_id)

    # --- queries ---
    def get(self, profile_id: int) -> ResumeProfile:
        profile = self.db.query(ResumeProfile).filter(
            ResumeProfile.id == profile_id,
            ResumeProfile.organization_id == self.org_id
        ).first()
        if not profile:
            raise NotFoundError("Resume profile", profile_id)
        return profile

    def get_job(self, job_id: int) -> JobPosting:
        job = self.db.query(JobPosting).filter(
            JobPosting.id == job_id,
            JobPosting.organization_id == self.org_id
        ).first()
        if not job:
            raise NotFoundError("Job posting", job_id)
        return job

    def list_profiles(self, job_id: Optional[int] = None, skip: int = 0, limit: int = 100) -> List[ResumeProfile]:
        query = self.db.query(ResumeProfile).filter(ResumeProfile.organization_id == self.org_id)
        if job_id is not None:
            query = query.join(JobScoring, JobScoring.profile_id == ResumeProfile.id).filter(JobScoring.job_id == job_id)
        return query.order_by(ResumeProfile.created_at.desc(), ResumeProfile.id.desc()).offset(skip).limit(limit).all()

    def scorings_for(self, profile: ResumeProfile, job_id: Optional[int] = None) -> List[JobScoring]:
        query = self.db.query(JobScoring).filter(JobScoring.profile_id == profile.id)
        if job_id is not None:
            query = query.filter(JobScoring.job_id == job_id)
        return query.order_by(JobScoring.overall_score.desc()).all()

    # --- mutations ---
    def _target_jobs(self, job_id: Optional[int]) -> List[JobPosting]:
        if job_id is not None:
            return [self.get_job(job_id)]
        return self.db.query(JobPosting).filter(
            JobPosting.organization_id == self.org_id,
            JobPosting.is_active == True
        ).all()

    def _save_profile(self, parsed: ParsedResume, resume_text: str, user: User, filename: Optional[str]) -> ResumeProfile:
        profile = ResumeProfile(
            **parsed.model_dump(),
            resume_text=resume_text,
            source_filename=filename,
            organization_id=self.org_id,
            created_by_id=user.id,
        )
        self.db.add(profile)
        self.db.flush()
        AuditService.log(
            self.db,
            action="create_resume_profile",
            entity_type="resume_profile",
            entity_id=profile.id,
            user_id=user.id,
            user_role=user.role,
            details={"name": profile.name, "source": filename or "text"},
            ai_recommended=True,
            organization_id=self.org_id
        )
        self.commit()
        self.db.refresh(profile)
        return profile

    def process(
        self,
        resume_text: str,
        user: User,
        job_id: Optional[int] = None,
        filename: Optional[str] = None,
        custom_rules: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Parse a resume, store the profile, then score it against `job_id`
        or every active job of the organization.
        """
        ensure_min_length(resume_text)
        jobs = self._target_jobs(job_id)

        parsed = self.parser.parse(resume_text, custom_rules)
        profile = self._save_profile(parsed, resume_text, user, filename)

        scorings, failures = self.scoring.score_against_jobs(profile, jobs, user=user)
        self.log_info(
            f"Processed resume profile {profile.id}: {len(scorings)} scored, {len(failures)} failed"
        )
        return {"profile": profile, "scorings": scorings, "failures": failures}

    def process_bulk(self, text: str, user: User, job_id: Optional[int] = None) -> Dict[str, Any]:
        chunks = split_bulk_text(text)
        self._target_jobs(job_id)
        results = []
        errors = []
        for index, chunk in enumerate(chunks):
            try:
                results.append(self.process(chunk, user, job_id=job_id))
            except AppException as e:
                self.log_warning(f"Bulk resume {index + 1} failed: {e.message}")
                errors.append({"index": index, "error": e.message, "code": e.error_code})
        return {"total": len(chunks), "results": results, "errors": errors}

    def reparse(self, profile_id: int, user: User, custom_rules: Optional[str] = None) -> ResumeProfile:
        """Re-run parsing on the stored resume text. The only way a profile changes."""
        profile = self.get(profile_id)
        parsed = self.parser.parse(profile.resume_text, custom_rules)
        before = {field: getattr(profile, field) for field in PROFILE_FIELDS}
        for field, value in parsed.model_dump().items():
            setattr(profile, field, value)
        AuditService.log(
            self.db,
            action="reparse_resume_profile",
            entity_type="resume_profile",
            entity_id=profile.id,
            user_id=user.id,
            user_role=user.role,
            details={"name": profile.name},
            ai_recommended=True,
            organization_id=self.org_id,
            before_state=before,
            after_state=parsed.model_dump()
        )
        self.commit()
        self.db.refresh(profile)
        return profile

    def score(self, profile_id: int, job_id: int, user: User) -> JobScoring:
        profile = self.get(profile_id)
        job = self.get_job(job_id)
        return self.scoring.score(profile, job, user=user)

    def delete(self, profile_id: int, user: User):
        profile = self.get(profile_id)
        name = profile.name
        self.db.delete(profile)
        AuditService.log(
            self.db,
            action="delete_resume_profile",
            entity_type="resume_profile",
            entity_id=profile_id,
            user_id=user.id,
            user_role=user.role,
            details={"name": name},
            organization_id=self.org_id
        )
        self.commit()
