"""
Scoring oracle client.

Sends resolved job-scoring prompts to the LLM and validates the reply into a
`FullResponse`. Any transport failure or unusable reply surfaces as AIError.
"""
import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from hiring.core.config import settings
from hiring.core.exceptions import AIError
from hiring.services.ai_orchestrator import AIOrchestrator, AIDomain

logger = logging.getLogger(__name__)


def _to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        cleaned = value.strip().rstrip("%").strip()
        try:
            return float(cleaned)
        except ValueError:
            return None
    return None


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return False


def _to_list(value: Any) -> List[Any]:
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


class OracleModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class SectionScore(OracleModel):
    score: Optional[float] = None
    max_score: Optional[float] = None
    explanation: Optional[str] = None

    @field_validator("score", "max_score", mode="before")
    @classmethod
    def _number(cls, v):
        return _to_number(v)


class ExecutiveSummary(OracleModel):
    one_liner: Optional[str] = None
    fit_score: Optional[str] = None  # EXCELLENT | GOOD | FAIR | POOR | MISMATCH
    hiring_urgency: Optional[str] = None
    competitive_position: Optional[str] = None


class Verdict(OracleModel):
    decision: Optional[str] = None  # INTERVIEW | CONSIDER | REVIEW | PASS
    confidence: Optional[str] = None
    risk_level: Optional[str] = None
    summary: Optional[str] = None
    top_strength: Optional[str] = None
    top_concern: Optional[str] = None
    dealbreakers: List[Any] = Field(default_factory=list)

    @field_validator("decision", mode="before")
    @classmethod
    def _upper(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("dealbreakers", mode="before")
    @classmethod
    def _list(cls, v):
        return _to_list(v)


class FullResponse(OracleModel):
    """Structured scoring output for one candidate-job pair."""

    overall_score: Optional[float] = None
    technical_skills_score: Optional[float] = None
    experience_score: Optional[float] = None
    cultural_fit_score: Optional[float] = None
    match_summary: str = "No match summary available"
    strengths_highlights: List[Any] = Field(default_factory=list)
    improvement_areas: List[Any] = Field(default_factory=list)
    detailed_breakdown: Optional[Dict[str, Any]] = None
    disqualified: bool = False
    disqualification_reason: Optional[str] = None
    red_flags: List[Any] = Field(default_factory=list)

    section_a: Optional[SectionScore] = None
    section_b: Optional[SectionScore] = None
    section_c: Optional[SectionScore] = None
    section_d: Optional[SectionScore] = None
    section_e: Optional[SectionScore] = None
    section_f: Optional[SectionScore] = None

    executive_summary: Optional[ExecutiveSummary] = None
    verdict: Optional[Verdict] = None
    recommendation: Optional[str] = None
    recommendation_reason: Optional[str] = None
    domain_analysis: Optional[Dict[str, Any]] = None
    competitive_intel: Optional[Dict[str, Any]] = None
    skill_analysis: Optional[Dict[str, Any]] = None
    experience_analysis: Optional[Dict[str, Any]] = None
    quantified_achievements: Optional[Any] = None
    interview_recommendations: Optional[Union[Dict[str, Any], List[Any]]] = None

    @field_validator(
        "overall_score", "technical_skills_score", "experience_score", "cultural_fit_score",
        mode="before"
    )
    @classmethod
    def _clamped_score(cls, v):
        number = _to_number(v)
        if number is None:
            return None
        return max(0.0, min(100.0, number))

    @field_validator("match_summary", mode="before")
    @classmethod
    def _summary(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return "No match summary available"
        return v if isinstance(v, str) else str(v)

    @field_validator("strengths_highlights", "improvement_areas", "red_flags", mode="before")
    @classmethod
    def _lists(cls, v):
        return _to_list(v)

    @field_validator("disqualified", mode="before")
    @classmethod
    def _flag(cls, v):
        return _to_bool(v)

    @field_validator(
        "section_a", "section_b", "section_c", "section_d", "section_e", "section_f",
        mode="before"
    )
    @classmethod
    def _section(cls, v):
        # Some models answer "sectionA": 24 instead of an object
        if isinstance(v, (int, float, str)) and not isinstance(v, bool):
            return {"score": v}
        return v

    @field_validator(
        "detailed_breakdown", "domain_analysis", "competitive_intel", "skill_analysis",
        "experience_analysis", mode="before"
    )
    @classmethod
    def _object(cls, v):
        return v if isinstance(v, dict) else None

    def has_scores(self) -> bool:
        sub_scores = (
            self.overall_score, self.technical_skills_score, self.experience_score, self.cultural_fit_score
        )
        if any(score is not None for score in sub_scores):
            return True
        return any(section is not None and section.score is not None for section in (self.section_c, self.section_d))

    def to_storage(self) -> Dict[str, Any]:
        """camelCase JSON form persisted in job_scorings.full_response."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def parse_full_response(data: Dict[str, Any]) -> FullResponse:
    if not isinstance(data, dict):
        raise AIError("Scoring response was not a JSON object.")
    try:
        response = FullResponse.model_validate(data)
    except ValidationError as e:
        logger.error(f"Scoring response failed validation: {e}")
        raise AIError("Scoring response did not match the expected schema.", details={"errors": e.errors(include_url=False)})
    if not response.has_scores():
        logger.error(f"Scoring response carried no scores: keys {sorted(data)}")
        raise AIError("Scoring response did not contain any scores.")
    return response


class ScoringOracleClient:
    def __init__(self, db: Any = None, organization_id: Optional[int] = None):
        self.db = db
        self.organization_id = organization_id

    def score(self, system_prompt: str, user_prompt: str) -> FullResponse:
        data = AIOrchestrator.analyze_text(
            system_prompt,
            user_prompt,
            temperature=settings.ai.scoring_temperature,
            domain=AIDomain.JOB_SCORING,
            organization_id=self.organization_id,
            db_session=self.db,
        )
        return parse_full_response(data)
