"""
Score aggregation.

Turns the oracle's sub-scores into the persisted overall score, a match label
and a qualification decision. Pure arithmetic, no I/O.
"""
import math
from typing import Dict, Optional

from pydantic import BaseModel

from hiring.models.job_scoring import QualificationStatus
from hiring.services.scoring_oracle import FullResponse, SectionScore

SECTION_WEIGHTS: Dict[str, float] = {
    "technical": 0.30,
    "experience": 0.25,
    "education": 0.20,
    "projects": 0.15,
    "cultural_fit": 0.10,
}

# Maximum points per scoring section in the oracle's rubric
SECTION_MAX_POINTS: Dict[str, int] = {
    "A": 30,  # skills
    "B": 25,  # experience
    "C": 20,  # impact, projects and achievements
    "D": 10,  # education and qualifications
    "E": 10,  # logistics
    "F": 5,   # bonus / penalty
}

# Lower bound inclusive, checked top-down
MATCH_LABELS = [
    (85, "Excellent Match"),
    (75, "Strong Match"),
    (60, "Good Match"),
    (40, "Fair Match"),
    (0, "Poor Match"),
]


class AggregatedScore(BaseModel):
    overall_score: int
    oracle_overall_score: Optional[int] = None
    technical_skills_score: Optional[int] = None
    experience_score: Optional[int] = None
    education_score: Optional[int] = None
    projects_score: Optional[int] = None
    cultural_fit_score: Optional[int] = None
    match_label: str
    badge_color: str
    qualification_status: QualificationStatus
    disqualified: bool = False


def clamp_score(value: Optional[float]) -> int:
    """Round half up and clamp into [0, 100]. None becomes 0."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return 0
    return int(max(0, min(100, math.floor(value + 0.5))))


def _optional_score(value: Optional[float]) -> Optional[int]:
    return None if value is None else clamp_score(value)


def section_percentage(section: Optional[SectionScore], max_points: int) -> Optional[int]:
    if section is None or section.score is None:
        return None
    ceiling = section.max_score or max_points
    if ceiling <= 0:
        return None
    return clamp_score(section.score / ceiling * 100)


def component_scores(response: FullResponse) -> Dict[str, Optional[int]]:
    return {
        "technical": _optional_score(response.technical_skills_score),
        "experience": _optional_score(response.experience_score),
        "education": section_percentage(response.section_d, SECTION_MAX_POINTS["D"]),
        "projects": section_percentage(response.section_c, SECTION_MAX_POINTS["C"]),
        "cultural_fit": _optional_score(response.cultural_fit_score),
    }


def weighted_overall(components: Dict[str, Optional[int]]) -> Optional[float]:
    """Weighted mean over the components that are present, weights renormalized."""
    total_weight = 0.0
    total = 0.0
    for name, weight in SECTION_WEIGHTS.items():
        value = components.get(name)
        if value is None:
            continue
        total += value * weight
        total_weight += weight
    if total_weight == 0:
        return None
    return total / total_weight


def match_label(score: int) -> str:
    for lower_bound, label in MATCH_LABELS:
        if score >= lower_bound:
            return label
    return MATCH_LABELS[-1][1]


def badge_color(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 60:
        return "yellow"
    return "red"


def qualification_status(overall: int, threshold: int, disqualified: bool) -> QualificationStatus:
    if disqualified:
        return QualificationStatus.disqualified
    if overall >= threshold:
        return QualificationStatus.qualified
    return QualificationStatus.not_qualified


def aggregate(response: FullResponse, threshold: int) -> AggregatedScore:
    components = component_scores(response)
    overall = weighted_overall(components)
    if overall is None:
        overall = response.overall_score
    overall_score = clamp_score(overall)

    return AggregatedScore(
        overall_score=overall_score,
        oracle_overall_score=_optional_score(response.overall_score),
        technical_skills_score=components["technical"],
        experience_score=components["experience"],
        education_score=components["education"],
        projects_score=components["projects"],
        cultural_fit_score=components["cultural_fit"],
        match_label=match_label(overall_score),
        badge_color=badge_color(overall_score),
        qualification_status=qualification_status(overall_score, threshold, response.disqualified),
        disqualified=response.disqualified,
    )
