"""
Prompt template resolution.

Templates use flat `{{path.to.field}}` placeholders. There are no loops,
conditionals or escapes. A placeholder whose path does not resolve, or
resolves to None, is left in the output verbatim.
"""
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from hiring.core import prompts

PLACEHOLDER_RE = re.compile(r"\{\{([^}]+)\}\}")

_MISSING = object()


def _lookup(context: Mapping[str, Any], path: str) -> Any:
    current: Any = context
    for part in path.split("."):
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        else:
            return _MISSING
    return current


def _stringify(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render_prompt(template: str, variables: Mapping[str, Any]) -> str:
    """Substitute every resolvable placeholder in `template`."""
    if not template:
        return ""

    def _replace(match: re.Match) -> str:
        value = _lookup(variables, match.group(1).strip())
        if value is _MISSING or value is None:
            return match.group(0)
        return _stringify(value)

    return PLACEHOLDER_RE.sub(_replace, template)


def extract_variables(template: str) -> List[str]:
    """Unique placeholder paths in first-seen order."""
    seen: List[str] = []
    for match in PLACEHOLDER_RE.finditer(template or ""):
        name = match.group(1).strip()
        if name not in seen:
            seen.append(name)
    return seen


def validate_variables(
    template: str,
    variables: Mapping[str, Any],
    schema: Optional[List[Dict[str, Any]]] = None,
) -> Tuple[bool, List[str]]:
    """
    Check that every required schema variable used by `template` has a value.
    Returns (is_valid, missing_names).
    """
    used = set(extract_variables(template))
    missing = []
    for var in schema or []:
        name = var["name"]
        if not var.get("required") or name not in used:
            continue
        value = _lookup(variables, name)
        if value is _MISSING or value is None or value == "":
            missing.append(name)
    return not missing, missing


def get_variable_schema(prompt_type: str) -> List[Dict[str, Any]]:
    return [dict(v) for v in prompts.VARIABLE_SCHEMAS.get(prompt_type, [])]


def get_sample_data(prompt_type: str) -> Dict[str, Any]:
    sample = prompts.SAMPLE_DATA.get(prompt_type, {})
    return {k: (dict(v) if isinstance(v, dict) else v) for k, v in sample.items()}


def build_scoring_context(job, profile, custom_rules: Optional[str] = None) -> Dict[str, Any]:
    """Variables available to job_scoring templates for one (job, profile) pair."""
    return {
        "jobTitle": job.title or "",
        "jobDescription": job.description or "",
        "jobRequirements": job.requirements or job.description or "",
        "jobLocation": job.location or "",
        "resume": {
            "name": profile.name or "",
            "email": profile.email or "",
            "summary": profile.summary or "",
            "skills": ", ".join(profile.skills or []),
            "experience": " | ".join(profile.experience or []),
            "education": " | ".join(profile.education or []),
            "certifications": " | ".join(profile.certifications or []),
            "languages": " | ".join(profile.languages or []),
        },
        "customRules": custom_rules or "",
    }


def build_parsing_context(resume_text: str, custom_rules: Optional[str] = None) -> Dict[str, Any]:
    return {
        "resumeText": resume_text,
        "customRules": custom_rules or "",
    }
