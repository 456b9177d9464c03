"""
Centralized AI Prompt Repository
- Built-in defaults used when no prompt is configured in the database
- Variable schemas and preview sample data per prompt type
"""

from typing import Any, Dict, List

PROMPT_TYPE_JOB_SCORING = "job_scoring"
PROMPT_TYPE_RESUME_PARSING = "resume_parsing"

PROMPT_TYPES: List[Dict[str, str]] = [
    {
        "value": PROMPT_TYPE_JOB_SCORING,
        "label": "Job Scoring",
        "description": "Scores a parsed resume against a job posting",
    },
    {
        "value": PROMPT_TYPE_RESUME_PARSING,
        "label": "Resume Parsing",
        "description": "Extracts a structured profile from raw resume text",
    },
]

# --- VARIABLE SCHEMAS ---
JOB_SCORING_VARIABLES: List[Dict[str, Any]] = [
    {"name": "jobTitle", "description": "Job posting title", "example": "Senior Software Engineer", "required": True},
    {"name": "jobDescription", "description": "Full job description", "example": "We are looking for...", "required": True},
    {"name": "jobRequirements", "description": "Job requirements and qualifications", "example": "5+ years Python...", "required": True},
    {"name": "resume.name", "description": "Candidate's full name", "example": "Jane Doe", "required": True},
    {"name": "resume.summary", "description": "Candidate's professional summary", "example": "Backend engineer with...", "required": False},
    {"name": "resume.skills", "description": "Comma-separated list of skills", "example": "Python, PostgreSQL, AWS", "required": False},
    {"name": "resume.experience", "description": "Pipe-separated work history", "example": "Engineer at Acme (2019-2023) | ...", "required": False},
    {"name": "resume.education", "description": "Pipe-separated education entries", "example": "BSc Computer Science, MIT (2018)", "required": False},
    {"name": "resume.certifications", "description": "Pipe-separated certifications", "example": "AWS Solutions Architect", "required": False},
    {"name": "resume.languages", "description": "Pipe-separated languages", "example": "English (Native) | Arabic (Fluent)", "required": False},
    {"name": "customRules", "description": "Organization-specific screening rules", "example": "Must hold a valid work permit", "required": False},
]

RESUME_PARSING_VARIABLES: List[Dict[str, Any]] = [
    {"name": "resumeText", "description": "Raw text extracted from the resume", "example": "Jane Doe\njane@example.com\n...", "required": True},
    {"name": "customRules", "description": "Organization-specific parsing instructions", "example": "Highlight security clearances", "required": False},
]

VARIABLE_SCHEMAS: Dict[str, List[Dict[str, Any]]] = {
    PROMPT_TYPE_JOB_SCORING: JOB_SCORING_VARIABLES,
    PROMPT_TYPE_RESUME_PARSING: RESUME_PARSING_VARIABLES,
}

# --- PREVIEW SAMPLE DATA ---
SAMPLE_DATA: Dict[str, Dict[str, Any]] = {
    PROMPT_TYPE_JOB_SCORING: {
        "jobTitle": "Senior Software Engineer",
        "jobDescription": "Build and operate the backend services behind our hiring platform.",
        "jobRequirements": "5+ years of Python, REST API design, SQL databases, cloud deployment.",
        "resume": {
            "name": "Jane Doe",
            "summary": "Backend engineer with 7 years of experience building data-heavy web services.",
            "skills": "Python, FastAPI, PostgreSQL, AWS, Docker",
            "experience": "Senior Engineer at Acme (2020-2024): led API platform | Engineer at Beta (2017-2020)",
            "education": "BSc Computer Science, University of Toronto (2017)",
            "certifications": "AWS Certified Developer",
            "languages": "English (Native) | French (Intermediate)",
        },
        "customRules": "Candidates must have production experience with relational databases.",
    },
    PROMPT_TYPE_RESUME_PARSING: {
        "resumeText": (
            "Jane Doe\njane.doe@example.com | +1 555 0100\n"
            "Senior Engineer, Acme (2020-2024)\nSkills: Python, FastAPI, PostgreSQL"
        ),
        "customRules": "Extract security clearances as certifications.",
    },
}

# --- RESUME PARSING ---
RESUME_PARSING_SYSTEM = """You are an expert resume analyzer. Extract structured information from the resume text.

Custom parsing instructions (may be empty): {{customRules}}

Respond with JSON in exactly this format:
{
  "name": "Full Name",
  "email": "email@example.com",
  "phone": "+1234567890",
  "summary": "Brief professional summary (2-3 sentences)",
  "experience": ["Job title at Company (2020-2023): Description"],
  "skills": ["Skill 1", "Skill 2"],
  "education": ["Degree in Field from University (Year)"],
  "certifications": ["Professional certification"],
  "languages": ["English (Native)"]
}

If a field is missing use an empty string for strings or an empty array for arrays."""

RESUME_PARSING_USER = "Analyze this resume and extract structured information:\n\n{{resumeText}}"

# --- JOB SCORING ---
JOB_SCORING_SYSTEM = """You are an expert hiring manager evaluating how well a candidate's resume matches a job posting.
Every claim must be backed by resume evidence. Anything missing or implied is treated as missing.
Apply the organization's screening rules exactly as written. If a rule defines a disqualification
condition and the candidate triggers it, set "disqualified": true and explain which rule was violated.

Return ONLY a JSON object with this structure:
{
  "overallScore": 0-100,
  "technicalSkillsScore": 0-100,
  "experienceScore": 0-100,
  "culturalFitScore": 0-100,
  "matchSummary": "2-4 factual sentences",
  "strengthsHighlights": ["strength with resume evidence"],
  "improvementAreas": ["missing requirement with impact"],
  "disqualified": false,
  "disqualificationReason": null,
  "redFlags": [{"issue": "", "evidence": "", "reason": ""}],
  "sectionA": {"score": 0-30, "explanation": "Skills match"},
  "sectionB": {"score": 0-25, "explanation": "Experience relevance"},
  "sectionC": {"score": 0-20, "explanation": "Impact, projects and achievements"},
  "sectionD": {"score": 0-10, "explanation": "Education and qualifications"},
  "sectionE": {"score": 0-10, "explanation": "Logistics and availability"},
  "sectionF": {"score": -5 to 5, "explanation": "Bonus or penalty"},
  "executiveSummary": {"oneLiner": "", "fitScore": "EXCELLENT|GOOD|FAIR|POOR|MISMATCH", "hiringUrgency": "", "competitivePosition": ""},
  "verdict": {"decision": "INTERVIEW|CONSIDER|REVIEW|PASS", "confidence": "HIGH|MEDIUM|LOW", "riskLevel": "LOW|MEDIUM|HIGH", "summary": "", "topStrength": "", "topConcern": "", "dealbreakers": []},
  "domainAnalysis": {},
  "interviewRecommendations": {"mustExplore": [], "redFlagQuestions": [], "technicalValidation": []}
}"""

JOB_SCORING_USER = """JOB TITLE: {{jobTitle}}

JOB DESCRIPTION:
{{jobDescription}}

JOB REQUIREMENTS:
{{jobRequirements}}

CANDIDATE PROFILE:
Name: {{resume.name}}
Summary: {{resume.summary}}
Skills: {{resume.skills}}
Experience: {{resume.experience}}
Education: {{resume.education}}
Certifications: {{resume.certifications}}
Languages: {{resume.languages}}

SCREENING RULES:
{{customRules}}

Return only the JSON object."""

DEFAULT_PROMPTS: Dict[str, Dict[str, str]] = {
    PROMPT_TYPE_JOB_SCORING: {
        "name": "Default Job Scoring",
        "description": "Evidence-based candidate to job match scoring",
        "system_prompt": JOB_SCORING_SYSTEM,
        "user_prompt": JOB_SCORING_USER,
    },
    PROMPT_TYPE_RESUME_PARSING: {
        "name": "Default Resume Parsing",
        "description": "Structured profile extraction from resume text",
        "system_prompt": RESUME_PARSING_SYSTEM,
        "user_prompt": RESUME_PARSING_USER,
    },
}
