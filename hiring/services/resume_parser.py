import io
import logging
import os
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from hiring.core import prompts
from hiring.core.config import settings
from hiring.core.exceptions import ValidationFailedError
from hiring.services.ai_orchestrator import AIOrchestrator, AIDomain
from hiring.services.prompt_template import build_parsing_context, render_prompt

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".pdf", ".docx", ".txt"}
BULK_SEPARATOR = "---"


def _flatten(item: Any) -> str:
    if isinstance(item, dict):
        return ", ".join(str(v) for v in item.values() if v not in (None, "", []))
    return str(item).strip()


class ParsedResume(BaseModel):
    name: str = "Unknown"
    email: Optional[str] = None
    phone: Optional[str] = None
    summary: str = ""
    experience: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    education: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        if not v or not str(v).strip():
            return "Unknown"
        return str(v).strip()

    @field_validator("email", "phone", mode="before")
    @classmethod
    def _optional_text(cls, v):
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @field_validator("summary", mode="before")
    @classmethod
    def _summary(cls, v):
        return "" if v is None else str(v).strip()

    @field_validator("experience", "skills", "education", "certifications", "languages", mode="before")
    @classmethod
    def _string_list(cls, v):
        if v is None or v == "":
            return []
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        if not isinstance(v, list):
            v = [v]
        return [text for text in (_flatten(item) for item in v) if text]


def extract_text(filename: str, content: bytes) -> str:
    """Plain text from an uploaded .pdf, .docx or .txt resume."""
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationFailedError(
            f"Unsupported file type '{ext or filename}'",
            details={"allowed": sorted(ALLOWED_EXTENSIONS)}
        )

    try:
        if ext == ".pdf":
            from PyPDF2 import PdfReader

            reader = PdfReader(io.BytesIO(content))
            text = "\n".join((page.extract_text() or "") for page in reader.pages)
        elif ext == ".docx":
            import docx

            document = docx.Document(io.BytesIO(content))
            text = "\n".join(p.text for p in document.paragraphs)
        else:
            text = content.decode("utf-8", errors="ignore")
    except ValidationFailedError:
        raise
    except Exception as e:
        logger.error(f"Text extraction failed for {filename}: {e}")
        raise ValidationFailedError(f"Could not read {filename}")

    return text.strip()


def ensure_min_length(text: str):
    if not text or len(text.strip()) < settings.min_resume_length:
        raise ValidationFailedError(
            f"Resume text must be at least {settings.min_resume_length} characters"
        )


def split_bulk_text(text: str) -> List[str]:
    """Split a pasted batch on '---' lines, dropping chunks too short to be a resume."""
    chunks = [chunk.strip() for chunk in (text or "").split(BULK_SEPARATOR)]
    return [chunk for chunk in chunks if len(chunk) > settings.min_resume_length]


class ResumeParser:
    def __init__(self, db: Any = None, organization_id: Optional[int] = None):
        self.db = db
        self.organization_id = organization_id

    def parse(self, resume_text: str, custom_rules: Optional[str] = None) -> ParsedResume:
        system_template, user_template = self._templates()
        context = build_parsing_context(resume_text, custom_rules)
        data = AIOrchestrator.analyze_text(
            render_prompt(system_template, context),
            render_prompt(user_template, context),
            temperature=settings.ai.parsing_temperature,
            domain=AIDomain.RESUME_PARSING,
            organization_id=self.organization_id,
            db_session=self.db,
        )
        parsed = ParsedResume.model_validate(data)
        logger.info(f"Parsed resume for '{parsed.name}' ({len(parsed.skills)} skills)")
        return parsed

    def _templates(self):
        if self.db is not None:
            from hiring.services.prompt_service import PromptService

            system_prompt, user_prompt, _ = PromptService(self.db).resolve_templates(
                prompts.PROMPT_TYPE_RESUME_PARSING
            )
            return system_prompt, user_prompt
        default = prompts.DEFAULT_PROMPTS[prompts.PROMPT_TYPE_RESUME_PARSING]
        return default["system_prompt"], default["user_prompt"]
