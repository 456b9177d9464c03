import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()

class AISettings(BaseModel):
    openrouter_api_key: Optional[str] = Field(default=os.getenv("OPENROUTER_API_KEY"))
    api_base_url: str = Field(default=os.getenv("AI_API_BASE_URL", "https://openrouter.ai/api/v1"))
    model_name: str = Field(default=os.getenv("AI_MODEL_NAME", "openai/gpt-4o-mini"))
    fallback_model: str = Field(default=os.getenv("AI_FALLBACK_MODEL", "google/gemini-2.0-flash-001"))
    kill_switch: bool = Field(default=os.getenv("AI_KILL_SWITCH", "false").lower() == "true")
    timeout_seconds: int = int(os.getenv("AI_TIMEOUT_SECONDS", "60"))
    scoring_temperature: float = 0.2
    parsing_temperature: float = 0.1
    max_tokens: int = 4000

class AirtableSettings(BaseModel):
    api_key: Optional[str] = Field(default=os.getenv("AIRTABLE_API_KEY"))
    base_id: Optional[str] = Field(default=os.getenv("AIRTABLE_BASE_ID"))
    table_name: str = Field(default=os.getenv("AIRTABLE_TABLE_NAME", "Candidates"))
    api_url: str = "https://api.airtable.com/v0"
    field_cache_ttl_seconds: int = int(os.getenv("AIRTABLE_FIELD_CACHE_TTL", "300"))

    @property
    def enabled(self) -> bool:
        return bool(self.api_key and self.base_id)

class Config(BaseModel):
    app_name: str = "Hiring Intelligence API"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./hiring.db")

    # Auth
    secret_key: str = os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # External collaborators
    ai: AISettings = AISettings()
    airtable: AirtableSettings = AirtableSettings()

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # CORS - comma-separated origins loaded from env.
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000",
            ).split(",")
            if o.strip()
        ]
    )

    # Scoring
    default_score_threshold: int = int(os.getenv("DEFAULT_SCORE_THRESHOLD", "30"))
    min_resume_length: int = 50

    # Optional first super admin, created at startup when both are set
    super_admin_email: Optional[str] = os.getenv("SUPER_ADMIN_EMAIL")
    super_admin_password: Optional[str] = os.getenv("SUPER_ADMIN_PASSWORD")

    # Rate limiting
    rate_limit_enabled: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    resume_process_rate_limit: str = os.getenv("RESUME_PROCESS_RATE_LIMIT", "20/minute")

settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if "dev-only" in settings.secret_key:
        raise RuntimeError(
            "FATAL: SECRET_KEY must be set for non-development environments. "
            "Set it as an environment variable."
        )
elif "dev-only" in settings.secret_key:
    _logger.warning("Using insecure default SECRET_KEY, only acceptable in development.")
