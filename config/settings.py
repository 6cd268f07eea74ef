"""Yannova API configuration settings.

Loads configuration from environment variables with sensible defaults.
A local .env file is honoured for development; production injects the same
variables through the hosting environment.
"""

import os
from typing import List, Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load .env file for local development (Supabase project, Gemini key, etc.)
load_dotenv()


def _get_bool(name: str, default: str = "false") -> bool:
    """Read a boolean flag from the environment."""
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _get_origins() -> List[str]:
    """Get allowed CORS origins from a comma separated env var."""
    raw = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    # Runtime
    environment: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "3001")))
    allowed_origins: List[str] = field(default_factory=_get_origins)

    # Supabase (PostgREST) Configuration
    supabase_url: Optional[str] = field(default_factory=lambda: os.getenv("SUPABASE_URL"))
    supabase_service_role_key: Optional[str] = field(
        default_factory=lambda: os.getenv("SUPABASE_SERVICE_ROLE_KEY"),
        repr=False,
    )
    supabase_timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("SUPABASE_TIMEOUT_SECONDS", "10"))
    )

    # Gemini Configuration
    gemini_api_key: Optional[str] = field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY"),
        repr=False,
    )
    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "gemini-1.5-flash"))
    llm_temperature: float = field(default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.7")))
    llm_max_output_tokens: int = field(
        default_factory=lambda: int(os.getenv("LLM_MAX_OUTPUT_TOKENS", "2048"))
    )

    # Admin access
    admin_api_token: Optional[str] = field(
        default_factory=lambda: os.getenv("ADMIN_API_TOKEN"),
        repr=False,
    )

    # Quote generation: reject unknown project types instead of pricing them
    # with the default rate.
    strict_project_types: bool = field(default_factory=lambda: _get_bool("STRICT_PROJECT_TYPES"))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment.lower() == "production"

    @property
    def supabase_configured(self) -> bool:
        """Check if Supabase credentials are present."""
        return bool(self.supabase_url and self.supabase_service_role_key)

    def validate(self) -> None:
        """Validate required settings are present.

        Raises:
            ValueError: If required settings are missing.
        """
        if not self.is_production:
            return
        if not self.supabase_configured:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required in production")
        if not self.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is required in production")
        if not self.admin_api_token:
            raise ValueError("ADMIN_API_TOKEN is required in production")


# Singleton settings instance
settings = Settings()
