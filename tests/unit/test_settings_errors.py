"""Unit tests for settings and the error hierarchy."""

import pytest

from config.errors import (
    AuthenticationError,
    DatabaseError,
    ErrorCode,
    NotFoundError,
    ValidationError,
)
from config.settings import Settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        for name in ("APP_ENV", "PORT", "ALLOWED_ORIGINS", "STRICT_PROJECT_TYPES", "LLM_MODEL"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.environment == "development"
        assert settings.port == 3001
        assert settings.allowed_origins == ["http://localhost:3000", "http://127.0.0.1:3000"]
        assert settings.strict_project_types is False
        assert settings.llm_model == "gemini-1.5-flash"
        assert settings.is_production is False

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "Production")
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("ALLOWED_ORIGINS", "https://yannova.be, https://www.yannova.be,")
        monkeypatch.setenv("STRICT_PROJECT_TYPES", "yes")

        settings = Settings()

        assert settings.is_production is True
        assert settings.port == 8080
        assert settings.allowed_origins == ["https://yannova.be", "https://www.yannova.be"]
        assert settings.strict_project_types is True

    def test_secrets_not_in_repr(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "geheim-123")

        assert "geheim-123" not in repr(Settings())

    def test_validate_outside_production(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "development")
        monkeypatch.delenv("SUPABASE_URL", raising=False)

        Settings().validate()

    def test_validate_production_requires_supabase(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "production")
        monkeypatch.delenv("SUPABASE_URL", raising=False)

        with pytest.raises(ValueError, match="SUPABASE_URL"):
            Settings().validate()

    def test_validate_production_requires_admin_token(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "production")
        monkeypatch.setenv("SUPABASE_URL", "https://yannova.supabase.co")
        monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "key")
        monkeypatch.setenv("GEMINI_API_KEY", "key")
        monkeypatch.delenv("ADMIN_API_TOKEN", raising=False)

        with pytest.raises(ValueError, match="ADMIN_API_TOKEN"):
            Settings().validate()


class TestErrors:
    """Tests for the error hierarchy."""

    def test_validation_error_carries_field(self):
        error = ValidationError("Size is required", field="size", code=ErrorCode.MISSING_FIELD)

        assert error.to_dict() == {
            "code": ErrorCode.MISSING_FIELD,
            "message": "Size is required",
            "details": {"field": "size"},
        }

    def test_authentication_error(self):
        assert AuthenticationError().code == ErrorCode.UNAUTHORIZED
        assert AuthenticationError().message == "Access token required"

    def test_not_found_error(self):
        error = NotFoundError("Quote", "QUO-1")

        assert error.message == "Quote not found"
        assert error.details == {"resource": "Quote", "id": "QUO-1"}

    def test_database_error_adds_table(self):
        error = DatabaseError(
            code=ErrorCode.DATABASE_ERROR,
            message="Supabase error: boom",
            table="/quotes",
            details={"status": 500}
        )

        assert error.details == {"status": 500, "table": "/quotes"}
        assert str(error) == "Supabase error: boom"
