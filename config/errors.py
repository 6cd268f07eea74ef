"""Yannova API error handling.

Custom exceptions and error codes shared by services and HTTP handlers.
"""

from typing import Optional, Dict, Any


# Error Codes
class ErrorCode:
    """Error code constants."""

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_FIELD = "INVALID_FIELD"
    UNKNOWN_PROJECT_TYPE = "UNKNOWN_PROJECT_TYPE"

    # Auth Errors
    UNAUTHORIZED = "UNAUTHORIZED"

    # Lookup Errors
    NOT_FOUND = "NOT_FOUND"

    # Database (Supabase) Errors
    DATABASE_ERROR = "DATABASE_ERROR"
    DATABASE_WRITE_FAILED = "DATABASE_WRITE_FAILED"
    DATABASE_NOT_CONFIGURED = "DATABASE_NOT_CONFIGURED"

    # LLM Errors
    LLM_ERROR = "LLM_ERROR"
    LLM_RATE_LIMIT = "LLM_RATE_LIMIT"
    LLM_CONTEXT_TOO_LONG = "LLM_CONTEXT_TOO_LONG"

    # Generic
    QUOTE_GENERATION_FAILED = "QUOTE_GENERATION_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class YannovaError(Exception):
    """Base exception for Yannova API errors.

    Provides structured error information for API responses.

    Attributes:
        code: Error code from ErrorCode constants
        message: Human-readable error message
        details: Additional error context
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for API response.

        Returns:
            Dictionary with code, message, and details.
        """
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(YannovaError):
    """Validation-specific error."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        code: str = ErrorCode.VALIDATION_ERROR,
        details: Optional[Dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            details={**(details or {}), "field": field} if field else details
        )
        self.field = field


class AuthenticationError(YannovaError):
    """Missing or invalid admin credentials."""

    def __init__(self, message: str = "Access token required"):
        super().__init__(code=ErrorCode.UNAUTHORIZED, message=message)


class NotFoundError(YannovaError):
    """Requested record does not exist."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message=f"{resource} not found",
            details={"resource": resource, "id": identifier}
        )
        self.resource = resource
        self.identifier = identifier


class DatabaseError(YannovaError):
    """Supabase-specific error."""

    def __init__(
        self,
        code: str,
        message: str,
        table: Optional[str] = None,
        details: Optional[Dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            details={**(details or {}), "table": table} if table else details
        )
        self.table = table


class LLMError(YannovaError):
    """Gemini / LangChain generation error."""

    def __init__(
        self,
        message: str,
        code: str = ErrorCode.LLM_ERROR,
        details: Optional[Dict] = None
    ):
        super().__init__(code=code, message=message, details=details)
