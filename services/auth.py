"""Admin authentication for the back-office routes.

A single static bearer token (ADMIN_API_TOKEN) shared with the admin
dashboard.
"""

import hmac
from functools import wraps
from typing import Callable, Optional

import structlog
from flask import current_app, request

from config.errors import AuthenticationError

logger = structlog.get_logger()


def extract_bearer_token(header: Optional[str]) -> Optional[str]:
    """Token from an 'Authorization: Bearer <token>' header value."""
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def verify_admin_token(token: Optional[str], expected: Optional[str]) -> None:
    """Check a presented token against the configured one.

    Raises:
        AuthenticationError: If the token is missing, wrong, or no token is configured.
    """
    if not token:
        raise AuthenticationError("Access token required")
    if not expected or not hmac.compare_digest(token.encode(), expected.encode()):
        raise AuthenticationError("Invalid or expired token")


def require_admin(view: Callable) -> Callable:
    """Flask view decorator that only lets the admin token through."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        token = extract_bearer_token(request.headers.get("Authorization"))
        try:
            verify_admin_token(token, current_app.config.get("ADMIN_API_TOKEN"))
        except AuthenticationError:
            logger.warning("admin_auth_rejected", path=request.path, token_present=bool(token))
            raise
        return view(*args, **kwargs)

    return wrapper
