"""Yannova API configuration.

This package contains:
- settings: Environment variables and configuration
- errors: Custom exceptions and error codes
- logging_config: structlog setup
"""

from config.settings import settings
from config.errors import YannovaError
from config.logging_config import configure_logging

__all__ = [
    "settings",
    "YannovaError",
    "configure_logging",
]
