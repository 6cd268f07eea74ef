#!/usr/bin/env python3
"""Local development server for the Yannova API.

Usage:
    python serve_local.py

Reads configuration from the environment (or a local .env file) and starts
the Flask development server on PORT (default 3001). Without Supabase
credentials the calculation endpoints still work; endpoints that need the
database answer with DATABASE_NOT_CONFIGURED.
"""

import structlog

from config.logging_config import configure_logging
from config.settings import settings
from main import create_app

logger = structlog.get_logger()


def main() -> None:
    configure_logging(settings.log_level, json_output=settings.is_production)
    settings.validate()

    app = create_app()

    logger.info(
        "dev_server_starting",
        port=settings.port,
        environment=settings.environment,
        supabase_configured=settings.supabase_configured,
        gemini_configured=bool(settings.gemini_api_key),
        allowed_origins=settings.allowed_origins,
    )
    app.run(host="127.0.0.1", port=settings.port, debug=not settings.is_production)


if __name__ == "__main__":
    main()
