"""Application factory wiring settings, store and service at startup."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from .api import create_app
from .config import Settings, load_settings
from .database import Database
from .service import build_service

logger = logging.getLogger("authservice.application")


def create_application(
    settings: Optional[Settings] = None,
    *,
    database: Optional[Database] = None,
) -> FastAPI:
    """Create the ASGI application; settings default to the environment."""

    if settings is None:
        settings = load_settings()

    service = build_service(settings, database=database)
    app = create_app(service, expose_errors=settings.expose_errors)
    app.state.settings = settings
    logger.info(
        "Authentication service ready (database=%s, token_ttl=%ss)",
        settings.database_path,
        settings.token_ttl_seconds,
    )
    return app


__all__ = ["create_application"]
