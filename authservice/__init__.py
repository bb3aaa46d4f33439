"""Minimal authentication backend: account registration and bearer tokens."""

from __future__ import annotations

from typing import Any

from .database import Database
from .config import Settings, load_settings, resolve_database_path


def create_application(*args: Any, **kwargs: Any):
    """Factory function that returns the HTTP application."""

    from .application import create_application as _create_application

    return _create_application(*args, **kwargs)


__all__ = [
    "Database",
    "Settings",
    "create_application",
    "load_settings",
    "resolve_database_path",
]
