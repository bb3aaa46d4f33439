"""Configuration management for the authentication service."""
from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigurationError

logger = logging.getLogger("authservice.config")

DEFAULT_TOKEN_TTL_SECONDS = 3600
DEFAULT_BCRYPT_ROUNDS = 12
MIN_BCRYPT_ROUNDS = 4
MAX_BCRYPT_ROUNDS = 31

_ENV_KEYS = {
    "database_path": "AUTH_DB_PATH",
    "token_secret": "AUTH_TOKEN_SECRET",
    "token_ttl_seconds": "AUTH_TOKEN_TTL_SECONDS",
    "bcrypt_rounds": "AUTH_BCRYPT_ROUNDS",
    "expose_errors": "AUTH_EXPOSE_ERRORS",
}


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the user database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "auth.sqlite3").resolve(strict=False)


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"", "0", "false", "no", "off"}:
        return False
    raise ConfigurationError(f"Invalid boolean value {value!r} for setting {name}")


def _parse_int(name: str, value: Any, *, minimum: int, maximum: Optional[int] = None) -> int:
    try:
        parsed = int(str(value).strip())
    except ValueError as exc:
        raise ConfigurationError(f"Invalid integer value {value!r} for setting {name}") from exc
    if parsed < minimum or (maximum is not None and parsed > maximum):
        upper = f"..{maximum}" if maximum is not None else " or greater"
        raise ConfigurationError(f"Setting {name} must be in range {minimum}{upper}, got {parsed}")
    return parsed


@dataclass(frozen=True)
class Settings:
    """Immutable runtime settings, resolved once at startup."""

    database_path: Path
    token_secret: str = field(repr=False)
    token_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS
    expose_errors: bool = False

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Settings":
        """Create :class:`Settings` from raw values, applying defaults."""

        unknown = set(data.keys()) - set(_ENV_KEYS.keys())
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        secret = data.get("token_secret")
        if secret is None or not str(secret).strip():
            logger.warning(
                "No token secret configured; generated an ephemeral one. "
                "Tokens will not survive a restart."
            )
            secret = secrets.token_urlsafe(32)

        raw_db = data.get("database_path")
        return Settings(
            database_path=resolve_database_path(str(raw_db) if raw_db else None),
            token_secret=str(secret),
            token_ttl_seconds=_parse_int(
                "token_ttl_seconds",
                data.get("token_ttl_seconds", DEFAULT_TOKEN_TTL_SECONDS),
                minimum=1,
            ),
            bcrypt_rounds=_parse_int(
                "bcrypt_rounds",
                data.get("bcrypt_rounds", DEFAULT_BCRYPT_ROUNDS),
                minimum=MIN_BCRYPT_ROUNDS,
                maximum=MAX_BCRYPT_ROUNDS,
            ),
            expose_errors=_parse_bool("expose_errors", data.get("expose_errors", False)),
        )


def load_config_file(config_path: Path) -> Dict[str, Any]:
    """Load settings overrides from a YAML file."""
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")
    section = raw.get("auth", raw)
    if not isinstance(section, dict):
        raise ConfigurationError("The 'auth' section of the configuration file must be a mapping")
    return dict(section)


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    *,
    config_path: Optional[Path] = None,
) -> Settings:
    """Resolve settings from defaults, an optional YAML file and the environment."""

    environ = os.environ if env is None else env
    values: Dict[str, Any] = {}

    if config_path is None and environ.get("AUTH_CONFIG_PATH"):
        config_path = Path(environ["AUTH_CONFIG_PATH"]).expanduser()
    if config_path is not None:
        values.update(load_config_file(config_path))

    for key, env_name in _ENV_KEYS.items():
        raw = environ.get(env_name)
        if raw is not None and raw.strip() != "":
            values[key] = raw

    return Settings.from_dict(values)


__all__ = ["Settings", "load_config_file", "load_settings", "resolve_database_path"]
