"""Domain records shared by the authentication core."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class User:
    """Represents a user account stored in the authentication database."""

    id: int
    name: str
    email: str
    password_hash: str
    created_at: datetime


@dataclass(frozen=True)
class RegistrationRequest:
    name: str
    email: str
    password: str


@dataclass(frozen=True)
class LoginRequest:
    email: str
    password: str


@dataclass(frozen=True)
class FieldError:
    """A single rejected field in a request payload."""

    object: str
    field: str
    rejected_value: Any
    message: str


@dataclass(frozen=True)
class TokenClaims:
    """Decoded contents of a bearer token."""

    user_id: int
    email: str
    issued_at: datetime
    expires_at: datetime


__all__ = ["FieldError", "LoginRequest", "RegistrationRequest", "TokenClaims", "User"]
