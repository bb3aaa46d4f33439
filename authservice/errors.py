"""Typed failures raised by the authentication core."""
from __future__ import annotations

from typing import List, Optional

from .models import FieldError


class AuthServiceError(Exception):
    """Base class for failures the transport layer knows how to translate."""

    default_message = "Authentication service error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message if message is not None else self.default_message
        super().__init__(self.message)


class ValidationError(AuthServiceError):
    """Raised when a request payload is missing or malformed."""

    default_message = "Validation error"

    def __init__(self, errors: List[FieldError], message: Optional[str] = None) -> None:
        super().__init__(message)
        self.errors = list(errors)


class InvalidCredentialsError(AuthServiceError):
    default_message = "Invalid Credentials"


class InvalidTokenError(AuthServiceError):
    default_message = "Invalid or expired token"


class UnprocessableEntityError(AuthServiceError):
    default_message = "Unprocessable Entity"


class EntityAlreadyExistsError(AuthServiceError):
    """Raised when a unique key is already taken."""

    def __init__(self, entity: str, field: str, value: object) -> None:
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f"{entity} already exists with {field}: {value}")


class EntityNotFoundError(AuthServiceError):
    def __init__(self, entity: str, field: str, value: object) -> None:
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f"{entity} not found with {field}: {value}")


class ConfigurationError(RuntimeError):
    """Raised when the service settings are invalid."""


__all__ = [
    "AuthServiceError",
    "ConfigurationError",
    "EntityAlreadyExistsError",
    "EntityNotFoundError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "UnprocessableEntityError",
    "ValidationError",
]
