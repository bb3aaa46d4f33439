"""Explicit field validation for registration and login payloads.

Each ``validate_*`` function returns a list of :class:`FieldError` entries,
empty when the payload is acceptable. The ``parse_*`` helpers raise
:class:`ValidationError` instead and hand back a typed request record.
"""
from __future__ import annotations

import re
from typing import Any, Iterable, List, Mapping

from .errors import ValidationError
from .models import FieldError, LoginRequest, RegistrationRequest

REGISTER_OBJECT = "registerRequest"
LOGIN_OBJECT = "loginRequest"

MSG_NOT_BLANK = "must not be blank"
MSG_NOT_STRING = "must be a string"
MSG_BAD_EMAIL = "must be a well-formed email address"
MSG_NUL_CHARACTER = "must not contain NUL characters"

_EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*$"
)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(value: str) -> bool:
    candidate = value.strip()
    if len(candidate) > 254 or ".." in candidate:
        return False
    return _EMAIL_PATTERN.match(candidate) is not None


def _not_blank(payload: Mapping[str, Any], object_name: str, fields: Iterable[str]) -> List[FieldError]:
    errors: List[FieldError] = []
    for field in fields:
        value = payload.get(field)
        if value is not None and not isinstance(value, str):
            errors.append(FieldError(object_name, field, value, MSG_NOT_STRING))
        elif value is None or not value.strip():
            errors.append(FieldError(object_name, field, value, MSG_NOT_BLANK))
    return errors


def _password_errors(payload: Mapping[str, Any], object_name: str) -> List[FieldError]:
    # bcrypt cannot hash NUL bytes; the plaintext is never echoed back.
    password = payload.get("password")
    if isinstance(password, str) and password.strip() and "\x00" in password:
        return [FieldError(object_name, "password", None, MSG_NUL_CHARACTER)]
    return []


def validate_registration(payload: Mapping[str, Any]) -> List[FieldError]:
    errors = _not_blank(payload, REGISTER_OBJECT, ("name", "email", "password"))
    email = payload.get("email")
    if isinstance(email, str) and email.strip() and not is_valid_email(email):
        errors.append(FieldError(REGISTER_OBJECT, "email", email, MSG_BAD_EMAIL))
    errors.extend(_password_errors(payload, REGISTER_OBJECT))
    return errors


def validate_login(payload: Mapping[str, Any]) -> List[FieldError]:
    errors = _not_blank(payload, LOGIN_OBJECT, ("email", "password"))
    errors.extend(_password_errors(payload, LOGIN_OBJECT))
    return errors


def parse_registration(payload: Mapping[str, Any]) -> RegistrationRequest:
    errors = validate_registration(payload)
    if errors:
        raise ValidationError(errors)
    return RegistrationRequest(
        name=payload["name"],
        email=payload["email"],
        password=payload["password"],
    )


def parse_login(payload: Mapping[str, Any]) -> LoginRequest:
    errors = validate_login(payload)
    if errors:
        raise ValidationError(errors)
    return LoginRequest(email=payload["email"], password=payload["password"])


__all__ = [
    "is_valid_email",
    "normalize_email",
    "parse_login",
    "parse_registration",
    "validate_login",
    "validate_registration",
]
