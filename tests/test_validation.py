from __future__ import annotations

import pytest

from authservice.errors import ValidationError
from authservice.models import LoginRequest, RegistrationRequest
from authservice.validation import (
    is_valid_email,
    normalize_email,
    parse_login,
    parse_registration,
    validate_login,
    validate_registration,
)


def test_valid_registration_has_no_errors() -> None:
    payload = {"name": "Ana", "email": "ana@x.com", "password": "secret123"}
    assert validate_registration(payload) == []
    assert parse_registration(payload) == RegistrationRequest("Ana", "ana@x.com", "secret123")


def test_missing_and_blank_fields_are_reported_in_order() -> None:
    errors = validate_registration({"name": "   ", "password": ""})

    assert [(e.field, e.message) for e in errors] == [
        ("name", "must not be blank"),
        ("email", "must not be blank"),
        ("password", "must not be blank"),
    ]
    assert all(e.object == "registerRequest" for e in errors)
    assert errors[0].rejected_value == "   "
    assert errors[1].rejected_value is None


def test_invalid_email_is_reported_with_rejected_value() -> None:
    errors = validate_registration({"name": "Ana", "email": "not-an-email", "password": "pw"})

    assert len(errors) == 1
    assert errors[0].field == "email"
    assert errors[0].rejected_value == "not-an-email"
    assert errors[0].message == "must be a well-formed email address"


def test_non_string_values_are_rejected() -> None:
    errors = validate_login({"email": 42, "password": ["pw"]})
    assert [(e.field, e.message) for e in errors] == [
        ("email", "must be a string"),
        ("password", "must be a string"),
    ]


@pytest.mark.parametrize("email", ["ana@x.com", "first.last+tag@sub.example.org", "a@b"])
def test_accepts_well_formed_addresses(email: str) -> None:
    assert is_valid_email(email)


@pytest.mark.parametrize("email", ["plain", "@x.com", "ana@", "ana@@x.com", "an a@x.com", "ana@x..com", "ana@-x.com"])
def test_rejects_malformed_addresses(email: str) -> None:
    assert not is_valid_email(email)


def test_parse_login_raises_validation_error() -> None:
    with pytest.raises(ValidationError) as excinfo:
        parse_login({"email": "ana@x.com"})
    assert [e.field for e in excinfo.value.errors] == ["password"]
    assert excinfo.value.message == "Validation error"

    assert parse_login({"email": "ana@x.com", "password": "pw"}) == LoginRequest("ana@x.com", "pw")


def test_normalize_email_strips_and_lowercases() -> None:
    assert normalize_email("  Ana@X.Com ") == "ana@x.com"


def test_nul_in_password_is_rejected_without_echoing_it() -> None:
    registration = validate_registration({"name": "A", "email": "a@x.com", "password": "ab\x00cd"})
    login = validate_login({"email": "a@x.com", "password": "\x00"})

    for errors, object_name in ((registration, "registerRequest"), (login, "loginRequest")):
        assert [(e.object, e.field, e.message) for e in errors] == [
            (object_name, "password", "must not contain NUL characters"),
        ]
        assert errors[0].rejected_value is None
