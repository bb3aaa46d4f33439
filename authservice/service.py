"""Registration and login orchestration."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import timedelta
from typing import Optional

from .config import Settings
from .database import Database
from .errors import (
    EntityAlreadyExistsError,
    EntityNotFoundError,
    InvalidCredentialsError,
    ValidationError,
)
from .models import LoginRequest, RegistrationRequest, User
from .passwords import PasswordHasher
from .tokens import TokenIssuer
from .validation import normalize_email, validate_login, validate_registration

logger = logging.getLogger("authservice.service")

INVALID_CREDENTIALS_MESSAGE = "Invalid email/password"


class AuthService:
    """Register accounts and exchange credentials for bearer tokens.

    Failures are raised as typed errors and left for the transport layer to
    translate. Unknown emails and wrong passwords raise the same
    :class:`InvalidCredentialsError` so callers cannot tell them apart.
    """

    def __init__(self, database: Database, hasher: PasswordHasher, issuer: TokenIssuer) -> None:
        self._database = database
        self._hasher = hasher
        self._issuer = issuer

    def register(self, request: RegistrationRequest) -> None:
        errors = validate_registration(asdict(request))
        if errors:
            raise ValidationError(errors)

        email = normalize_email(request.email)
        if self._database.exists_by_email(email):
            raise EntityAlreadyExistsError("User", "email", email)

        password_hash = self._hasher.hash(request.password)
        user = self._database.save(request.name.strip(), email, password_hash)
        logger.info("Registered user %s", user.id)

    def login(self, request: LoginRequest) -> str:
        errors = validate_login(asdict(request))
        if errors:
            raise ValidationError(errors)

        user = self._database.find_by_email(request.email)
        if user is None or not self._hasher.verify(request.password, user.password_hash):
            logger.warning("Failed login attempt for %s", normalize_email(request.email))
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        if self._hasher.needs_rehash(user.password_hash):
            logger.info(
                "Password hash for user %s uses an outdated work factor "
                "(informational; stored hashes are not upgraded)",
                user.id,
            )

        logger.info("User %s logged in", user.id)
        return self._issuer.issue(user)

    def current_user(self, token: str) -> User:
        """Resolve the account a bearer token was issued for."""

        claims = self._issuer.verify(token)
        user = self._database.get_user(claims.user_id)
        if user is None:
            raise EntityNotFoundError("User", "id", claims.user_id)
        return user


def build_service(settings: Settings, *, database: Optional[Database] = None) -> AuthService:
    """Wire the store, hasher and issuer described by ``settings``."""

    if database is None:
        database = Database(settings.database_path)
        database.initialize()
    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    issuer = TokenIssuer(settings.token_secret, ttl=timedelta(seconds=settings.token_ttl_seconds))
    return AuthService(database, hasher, issuer)


__all__ = ["AuthService", "INVALID_CREDENTIALS_MESSAGE", "build_service"]
