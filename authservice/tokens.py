"""Signed bearer tokens for authenticated users.

Tokens are Fernet tokens (AES-128-CBC plus HMAC-SHA256) wrapping a small
JSON payload with the user id, email, issued-at and expiry timestamps. The
Fernet key is derived from the process-wide secret, so any holder of the
secret can verify a token without a server-side lookup.
"""
from __future__ import annotations

import base64
import hashlib
import json
import re
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from cryptography.fernet import Fernet, InvalidToken

from .config import DEFAULT_TOKEN_TTL_SECONDS
from .errors import InvalidTokenError
from .models import TokenClaims, User

Clock = Callable[[], datetime]

# Fernet's decoder ignores trailing bytes after padding; only canonical
# url-safe base64 is accepted.
_TOKEN_PATTERN = re.compile(r"[A-Za-z0-9_-]+={0,2}")


def _is_canonical(token: str) -> bool:
    return len(token) % 4 == 0 and _TOKEN_PATTERN.fullmatch(token) is not None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _build_cipher(secret: str) -> Fernet:
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    key = base64.urlsafe_b64encode(digest)
    return Fernet(key)


class TokenIssuer:
    """Issue and verify stateless bearer tokens."""

    def __init__(
        self,
        secret: str,
        *,
        ttl: timedelta = timedelta(seconds=DEFAULT_TOKEN_TTL_SECONDS),
        clock: Optional[Clock] = None,
    ) -> None:
        if not secret:
            raise ValueError("A token signing secret must be provided")
        if ttl <= timedelta(0):
            raise ValueError("Token TTL must be positive")
        self._cipher = _build_cipher(secret)
        self._ttl = ttl
        self._clock = clock or _utcnow

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, user: User) -> str:
        issued_at = self._clock()
        expires_at = issued_at + self._ttl
        payload = {
            "sub": user.id,
            "email": user.email,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        token = self._cipher.encrypt_at_time(raw, int(issued_at.timestamp()))
        return token.decode("ascii")

    def verify(self, token: str) -> TokenClaims:
        """Return the claims carried by ``token`` or raise :class:`InvalidTokenError`."""

        if not token or not _is_canonical(token):
            raise InvalidTokenError()
        try:
            raw = self._cipher.decrypt(token.encode("ascii"))
            payload = json.loads(raw)
            user_id = int(payload["sub"])
            email = str(payload["email"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        except (InvalidToken, UnicodeEncodeError, ValueError, KeyError, TypeError) as exc:
            raise InvalidTokenError() from exc

        if expires_at <= self._clock():
            raise InvalidTokenError("Token has expired")

        return TokenClaims(user_id=user_id, email=email, issued_at=issued_at, expires_at=expires_at)


__all__ = ["TokenIssuer"]
