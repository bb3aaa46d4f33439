"""Password hashing and verification backed by passlib's bcrypt handler."""
from __future__ import annotations

from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from .config import DEFAULT_BCRYPT_ROUNDS


class PasswordHasher:
    """Salted one-way password hashing with a tunable work factor."""

    def __init__(self, *, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        self._rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
            bcrypt__min_rounds=rounds,
        )

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, password: str) -> str:
        if not password:
            raise ValueError("Password must not be empty")
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        """Return ``True`` if ``password`` matches ``hashed``; malformed hashes never match."""

        if not isinstance(password, str) or not isinstance(hashed, str) or not hashed:
            return False
        try:
            return self._context.verify(password, hashed)
        except (UnknownHashError, ValueError, TypeError):
            return False

    def needs_rehash(self, hashed: str) -> bool:
        try:
            return self._context.needs_update(hashed)
        except (UnknownHashError, ValueError, TypeError):
            return True


__all__ = ["PasswordHasher"]
