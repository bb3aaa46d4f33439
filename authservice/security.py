"""Bearer token authentication for protected routes."""
from __future__ import annotations

from fastapi import Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .errors import InvalidTokenError
from .models import User
from .service import AuthService


class BearerTokenAuth:
    """FastAPI dependency resolving the ``Authorization: Bearer`` header to a user."""

    def __init__(self, service: AuthService) -> None:
        self._service = service
        self._bearer = HTTPBearer(auto_error=False)

    async def __call__(self, request: Request) -> User:
        credentials: HTTPAuthorizationCredentials | None = await self._bearer(request)  # type: ignore[assignment]
        if credentials is None or credentials.scheme.lower() != "bearer":
            raise InvalidTokenError("Missing bearer token")

        token = credentials.credentials.strip()
        if not token:
            raise InvalidTokenError("Missing bearer token")
        return self._service.current_user(token)


__all__ = ["BearerTokenAuth"]
