"""FastAPI transport for the authentication service.

Routes decode the JSON body, run the explicit validators and call
:class:`AuthService`. Every typed failure is turned into the JSON error
envelope in one place, :func:`error_response`, using ``_STATUS_BY_ERROR``.
"""
from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Type

import anyio
from fastapi import APIRouter, Depends, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import (
    AuthServiceError,
    EntityAlreadyExistsError,
    EntityNotFoundError,
    InvalidCredentialsError,
    InvalidTokenError,
    UnprocessableEntityError,
    ValidationError,
)
from .models import FieldError, User
from .security import BearerTokenAuth
from .service import AuthService
from .validation import parse_login, parse_registration

MALFORMED_BODY_MESSAGE = "Malformed request body"
UNEXPECTED_ERROR_MESSAGE = "Unexpected error"

_STATUS_BY_ERROR: Dict[Type[AuthServiceError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    InvalidCredentialsError: status.HTTP_401_UNAUTHORIZED,
    InvalidTokenError: status.HTTP_401_UNAUTHORIZED,
    EntityNotFoundError: status.HTTP_404_NOT_FOUND,
    EntityAlreadyExistsError: status.HTTP_409_CONFLICT,
    UnprocessableEntityError: status.HTTP_409_CONFLICT,
}


class ApiValidationError(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    object: str
    field: str
    rejected_value: Any = Field(default=None, alias="rejectedValue")
    message: str


class ApiError(BaseModel):
    status: int
    message: str
    errors: Optional[List[ApiValidationError]] = None


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    created_at: datetime


def status_for(exc: AuthServiceError) -> int:
    for cls in type(exc).__mro__:
        code = _STATUS_BY_ERROR.get(cls)
        if code is not None:
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _sub_errors(errors: List[FieldError]) -> List[ApiValidationError]:
    return [
        ApiValidationError(
            object=error.object,
            field=error.field,
            rejected_value=error.rejected_value,
            message=error.message,
        )
        for error in errors
    ]


def _envelope(api_error: ApiError) -> JSONResponse:
    content = api_error.model_dump(mode="json", by_alias=True)
    if api_error.errors is None:
        content.pop("errors", None)
    return JSONResponse(status_code=api_error.status, content=content)


def error_response(exc: AuthServiceError) -> JSONResponse:
    """Translate a typed service failure into the wire envelope."""

    api_error = ApiError(status=status_for(exc), message=exc.message)
    if isinstance(exc, ValidationError):
        api_error.errors = _sub_errors(exc.errors)
    return _envelope(api_error)


async def _read_json_object(request: Request) -> Dict[str, Any]:
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError([], MALFORMED_BODY_MESSAGE) from exc
    if not isinstance(payload, dict):
        raise ValidationError([], MALFORMED_BODY_MESSAGE)
    return payload


def _user_to_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, name=user.name, email=user.email, created_at=user.created_at)


def create_app(service: AuthService, *, expose_errors: bool = False) -> FastAPI:
    """Build the HTTP application around an already wired :class:`AuthService`."""

    app = FastAPI(
        title="Authentication Service",
        description="Account registration and bearer token issuance",
        version="1.0.0",
    )
    app.state.service = service
    auth = BearerTokenAuth(service)

    router = APIRouter(prefix="/api/v1/auth", tags=["auth"])

    @router.post("/register")
    async def register(request: Request) -> Response:
        registration = parse_registration(await _read_json_object(request))
        # Hashing is CPU-bound; run it on a worker thread.
        await anyio.to_thread.run_sync(service.register, registration)
        return Response(status_code=status.HTTP_200_OK)

    @router.post("/login", response_class=PlainTextResponse)
    async def login(request: Request) -> PlainTextResponse:
        credentials = parse_login(await _read_json_object(request))
        token = await anyio.to_thread.run_sync(service.login, credentials)
        return PlainTextResponse(token)

    @router.get("/me", response_model=UserResponse)
    async def me(current_user: User = Depends(auth)) -> UserResponse:
        return _user_to_response(current_user)

    app.include_router(router)

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.exception_handler(AuthServiceError)
    async def handle_service_error(_: Request, exc: AuthServiceError) -> JSONResponse:
        return error_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _envelope(ApiError(status=exc.status_code, message=str(exc.detail)))

    @app.exception_handler(Exception)
    async def handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
        # ServerErrorMiddleware re-raises after this returns; the server logs the traceback.
        message = str(exc) if expose_errors and str(exc) else UNEXPECTED_ERROR_MESSAGE
        return _envelope(ApiError(status=status.HTTP_500_INTERNAL_SERVER_ERROR, message=message))

    return app


__all__ = ["ApiError", "ApiValidationError", "UserResponse", "create_app", "error_response", "status_for"]
