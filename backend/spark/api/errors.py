"""Global error handlers ensuring request_id is included in JSON responses."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from spark.domain.identity.exceptions import (
    AuthFailed,
    ConnectionNotFound,
    DuplicateUsername,
    IdentityError,
    NoCurrentUser,
)
from spark.domain.proximity.exceptions import DecodeError


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-Id") or "unknown"


def identity_status(exc: IdentityError) -> int:
    if isinstance(exc, DuplicateUsername):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, (AuthFailed, NoCurrentUser)):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, ConnectionNotFound):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_400_BAD_REQUEST


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        payload = {"detail": exc.detail, "request_id": _request_id(request)}
        return JSONResponse(status_code=exc.status_code, content=payload, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        payload = {"detail": "validation_error", "errors": jsonable_encoder(exc.errors()), "request_id": _request_id(request)}
        return JSONResponse(status_code=422, content=payload)

    @app.exception_handler(IdentityError)
    async def identity_exc_handler(request: Request, exc: IdentityError):  # type: ignore[override]
        payload = {"detail": exc.reason, "request_id": _request_id(request)}
        return JSONResponse(status_code=identity_status(exc), content=payload)

    @app.exception_handler(DecodeError)
    async def decode_exc_handler(request: Request, exc: DecodeError):  # type: ignore[override]
        payload = {"detail": exc.reason, "request_id": _request_id(request)}
        return JSONResponse(status_code=422, content=payload)
