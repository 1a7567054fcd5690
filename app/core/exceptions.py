"""
Auth error taxonomy and global exception handlers.

Stores raise structured errors only; these handlers decide what a client
gets to see and keep stack traces and driver messages server-side.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


# ── Error taxonomy ──────────────────────────────────────────────────
class DealershipError(Exception):
    """Base class for errors that map to a structured client response."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)

    def to_content(self) -> dict[str, Any]:
        return {"detail": self.message, "success": False}


class ValidationError(DealershipError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation error"

    def __init__(self, errors: list[dict[str, str]]) -> None:
        super().__init__()
        self.errors = errors

    @classmethod
    def from_pydantic(cls, raw_errors: Any) -> "ValidationError":
        errors = []
        for err in raw_errors:
            msg = err.get("msg", "Invalid value")
            if err.get("type") == "json_invalid":
                # loc carries a character offset here, not a field
                errors.append({"field": "body", "message": msg})
                continue
            loc = [str(part) for part in err.get("loc", ()) if part != "body"]
            if msg.startswith("Value error, "):
                msg = msg[len("Value error, "):]
            errors.append({"field": ".".join(loc) or "body", "message": msg})
        return cls(errors)

    def to_content(self) -> dict[str, Any]:
        return {**super().to_content(), "errors": self.errors}


class ConflictError(DealershipError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, field: str) -> None:
        self.field = field
        if field == "email":
            super().__init__("Email already in use")
        else:
            super().__init__("Username already exists")

    def to_content(self) -> dict[str, Any]:
        return {**super().to_content(), "field": self.field}


class AuthenticationError(DealershipError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid email or password"


class RoleMismatchError(DealershipError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Invalid role for this user"


class NotAuthenticatedError(DealershipError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Not authenticated"


class AccessDeniedError(DealershipError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Access denied"


class NotFoundError(DealershipError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class StorageError(DealershipError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"


class UniquenessViolation(Exception):
    """Raised by the credential store when a unique column collides."""

    def __init__(self, field: str | None = None) -> None:
        self.field = field
        super().__init__(f"unique constraint violated ({field or 'unknown column'})")


# ── Handlers ────────────────────────────────────────────────────────
async def _dealership_error_handler(_request: Request, exc: DealershipError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


async def _request_validation_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    err = ValidationError.from_pydantic(exc.errors())
    return JSONResponse(status_code=err.status_code, content=err.to_content())


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(DealershipError, _dealership_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
