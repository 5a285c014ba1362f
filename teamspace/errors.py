"""
teamspace/errors.py

Application errors with machine-readable error codes.

Every error is an HTTPException, so services can raise them directly and
FastAPI turns them into responses. The handlers registered in main.py add
the error_code next to the usual "detail" field.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from teamspace.config import IS_DEV


class ErrorCode(str, Enum):
    ACCESS_UNAUTHORIZED = "ACCESS_UNAUTHORIZED"

    AUTH_EMAIL_ALREADY_EXISTS = "AUTH_EMAIL_ALREADY_EXISTS"
    AUTH_INVALID_TOKEN = "AUTH_INVALID_TOKEN"
    AUTH_USER_NOT_FOUND = "AUTH_USER_NOT_FOUND"
    AUTH_NOT_FOUND = "AUTH_NOT_FOUND"
    AUTH_UNAUTHORIZED_ACCESS = "AUTH_UNAUTHORIZED_ACCESS"

    VALIDATION_ERROR = "VALIDATION_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class AppError(HTTPException):
    """Base class: an HTTP status plus a stable error code."""

    status_code_default = 500
    error_code_default = ErrorCode.INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, error_code: ErrorCode | None = None):
        super().__init__(status_code=self.status_code_default, detail=detail)
        self.error_code = error_code or self.error_code_default


class BadRequestError(AppError):
    status_code_default = 400
    error_code_default = ErrorCode.VALIDATION_ERROR


class UnauthorizedError(AppError):
    status_code_default = 401
    error_code_default = ErrorCode.ACCESS_UNAUTHORIZED


class ForbiddenError(AppError):
    status_code_default = 403
    error_code_default = ErrorCode.ACCESS_UNAUTHORIZED


class NotFoundError(AppError):
    status_code_default = 404
    error_code_default = ErrorCode.RESOURCE_NOT_FOUND


class InternalServerError(AppError):
    status_code_default = 500
    error_code_default = ErrorCode.INTERNAL_SERVER_ERROR


# ---------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if IS_DEV:
        print(f"[ERROR] {request.method} {request.url.path} -> {exc.status_code} {exc.error_code.value}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_code": exc.error_code.value},
    )


def _format_validation_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    # Drop the leading "body"/"query"/"path" segment from the location
    formatted = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        field = ".".join(loc[1:] if len(loc) > 1 else loc)
        formatted.append({"field": field, "message": err.get("msg", "Invalid value")})
    return formatted


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Validation failed",
            "error_code": ErrorCode.VALIDATION_ERROR.value,
            "errors": _format_validation_errors(exc.errors()),
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    print(f"[ERROR] Error occurred on PATH: {request.url.path}: {type(exc).__name__}: {exc}")
    return await app_error_handler(request, InternalServerError("Internal Server Error"))
