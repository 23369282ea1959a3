# pricebook/core/error_handlers.py

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from pricebook.constants.error_codes import ErrorCode
from pricebook.core.exceptions import AppException
from pricebook.utils.response import error_payload

logger = logging.getLogger(__name__)


def _respond(status_code: int, message: str, error_code: ErrorCode, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_payload(message, error_code, details),
    )


# -------------------------
# APP EXCEPTIONS
# -------------------------
async def app_exception_handler(request: Request, exc: AppException):
    if exc.status_code >= 500:
        logger.error(
            "Request failed",
            extra={"path": request.url.path, "error_code": exc.error_code, "details": exc.details},
        )
    return _respond(exc.status_code, exc.message, exc.error_code, exc.details)


# -------------------------
# REQUEST VALIDATION
# -------------------------
def _field_path(loc) -> str:
    # drop the "body" / "query" prefix FastAPI puts in front of the field
    parts = [str(p) for p in loc]
    if parts and parts[0] in {"body", "query", "path", "header"}:
        parts = parts[1:]
    return ".".join(parts) or "__root__"


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": _field_path(err.get("loc", ())), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return _respond(422, "Invalid request data", ErrorCode.VALIDATION_ERROR, details)


# -------------------------
# HTTP EXCEPTIONS (routing, method not allowed)
# -------------------------
HTTP_STATUS_TO_ERROR_CODE = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.PERMISSION_DENIED,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION_ERROR,
    503: ErrorCode.SERVICE_UNAVAILABLE,
}


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    error_code = HTTP_STATUS_TO_ERROR_CODE.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    return _respond(exc.status_code, str(exc.detail), error_code)


# -------------------------
# DB INTEGRITY (outside the data service)
# -------------------------
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.exception("DB integrity error", extra={"path": request.url.path})
    return _respond(409, "Database constraint violation", ErrorCode.CONFLICT)


# -------------------------
# LAST RESORT
# -------------------------
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled exception",
        extra={"path": request.url.path, "method": request.method},
    )
    return _respond(500, "Something went wrong. Please try again.", ErrorCode.INTERNAL_ERROR)
