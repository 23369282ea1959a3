# pricebook/utils/response.py

from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel

from pricebook.constants.error_codes import ErrorCode

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error_code: ErrorCode
    details: Any = None


def success_response(message: str, data: Optional[T] = None) -> Dict[str, Any]:
    return {"success": True, "message": message, "data": data}


def error_payload(message: str, error_code: ErrorCode, details: Any = None) -> Dict[str, Any]:
    return ErrorResponse(
        message=message,
        error_code=error_code,
        details=details,
    ).model_dump(mode="json")


# OpenAPI entries for the error envelope
ERROR_RESPONSES = {
    status: {"model": ErrorResponse}
    for status in (400, 401, 403, 404, 409, 422, 503)
}
