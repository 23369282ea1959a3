from fastapi import HTTPException
from pricebook.constants.error_codes import ErrorCode


class AppException(HTTPException):
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: ErrorCode,
        details: dict | list | None = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.error_code = error_code
        self.details = details

    def __str__(self):
        return self.message


class _TypedAppException(AppException):
    status_code_default = 500
    error_code_default = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        error_code: ErrorCode | None = None,
        details: dict | list | None = None,
    ):
        super().__init__(
            self.status_code_default,
            message,
            error_code or self.error_code_default,
            details,
        )


class ValidationError(_TypedAppException):
    """Local input check failed; raised before any backend call."""

    status_code_default = 400
    error_code_default = ErrorCode.VALIDATION_ERROR


class ConflictError(_TypedAppException):
    status_code_default = 409
    error_code_default = ErrorCode.CONFLICT


class NotFoundError(_TypedAppException):
    status_code_default = 404
    error_code_default = ErrorCode.NOT_FOUND


class AuthenticationError(_TypedAppException):
    status_code_default = 401
    error_code_default = ErrorCode.UNAUTHORIZED


class AuthorizationError(_TypedAppException):
    status_code_default = 403
    error_code_default = ErrorCode.PERMISSION_DENIED


class BlockedAccountError(_TypedAppException):
    """The session belongs to a blocked user and has been signed out."""

    status_code_default = 403
    error_code_default = ErrorCode.ACCOUNT_BLOCKED


class TransportError(_TypedAppException):
    """The data service could not be reached or failed mid-call. Never retried."""

    status_code_default = 503
    error_code_default = ErrorCode.SERVICE_UNAVAILABLE
