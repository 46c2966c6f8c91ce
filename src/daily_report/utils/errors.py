# src/daily_report/utils/errors.py
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ACCOUNT_DISABLED = "ACCOUNT_DISABLED"
    DUPLICATE_REPORT = "DUPLICATE_REPORT"
    DUPLICATE_EMPLOYEE_CODE = "DUPLICATE_EMPLOYEE_CODE"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    DUPLICATE_CUSTOMER_CODE = "DUPLICATE_CUSTOMER_CODE"


ERROR_STATUS_MAP: dict[ErrorCode, int] = {
    ErrorCode.BAD_REQUEST: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.INVALID_CREDENTIALS: 401,
    ErrorCode.ACCOUNT_DISABLED: 401,
    ErrorCode.DUPLICATE_REPORT: 409,
    ErrorCode.DUPLICATE_EMPLOYEE_CODE: 409,
    ErrorCode.DUPLICATE_EMAIL: 409,
    ErrorCode.DUPLICATE_CUSTOMER_CODE: 409,
}

ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.BAD_REQUEST: "The request is malformed.",
    ErrorCode.UNAUTHORIZED: "Authentication is required.",
    ErrorCode.FORBIDDEN: "You do not have permission to perform this operation.",
    ErrorCode.NOT_FOUND: "The requested resource was not found.",
    ErrorCode.CONFLICT: "The resource conflicts with an existing one.",
    ErrorCode.VALIDATION_ERROR: "The input is invalid.",
    ErrorCode.INTERNAL_ERROR: "Internal Server Error. Please try again later.",
    ErrorCode.INVALID_CREDENTIALS: "Email address or password is incorrect.",
    ErrorCode.ACCOUNT_DISABLED: "This account has been disabled.",
    ErrorCode.DUPLICATE_REPORT: "A report for this date already exists.",
    ErrorCode.DUPLICATE_EMPLOYEE_CODE: "This employee code is already in use.",
    ErrorCode.DUPLICATE_EMAIL: "This email address is already in use.",
    ErrorCode.DUPLICATE_CUSTOMER_CODE: "This customer code is already in use.",
}


class AppError(Exception):
    """
    Tagged failure raised by the core.
    The error handler turns it into {"success": false, "error": {code, message}}.
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str | None = None, code: ErrorCode | None = None):
        if code is not None:
            self.code = code
        self.message = message or ERROR_MESSAGES[self.code]
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_MAP.get(self.code, 500)


class ValidationError(AppError):
    code = ErrorCode.VALIDATION_ERROR


class UnauthorizedError(AppError):
    code = ErrorCode.UNAUTHORIZED


class ForbiddenError(AppError):
    code = ErrorCode.FORBIDDEN


class NotFoundError(AppError):
    code = ErrorCode.NOT_FOUND


class ConflictError(AppError):
    code = ErrorCode.CONFLICT


class InternalError(AppError):
    code = ErrorCode.INTERNAL_ERROR
