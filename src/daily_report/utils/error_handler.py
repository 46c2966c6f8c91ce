# src/daily_report/utils/error_handler.py
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.daily_report.utils.errors import AppError, ErrorCode, ERROR_MESSAGES

logger = logging.getLogger("fastapi")

_STATUS_CODES: Dict[int, ErrorCode] = {
    400: ErrorCode.BAD_REQUEST,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION_ERROR,
}


def _safe_args(exc: Exception) -> str:
    a = getattr(exc, "args", None)
    return str(a) if a else "No additional details"


def error_payload(code: ErrorCode, message: str) -> Dict[str, Any]:
    return {"success": False, "error": {"code": code.value, "message": message}}


def _json_error(status_code: int, code: ErrorCode, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_payload(code, message))


def _log_http(request: Request, status_code: int, detail: str, exc: Exception) -> None:
    """
    Log levels:
    - 404 -> INFO (normal noise)
    - 401/403 -> WARNING (auth/permission)
    - other 4xx -> ERROR (client error worth checking)
    - 5xx -> EXCEPTION (stack trace)
    """
    url = str(request.url)
    method = request.method

    if status_code == 404:
        logger.info("404 Not Found: %s %s", method, url)
        return

    if status_code in (401, 403):
        logger.warning("%s: %s %s | detail=%s", status_code, method, url, detail)
        return

    if 400 <= status_code < 500:
        logger.error(
            "%s: %s %s | detail=%s | args=%s",
            status_code,
            method,
            url,
            detail,
            _safe_args(exc),
        )
        return

    logger.exception("%s: %s %s | detail=%s", status_code, method, url, detail)


def first_validation_message(exc: RequestValidationError) -> str:
    """Only the first offending field is reported, as "field: message"."""
    errors = exc.errors()
    if not errors:
        return ERROR_MESSAGES[ErrorCode.VALIDATION_ERROR]
    err = errors[0]
    msg = str(err.get("msg") or ERROR_MESSAGES[ErrorCode.VALIDATION_ERROR])
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    # drop the leading "body"/"query"/"path" segment
    field = ".".join(str(p) for p in list(err.get("loc") or ())[1:])
    return f"{field}: {msg}" if field else msg


async def custom_exception_handler(request: Request, exc: Exception):
    """
    Single handler for every failure, so clients only ever see
    {"success": false, "error": {"code", "message"}}.
    """
    # -----------------------------
    # 1) Domain errors
    # -----------------------------
    if isinstance(exc, AppError):
        _log_http(request, exc.status_code, exc.message, exc)
        return _json_error(exc.status_code, exc.code, exc.message)

    # -----------------------------
    # 2) Starlette / FastAPI HTTPException (routing 404, 405 etc.)
    # -----------------------------
    if isinstance(exc, StarletteHTTPException):
        status = int(exc.status_code)
        detail = str(exc.detail)
        _log_http(request, status, detail, exc)

        code = _STATUS_CODES.get(status)
        if code is None:
            code = ErrorCode.BAD_REQUEST if status < 500 else ErrorCode.INTERNAL_ERROR
        message = detail if status < 500 else ERROR_MESSAGES[ErrorCode.INTERNAL_ERROR]
        return _json_error(status, code, message)

    # -----------------------------
    # 3) Validation error
    # -----------------------------
    if isinstance(exc, RequestValidationError):
        message = first_validation_message(exc)
        logger.warning(
            "422 Validation error: %s %s | %s",
            request.method,
            str(request.url),
            message,
        )
        return _json_error(422, ErrorCode.VALIDATION_ERROR, message)

    # -----------------------------
    # 4) Any other unexpected exception
    # -----------------------------
    logger.exception("500 Unhandled exception: %s %s | %s", request.method, str(request.url), str(exc))
    return _json_error(500, ErrorCode.INTERNAL_ERROR, ERROR_MESSAGES[ErrorCode.INTERNAL_ERROR])
