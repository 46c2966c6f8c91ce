# src/daily_report/utils/auth.py
from __future__ import annotations

import logging
from typing import Optional, Literal, cast

from fastapi import Request, Depends
from fastapi.responses import Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.daily_report.config import Settings, get_settings
from src.daily_report.models import SalesPerson
from src.daily_report.utils.database import get_db
from src.daily_report.utils.errors import AppError, ErrorCode, ForbiddenError, UnauthorizedError
from src.daily_report.utils.permissions import can_manage_master
from src.daily_report.utils.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    needs_rehash,
    verify_password,
)

logger = logging.getLogger(__name__)

# -------------------------------------------------------------------
# Config
# -------------------------------------------------------------------
ACCESS_COOKIE_NAME = "access_token"


def app_settings(request: Request) -> Settings:
    # create_app() stores the Settings it was built with
    return getattr(request.app.state, "settings", None) or get_settings()


def cookie_samesite(settings: Settings) -> Literal["lax", "strict", "none"]:
    samesite = (settings.COOKIE_SAMESITE or "lax").strip().lower()
    if samesite not in ("lax", "strict", "none"):
        samesite = "lax"
    # Browsers require SameSite=None cookies to also be Secure
    if samesite == "none" and not settings.COOKIE_SECURE:
        samesite = "lax"
    return cast(Literal["lax", "strict", "none"], samesite)


# -------------------------------------------------------------------
# Cookie helpers
# -------------------------------------------------------------------
def set_access_cookie(response: Response, access_token: str, settings: Settings) -> None:
    response.set_cookie(
        ACCESS_COOKIE_NAME,
        access_token,
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        secure=settings.COOKIE_SECURE,
        samesite=cookie_samesite(settings),
        path="/",
    )


def clear_access_cookie(response: Response) -> None:
    response.delete_cookie(ACCESS_COOKIE_NAME, path="/")


# -------------------------------------------------------------------
# Core auth
# -------------------------------------------------------------------
async def authenticate_user(db: AsyncSession, email: str, password: str) -> SalesPerson:
    """
    Check credentials.
    Unknown email and wrong password share one error so that accounts can't be probed.
    """
    email = (email or "").strip().lower()
    user = await db.scalar(select(SalesPerson).where(SalesPerson.email == email))
    if not user:
        raise AppError(code=ErrorCode.INVALID_CREDENTIALS)

    if not user.is_active:
        raise AppError(code=ErrorCode.ACCOUNT_DISABLED)

    if not verify_password(password, user.password_hash):
        raise AppError(code=ErrorCode.INVALID_CREDENTIALS)

    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        await db.commit()
        logger.info("Password hash upgraded for sales person %s", user.id)

    return user


def issue_access_token(user: SalesPerson, settings: Optional[Settings] = None):
    return create_access_token(
        {"sub": str(user.id), "email": user.email, "role": user.role.value}, settings
    )


# -------------------------------------------------------------------
# Protected dependency
# -------------------------------------------------------------------
def _extract_bearer(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header:
        parts = auth_header.split(" ", 1)
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1].strip()

    cookie_tok = request.cookies.get(ACCESS_COOKIE_NAME)
    if cookie_tok:
        return cookie_tok.strip()

    return None


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> SalesPerson:
    token = _extract_bearer(request)
    if not token:
        raise UnauthorizedError("Not authenticated")

    payload = decode_access_token(token, app_settings(request))
    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub.isdigit():
        raise UnauthorizedError("Invalid token payload")

    user = await db.get(SalesPerson, int(sub))
    if not user or not user.is_active:
        raise UnauthorizedError("User not found")
    return user


async def require_admin(
    current_user: SalesPerson = Depends(get_current_user),
) -> SalesPerson:
    if not can_manage_master(current_user):
        raise ForbiddenError("Only administrators can manage master data.")
    return current_user
