# src/daily_report/utils/security.py
from __future__ import annotations

import time
from datetime import datetime
from typing import Optional, Dict, Any

from jose import jwt, JWTError
from passlib.context import CryptContext

from src.daily_report.config import Settings, get_settings
from src.daily_report.utils.errors import UnauthorizedError
from src.daily_report.utils.timezone import LOCAL_TZ


# ---- Password hashing policy ----
pwd_context = CryptContext(
    schemes=["argon2", "bcrypt"],
    deprecated="auto",
)

# ---------------------------------------------------------------------
# Password Handling
# ---------------------------------------------------------------------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        # unknown or malformed hash
        return False


def needs_rehash(hashed: str) -> bool:
    try:
        return pwd_context.needs_update(hashed)
    except (ValueError, TypeError):
        return True


# ---------------------------------------------------------------------
# Token Handling - Access Token
# ---------------------------------------------------------------------
def create_access_token(
    data: Dict[str, Any],
    settings: Optional[Settings] = None,
    minutes: Optional[int] = None,
) -> tuple[str, datetime]:
    """
    Create a JWT access token.
    `settings` is the app's injected Settings; the process defaults are used when omitted.
    Uses epoch seconds to avoid timezone/datetime issues.
    Returns (token, expires_at) with expires_at in local time.
    """
    settings = settings or get_settings()
    now_ts = int(time.time())
    exp_ts = now_ts + int(60 * (minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {**data, "iat": now_ts, "exp": exp_ts}

    token = jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALG)
    return token, datetime.fromtimestamp(exp_ts, LOCAL_TZ)


def _check_exp_with_leeway(payload: Dict[str, Any], leeway_seconds: int) -> None:
    exp = payload.get("exp")
    if exp is None:
        raise UnauthorizedError("Invalid token")

    now = int(time.time())
    if now > int(exp) + leeway_seconds:
        raise UnauthorizedError("Token expired")


def decode_access_token(token: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Return payload or raise UnauthorizedError.
    Built-in exp verification is skipped; we enforce exp with our own leeway.
    """
    settings = settings or get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALG],
            options={"verify_aud": False, "verify_exp": False},
        )
    except JWTError:
        raise UnauthorizedError("Invalid token")

    _check_exp_with_leeway(payload, settings.JWT_LEEWAY_SECONDS)
    return payload
