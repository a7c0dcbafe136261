# tarot42/core/security.py
from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from tarot42.core.config import settings

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


# -------------------------
# Password hashing
# -------------------------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)


# -------------------------
# Session tokens
# -------------------------
def generate_session_token() -> str:
    """
    Opaque bearer/cookie credential for a session row.
    Returned to the client once at sign-in.
    """
    return secrets.token_urlsafe(32)


def generate_id() -> str:
    return uuid.uuid4().hex


# -------------------------
# JWT helpers
# -------------------------
def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _require_auth_secret() -> None:
    if not settings.AUTH_SECRET or not settings.AUTH_SECRET.strip():
        raise RuntimeError("AUTH_SECRET must be set (auth is required).")


def create_email_verification_token(email: str) -> tuple[str, str, datetime]:
    """
    Token used for /api/auth/verify-email?token=...

    Returns (token, token_id, expires_at). Only a hash of token_id is persisted,
    which makes each link single-use.
    """
    _require_auth_secret()

    now = _now_utc()
    exp = now + timedelta(hours=settings.EMAIL_VERIFY_TOKEN_EXPIRE_HOURS)
    token_id = secrets.token_hex(16)

    payload = {
        "sub": email,
        "purpose": "email_verification",
        "jti": token_id,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }

    token = jwt.encode(payload, settings.AUTH_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, token_id, exp


def decode_token(token: str) -> dict[str, Any]:
    _require_auth_secret()
    # Let callers decide how to handle JWTError
    return jwt.decode(token, settings.AUTH_SECRET, algorithms=[settings.JWT_ALGORITHM])


def verify_token_purpose(token: str, expected_purpose: str) -> dict[str, Any]:
    try:
        payload = decode_token(token)
    except JWTError:
        raise ValueError("Invalid or expired token")

    if payload.get("purpose") != expected_purpose:
        raise ValueError("Invalid token purpose")

    return payload
