from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi import Request, Response
from sqlalchemy.orm import Session

from tarot42.core.config import settings
from tarot42.core.security import generate_id, generate_session_token
from tarot42.models.session import UserSession
from tarot42.models.user import User


# -----------------------------
# Session lifetime
# -----------------------------
def session_expiry() -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=settings.SESSION_EXPIRE_DAYS)


def session_max_age_seconds() -> int:
    return settings.SESSION_EXPIRE_DAYS * 24 * 3600


def as_utc(value: datetime) -> datetime:
    # SQLite round-trips tz-aware datetimes as naive. Treat naive values as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_expired(session: UserSession, now: datetime | None = None) -> bool:
    if session.expires_at is None:
        return True
    now = now or datetime.now(timezone.utc)
    return as_utc(session.expires_at) <= now


# -----------------------------
# Session rows
# -----------------------------
def create_session(
    db: Session,
    user: User,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> UserSession:
    """
    Create and commit a new session for ``user``. The caller hands
    ``session.token`` to the client. The user's expired sessions are
    removed in the same commit.
    """
    delete_expired_sessions(db, user_id=user.id)
    s = UserSession(
        id=generate_id(),
        user_id=user.id,
        token=generate_session_token(),
        expires_at=session_expiry(),
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.add(s)
    db.commit()
    db.refresh(s)
    return s


def delete_expired_sessions(db: Session, *, user_id: str | None = None, now: datetime | None = None) -> int:
    """Delete expired session rows (for one user, or all). The caller commits."""
    now = now or datetime.now(timezone.utc)
    q = db.query(UserSession).filter(UserSession.expires_at <= now)
    if user_id is not None:
        q = q.filter(UserSession.user_id == user_id)
    return q.delete(synchronize_session=False)


def find_valid_session(db: Session, token: str) -> tuple[UserSession, User] | None:
    """
    Returns (session, user) for a live session token, or None when the token is
    unknown, expired or its user no longer exists.
    """
    row = (
        db.query(UserSession, User)
        .join(User, User.id == UserSession.user_id)
        .filter(UserSession.token == token)
        .first()
    )
    if row is None:
        return None

    s, user = row
    if is_expired(s):
        return None
    return s, user


def revoke_session(db: Session, token: str) -> str | None:
    """Delete the session for ``token``. Returns the owning user id, or None if unknown."""
    s = db.query(UserSession).filter(UserSession.token == token).first()
    if not s:
        return None
    user_id = s.user_id
    db.delete(s)
    db.commit()
    return user_id


# -----------------------------
# Client metadata
# -----------------------------
def client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        first = forwarded.split(",", 1)[0].strip()
        if first:
            return first[:45]
    if request.client:
        return request.client.host[:45]
    return None


def client_user_agent(request: Request) -> str | None:
    return request.headers.get("user-agent") or None


# -----------------------------
# Cookie helpers
# -----------------------------
def cookie_name() -> str:
    return settings.SESSION_COOKIE_NAME or "tarot42.session_token"


def cookie_samesite() -> str:
    v = str(settings.SESSION_COOKIE_SAMESITE or "lax").lower().strip()
    if v not in {"lax", "strict", "none"}:
        return "lax"
    return v


def set_session_cookie(resp: Response, token: str) -> None:
    resp.set_cookie(
        key=cookie_name(),
        value=token,
        httponly=True,
        secure=settings.is_prod,
        samesite=cookie_samesite(),
        max_age=session_max_age_seconds(),
        path="/",
    )


def clear_session_cookie(resp: Response) -> None:
    resp.delete_cookie(key=cookie_name(), path="/")
