# tarot42/auth/identity.py
"""
Canonical authenticated identity model.

The Gate resolves a request credential into an ``AuthContext`` (who the caller
is and which session authorised the request). Handlers receive it through the
``get_auth_context`` dependency and scope every query by ``user_id``.

The context is INTERNAL ONLY; routes serialise what they need through schemas.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: str
    name: str | None = None
    email_verified: bool = False


@dataclass(frozen=True)
class SessionInfo:
    id: str
    user_id: str
    expires_at: datetime
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class AuthContext:
    """
    Result of the authentication gate for one request.

    Attributes:
        identity: The authenticated user, or ``None`` for an unauthenticated request.
        session: The session that authorised the request, or ``None``.
    """

    identity: Identity | None = None
    session: SessionInfo | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None and self.session is not None

    @property
    def user_id(self) -> str | None:
        return self.identity.user_id if self.identity else None

    @classmethod
    def unauthenticated(cls) -> AuthContext:
        return cls(identity=None, session=None)

    @classmethod
    def from_records(cls, user: Any, session: Any) -> AuthContext:
        """Build a context from ORM ``User`` / ``UserSession`` rows."""
        return cls(
            identity=Identity(
                user_id=str(user.id),
                email=user.email,
                name=user.name,
                email_verified=bool(user.email_verified),
            ),
            session=SessionInfo(
                id=str(session.id),
                user_id=str(session.user_id),
                expires_at=session.expires_at,
                ip_address=session.ip_address,
                user_agent=session.user_agent,
            ),
        )

    def to_debug_dict(self) -> dict[str, Any]:
        """Safe subset for logs; never includes the session token."""
        return {
            "user_id": self.user_id,
            "email": self.identity.email if self.identity else None,
            "session_id": self.session.id if self.session else None,
            "is_authenticated": self.is_authenticated,
        }
