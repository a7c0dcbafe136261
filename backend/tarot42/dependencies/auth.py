# tarot42/dependencies/auth.py
from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from tarot42.auth.identity import AuthContext


def _unauthorized(detail: str = "User not authenticated") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_request_auth(request: Request) -> AuthContext:
    """The AuthContext the gate attached, or an unauthenticated one."""
    auth = getattr(request.state, "auth", None)
    if isinstance(auth, AuthContext):
        return auth
    return AuthContext.unauthenticated()


def get_auth_context(auth: AuthContext = Depends(get_request_auth)) -> AuthContext:
    """
    Router precondition: the gate must have authenticated this request.
    Rejects with 401 before any storage access otherwise.
    """
    if not auth.is_authenticated:
        raise _unauthorized()
    return auth


def get_current_user_id(auth: AuthContext = Depends(get_auth_context)) -> str:
    return auth.user_id  # type: ignore[return-value]
