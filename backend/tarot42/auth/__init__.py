# tarot42/auth/__init__.py
"""
Authentication modules for Tarot42.

This package contains:
- identity.py: AuthContext / Identity / SessionInfo attached to authenticated requests
- session_store.py: credential extraction and the SessionValidator seam used by the gate
"""
from tarot42.auth.identity import AuthContext, Identity, SessionInfo
from tarot42.auth.session_store import (
    DatabaseSessionValidator,
    MalformedCredentialError,
    SessionLookupError,
    SessionValidator,
    extract_credential,
)

__all__ = [
    "AuthContext",
    "DatabaseSessionValidator",
    "Identity",
    "MalformedCredentialError",
    "SessionInfo",
    "SessionLookupError",
    "SessionValidator",
    "extract_credential",
]
