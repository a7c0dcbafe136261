# tarot42/auth/session_store.py
"""
Session validation seam used by the authentication gate.

The gate only knows the ``SessionValidator`` protocol: give it a credential,
get back an ``AuthContext`` or ``None``. ``DatabaseSessionValidator`` is the
production adapter over the ``session`` / ``user`` tables; tests substitute
their own implementations to simulate outages.
"""
from __future__ import annotations

import logging
from typing import Mapping, Protocol

from sqlalchemy.exc import SQLAlchemyError
from starlette.requests import cookie_parser

from tarot42.auth.identity import AuthContext
from tarot42.core.database import Database
from tarot42.services.sessions import find_valid_session

logger = logging.getLogger(__name__)


class MalformedCredentialError(ValueError):
    """The request carried an Authorization header that is not a usable bearer token."""


class SessionLookupError(RuntimeError):
    """The session store could not answer (unreachable, pool exhausted, query failure)."""


class SessionValidator(Protocol):
    def get_session(self, credential: str) -> AuthContext | None:
        """
        Resolve a session credential.

        Returns the context for a live session bound to an existing user, or
        None. Raises SessionLookupError if the store itself fails.
        """
        ...


def extract_credential(headers: Mapping[str, str], cookie_name: str) -> str | None:
    """
    Pull the session credential out of request headers.

    ``Authorization: Bearer <token>`` wins over the session cookie. Header
    lookups rely on ``headers`` being case-insensitive (Starlette ``Headers``).

    Raises MalformedCredentialError for a present but unusable Authorization header.
    """
    auth_header = (headers.get("authorization") or "").strip()
    if auth_header:
        scheme, _, token = auth_header.partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token or " " in token:
            raise MalformedCredentialError("Authorization header must be 'Bearer <token>'")
        return token

    raw_cookie = headers.get("cookie")
    if raw_cookie:
        value = (cookie_parser(raw_cookie).get(cookie_name) or "").strip()
        if value:
            return value

    return None


class DatabaseSessionValidator:
    def __init__(self, database: Database) -> None:
        self.database = database

    def get_session(self, credential: str) -> AuthContext | None:
        db = self.database.session()
        try:
            found = find_valid_session(db, credential)
            if found is None:
                return None
            session, user = found
            return AuthContext.from_records(user, session)
        except SQLAlchemyError as exc:
            raise SessionLookupError("Session store lookup failed") from exc
        finally:
            db.close()
