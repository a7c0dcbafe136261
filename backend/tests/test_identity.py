from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from tarot42.auth.identity import AuthContext, Identity, SessionInfo
from tarot42.dependencies.auth import get_auth_context, get_current_user_id, get_request_auth


def _records():
    user = SimpleNamespace(id="u-1", email="seer@example.com", name="Seer", email_verified=True)
    session = SimpleNamespace(
        id="s-1",
        user_id="u-1",
        token="secret-token",
        expires_at=datetime.now(timezone.utc) + timedelta(days=1),
        ip_address="127.0.0.1",
        user_agent="pytest",
    )
    return user, session


def test_unauthenticated_context():
    ctx = AuthContext.unauthenticated()
    assert ctx.is_authenticated is False
    assert ctx.user_id is None
    assert ctx.identity is None
    assert ctx.session is None


def test_context_from_records():
    user, session = _records()
    ctx = AuthContext.from_records(user, session)

    assert ctx.is_authenticated is True
    assert ctx.user_id == "u-1"
    assert ctx.identity == Identity(user_id="u-1", email="seer@example.com", name="Seer", email_verified=True)
    assert isinstance(ctx.session, SessionInfo)
    assert ctx.session.id == "s-1"
    assert ctx.session.user_agent == "pytest"


def test_context_is_immutable():
    user, session = _records()
    ctx = AuthContext.from_records(user, session)
    with pytest.raises(AttributeError):
        ctx.identity = None  # type: ignore[misc]


def test_identity_without_session_is_not_authenticated():
    ctx = AuthContext(identity=Identity(user_id="u-1", email="x@example.com"), session=None)
    assert ctx.is_authenticated is False


def test_debug_dict_never_contains_the_token():
    user, session = _records()
    debug = AuthContext.from_records(user, session).to_debug_dict()

    assert debug == {
        "user_id": "u-1",
        "email": "seer@example.com",
        "session_id": "s-1",
        "is_authenticated": True,
    }
    assert "secret-token" not in repr(debug)


def test_get_request_auth_defaults_to_unauthenticated():
    request = SimpleNamespace(state=SimpleNamespace())
    assert get_request_auth(request).is_authenticated is False  # type: ignore[arg-type]


def test_get_auth_context_rejects_unauthenticated():
    with pytest.raises(HTTPException) as exc_info:
        get_auth_context(AuthContext.unauthenticated())
    assert exc_info.value.status_code == 401


def test_get_current_user_id():
    user, session = _records()
    ctx = get_auth_context(AuthContext.from_records(user, session))
    assert get_current_user_id(ctx) == "u-1"
