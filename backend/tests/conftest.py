import os
from datetime import datetime, timedelta, timezone

# Ensure AUTH_SECRET exists before importing the app (create_app() calls require_auth_secret()).
os.environ.setdefault("AUTH_SECRET", "test_auth_secret")

from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from tarot42.core import config as app_config
from tarot42.core.base import Base
from tarot42.core.database import Database
from tarot42.core.security import generate_id, generate_session_token, hash_password
from tarot42.main import create_app

# Import models so they register with SQLAlchemy metadata.
from tarot42.models import Account, User, UserSession  # noqa: F401
from tarot42.models.account import CREDENTIAL_PROVIDER

TEST_PASSWORD = "test_password_123"


@pytest.fixture(scope="session")
def database():
    # In-memory SQLite for fast, isolated tests.
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    return Database(engine)


@pytest.fixture()
def db_session(database):
    # Important: because we use an in-memory SQLite DB with StaticPool, the DB
    # persists across tests. Reset schema per test to avoid cross-test coupling.
    Base.metadata.drop_all(bind=database.engine)
    Base.metadata.create_all(bind=database.engine)

    db = database.session()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _reset_mutable_settings():
    """
    Tests sometimes tweak global settings (app_config.settings.*). Because that object is
    process-global, we must restore values after each test to avoid cross-test coupling.
    """
    keys = [
        "EMAIL_ENABLED",
        "REQUIRE_EMAIL_VERIFICATION",
        "AUTO_SIGN_IN_AFTER_VERIFICATION",
        "AUTH_LOOKUP_TIMEOUT_SECONDS",
        "PASSWORD_MIN_LENGTH",
        "EMAIL_PROVIDER",
    ]
    original = {k: getattr(app_config.settings, k) for k in keys}
    app_config.settings.EMAIL_ENABLED = False
    app_config.settings.REQUIRE_EMAIL_VERIFICATION = True
    app_config.settings.AUTO_SIGN_IN_AFTER_VERIFICATION = True
    try:
        yield
    finally:
        for k, v in original.items():
            setattr(app_config.settings, k, v)


@pytest.fixture()
def app(database, db_session):
    return create_app(database=database)


def make_user(db: Session, email: str, *, name: str = "Test User", verified: bool = True) -> User:
    user = User(id=generate_id(), email=email, name=name, email_verified=verified)
    db.add(user)
    db.flush()
    db.add(
        Account(
            id=generate_id(),
            account_id=user.id,
            provider_id=CREDENTIAL_PROVIDER,
            user_id=user.id,
            password=hash_password(TEST_PASSWORD),
        )
    )
    db.commit()
    db.refresh(user)
    return user


def make_session(db: Session, user: User, *, expires_in: timedelta = timedelta(days=7)) -> str:
    token = generate_session_token()
    db.add(
        UserSession(
            id=generate_id(),
            user_id=user.id,
            token=token,
            expires_at=datetime.now(timezone.utc) + expires_in,
        )
    )
    db.commit()
    return token


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def users(db_session):
    """
    Two distinct verified users for ownership / isolation tests.
    """
    user_a = make_user(db_session, "test@example.com", name="Test User")
    user_b = make_user(db_session, "other@example.com", name="Other User")
    return user_a, user_b


@pytest.fixture()
def anon_client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def client(app, db_session, users):
    """
    Default client authenticated as user_a via a bearer session token.
    """
    user_a, _ = users
    token = make_session(db_session, user_a)
    with TestClient(app, headers=auth_headers(token)) as c:
        yield c


@pytest.fixture()
def client_for(app, db_session):
    """
    Context manager to create a client authenticated as an arbitrary user.

    Usage:
        with client_for(user) as c:
            ...
    """

    @contextmanager
    def _client_for(user: User):
        token = make_session(db_session, user)
        with TestClient(app, headers=auth_headers(token)) as c:
            yield c

    return _client_for


@pytest.fixture()
def session_token(db_session):
    """
    Factory for raw session tokens. Pass a negative ``expires_in`` for an expired session.
    """

    def _session_token(user: User, *, expires_in: timedelta = timedelta(days=7)) -> str:
        return make_session(db_session, user, expires_in=expires_in)

    return _session_token


@pytest.fixture()
def user_password() -> str:
    """Plain-text password of the users created by the ``users`` fixture."""
    return TEST_PASSWORD
