from __future__ import annotations

import logging
from typing import Any, Generator

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from tarot42.core.config import Settings

logger = logging.getLogger(__name__)


class Database:
    """
    Owns the process-wide engine and its connection pool.

    Constructed once at startup and handed to whatever needs storage (the
    auth gate's session validator, the ``get_db`` dependency). ``dispose()``
    drains the pool on shutdown.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        if engine.dialect.name == "sqlite":
            # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection.
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    @classmethod
    def from_settings(cls, settings: Settings) -> Database:
        connect_args: dict[str, Any] = {}
        url = settings.database_url
        if url.startswith("postgresql") and settings.DB_STATEMENT_TIMEOUT_MS > 0:
            connect_args["options"] = f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}"

        engine = create_engine(
            url,
            pool_pre_ping=True,  # checks stale connections
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            # Pool exhaustion raises sqlalchemy.exc.TimeoutError instead of waiting forever.
            pool_timeout=settings.DB_POOL_TIMEOUT_SECONDS,
            connect_args=connect_args,
        )
        return cls(engine)

    def session(self) -> Session:
        return self.session_factory()

    def check_connection(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database connection pool disposed")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # noqa: ARG001
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(request: Request) -> Generator[Session, None, None]:
    db = get_database(request).session()
    try:
        yield db
    finally:
        db.close()
