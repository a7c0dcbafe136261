from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from tarot42.auth.session_store import DatabaseSessionValidator, SessionValidator
from tarot42.core.config import require_auth_secret, settings
from tarot42.core.database import Database
from tarot42.core.rate_limit import limiter
from tarot42.middleware.auth_gate import register_auth_gate
from tarot42.routes.auth import router as auth_router
from tarot42.routes.cards import router as cards_router
from tarot42.routes.goals import router as goals_router
from tarot42.routes.profile import router as profile_router

logger = logging.getLogger(__name__)

_ERROR_CODE_BY_STATUS: dict[int, str] = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    429: "RATE_LIMITED",
    500: "INTERNAL_SERVER_ERROR",
}

GENERIC_SERVER_ERROR = "Internal Server Error"


def _error_code(status_code: int) -> str:
    return _ERROR_CODE_BY_STATUS.get(int(status_code), "HTTP_ERROR")


def error_payload(status_code: int, message: str, details: dict | None = None) -> dict:
    """
    Auth and server failures use {"error", "code"}; client errors from the
    resource routers use {"message", "code", "details"?}.
    """
    if status_code == 401 or status_code >= 500:
        return {"error": message, "code": _error_code(status_code)}
    payload: dict = {"message": message, "code": _error_code(status_code)}
    if details:
        payload["details"] = details
    return payload


def http_exception_handler(request: Request, exc: HTTPException):  # noqa: ARG001
    detail = exc.detail
    message: str
    details: dict | None = None

    if isinstance(detail, str):
        message = detail
    elif isinstance(detail, dict):
        msg = detail.get("message")
        message = msg if isinstance(msg, str) and msg else "Request failed"
        det = detail.get("details")
        details = det if isinstance(det, dict) else None
    else:
        message = str(detail) if detail is not None else "Request failed"

    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(exc.status_code, message, details),
        headers=getattr(exc, "headers", None),
    )


def validation_exception_handler(request: Request, exc: RequestValidationError):  # noqa: ARG001
    # Malformed or missing input is a plain 400 for the mobile client.
    return JSONResponse(
        status_code=400,
        content=error_payload(400, "Invalid request payload", {"errors": _jsonable_errors(exc)}),
    )


def _jsonable_errors(exc: RequestValidationError) -> list[dict]:
    out: list[dict] = []
    for err in exc.errors():
        out.append(
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": str(err.get("msg", "")),
                "type": str(err.get("type", "")),
            }
        )
    return out


def rate_limit_handler(request: Request, exc: RateLimitExceeded):  # noqa: ARG001
    return JSONResponse(status_code=429, content=error_payload(429, "Too many requests"))


def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("[API_ERROR] Database failure: %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=error_payload(500, GENERIC_SERVER_ERROR))


def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("[API_ERROR] Unhandled error: %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=error_payload(500, GENERIC_SERVER_ERROR))


def register_error_boundary(app: FastAPI) -> None:
    @app.middleware("http")
    async def error_boundary(request: Request, call_next):
        # Innermost middleware: unhandled errors become the generic 500 here,
        # inside CORS, so browser clients can read the body.
        try:
            return await call_next(request)
        except Exception as exc:  # noqa: BLE001
            return unhandled_exception_handler(request, exc)


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_app(
    database: Database | None = None,
    session_validator: SessionValidator | None = None,
) -> FastAPI:
    """
    Build the API.

    ``database`` defaults to one built from settings; ``session_validator``
    defaults to the database-backed validator over that handle. Both live on
    app.state for the lifetime of the lifespan, never in module globals. A
    database built here is disposed on shutdown; a supplied one belongs to
    the caller.
    """
    require_auth_secret()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owns_database = database is None
        db = database or Database.from_settings(settings)
        app.state.database = db
        app.state.session_validator = session_validator or DatabaseSessionValidator(db)

        db.check_connection()
        logger.info(
            "Tarot42 API starting: EMAIL_ENABLED=%s provider=%s RATE_LIMITING=%s",
            settings.EMAIL_ENABLED,
            settings.EMAIL_PROVIDER,
            settings.ENABLE_RATE_LIMITING,
        )

        yield

        if owns_database:
            db.dispose()
        logger.info("Tarot42 API shutdown complete")

    app = FastAPI(title="Tarot42 Backend", lifespan=lifespan)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

    register_error_boundary(app)
    # Registered before CORS so CORS wraps it: 401s from the gate still carry CORS headers.
    register_auth_gate(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["set-auth-token"],
    )

    app.include_router(auth_router)
    app.include_router(profile_router)
    app.include_router(goals_router)
    app.include_router(cards_router)

    @app.get("/api/health")
    def health_check():
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "message": "Tarot42 Backend is running",
        }

    return app
