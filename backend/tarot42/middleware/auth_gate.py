from __future__ import annotations

import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from tarot42.auth.identity import AuthContext
from tarot42.auth.session_store import MalformedCredentialError, SessionValidator, extract_credential
from tarot42.core.config import settings

logger = logging.getLogger(__name__)

AUTH_BYPASS_PATHS = frozenset(
    [
        "/api/health",
        "/docs",
        "/openapi.json",
        "/redoc",
    ]
)

AUTH_BYPASS_PREFIXES = (
    "/api/auth",  # Sign-up / sign-in / session endpoints manage credentials themselves
)

AUTH_FAILURE_MESSAGE = "Internal server error during authentication check."


def _is_auth_bypass_path(path: str) -> bool:
    """Check if a path should bypass authentication."""
    path = path.rstrip("/")
    if path in AUTH_BYPASS_PATHS:
        return True
    return any(path == prefix or path.startswith(prefix + "/") for prefix in AUTH_BYPASS_PREFIXES)


def _unauthorized(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"error": message, "code": "UNAUTHORIZED"},
        headers={"WWW-Authenticate": "Bearer"},
    )


def _gate_failure() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": AUTH_FAILURE_MESSAGE, "code": "INTERNAL_SERVER_ERROR"},
    )


def get_session_validator(request: Request) -> SessionValidator:
    return request.app.state.session_validator


async def resolve_auth_context(request: Request) -> AuthContext | JSONResponse:
    """
    Run the gate for one request.

    Returns the AuthContext on success, otherwise the rejection response
    (401 for credential problems, 500 when the validator itself fails).
    """
    try:
        credential = extract_credential(request.headers, settings.SESSION_COOKIE_NAME)
    except MalformedCredentialError:
        logger.info("Rejected malformed Authorization header: %s %s", request.method, request.url.path)
        return _unauthorized("Unauthorized: Malformed Authorization header")

    if not credential:
        return _unauthorized("Unauthorized: No active session or token invalid")

    validator = get_session_validator(request)
    try:
        context = await asyncio.wait_for(
            run_in_threadpool(validator.get_session, credential),
            timeout=settings.AUTH_LOOKUP_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error(
            "Session lookup timed out after %ss: %s %s",
            settings.AUTH_LOOKUP_TIMEOUT_SECONDS,
            request.method,
            request.url.path,
        )
        return _gate_failure()
    except Exception:  # noqa: BLE001
        logger.exception("Session validation failed: %s %s", request.method, request.url.path)
        return _gate_failure()

    if context is None or not context.is_authenticated:
        logger.info("No valid session for %s %s", request.method, request.url.path)
        return _unauthorized("Unauthorized: No active session or token invalid")

    return context


def register_auth_gate(app: FastAPI) -> None:
    @app.middleware("http")
    async def auth_gate(request: Request, call_next):
        """
        Enforce session authentication for all protected routes.

        Requests carry a session token as ``Authorization: Bearer <token>`` or
        in the session cookie. The token is resolved by the app's
        SessionValidator and the resulting AuthContext is stored on
        request.state.auth before the handler runs.
        """
        request.state.auth = AuthContext.unauthenticated()

        # Allow CORS preflight to flow through CORSMiddleware unchanged
        if request.method.upper() == "OPTIONS":
            return await call_next(request)

        if _is_auth_bypass_path(request.url.path):
            return await call_next(request)

        result = await resolve_auth_context(request)
        if isinstance(result, JSONResponse):
            return result

        request.state.auth = result
        logger.debug("Authenticated request: %s", result.to_debug_dict())
        return await call_next(request)
