# tarot42/routes/auth.py
from __future__ import annotations

import logging
from html import escape as html_escape
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from tarot42.auth.session_store import MalformedCredentialError, extract_credential
from tarot42.core.config import settings
from tarot42.core.database import get_db
from tarot42.core.rate_limit import limiter
from tarot42.core.security import verify_password, verify_token_purpose
from tarot42.models.user import User
from tarot42.schemas.auth import (
    AuthTokenOut,
    DeleteUserIn,
    MessageOut,
    SendVerificationIn,
    SessionEnvelopeOut,
    SignInIn,
    SignUpIn,
    SuccessOut,
    VerifyEmailOut,
)
from tarot42.services import auth_events
from tarot42.services.email import EmailDeliveryError, EmailNotConfiguredError, send_email
from tarot42.services.email_verification import (
    consume_email_verification_token,
    issue_email_verification_token,
)
from tarot42.services.sessions import (
    clear_session_cookie,
    client_ip,
    client_user_agent,
    create_session,
    find_valid_session,
    revoke_session,
    set_session_cookie,
)
from tarot42.services.users import (
    create_credential_user,
    delete_user,
    get_credential_account,
    get_user_by_email,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

# Header the bearer-token client reads after sign-in.
AUTH_TOKEN_HEADER = "set-auth-token"


# -----------------------------
# Email verification sender
# -----------------------------
def send_verification_email(email: str, token: str) -> None:
    """
    Delivery problems are logged and swallowed: the account exists either way
    and the user can ask for a new link via /send-verification-email.
    """
    verify_link = f"{settings.PUBLIC_BASE_URL}/api/auth/verify-email?{urlencode({'token': token})}"
    subject = "Verify your email address for Tarot42"
    text = f"Please click the following link to verify your email address: {verify_link}"
    html = (
        "<p>Please click the following link to verify your email address:</p>"
        f'<a href="{html_escape(verify_link)}">{html_escape(verify_link)}</a>'
    )

    if not settings.EMAIL_ENABLED:
        logger.info("Email disabled; verification email not sent to=%s", email)
        return

    try:
        msg_id = send_email(to_email=email, subject=subject, text=text, html=html)
    except EmailNotConfiguredError as e:
        logger.error("Cannot send verification email: %s", e)
        return
    except EmailDeliveryError:
        logger.exception("Error sending verification email to=%s", email)
        return
    logger.info("Verification email sent: to=%s provider=%s msg_id=%s", email, settings.EMAIL_PROVIDER, msg_id)


def _issue_session(db: Session, user: User, request: Request, response: Response) -> str:
    s = create_session(db, user, ip_address=client_ip(request), user_agent=client_user_agent(request))
    set_session_cookie(response, s.token)
    response.headers[AUTH_TOKEN_HEADER] = s.token
    return s.token


def _request_credential(request: Request) -> str | None:
    try:
        return extract_credential(request.headers, settings.SESSION_COOKIE_NAME)
    except MalformedCredentialError:
        return None


# -----------------------------
# Routes
# -----------------------------
@router.post("/sign-up/email", response_model=AuthTokenOut)
@limiter.limit(settings.AUTH_RATE_LIMIT)
def sign_up_email(payload: SignUpIn, request: Request, response: Response, db: Session = Depends(get_db)):
    password = payload.password
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters",
        )

    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")

    try:
        user = create_credential_user(db, email=payload.email, password=password, name=name, image=payload.image)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    auth_events.record_auth_event(db, user.id, auth_events.SIGN_UP, request)
    try:
        token = issue_email_verification_token(db, user)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user)

    send_verification_email(user.email, token)

    session_token: str | None = None
    if not settings.REQUIRE_EMAIL_VERIFICATION:
        session_token = _issue_session(db, user, request, response)

    logger.info("User signed up: id=%s email=%s", user.id, user.email)
    return {"token": session_token, "user": user}


@router.post("/sign-in/email", response_model=AuthTokenOut)
@limiter.limit(settings.AUTH_RATE_LIMIT)
def sign_in_email(payload: SignInIn, request: Request, response: Response, db: Session = Depends(get_db)):
    user = get_user_by_email(db, payload.email)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    account = get_credential_account(db, user.id)
    if not account or not verify_password(payload.password, account.password):
        auth_events.record_auth_event(db, user.id, auth_events.SIGN_IN_FAILED, request)
        db.commit()
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if settings.REQUIRE_EMAIL_VERIFICATION and not user.email_verified:
        raise HTTPException(status_code=403, detail="Email not verified")

    auth_events.record_auth_event(db, user.id, auth_events.SIGN_IN, request)
    token = _issue_session(db, user, request, response)
    return {"token": token, "user": user}


@router.post("/sign-out", response_model=SuccessOut)
def sign_out(request: Request, response: Response, db: Session = Depends(get_db)):
    """
    Delete the presented session (if any) and clear the cookie.
    """
    credential = _request_credential(request)
    if credential:
        user_id = revoke_session(db, credential)
        if user_id is not None:
            auth_events.record_auth_event(db, user_id, auth_events.SIGN_OUT, request)
            db.commit()

    clear_session_cookie(response)
    return {"success": True}


@router.get("/get-session", response_model=SessionEnvelopeOut | None)
def get_session(request: Request, db: Session = Depends(get_db)):
    credential = _request_credential(request)
    if not credential:
        return None

    found = find_valid_session(db, credential)
    if found is None:
        return None
    session, user = found
    return {"session": session, "user": user}


@router.get("/verify-email", response_model=VerifyEmailOut)
def verify_email(token: str, request: Request, response: Response, db: Session = Depends(get_db)):
    try:
        payload = verify_token_purpose(token, expected_purpose="email_verification")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    email = (payload.get("sub") or "").strip().lower()
    jti = payload.get("jti")
    if not email or not jti:
        raise HTTPException(status_code=400, detail="Invalid token payload")

    user = get_user_by_email(db, email)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if user.email_verified:
        return {"message": "Email already verified", "user": user}

    try:
        consume_email_verification_token(db, user, jti)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    user.email_verified = True
    auth_events.record_auth_event(db, user.id, auth_events.EMAIL_VERIFIED, request)
    db.commit()
    db.refresh(user)

    session_token: str | None = None
    if settings.AUTO_SIGN_IN_AFTER_VERIFICATION:
        session_token = _issue_session(db, user, request, response)

    return {"message": "Email verified successfully", "token": session_token, "user": user}


@router.post("/send-verification-email", response_model=MessageOut)
def send_verification(payload: SendVerificationIn, db: Session = Depends(get_db)):
    generic = {"message": "If that email exists, a verification link was sent."}

    user = get_user_by_email(db, payload.email)
    if not user or user.email_verified:
        return generic

    try:
        token = issue_email_verification_token(db, user)
        db.commit()
    except Exception:
        db.rollback()
        raise

    send_verification_email(user.email, token)
    return generic


@router.post("/delete-user", response_model=SuccessOut)
def delete_account(payload: DeleteUserIn, request: Request, response: Response, db: Session = Depends(get_db)):
    credential = _request_credential(request)
    found = find_valid_session(db, credential) if credential else None
    if found is None:
        raise HTTPException(status_code=401, detail="Unauthorized: No active session or token invalid")
    _, user = found

    account = get_credential_account(db, user.id)
    if not account or not verify_password(payload.password, account.password):
        raise HTTPException(status_code=400, detail="Invalid password")

    delete_user(db, user)
    clear_session_cookie(response)
    return {"success": True, "message": "User deleted"}
