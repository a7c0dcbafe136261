from __future__ import annotations

import logging

from fastapi import Request
from sqlalchemy.orm import Session

from tarot42.models.auth_event import AuthEvent
from tarot42.services.sessions import client_ip, client_user_agent

logger = logging.getLogger(__name__)

SIGN_UP = "sign_up"
SIGN_IN = "sign_in"
SIGN_IN_FAILED = "sign_in_failed"
SIGN_OUT = "sign_out"
EMAIL_VERIFIED = "email_verified"


def record_auth_event(db: Session, user_id: str, event_type: str, request: Request | None = None) -> AuthEvent:
    """Add an audit row for an auth event. The caller commits."""
    event = AuthEvent(
        user_id=user_id,
        event_type=event_type,
        ip_address=client_ip(request) if request is not None else None,
        user_agent=client_user_agent(request) if request is not None else None,
    )
    db.add(event)
    logger.info("auth_event type=%s user_id=%s", event_type, user_id)
    return event
