from __future__ import annotations

from datetime import datetime, timezone
from hashlib import sha256

from sqlalchemy.orm import Session

from tarot42.core.security import create_email_verification_token, generate_id
from tarot42.models.user import User
from tarot42.models.verification import Verification


def _identifier(email: str) -> str:
    return f"email-verification:{email}"


def _hash_token_id(token_id: str) -> str:
    return sha256(token_id.encode("utf-8")).hexdigest()


def issue_email_verification_token(db: Session, user: User) -> str:
    """
    Generates a new verification token JWT for the given user, stores a hashed token id
    so it can be verified/invalidated later, and returns the raw token string.
    """
    token, token_id, expires_at = create_email_verification_token(email=user.email)
    identifier = _identifier(user.email)

    # Remove any previously issued tokens so only the latest link works.
    db.query(Verification).filter(Verification.identifier == identifier).delete(synchronize_session=False)

    db.add(
        Verification(
            id=generate_id(),
            identifier=identifier,
            value=_hash_token_id(token_id),
            expires_at=expires_at,
        )
    )
    db.flush()
    return token


def consume_email_verification_token(db: Session, user: User, token_id: str) -> None:
    """
    Deletes the matching verification record. Raises ValueError if the token is invalid.
    """
    record = (
        db.query(Verification)
        .filter(
            Verification.identifier == _identifier(user.email),
            Verification.value == _hash_token_id(token_id),
        )
        .first()
    )
    if not record:
        raise ValueError("Invalid or expired token")

    expires_at = record.expires_at
    if expires_at is None:
        raise ValueError("Invalid or expired token")
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at <= datetime.now(timezone.utc):
        raise ValueError("Invalid or expired token")

    db.delete(record)
