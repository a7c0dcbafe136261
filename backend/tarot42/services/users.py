# tarot42/services/users.py
"""
User management helpers.

Responsibilities:
- User lookup by email / id
- Creating email/password users together with their credential account
- Resolving the stored password hash for a user
- Deleting a user (sessions, accounts, goals and history cascade)
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from tarot42.core.security import generate_id, hash_password
from tarot42.models.account import CREDENTIAL_PROVIDER, Account
from tarot42.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Tarot42 User"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Look up a user by email address."""
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_credential_account(db: Session, user_id: str) -> Optional[Account]:
    return (
        db.query(Account)
        .filter(Account.user_id == user_id, Account.provider_id == CREDENTIAL_PROVIDER)
        .first()
    )


def create_credential_user(
    db: Session,
    *,
    email: str,
    password: str,
    name: str | None = None,
    image: str | None = None,
) -> User:
    """
    Create a user with an email/password account. The caller commits.

    Raises:
        ValueError: If the email is already registered
    """
    normalized_email = normalize_email(email)
    if get_user_by_email(db, normalized_email):
        raise ValueError("User already exists")

    user = User(
        id=generate_id(),
        email=normalized_email,
        name=normalize_name(name, fallback=normalized_email),
        image=image,
        email_verified=False,
    )
    db.add(user)
    db.flush()

    db.add(
        Account(
            id=generate_id(),
            account_id=user.id,
            provider_id=CREDENTIAL_PROVIDER,
            user_id=user.id,
            password=hash_password(password),
        )
    )
    db.flush()
    return user


def delete_user(db: Session, user: User) -> None:
    user_id, email = user.id, user.email
    logger.info("User %s (ID: %s) is about to be deleted.", email, user_id)
    db.delete(user)
    db.commit()
    logger.info("User %s (ID: %s) has been successfully deleted.", email, user_id)


def normalize_name(name: str | None, fallback: str) -> str:
    """Normalize name, falling back to email localpart if needed."""
    if name:
        clean = name.strip()
        if clean:
            return clean[:100]

    if fallback and "@" in fallback:
        local = fallback.split("@", 1)[0]
        if local:
            return local[:100]
    return DEFAULT_NAME
