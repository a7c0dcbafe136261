# tarot42/models/account.py
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import relationship

from tarot42.core.base import Base

CREDENTIAL_PROVIDER = "credential"


class Account(Base):
    """Link between a user and a credential provider (password or OAuth)."""

    __tablename__ = "account"
    __table_args__ = (UniqueConstraint("provider_id", "account_id", name="uq_account_provider_account"),)

    id = Column(String(36), primary_key=True)

    # Provider-side identifier; equals user.id for the credential provider.
    account_id = Column(String(255), nullable=False)
    provider_id = Column(String(50), nullable=False)

    user_id = Column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Provider-issued tokens (OAuth providers only)
    access_token = Column(Text, nullable=True)
    refresh_token = Column(Text, nullable=True)
    id_token = Column(Text, nullable=True)
    access_token_expires_at = Column(DateTime(timezone=True), nullable=True)
    refresh_token_expires_at = Column(DateTime(timezone=True), nullable=True)
    scope = Column(Text, nullable=True)

    # Password hash (credential provider only)
    password = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="accounts")
