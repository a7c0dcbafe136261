# tarot42/models/verification.py
from sqlalchemy import Column, DateTime, String, func

from tarot42.core.base import Base


class Verification(Base):
    __tablename__ = "verification"

    id = Column(String(36), primary_key=True)

    # e.g. "email-verification:<email>"
    identifier = Column(String(255), nullable=False, index=True)

    # Store ONLY a hash of the token id
    value = Column(String(255), nullable=False)

    expires_at = Column(DateTime(timezone=True), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
