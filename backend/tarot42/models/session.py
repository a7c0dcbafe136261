# tarot42/models/session.py
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import relationship

from tarot42.core.base import Base


class UserSession(Base):
    __tablename__ = "session"

    id = Column(String(36), primary_key=True)

    user_id = Column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Opaque credential presented as a bearer token or cookie.
    token = Column(String(255), unique=True, index=True, nullable=False)

    # Absolute expiration for this session
    expires_at = Column(DateTime(timezone=True), nullable=False)

    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="sessions")
