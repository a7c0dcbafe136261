# tarot42/models/drawn_card.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from tarot42.core.base import Base


class DrawnCard(Base):
    __tablename__ = "drawn_card_history"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    card_name = Column(String(100), nullable=False)
    card_upright = Column(Boolean, nullable=False, default=True, server_default="true")
    reading_context = Column(Text, nullable=True)

    drawn_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="drawn_cards")
