# tarot42/models/user.py
from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import relationship

from tarot42.core.base import Base


class User(Base):
    __tablename__ = "user"

    id = Column(String(36), primary_key=True)

    name = Column(String(100), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    email_verified = Column(Boolean, nullable=False, default=False, server_default="false")
    image = Column(Text, nullable=True)

    # Astrological data
    zodiac_sign = Column(String(50), nullable=True)
    selected_element = Column(String(50), nullable=True)

    # Personal goals & details
    personal_goals = Column(String(200), nullable=True)
    additional_details = Column(Text, nullable=True)
    focus_area = Column(String(100), nullable=True)

    # Demographics
    gender = Column(String(50), nullable=True)
    age_range = Column(String(50), nullable=True)

    # Birth date & time. Kept as the client-supplied ISO string.
    birth_date_time = Column(String(64), nullable=True)
    include_time = Column(Boolean, nullable=True)

    # Legacy profile fields, superseded by birth_date_time / age_range.
    birthday = Column(DateTime(timezone=True), nullable=True)
    age = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
    accounts = relationship("Account", back_populates="user", cascade="all, delete-orphan")
    goals = relationship("UserGoal", back_populates="user", cascade="all, delete-orphan")
    drawn_cards = relationship("DrawnCard", back_populates="user", cascade="all, delete-orphan")
    auth_events = relationship("AuthEvent", back_populates="user", cascade="all, delete-orphan")
