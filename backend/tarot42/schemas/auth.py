# tarot42/schemas/auth.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from tarot42.schemas.base import CamelModel


class SignUpIn(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)
    name: str = Field(min_length=1, max_length=100)
    image: Optional[str] = None


class SignInIn(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class SendVerificationIn(CamelModel):
    email: EmailStr


class DeleteUserIn(CamelModel):
    password: str = Field(min_length=1, max_length=128)


class UserOut(CamelModel):
    id: str
    email: str
    name: Optional[str] = None
    image: Optional[str] = None
    email_verified: bool
    created_at: datetime
    updated_at: datetime


class SessionOut(CamelModel):
    id: str
    user_id: str
    token: str
    expires_at: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AuthTokenOut(CamelModel):
    token: Optional[str] = None
    user: UserOut


class SessionEnvelopeOut(CamelModel):
    session: SessionOut
    user: UserOut


class VerifyEmailOut(CamelModel):
    status: bool = True
    message: str
    token: Optional[str] = None
    user: Optional[UserOut] = None


class SuccessOut(CamelModel):
    success: bool = True
    message: Optional[str] = None


class MessageOut(BaseModel):
    message: str
