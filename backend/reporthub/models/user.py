from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from reporthub.utils.clock import utcnow


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    full_name: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class EmailOTP(SQLModel, table=True):
    __tablename__ = "email_otps"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True)
    otp: str
    expires_at: datetime
    verified: bool = False
    created_at: datetime = Field(default_factory=utcnow)


class AuthSession(SQLModel, table=True):
    __tablename__ = "auth_sessions"

    id: Optional[int] = Field(default=None, primary_key=True)
    token: str = Field(index=True, unique=True)
    user_id: int = Field(foreign_key="users.id")
    expires_at: datetime
    created_at: datetime = Field(default_factory=utcnow)


class SendOTPRequest(SQLModel):
    email: str


class VerifyOTPRequest(SQLModel):
    email: str
    otp: str
    full_name: Optional[str] = None
