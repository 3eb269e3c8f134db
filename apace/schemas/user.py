from __future__ import annotations
from typing import Optional
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from apace.schemas.common import CamelModel

PHONE_PATTERN = r"^\+?\d{7,15}$"
NAME_PATTERN = r"^[A-Za-z ]+$"


class UserRead(CamelModel):
    id: UUID
    first_name: str
    last_name: str
    email: EmailStr
    phone: str
    profile_picture: Optional[str] = None
    active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class UserUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    profile_picture: Optional[str] = None


class AdminRead(CamelModel):
    id: UUID
    first_name: str
    last_name: str
    email: EmailStr
    phone: str
    active: bool
    created_at: datetime


class ActiveUpdate(CamelModel):
    active: bool


# Authentication payloads

class OtpRequest(BaseModel):
    phone: str = Field(..., pattern=PHONE_PATTERN)


class OtpVerify(BaseModel):
    phone: str = Field(..., pattern=PHONE_PATTERN)
    otp: str = Field(..., pattern=r"^\d{6}$")


class UserSignup(CamelModel):
    first_name: str = Field(..., min_length=2, max_length=50, pattern=NAME_PATTERN)
    last_name: str = Field(..., min_length=2, max_length=50, pattern=NAME_PATTERN)
    email: EmailStr
    phone: str = Field(..., pattern=PHONE_PATTERN)


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    status: str = "success"
    token: Optional[str] = None
    refreshToken: Optional[str] = None
    isNewUser: bool = False
    data: Optional[dict] = None
