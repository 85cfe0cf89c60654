# payroll/schemas/auth.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class _Credentials(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def normalize(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class SignupRequest(_Credentials):
    password: str = Field(min_length=6, max_length=128)


class LoginRequest(_Credentials):
    password: str = Field(min_length=1, max_length=128)


class UserPublic(BaseModel):
    id: str
    email: str


class SessionUser(UserPublic):
    model_config = ConfigDict(populate_by_name=True)

    company_id: Optional[str] = Field(default=None, alias="companyId")


class SignupResponse(BaseModel):
    user: UserPublic
    message: str


class LoginResponse(BaseModel):
    user: SessionUser
    access_token: str
    refresh_token: str


class TokenPairOut(BaseModel):
    access_token: str
    refresh_token: str


class LogoutResponse(BaseModel):
    success: bool = True
