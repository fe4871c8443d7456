from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=256)
    full_name: str = Field(..., min_length=1, max_length=120, alias="fullName")
    phone_number: str = Field(..., min_length=1, max_length=32, alias="phoneNumber")


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=256)


class GoogleLoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id_token: str = Field(..., min_length=1, alias="idToken")


class RefreshTokenRequest(BaseModel):
    refresh_token: str | None = None


class EmailRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1, max_length=256, alias="newPassword")


class AuthUserResponse(BaseModel):
    id: str
    email: str
    full_name: str
    phone_number: str | None
    role: str
    is_verified: bool
    profile_picture_url: str | None = None
    created_at: datetime
    updated_at: datetime


class RegisterResponse(BaseModel):
    message: str
    user: AuthUserResponse


class AuthTokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    access_expires_at: datetime
    refresh_expires_at: datetime
    user: AuthUserResponse


class VerifyEmailResponse(BaseModel):
    message: str
    user: AuthUserResponse


class MessageResponse(BaseModel):
    message: str


class ResetTokenStatusResponse(BaseModel):
    valid: bool
    message: str
