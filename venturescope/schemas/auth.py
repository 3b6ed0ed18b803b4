"""Auth schema module."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from venturescope.schemas.common import EMAIL_PATTERN


class SignupRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN, max_length=320)
    password: str = Field(min_length=8, max_length=256)
    name: str | None = Field(default=None, max_length=255)
    organization_name: str | None = Field(default=None, max_length=255)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.strip().lower()


class LoginRequest(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=256)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.strip().lower()


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user_id: int
    org_id: int | None = None
    org_role: str | None = None
