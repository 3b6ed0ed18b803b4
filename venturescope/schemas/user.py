"""User profile, notification, and session schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from venturescope.models.enums import UserRole


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None = None
    avatar_url: str | None = None
    role: UserRole
    created_at: datetime | None = None


class ProfileUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    avatar_url: str | None = Field(default=None, max_length=1024)
    role: UserRole | None = None


class NotificationSettings(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    email_assessments: bool = True
    email_comments: bool = True
    email_sharing: bool = True
    email_digest: bool = False


class NotificationSettingsUpdate(BaseModel):
    email_assessments: bool | None = None
    email_comments: bool | None = None
    email_sharing: bool | None = None
    email_digest: bool | None = None


class SessionResponse(BaseModel):
    id: int
    device: str
    browser: str
    created_at: datetime | None = None
    last_active_at: datetime | None = None
    expires_at: datetime | None = None
    is_current: bool = Field(default=False, serialization_alias="isCurrent")
