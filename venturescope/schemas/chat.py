"""Chat schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from venturescope.models.enums import ChatRole


class Citation(BaseModel):
    source: str
    text: str


class ThreadCreateRequest(BaseModel):
    company_id: int = Field(ge=1)
    title: str | None = Field(default=None, max_length=255)


class ThreadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    user_id: int
    title: str | None = None
    message_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class MessageCreateRequest(BaseModel):
    content: str = Field(min_length=1, max_length=10000)


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    thread_id: int
    role: ChatRole
    content: str
    citations: list[Citation] | None = None
    created_at: datetime | None = None
