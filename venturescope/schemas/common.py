"""Patterns and envelopes reused across request and response schemas."""

from __future__ import annotations

from pydantic import BaseModel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
URL_PATTERN = r"^https?://\S+$"


class SuccessResponse(BaseModel):
    success: bool = True
