"""Assessment, share, and comment schemas."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from venturescope.models.enums import AssessmentStatus, AssessmentType, Recommendation, SharePermission
from venturescope.schemas.common import EMAIL_PATTERN


class AssessmentCreateRequest(BaseModel):
    company_id: int = Field(ge=1)
    type: AssessmentType = AssessmentType.SCREENING


class AssessmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    created_by: int | None = None
    type: AssessmentType
    status: AssessmentStatus
    company_name: str | None = None
    content: Any = None
    scores: dict[str, Any] | None = None
    recommendation: Recommendation | None = None
    overall_score: float | None = None
    processing_time_ms: int | None = None
    error_message: str | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _decode_content(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return value
        return value


class ShareCreateRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN, max_length=320)
    permission: SharePermission = SharePermission.VIEW


class ShareResponse(BaseModel):
    id: int
    assessment_id: int
    shared_with_user_id: int
    shared_with_email: str | None = None
    shared_with_name: str | None = None
    shared_by: int | None = None
    permission: SharePermission
    created_at: datetime | None = None


class CommentCreateRequest(BaseModel):
    content: str = Field(min_length=1, max_length=5000)
    parent_id: int | None = Field(default=None, ge=1)


class CommentResponse(BaseModel):
    id: int
    assessment_id: int
    user_id: int
    user_name: str | None = None
    content: str
    parent_id: int | None = None
    created_at: datetime | None = None
    replies: list["CommentResponse"] = Field(default_factory=list)


CommentResponse.model_rebuild()
