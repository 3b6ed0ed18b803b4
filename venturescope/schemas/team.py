"""Team membership schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from venturescope.models.enums import OrgRole
from venturescope.schemas.common import EMAIL_PATTERN


class InviteMemberRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN, max_length=320)
    role: Literal["admin", "member"] = "member"


class UpdateMemberRoleRequest(BaseModel):
    role: Literal["admin", "member"]


class TeamMemberResponse(BaseModel):
    id: int
    user_id: int
    email: str
    name: str | None = None
    avatar_url: str | None = None
    role: OrgRole
    invited_at: datetime | None = None
    accepted_at: datetime | None = None
