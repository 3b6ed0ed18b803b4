"""Deal submission schemas, including the public intake form."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from venturescope.models.enums import CompanyStage, SubmissionStatus
from venturescope.schemas.common import EMAIL_PATTERN, URL_PATTERN


class IntakeSubmissionRequest(BaseModel):
    company_name: str = Field(min_length=1, max_length=100)
    founder_name: str = Field(min_length=1, max_length=100)
    founder_email: str = Field(pattern=EMAIL_PATTERN, max_length=320)
    website: str | None = Field(default=None, pattern=URL_PATTERN, max_length=1024)
    pitch_deck_url: str | None = Field(default=None, pattern=URL_PATTERN, max_length=1024)
    stage: CompanyStage | None = None
    sector: str | None = Field(default=None, max_length=120)
    raise_amount: float | None = Field(default=None, ge=0)
    description: str | None = Field(default=None, max_length=2000)
    referral_source: str | None = Field(default=None, max_length=200)


class IntakeSubmissionResponse(BaseModel):
    success: bool = True
    id: int


class SubmissionUpdateRequest(BaseModel):
    status: SubmissionStatus | None = None
    notes: str | None = Field(default=None, max_length=10000)


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    org_id: int
    company_name: str
    founder_name: str
    founder_email: str
    website: str | None = None
    pitch_deck_url: str | None = None
    stage: CompanyStage | None = None
    sector: str | None = None
    raise_amount: float | None = None
    description: str | None = None
    referral_source: str | None = None
    status: SubmissionStatus
    notes: str | None = None
    company_id: int | None = None
    reviewed_at: datetime | None = None
    reviewed_by: int | None = None
    created_at: datetime | None = None


class AcceptSubmissionResponse(BaseModel):
    success: bool = True
    company_id: int = Field(serialization_alias="companyId")
