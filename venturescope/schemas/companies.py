"""Company request/response schemas for API contracts."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from venturescope.models.enums import CompanyStage, CompanyStatus


class CompanyCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    stage: CompanyStage | None = None
    sector: str | None = Field(default=None, max_length=120)
    raise_amount: float | None = Field(default=None, ge=0)
    valuation: float | None = Field(default=None, ge=0)
    status: CompanyStatus = CompanyStatus.ACTIVE
    website: str | None = Field(default=None, max_length=1024)
    description: str | None = Field(default=None, max_length=10000)


class CompanyUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    stage: CompanyStage | None = None
    sector: str | None = Field(default=None, max_length=120)
    raise_amount: float | None = Field(default=None, ge=0)
    valuation: float | None = Field(default=None, ge=0)
    status: CompanyStatus | None = None
    website: str | None = Field(default=None, max_length=1024)
    description: str | None = Field(default=None, max_length=10000)
    pipeline_position: int | None = Field(default=None, ge=0)


class CompanyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    org_id: int
    name: str
    stage: CompanyStage | None = None
    sector: str | None = None
    raise_amount: float | None = None
    valuation: float | None = None
    status: CompanyStatus
    website: str | None = None
    description: str | None = None
    pipeline_position: int = 0
    created_by: int | None = None
    document_count: int | None = None
    assessment_count: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
