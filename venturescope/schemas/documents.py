"""Document schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from venturescope.models.enums import DocumentClassification


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    company_id: int
    uploaded_by: int | None = None
    file_name: str
    file_type: str
    file_size: int
    file_path: str
    classification: DocumentClassification | None = None
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="doc_metadata")
    processed_at: datetime | None = None
    error_message: str | None = None
    created_at: datetime | None = None


class DocumentDetailResponse(DocumentResponse):
    extracted_text: str | None = None
    signed_url: str | None = Field(default=None, serialization_alias="signedUrl")


class DocumentProcessRequest(BaseModel):
    document_id: int = Field(ge=1)
