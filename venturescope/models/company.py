"""Company and document model module."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, BigInteger, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from venturescope.models.base import AuditMixin, Base, CreatedAtMixin, OrgScopedMixin, enum_column
from venturescope.models.enums import CompanyStage, CompanyStatus, DocumentClassification


class Company(Base, OrgScopedMixin, AuditMixin):
    __tablename__ = "companies"
    __table_args__ = (Index("idx_companies_org_status", "org_id", "status"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    stage: Mapped[CompanyStage | None] = mapped_column(enum_column(CompanyStage))
    sector: Mapped[str | None] = mapped_column(String(120))
    raise_amount: Mapped[float | None] = mapped_column(Float)
    valuation: Mapped[float | None] = mapped_column(Float)
    status: Mapped[CompanyStatus] = mapped_column(
        enum_column(CompanyStatus), default=CompanyStatus.ACTIVE, nullable=False
    )
    website: Mapped[str | None] = mapped_column(String(1024))
    description: Mapped[str | None] = mapped_column(Text)
    pipeline_position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))

    documents = relationship("Document", back_populates="company", cascade="all, delete-orphan")
    assessments = relationship("Assessment", back_populates="company", cascade="all, delete-orphan")
    chat_threads = relationship("ChatThread", back_populates="company", cascade="all, delete-orphan")


class Document(Base, CreatedAtMixin):
    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    uploaded_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    file_name: Mapped[str] = mapped_column(String(512), nullable=False)
    file_type: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    file_path: Mapped[str] = mapped_column(String(1024), nullable=False)
    classification: Mapped[DocumentClassification | None] = mapped_column(enum_column(DocumentClassification))
    extracted_text: Mapped[str | None] = mapped_column(Text)
    # "metadata" is reserved on declarative classes.
    doc_metadata: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, default=dict, nullable=False)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime)
    error_message: Mapped[str | None] = mapped_column(Text)

    company = relationship("Company", back_populates="documents")
