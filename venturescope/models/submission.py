"""Deal submission and intake rate-limit model module."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from venturescope.models.base import AuditMixin, Base, CreatedAtMixin, OrgScopedMixin, enum_column
from venturescope.models.enums import CompanyStage, SubmissionStatus


class DealSubmission(Base, OrgScopedMixin, AuditMixin):
    __tablename__ = "deal_submissions"
    __table_args__ = (Index("idx_deal_submissions_org_status", "org_id", "status"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    founder_name: Mapped[str] = mapped_column(String(255), nullable=False)
    founder_email: Mapped[str] = mapped_column(String(320), nullable=False)
    website: Mapped[str | None] = mapped_column(String(1024))
    pitch_deck_url: Mapped[str | None] = mapped_column(String(1024))
    stage: Mapped[CompanyStage | None] = mapped_column(enum_column(CompanyStage))
    sector: Mapped[str | None] = mapped_column(String(120))
    raise_amount: Mapped[float | None] = mapped_column(Float)
    description: Mapped[str | None] = mapped_column(Text)
    referral_source: Mapped[str | None] = mapped_column(String(255))
    ip_address: Mapped[str | None] = mapped_column(String(64))
    status: Mapped[SubmissionStatus] = mapped_column(
        enum_column(SubmissionStatus), default=SubmissionStatus.PENDING, nullable=False
    )
    notes: Mapped[str | None] = mapped_column(Text)
    company_id: Mapped[int | None] = mapped_column(ForeignKey("companies.id", ondelete="SET NULL"))
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime)
    reviewed_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))


class IntakeRateLimit(Base, OrgScopedMixin, CreatedAtMixin):
    __tablename__ = "intake_rate_limits"
    __table_args__ = (Index("idx_intake_rate_limits_org_ip_created", "org_id", "ip_address", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ip_address: Mapped[str] = mapped_column(String(64), nullable=False)
