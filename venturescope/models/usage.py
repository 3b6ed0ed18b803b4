"""Append-only usage ledger model."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from venturescope.models.base import Base, CreatedAtMixin, OrgScopedMixin, enum_column
from venturescope.models.enums import AssessmentType


class UsageRecord(Base, OrgScopedMixin, CreatedAtMixin):
    __tablename__ = "usage_records"
    __table_args__ = (Index("idx_usage_records_org_created", "org_id", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    assessment_type: Mapped[AssessmentType] = mapped_column(enum_column(AssessmentType), nullable=False)
    assessment_id: Mapped[int | None] = mapped_column(ForeignKey("assessments.id", ondelete="SET NULL"))
    tokens_used: Mapped[int | None] = mapped_column(Integer)
