"""Assessment, share, and comment model module."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from venturescope.models.base import AuditMixin, Base, CreatedAtMixin, enum_column
from venturescope.models.enums import AssessmentStatus, AssessmentType, Recommendation, SharePermission


class Assessment(Base, AuditMixin):
    __tablename__ = "assessments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    type: Mapped[AssessmentType] = mapped_column(enum_column(AssessmentType), nullable=False)
    status: Mapped[AssessmentStatus] = mapped_column(
        enum_column(AssessmentStatus), default=AssessmentStatus.PENDING, nullable=False
    )
    content: Mapped[str | None] = mapped_column(Text)
    scores: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    recommendation: Mapped[Recommendation | None] = mapped_column(enum_column(Recommendation))
    overall_score: Mapped[float | None] = mapped_column(Float)
    processing_time_ms: Mapped[int | None] = mapped_column(Integer)
    error_message: Mapped[str | None] = mapped_column(Text)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)

    company = relationship("Company", back_populates="assessments")
    shares = relationship("AssessmentShare", back_populates="assessment", cascade="all, delete-orphan")
    comments = relationship("AssessmentComment", back_populates="assessment", cascade="all, delete-orphan")
    ic_rounds = relationship("ICVotingRound", back_populates="assessment", cascade="all, delete-orphan")

    @property
    def company_name(self) -> str | None:
        return self.company.name if self.company is not None else None


class AssessmentShare(Base, CreatedAtMixin):
    __tablename__ = "assessment_shares"
    __table_args__ = (
        UniqueConstraint("assessment_id", "shared_with_user_id", name="uq_assessment_shares_assessment_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    assessment_id: Mapped[int] = mapped_column(ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False)
    shared_with_user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    shared_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    permission: Mapped[SharePermission] = mapped_column(
        enum_column(SharePermission), default=SharePermission.VIEW, nullable=False
    )

    assessment = relationship("Assessment", back_populates="shares")


class AssessmentComment(Base, AuditMixin):
    __tablename__ = "assessment_comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    assessment_id: Mapped[int] = mapped_column(
        ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    parent_id: Mapped[int | None] = mapped_column(ForeignKey("assessment_comments.id", ondelete="CASCADE"))

    assessment = relationship("Assessment", back_populates="comments")
    replies = relationship("AssessmentComment", cascade="all, delete-orphan")
