"""Investment-committee voting round models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from venturescope.models.base import AuditMixin, Base, CreatedAtMixin, OrgScopedMixin, enum_column
from venturescope.models.enums import RoundStatus, VoteChoice


class ICVotingRound(Base, OrgScopedMixin, AuditMixin):
    __tablename__ = "ic_voting_rounds"
    __table_args__ = (
        CheckConstraint("quorum_percentage >= 1 AND quorum_percentage <= 100", name="ck_ic_rounds_quorum_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    assessment_id: Mapped[int] = mapped_column(ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    deadline: Mapped[datetime | None] = mapped_column(DateTime)
    quorum_percentage: Mapped[int] = mapped_column(Integer, default=50, nullable=False)
    status: Mapped[RoundStatus] = mapped_column(enum_column(RoundStatus), default=RoundStatus.OPEN, nullable=False)
    revealed_at: Mapped[datetime | None] = mapped_column(DateTime)

    assessment = relationship("Assessment", back_populates="ic_rounds")
    participants = relationship("ICRoundParticipant", back_populates="round", cascade="all, delete-orphan")
    votes = relationship("ICVote", back_populates="round", cascade="all, delete-orphan")


class ICRoundParticipant(Base, CreatedAtMixin):
    __tablename__ = "ic_round_participants"
    __table_args__ = (UniqueConstraint("round_id", "user_id", name="uq_ic_round_participants_round_user"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    round_id: Mapped[int] = mapped_column(ForeignKey("ic_voting_rounds.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    round = relationship("ICVotingRound", back_populates="participants")


class ICVote(Base, AuditMixin):
    __tablename__ = "ic_votes"
    __table_args__ = (UniqueConstraint("round_id", "user_id", name="uq_ic_votes_round_user"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    round_id: Mapped[int] = mapped_column(ForeignKey("ic_voting_rounds.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    vote: Mapped[VoteChoice] = mapped_column(enum_column(VoteChoice), nullable=False)
    comment: Mapped[str | None] = mapped_column(Text)

    round = relationship("ICVotingRound", back_populates="votes")
