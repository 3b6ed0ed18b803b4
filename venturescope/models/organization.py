"""Organization and membership model module."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from venturescope.models.base import Base, CreatedAtMixin, enum_column, utcnow
from venturescope.models.enums import OrgRole, PlanTier


class Organization(Base, CreatedAtMixin):
    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    plan_tier: Mapped[PlanTier] = mapped_column(enum_column(PlanTier), default=PlanTier.FREE, nullable=False)
    assessments_used_this_month: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    billing_cycle_start: Mapped[datetime | None] = mapped_column(DateTime, default=utcnow)
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255), unique=True, index=True)
    stripe_subscription_id: Mapped[str | None] = mapped_column(String(255))
    intake_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    memberships = relationship("OrgMembership", back_populates="organization", cascade="all, delete-orphan")


class OrgMembership(Base):
    __tablename__ = "org_memberships"
    __table_args__ = (
        UniqueConstraint("org_id", "user_id", name="uq_org_memberships_org_user"),
        Index("idx_org_memberships_user_accepted", "user_id", "accepted_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role: Mapped[OrgRole] = mapped_column(enum_column(OrgRole), default=OrgRole.MEMBER, nullable=False)
    invited_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime)

    organization = relationship("Organization", back_populates="memberships")
    user = relationship("User", back_populates="memberships")
