"""Canonical enum values for the tenant schema."""

from __future__ import annotations

import enum


class PlanTier(str, enum.Enum):
    FREE = "free"
    ANGEL = "angel"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class OrgRole(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class UserRole(str, enum.Enum):
    ANGEL = "angel"
    ANALYST = "analyst"
    PARTNER = "partner"
    FAMILY_OFFICE = "family_office"


class CompanyStage(str, enum.Enum):
    PRE_SEED = "pre_seed"
    SEED = "seed"
    SERIES_A = "series_a"
    SERIES_B = "series_b"
    SERIES_C = "series_c"
    GROWTH = "growth"


class CompanyStatus(str, enum.Enum):
    ACTIVE = "active"
    PASSED = "passed"
    INVESTED = "invested"
    WATCHING = "watching"


class DocumentClassification(str, enum.Enum):
    PITCH_DECK = "pitch_deck"
    FINANCIALS = "financials"
    CAP_TABLE = "cap_table"
    LEGAL = "legal"
    PRODUCT_DEMO = "product_demo"
    FOUNDER_VIDEO = "founder_video"
    CUSTOMER_REFERENCE = "customer_reference"
    OTHER = "other"


class AssessmentType(str, enum.Enum):
    SCREENING = "screening"
    FULL = "full"


class AssessmentStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Recommendation(str, enum.Enum):
    STRONG_CONVICTION = "strong_conviction"
    PROCEED = "proceed"
    CONDITIONAL = "conditional"
    PASS = "pass"


class ChatRole(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"


class SharePermission(str, enum.Enum):
    VIEW = "view"
    COMMENT = "comment"
    EDIT = "edit"


class SubmissionStatus(str, enum.Enum):
    PENDING = "pending"
    REVIEWING = "reviewing"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class RoundStatus(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class VoteChoice(str, enum.Enum):
    STRONG_YES = "strong_yes"
    YES = "yes"
    NEUTRAL = "neutral"
    NO = "no"
    STRONG_NO = "strong_no"
