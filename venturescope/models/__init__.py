"""Modular SQLAlchemy model package for the org-scoped schema."""

from venturescope.models.assessment import Assessment, AssessmentComment, AssessmentShare
from venturescope.models.base import Base
from venturescope.models.chat import ChatMessage, ChatThread
from venturescope.models.company import Company, Document
from venturescope.models.enums import (
    AssessmentStatus,
    AssessmentType,
    ChatRole,
    CompanyStage,
    CompanyStatus,
    DocumentClassification,
    OrgRole,
    PlanTier,
    Recommendation,
    RoundStatus,
    SharePermission,
    SubmissionStatus,
    UserRole,
    VoteChoice,
)
from venturescope.models.ic_voting import ICRoundParticipant, ICVote, ICVotingRound
from venturescope.models.organization import OrgMembership, Organization
from venturescope.models.submission import DealSubmission, IntakeRateLimit
from venturescope.models.usage import UsageRecord
from venturescope.models.user import User, UserSession, UserSettings

__all__ = [
    "Assessment",
    "AssessmentComment",
    "AssessmentShare",
    "AssessmentStatus",
    "AssessmentType",
    "Base",
    "ChatMessage",
    "ChatRole",
    "ChatThread",
    "Company",
    "CompanyStage",
    "CompanyStatus",
    "DealSubmission",
    "Document",
    "DocumentClassification",
    "ICRoundParticipant",
    "ICVote",
    "ICVotingRound",
    "IntakeRateLimit",
    "OrgMembership",
    "OrgRole",
    "Organization",
    "PlanTier",
    "Recommendation",
    "RoundStatus",
    "SharePermission",
    "SubmissionStatus",
    "UsageRecord",
    "User",
    "UserRole",
    "UserSession",
    "UserSettings",
    "VoteChoice",
]
