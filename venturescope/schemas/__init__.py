"""Pydantic schema package for API contracts."""

from venturescope.schemas.assessments import (
    AssessmentCreateRequest,
    AssessmentResponse,
    CommentCreateRequest,
    CommentResponse,
    ShareCreateRequest,
    ShareResponse,
)
from venturescope.schemas.auth import LoginRequest, SignupRequest, TokenResponse
from venturescope.schemas.billing import CheckoutRequest, RedirectResponse, WebhookAck
from venturescope.schemas.chat import Citation, MessageCreateRequest, MessageResponse, ThreadCreateRequest, ThreadResponse
from venturescope.schemas.common import SuccessResponse
from venturescope.schemas.companies import CompanyCreateRequest, CompanyResponse, CompanyUpdateRequest
from venturescope.schemas.documents import DocumentDetailResponse, DocumentProcessRequest, DocumentResponse
from venturescope.schemas.ic_rounds import (
    RoundCreateRequest,
    RoundResponse,
    RoundSummaryResponse,
    RoundUpdateRequest,
    VoteRequest,
    VoteResponse,
)
from venturescope.schemas.submissions import (
    AcceptSubmissionResponse,
    IntakeSubmissionRequest,
    IntakeSubmissionResponse,
    SubmissionResponse,
    SubmissionUpdateRequest,
)
from venturescope.schemas.team import InviteMemberRequest, TeamMemberResponse, UpdateMemberRoleRequest
from venturescope.schemas.user import (
    NotificationSettings,
    NotificationSettingsUpdate,
    ProfileResponse,
    ProfileUpdateRequest,
    SessionResponse,
)

__all__ = [
    "AcceptSubmissionResponse",
    "AssessmentCreateRequest",
    "AssessmentResponse",
    "CheckoutRequest",
    "Citation",
    "CommentCreateRequest",
    "CommentResponse",
    "CompanyCreateRequest",
    "CompanyResponse",
    "CompanyUpdateRequest",
    "DocumentDetailResponse",
    "DocumentProcessRequest",
    "DocumentResponse",
    "IntakeSubmissionRequest",
    "IntakeSubmissionResponse",
    "InviteMemberRequest",
    "LoginRequest",
    "MessageCreateRequest",
    "MessageResponse",
    "NotificationSettings",
    "NotificationSettingsUpdate",
    "ProfileResponse",
    "ProfileUpdateRequest",
    "RedirectResponse",
    "RoundCreateRequest",
    "RoundResponse",
    "RoundSummaryResponse",
    "RoundUpdateRequest",
    "SessionResponse",
    "ShareCreateRequest",
    "ShareResponse",
    "SignupRequest",
    "SuccessResponse",
    "TeamMemberResponse",
    "ThreadCreateRequest",
    "ThreadResponse",
    "TokenResponse",
    "UpdateMemberRoleRequest",
    "VoteRequest",
    "VoteResponse",
]
