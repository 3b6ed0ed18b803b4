"""Investment-committee voting round schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from venturescope.models.enums import RoundStatus, VoteChoice


class RoundCreateRequest(BaseModel):
    assessment_id: int = Field(ge=1)
    title: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=5000)
    deadline: datetime
    quorum_percentage: int = Field(default=50, ge=1, le=100)
    participant_ids: list[int] = Field(min_length=1)


class RoundUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=5000)
    deadline: datetime | None = None
    quorum_percentage: int | None = Field(default=None, ge=1, le=100)
    status: RoundStatus | None = None


class VoteRequest(BaseModel):
    vote: VoteChoice
    comment: str | None = Field(default=None, max_length=2000)


class VoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    round_id: int
    user_id: int
    vote: VoteChoice | None = None
    comment: str | None = None
    created_at: datetime | None = None


class RoundResponse(BaseModel):
    id: int
    org_id: int
    assessment_id: int
    company_name: str | None = None
    created_by: int | None = None
    title: str
    description: str | None = None
    deadline: datetime | None = None
    quorum_percentage: int
    status: RoundStatus
    revealed_at: datetime | None = None
    is_revealed: bool = False
    is_participant: bool = False
    user_has_voted: bool = False
    participant_ids: list[int] = Field(default_factory=list)
    total_participants: int = 0
    votes_submitted: int = 0
    votes: list[VoteResponse] = Field(default_factory=list)
    created_at: datetime | None = None


class VoteBucket(BaseModel):
    vote: VoteChoice
    label: str
    count: int
    percentage: int


class VoteComment(BaseModel):
    user: str
    vote: str
    comment: str


class RoundSummaryResponse(BaseModel):
    round_id: int
    title: str
    status: RoundStatus
    deadline: datetime | None = None
    revealed_at: datetime | None = None
    is_revealed: bool
    total_participants: int
    votes_submitted: int
    quorum_percentage: int
    quorum_required: int
    quorum_met: bool
    vote_distribution: list[VoteBucket] = Field(default_factory=list)
    average_score: float | None = None
    consensus: str | None = None
    comments: list[VoteComment] = Field(default_factory=list)
    message: str | None = None
