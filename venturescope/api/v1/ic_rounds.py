"""Investment-committee voting endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Query, Response, status
from sqlalchemy.orm import Session

from venturescope.api.v1._authz import authorize
from venturescope.core.dependencies import get_db_session
from venturescope.schemas.common import SuccessResponse
from venturescope.schemas.ic_rounds import (
    RoundCreateRequest,
    RoundResponse,
    RoundSummaryResponse,
    RoundUpdateRequest,
    VoteRequest,
    VoteResponse,
)
from venturescope.services.ic_round_service import ICRoundService

router = APIRouter(prefix="/ic-rounds", tags=["ic-rounds"])


@router.get("", response_model=list[RoundResponse])
def list_rounds(
    assessment_id: int | None = Query(default=None, alias="assessmentId"),
    status_filter: str | None = Query(default=None, alias="status"),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> list[RoundResponse]:
    user = authorize(db, authorization)
    context = user.org_context()
    service = ICRoundService(db)
    rounds = service.list_rounds(context, assessment_id=assessment_id, status=status_filter)
    return [RoundResponse(**service.serialize_round(context, round_)) for round_ in rounds]


@router.post("", response_model=RoundResponse, status_code=status.HTTP_201_CREATED)
def create_round(
    payload: RoundCreateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> RoundResponse:
    user = authorize(db, authorization)
    context = user.org_context()
    service = ICRoundService(db)
    round_ = service.create_round(context, payload.model_dump())
    return RoundResponse(**service.serialize_round(context, round_))


@router.get("/{round_id}", response_model=RoundResponse)
def get_round(
    round_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> RoundResponse:
    user = authorize(db, authorization)
    context = user.org_context()
    service = ICRoundService(db)
    return RoundResponse(**service.serialize_round(context, service.get_round(context, round_id)))


@router.patch("/{round_id}", response_model=RoundResponse)
def update_round(
    round_id: int,
    payload: RoundUpdateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> RoundResponse:
    user = authorize(db, authorization)
    context = user.org_context()
    service = ICRoundService(db)
    round_ = service.update_round(context, round_id, payload.model_dump(exclude_unset=True))
    return RoundResponse(**service.serialize_round(context, round_))


@router.delete("/{round_id}", response_model=SuccessResponse)
def delete_round(
    round_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> SuccessResponse:
    user = authorize(db, authorization)
    ICRoundService(db).delete_round(user.org_context(), round_id)
    return SuccessResponse()


@router.post("/{round_id}/vote", response_model=VoteResponse)
def cast_vote(
    round_id: int,
    payload: VoteRequest,
    response: Response,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> VoteResponse:
    user = authorize(db, authorization, scopes=["ic_rounds.vote"])
    ballot, created = ICRoundService(db).cast_vote(user.org_context(), round_id, payload.vote, payload.comment)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return VoteResponse.model_validate(ballot)


@router.post("/{round_id}/reveal", response_model=RoundResponse)
def reveal_votes(
    round_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> RoundResponse:
    user = authorize(db, authorization)
    context = user.org_context()
    service = ICRoundService(db)
    return RoundResponse(**service.serialize_round(context, service.reveal(context, round_id)))


@router.get("/{round_id}/summary", response_model=RoundSummaryResponse)
def round_summary(
    round_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> RoundSummaryResponse:
    user = authorize(db, authorization)
    return RoundSummaryResponse(**ICRoundService(db).summary(user.org_context(), round_id))
