"""Team membership endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from venturescope.api.v1._authz import authorize
from venturescope.core.dependencies import get_db_session
from venturescope.schemas.common import SuccessResponse
from venturescope.schemas.team import InviteMemberRequest, TeamMemberResponse, UpdateMemberRoleRequest
from venturescope.services.team_service import TeamService

router = APIRouter(prefix="/team", tags=["team"])


def _member_response(membership) -> TeamMemberResponse:
    return TeamMemberResponse(
        id=membership.id,
        user_id=membership.user_id,
        email=membership.user.email,
        name=membership.user.name,
        avatar_url=membership.user.avatar_url,
        role=membership.role,
        invited_at=membership.invited_at,
        accepted_at=membership.accepted_at,
    )


@router.get("", response_model=list[TeamMemberResponse])
def list_members(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> list[TeamMemberResponse]:
    user = authorize(db, authorization, scopes=["team.read"])
    return [_member_response(membership) for membership in TeamService(db).list_members(user.org_context())]


@router.post("", response_model=TeamMemberResponse)
def invite_member(
    payload: InviteMemberRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> TeamMemberResponse:
    user = authorize(db, authorization)
    membership = TeamService(db).invite_member(user.org_context(), payload.email, payload.role)
    return _member_response(membership)


@router.patch("/{member_id}")
def change_role(
    member_id: int,
    payload: UpdateMemberRoleRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> dict:
    user = authorize(db, authorization)
    membership = TeamService(db).change_role(user.org_context(), member_id, payload.role)
    return {"success": True, "role": membership.role.value}


@router.delete("/{member_id}", response_model=SuccessResponse)
def remove_member(
    member_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> SuccessResponse:
    user = authorize(db, authorization)
    TeamService(db).remove_member(user.org_context(), member_id)
    return SuccessResponse()
