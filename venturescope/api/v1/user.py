"""Current-user profile, notification, and session endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from venturescope.api.v1._authz import authorize
from venturescope.core.dependencies import get_db_session
from venturescope.schemas.common import SuccessResponse
from venturescope.schemas.user import (
    NotificationSettings,
    NotificationSettingsUpdate,
    ProfileResponse,
    ProfileUpdateRequest,
    SessionResponse,
)
from venturescope.services.user_service import UserService

router = APIRouter(prefix="/user", tags=["user"])


@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> ProfileResponse:
    user = authorize(db, authorization, require_org=False)
    return ProfileResponse.model_validate(UserService(db).get_profile(user.user_id))


@router.patch("/profile", response_model=ProfileResponse)
def update_profile(
    payload: ProfileUpdateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> ProfileResponse:
    user = authorize(db, authorization, require_org=False)
    profile = UserService(db).update_profile(user.user_id, payload.model_dump(exclude_unset=True))
    return ProfileResponse.model_validate(profile)


@router.get("/notifications", response_model=NotificationSettings)
def get_notifications(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> NotificationSettings:
    user = authorize(db, authorization, require_org=False)
    return NotificationSettings(**UserService(db).get_notifications(user.user_id))


@router.patch("/notifications", response_model=NotificationSettings)
def update_notifications(
    payload: NotificationSettingsUpdate,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> NotificationSettings:
    user = authorize(db, authorization, require_org=False)
    settings = UserService(db).update_notifications(user.user_id, payload.model_dump(exclude_unset=True))
    return NotificationSettings(**settings)


@router.get("/sessions", response_model=list[SessionResponse])
def list_sessions(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> list[SessionResponse]:
    user = authorize(db, authorization, require_org=False)
    return [SessionResponse(**row) for row in UserService(db).list_sessions(user.user_id, user.session_id)]


@router.delete("/sessions", response_model=SuccessResponse)
def revoke_other_sessions(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> SuccessResponse:
    user = authorize(db, authorization, require_org=False)
    UserService(db).revoke_other_sessions(user.user_id, user.session_id)
    return SuccessResponse()


@router.delete("/sessions/{session_id}", response_model=SuccessResponse)
def revoke_session(
    session_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> SuccessResponse:
    user = authorize(db, authorization, require_org=False)
    UserService(db).revoke_session(user.user_id, session_id)
    return SuccessResponse()
