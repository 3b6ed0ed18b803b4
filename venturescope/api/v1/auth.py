"""Authentication endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.orm import Session

from venturescope.api.v1._authz import authorize
from venturescope.core.dependencies import get_db_session
from venturescope.schemas.auth import LoginRequest, SignupRequest, TokenResponse
from venturescope.schemas.common import SuccessResponse
from venturescope.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def signup(
    payload: SignupRequest,
    user_agent: str | None = Header(default=None, alias="User-Agent"),
    db: Session = Depends(get_db_session),
) -> TokenResponse:
    issued = AuthService(db).signup(
        email=payload.email,
        password=payload.password,
        name=payload.name,
        organization_name=payload.organization_name,
        user_agent=user_agent,
    )
    return TokenResponse(**issued.__dict__)


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    user_agent: str | None = Header(default=None, alias="User-Agent"),
    db: Session = Depends(get_db_session),
) -> TokenResponse:
    issued = AuthService(db).login(email=payload.email, password=payload.password, user_agent=user_agent)
    return TokenResponse(**issued.__dict__)


@router.post("/logout", response_model=SuccessResponse)
def logout(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> SuccessResponse:
    user = authorize(db, authorization, require_org=False)
    AuthService(db).logout(user.session_id)
    return SuccessResponse()
