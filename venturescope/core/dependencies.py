"""Dependency providers for API handlers and background workers."""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass

from sqlalchemy.orm import Session

from venturescope.auth.jwt import read_session_token
from venturescope.auth.tenant_context import OrgContext, from_membership
from venturescope.core.config import Config, get_config
from venturescope.core.exceptions import AuthenticationError
from venturescope.database.db import get_db
from venturescope.models import User, UserSession
from venturescope.models.base import utcnow
from venturescope.services.auth_service import resolve_active_membership


@dataclass(frozen=True)
class CurrentUser:
    user_id: int
    session_id: int
    email: str
    org_id: int | None
    org_role: str | None

    def org_context(self) -> OrgContext:
        """Org context for tenant-scoped work; raises when the caller has no accepted membership."""
        return from_membership(self.org_id, self.user_id, self.org_role)


def get_settings() -> Config:
    """Return validated application configuration."""
    return get_config()


def get_db_session() -> Generator[Session, None, None]:
    """Yield SQLAlchemy session for dependency injection."""
    yield from get_db()


def get_current_user(db: Session, token: str, settings: Config | None = None) -> CurrentUser:
    """Resolve the caller from a bearer token backed by a live session row."""
    cfg = settings or get_settings()
    claims = read_session_token(token, secret=cfg.JWT_SECRET)
    user_id = claims.user_id
    session_row = (
        db.query(UserSession)
        .filter(UserSession.session_token == claims.session_token, UserSession.user_id == user_id)
        .first()
    )
    if session_row is None or session_row.expires_at < utcnow():
        raise AuthenticationError("Session has expired or been revoked.")

    user = db.get(User, user_id)
    if user is None:
        raise AuthenticationError("Unauthorized")

    membership = resolve_active_membership(db, user_id)
    return CurrentUser(
        user_id=user.id,
        session_id=session_row.id,
        email=user.email,
        org_id=membership.org_id if membership else None,
        org_role=membership.role.value if membership else None,
    )
