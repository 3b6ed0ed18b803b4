"""Shared authorization helpers for API v1 route modules."""

from __future__ import annotations

from sqlalchemy.orm import Session

from venturescope.auth.rbac import require_scopes
from venturescope.core.config import get_config
from venturescope.core.dependencies import CurrentUser, get_current_user
from venturescope.core.exceptions import AuthenticationError


def _extract_bearer_token(authorization: str | None) -> str:
    if authorization is None or not authorization.strip():
        raise AuthenticationError("Unauthorized")
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise AuthenticationError("Authorization header must use Bearer token.")
    return parts[1].strip()


def authorize(
    db: Session,
    authorization: str | None,
    scopes: list[str] | None = None,
    require_org: bool = True,
) -> CurrentUser:
    """Resolve the caller; org-scoped routes also require an accepted membership and its scopes."""
    token = _extract_bearer_token(authorization)
    user = get_current_user(db, token=token, settings=get_config())
    if require_org:
        context = user.org_context()
        if scopes:
            require_scopes(context.role, scopes)
    return user
