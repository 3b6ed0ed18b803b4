"""Organization context extraction and enforcement utilities."""

from __future__ import annotations

from dataclasses import dataclass

from venturescope.core.exceptions import AuthorizationError, NotFoundError


@dataclass(frozen=True)
class OrgContext:
    org_id: int
    user_id: int
    role: str


def from_membership(org_id: int | None, user_id: int, role: str | None) -> OrgContext:
    """Build org context from a resolved membership; callers without one are rejected."""
    if org_id is None or role is None:
        raise AuthorizationError("No organization membership found.")
    return OrgContext(org_id=int(org_id), user_id=int(user_id), role=str(role).lower())


def enforce_org_match(entity_org_id: int | None, context: OrgContext, label: str = "Resource") -> None:
    """Ensure entity access stays inside the caller's org; foreign rows look missing."""
    if entity_org_id is None or int(entity_org_id) != int(context.org_id):
        raise NotFoundError(f"{label} not found")
