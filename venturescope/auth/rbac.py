"""Organization role authorization helpers."""

from __future__ import annotations

from venturescope.core.exceptions import AuthorizationError

# Every accepted member holds the baseline read/write scopes on org data.
MEMBER_SCOPES: set[str] = {
    "companies.write",
    "documents.write",
    "assessments.write",
    "chat.write",
    "billing.read",
    "billing.manage",
    "submissions.read",
    "team.read",
    "ic_rounds.vote",
}

ORG_ROLE_SCOPES: dict[str, set[str]] = {
    "owner": {
        "*",
    },
    "admin": MEMBER_SCOPES
    | {
        "submissions.review",
        "team.invite",
        "team.remove",
        "ic_rounds.manage",
    },
    "member": set(MEMBER_SCOPES),
}


def get_scopes_for_role(role: str) -> set[str]:
    """Return scopes granted to an org role."""
    return ORG_ROLE_SCOPES.get(str(role).lower(), set())


def has_scopes(role: str, required_scopes: list[str] | set[str] | tuple[str, ...]) -> bool:
    """Check if role includes every required scope."""
    granted = get_scopes_for_role(role)
    if "*" in granted:
        return True
    return set(required_scopes).issubset(granted)


def require_scopes(role: str, required_scopes: list[str] | set[str] | tuple[str, ...]) -> None:
    """Raise when a role lacks required scopes."""
    if has_scopes(role=role, required_scopes=required_scopes):
        return
    missing = sorted(set(required_scopes) - get_scopes_for_role(role))
    raise AuthorizationError(f"Missing required scopes: {', '.join(missing)}")


def is_admin_role(role: str) -> bool:
    return str(role).lower() in {"owner", "admin"}
