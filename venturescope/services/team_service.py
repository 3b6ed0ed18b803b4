"""Organization membership management."""

from __future__ import annotations

import logging

from venturescope.auth.rbac import is_admin_role
from venturescope.auth.tenant_context import OrgContext
from venturescope.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from venturescope.models import OrgMembership, OrgRole, User
from venturescope.models.base import utcnow
from venturescope.services.base_service import BaseService

logger = logging.getLogger(__name__)

ASSIGNABLE_ROLES = (OrgRole.ADMIN, OrgRole.MEMBER)


def _assignable_role(role: str | OrgRole) -> OrgRole:
    try:
        resolved = OrgRole(role)
    except ValueError as exc:
        raise ValidationError("Invalid role") from exc
    if resolved not in ASSIGNABLE_ROLES:
        raise ValidationError("Invalid role")
    return resolved


class TeamService(BaseService):
    def list_members(self, context: OrgContext) -> list[OrgMembership]:
        return (
            self.db.query(OrgMembership)
            .filter(OrgMembership.org_id == context.org_id)
            .order_by(OrgMembership.accepted_at.desc(), OrgMembership.id.asc())
            .all()
        )

    def _membership(self, context: OrgContext, member_id: int) -> OrgMembership:
        membership = (
            self.db.query(OrgMembership)
            .filter(OrgMembership.id == member_id, OrgMembership.org_id == context.org_id)
            .first()
        )
        if membership is None:
            raise NotFoundError("Member not found")
        return membership

    def invite_member(self, context: OrgContext, email: str, role: str = "member") -> OrgMembership:
        """Add an existing account to the org; memberships are accepted on creation."""
        if not is_admin_role(context.role):
            raise AuthorizationError("Only owners and admins can invite members")
        resolved_role = _assignable_role(role)

        user = self.db.query(User).filter(User.email == email.strip().lower()).first()
        if user is None:
            raise NotFoundError("User not found. They must create an account first.")
        existing = (
            self.db.query(OrgMembership)
            .filter(OrgMembership.org_id == context.org_id, OrgMembership.user_id == user.id)
            .first()
        )
        if existing is not None:
            raise ConflictError("User is already a team member")

        now = utcnow()
        membership = OrgMembership(
            org_id=context.org_id,
            user_id=user.id,
            role=resolved_role,
            invited_at=now,
            accepted_at=now,
        )
        self.db.add(membership)
        self.commit()
        self.db.refresh(membership)
        logger.info(
            "team.member.invited",
            extra={
                "event": "team.member.invited",
                "org_id": context.org_id,
                "user_id": user.id,
                "role": resolved_role.value,
            },
        )
        return membership

    def change_role(self, context: OrgContext, member_id: int, role: str) -> OrgMembership:
        if context.role != OrgRole.OWNER.value:
            raise AuthorizationError("Only owners can change roles")
        resolved_role = _assignable_role(role)
        membership = self._membership(context, member_id)
        if membership.role == OrgRole.OWNER:
            raise ValidationError("Cannot change owner role")
        membership.role = resolved_role
        self.commit()
        self.db.refresh(membership)
        return membership

    def remove_member(self, context: OrgContext, member_id: int) -> None:
        if not is_admin_role(context.role):
            raise AuthorizationError("Insufficient permissions")
        membership = self._membership(context, member_id)
        if membership.role == OrgRole.OWNER:
            raise ValidationError("Cannot remove the owner")
        if context.role == OrgRole.ADMIN.value and membership.role == OrgRole.ADMIN:
            raise AuthorizationError("Admins cannot remove other admins")
        self.db.delete(membership)
        self.commit()
        logger.info(
            "team.member.removed",
            extra={"event": "team.member.removed", "org_id": context.org_id, "member_id": member_id},
        )
