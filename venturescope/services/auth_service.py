"""Signup, login, and server-side session management."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError

from venturescope.auth.jwt import create_session_token
from venturescope.core.config import Config, get_config
from venturescope.core.exceptions import AuthenticationError, ConflictError
from venturescope.core.security import generate_session_token, hash_password, verify_password
from venturescope.models import OrgMembership, OrgRole, Organization, User, UserSession
from venturescope.models.base import utcnow
from venturescope.services.base_service import BaseService

logger = logging.getLogger(__name__)

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    slug = _SLUG_STRIP.sub("-", value.lower()).strip("-")
    return slug[:100] or "org"


@dataclass(frozen=True)
class IssuedSession:
    access_token: str
    expires_at: datetime
    user_id: int
    org_id: int | None
    org_role: str | None


class AuthService(BaseService):
    """Password authentication standing in for the external identity provider."""

    def __init__(self, db=None, config: Config | None = None) -> None:
        super().__init__(db)
        self.config = config or get_config()

    def _unique_slug(self, base: str) -> str:
        candidate = slugify(base)
        suffix = 1
        while self.db.query(Organization.id).filter(Organization.slug == candidate).first() is not None:
            suffix += 1
            candidate = f"{slugify(base)}-{suffix}"
        return candidate

    def signup(
        self,
        email: str,
        password: str,
        name: str | None = None,
        organization_name: str | None = None,
        user_agent: str | None = None,
    ) -> IssuedSession:
        """Create the user with a personal organization they own, then open a session."""
        email = email.strip().lower()
        if self.db.query(User.id).filter(User.email == email).first() is not None:
            raise ConflictError("An account with this email already exists")

        display_name = name or email.split("@", 1)[0]
        org_name = organization_name or f"{display_name}'s Organization"
        now = utcnow()
        try:
            user = User(email=email, name=name, hashed_password=hash_password(password))
            org = Organization(name=org_name, slug=self._unique_slug(org_name), billing_cycle_start=now)
            self.db.add_all([user, org])
            self.db.flush()
            self.db.add(
                OrgMembership(org_id=org.id, user_id=user.id, role=OrgRole.OWNER, invited_at=now, accepted_at=now)
            )
            issued = self._open_session(user, user_agent=user_agent, org_id=org.id, org_role=OrgRole.OWNER.value)
            self.commit()
        except IntegrityError as exc:
            self.rollback()
            raise ConflictError("An account with this email already exists") from exc

        logger.info(
            "auth.signup.completed",
            extra={"event": "auth.signup.completed", "user_id": user.id, "org_id": org.id},
        )
        return issued

    def login(self, email: str, password: str, user_agent: str | None = None) -> IssuedSession:
        user = self.db.query(User).filter(User.email == email.strip().lower()).first()
        if user is None or not verify_password(password, user.hashed_password):
            logger.info("auth.login.rejected", extra={"event": "auth.login.rejected"})
            raise AuthenticationError("Invalid email or password")

        membership = resolve_active_membership(self.db, user.id)
        issued = self._open_session(
            user,
            user_agent=user_agent,
            org_id=membership.org_id if membership else None,
            org_role=membership.role.value if membership else None,
        )
        self.commit()
        logger.info("auth.login.completed", extra={"event": "auth.login.completed", "user_id": user.id})
        return issued

    def logout(self, session_id: int) -> None:
        self.db.query(UserSession).filter(UserSession.id == session_id).delete()
        self.commit()

    def _open_session(
        self,
        user: User,
        user_agent: str | None,
        org_id: int | None,
        org_role: str | None,
    ) -> IssuedSession:
        ttl_days = self.config.SESSION_TTL_DAYS
        expires_at = utcnow() + timedelta(days=ttl_days)
        session_token = generate_session_token()
        self.db.add(
            UserSession(
                user_id=user.id,
                session_token=session_token,
                expires_at=expires_at,
                user_agent=(user_agent or "")[:512] or None,
            )
        )
        self.db.flush()
        token = create_session_token(user.id, session_token, secret=self.config.JWT_SECRET, ttl_days=ttl_days)
        return IssuedSession(
            access_token=token,
            expires_at=expires_at,
            user_id=user.id,
            org_id=org_id,
            org_role=org_role,
        )


def resolve_active_membership(db, user_id: int) -> OrgMembership | None:
    """Return the caller's most recently accepted membership, which defines their active org."""
    return (
        db.query(OrgMembership)
        .filter(OrgMembership.user_id == user_id, OrgMembership.accepted_at.is_not(None))
        .order_by(OrgMembership.accepted_at.desc(), OrgMembership.id.desc())
        .first()
    )
