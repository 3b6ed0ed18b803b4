"""Profile, notification preference, and session management for the caller."""

from __future__ import annotations

import logging
import re
from typing import Any

from venturescope.core.exceptions import NotFoundError, ValidationError
from venturescope.models import User, UserSession, UserSettings
from venturescope.models.base import utcnow
from venturescope.services.base_service import BaseService

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = ("name", "avatar_url", "role")
_NOTIFICATION_FIELDS = ("email_assessments", "email_comments", "email_sharing", "email_digest")


def parse_device(user_agent: str | None) -> str:
    ua = user_agent or ""
    if re.search(r"Mobile|Android|iPhone|iPad", ua):
        if "iPad" in ua:
            return "iPad"
        if "iPhone" in ua:
            return "iPhone"
        if "Android" in ua:
            return "Android"
        return "Mobile"
    if "Mac" in ua:
        return "Mac"
    if "Windows" in ua:
        return "Windows"
    if "Linux" in ua:
        return "Linux"
    return "Unknown Device"


def parse_browser(user_agent: str | None) -> str:
    ua = user_agent or ""
    is_edge = bool(re.search(r"Edge|Edg", ua))
    if "Chrome" in ua and not is_edge:
        return "Chrome"
    if "Safari" in ua and "Chrome" not in ua:
        return "Safari"
    if "Firefox" in ua:
        return "Firefox"
    if is_edge:
        return "Edge"
    return "Unknown Browser"


class UserService(BaseService):
    def get_profile(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: int, fields: dict[str, Any]) -> User:
        updates = {key: value for key, value in fields.items() if key in _PROFILE_FIELDS and value is not None}
        if not updates:
            raise ValidationError("No valid fields to update")
        user = self.get_profile(user_id)
        for key, value in updates.items():
            setattr(user, key, value)
        self.commit()
        self.db.refresh(user)
        return user

    def get_notifications(self, user_id: int) -> dict[str, bool]:
        """Stored preferences, or the defaults when the user never saved any."""
        settings = self.db.query(UserSettings).filter(UserSettings.user_id == user_id).first()
        if settings is None:
            return {
                "email_assessments": True,
                "email_comments": True,
                "email_sharing": True,
                "email_digest": False,
            }
        return {name: bool(getattr(settings, name)) for name in _NOTIFICATION_FIELDS}

    def update_notifications(self, user_id: int, fields: dict[str, Any]) -> dict[str, bool]:
        settings = self.db.query(UserSettings).filter(UserSettings.user_id == user_id).first()
        if settings is None:
            settings = UserSettings(user_id=user_id)
            self.db.add(settings)
        for name in _NOTIFICATION_FIELDS:
            if fields.get(name) is not None:
                setattr(settings, name, bool(fields[name]))
        self.commit()
        return self.get_notifications(user_id)

    def list_sessions(self, user_id: int, current_session_id: int) -> list[dict[str, Any]]:
        """Unexpired sessions with device details parsed from each session's user agent."""
        rows = (
            self.db.query(UserSession)
            .filter(UserSession.user_id == user_id, UserSession.expires_at >= utcnow())
            .order_by(UserSession.expires_at.desc())
            .all()
        )
        return [
            {
                "id": row.id,
                "device": parse_device(row.user_agent),
                "browser": parse_browser(row.user_agent),
                "created_at": row.created_at,
                "last_active_at": row.last_active_at,
                "expires_at": row.expires_at,
                "is_current": row.id == current_session_id,
            }
            for row in rows
        ]

    def revoke_other_sessions(self, user_id: int, current_session_id: int) -> int:
        revoked = (
            self.db.query(UserSession)
            .filter(UserSession.user_id == user_id, UserSession.id != current_session_id)
            .delete(synchronize_session=False)
        )
        self.commit()
        logger.info(
            "user.sessions.revoked",
            extra={"event": "user.sessions.revoked", "user_id": user_id, "count": revoked},
        )
        return revoked

    def revoke_session(self, user_id: int, session_id: int) -> None:
        row = self.db.get(UserSession, session_id)
        if row is None or row.user_id != user_id:
            raise NotFoundError("Session not found")
        self.db.delete(row)
        self.commit()
