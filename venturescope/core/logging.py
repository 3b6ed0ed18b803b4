"""Structured log payloads shared by API handlers and Celery workers."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any


def _as_text(value: Any) -> str | None:
    return None if value is None else str(value)


@dataclass(frozen=True)
class LogContext:
    """Tenant and task identifiers attached to every structured event."""

    org_id: str | None = None
    user_id: str | None = None
    task_id: str | None = None
    task_name: str | None = None
    trace_id: str | None = None

    @classmethod
    def for_task(cls, task_name: str, context: dict[str, Any]) -> "LogContext":
        return cls(
            org_id=_as_text(context.get("org_id")),
            user_id=_as_text(context.get("user_id")),
            task_id=context.get("task_id"),
            task_name=task_name,
            trace_id=context.get("trace_id"),
        )


def build_log_event(event: str, context: LogContext, **fields: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {"timestamp": datetime.now(timezone.utc).isoformat(), "event": event}
    payload.update(asdict(context))
    payload.update(fields)
    return payload
