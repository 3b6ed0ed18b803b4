"""Start/finish log payloads for Celery tasks."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from venturescope.core.logging import LogContext, build_log_event


def before_task(task_name: str, context: dict[str, Any]) -> dict[str, Any]:
    return build_log_event(event="task.start", context=LogContext.for_task(task_name, context))


def after_task(task_name: str, context: dict[str, Any], status: str, **fields: Any) -> dict[str, Any]:
    """Finish payload; extra fields (document_id, assessment_id, error) ride along."""
    return build_log_event(
        event="task.finish",
        context=LogContext.for_task(task_name, context),
        status=status,
        finished_at=datetime.now(timezone.utc).isoformat(),
        **fields,
    )
