from __future__ import annotations

import json
import logging

from venturescope.core.logging import LogContext, build_log_event
from venturescope.core.logging_config import JsonFormatter


def test_json_formatter_merges_extra_fields():
    record = logging.LogRecord("venturescope.test", logging.INFO, __file__, 1, "company.created", (), None)
    record.event = "company.created"
    record.org_id = 4

    payload = json.loads(JsonFormatter(service="venturescope", env="test").format(record))

    assert payload["message"] == "company.created"
    assert payload["event"] == "company.created"
    assert payload["org_id"] == 4
    assert payload["service"] == "venturescope"
    assert payload["level"] == "INFO"


def test_log_context_for_task_stringifies_ids():
    context = LogContext.for_task("assessments.run", {"org_id": 9, "user_id": None, "task_id": "t-9"})
    event = build_log_event("task.start", context, assessment_id=3)

    assert event["org_id"] == "9"
    assert event["user_id"] is None
    assert event["task_name"] == "assessments.run"
    assert event["assessment_id"] == 3
