"""Usage aggregation and the billing usage report."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from venturescope.billing.plans import UNLIMITED, get_plan
from venturescope.models.base import utcnow
from venturescope.models.enums import AssessmentType

DEFAULT_WINDOW_DAYS = 30


@dataclass(frozen=True)
class UsageBreakdown:
    screening: int = 0
    full: int = 0
    total_tokens: int = 0


def _field(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def aggregate_usage(records: Iterable[Any]) -> UsageBreakdown:
    """Fold usage rows into per-type counts and a token total.

    Rows may be ORM objects or mappings carrying ``assessment_type`` and
    ``tokens_used``. Missing token counts add nothing; unknown types are skipped.
    """
    screening = 0
    full = 0
    total_tokens = 0
    for record in records:
        raw_type = _field(record, "assessment_type")
        kind = raw_type.value if isinstance(raw_type, AssessmentType) else raw_type
        if kind == AssessmentType.SCREENING.value:
            screening += 1
        elif kind == AssessmentType.FULL.value:
            full += 1
        else:
            continue
        total_tokens += int(_field(record, "tokens_used") or 0)
    return UsageBreakdown(screening=screening, full=full, total_tokens=total_tokens)


def percent_used(used: int, limit: int) -> int:
    if limit == UNLIMITED or limit <= 0:
        return 0
    return round(used / limit * 100)


def usage_window_start(billing_cycle_start: datetime | None, now: datetime | None = None) -> datetime:
    """Start of the usage window: the billing cycle start, else the trailing 30 days."""
    if billing_cycle_start is not None:
        return billing_cycle_start
    return (now or utcnow()) - timedelta(days=DEFAULT_WINDOW_DAYS)


def build_usage_report(org: Any, records: Iterable[Any]) -> dict[str, Any]:
    """Build the ``GET /billing/usage`` payload for an organization."""
    plan = get_plan(org.plan_tier)
    breakdown = aggregate_usage(records)
    used = int(org.assessments_used_this_month or 0)
    limit = plan.assessments_per_month
    cycle_start = org.billing_cycle_start
    return {
        "plan": {
            "tier": plan.tier.value,
            "name": plan.name,
            "features": list(plan.features),
        },
        "usage": {
            "assessmentsUsed": used,
            "assessmentsLimit": limit,
            "percentUsed": percent_used(used, limit),
            "isUnlimited": plan.is_unlimited,
            "byType": {
                "screening": breakdown.screening,
                "full": breakdown.full,
            },
            "totalTokens": breakdown.total_tokens,
        },
        "billing": {
            "cycleStart": cycle_start.isoformat() if cycle_start else None,
            "hasPaymentMethod": bool(org.stripe_customer_id),
            "hasActiveSubscription": bool(org.stripe_subscription_id),
        },
    }
