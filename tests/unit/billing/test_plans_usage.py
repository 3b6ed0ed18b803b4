from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace

import pytest

from venturescope.billing.plans import (
    UNLIMITED,
    build_plan_catalog,
    can_create_assessment,
    get_plan,
    price_id_to_tier,
    resolve_tier,
)
from venturescope.billing.usage import aggregate_usage, build_usage_report, percent_used, usage_window_start
from venturescope.core.config import get_config
from venturescope.core.exceptions import ValidationError
from venturescope.models.enums import AssessmentType, PlanTier


def test_plan_quotas_match_tiers():
    catalog = build_plan_catalog()
    assert catalog[PlanTier.FREE].assessments_per_month == 3
    assert catalog[PlanTier.ANGEL].assessments_per_month == 20
    assert catalog[PlanTier.PRO].assessments_per_month == 100
    assert catalog[PlanTier.ENTERPRISE].assessments_per_month == UNLIMITED
    assert catalog[PlanTier.ENTERPRISE].is_unlimited


@pytest.mark.parametrize(
    ("tier", "used", "allowed"),
    [
        ("free", 0, True),
        ("free", 2, True),
        ("free", 3, False),
        ("angel", 19, True),
        ("angel", 20, False),
        ("pro", 100, False),
        ("enterprise", 10_000, True),
    ],
)
def test_can_create_assessment_respects_quota(tier, used, allowed):
    assert can_create_assessment(tier, used) is allowed


def test_can_create_assessment_rejects_negative_usage():
    with pytest.raises(ValidationError):
        can_create_assessment("free", -1)


def test_resolve_tier_is_case_insensitive_and_strict():
    assert resolve_tier("PRO") is PlanTier.PRO
    assert resolve_tier(PlanTier.ANGEL) is PlanTier.ANGEL
    with pytest.raises(ValidationError):
        resolve_tier("platinum")


def test_price_id_maps_back_to_tier():
    config = get_config()
    assert price_id_to_tier(config.STRIPE_PRO_PRICE_ID) is PlanTier.PRO
    assert price_id_to_tier(config.STRIPE_ANGEL_PRICE_ID) is PlanTier.ANGEL
    assert price_id_to_tier("price_unknown") is PlanTier.FREE
    assert price_id_to_tier(None) is PlanTier.FREE


def test_aggregate_usage_counts_types_and_tokens():
    records = [
        {"assessment_type": AssessmentType.SCREENING, "tokens_used": 1200},
        {"assessment_type": "full", "tokens_used": 5000},
        SimpleNamespace(assessment_type=AssessmentType.FULL, tokens_used=None),
        {"assessment_type": "mystery", "tokens_used": 999},
    ]
    breakdown = aggregate_usage(records)
    assert breakdown.screening == 1
    assert breakdown.full == 2
    assert breakdown.total_tokens == 6200


def test_percent_used_handles_unlimited():
    assert percent_used(1, 3) == 33
    assert percent_used(2, 3) == 67
    assert percent_used(50, UNLIMITED) == 0


def test_usage_window_falls_back_to_trailing_thirty_days():
    now = datetime(2026, 3, 31, 12, 0, 0)
    assert usage_window_start(None, now=now) == datetime(2026, 3, 1, 12, 0, 0)
    cycle = datetime(2026, 3, 15)
    assert usage_window_start(cycle, now=now) == cycle


def test_usage_report_shape():
    org = SimpleNamespace(
        plan_tier=PlanTier.FREE,
        assessments_used_this_month=2,
        billing_cycle_start=datetime(2026, 3, 1),
        stripe_customer_id="cus_1",
        stripe_subscription_id=None,
    )
    report = build_usage_report(org, [{"assessment_type": "screening", "tokens_used": 10}])
    assert report["plan"]["tier"] == "free"
    assert report["plan"]["features"] == list(get_plan("free").features)
    assert report["usage"] == {
        "assessmentsUsed": 2,
        "assessmentsLimit": 3,
        "percentUsed": 67,
        "isUnlimited": False,
        "byType": {"screening": 1, "full": 0},
        "totalTokens": 10,
    }
    assert report["billing"] == {
        "cycleStart": "2026-03-01T00:00:00",
        "hasPaymentMethod": True,
        "hasActiveSubscription": False,
    }
