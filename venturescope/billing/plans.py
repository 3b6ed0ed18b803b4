"""Static plan catalog and entitlement checks.

The catalog maps each subscription tier to its monthly assessment quota. A
quota of ``UNLIMITED`` (-1) means the tier is never blocked. Price ids come
from configuration so the same catalog serves test and live Stripe accounts.
"""

from __future__ import annotations

from dataclasses import dataclass

from venturescope.core.config import Config, get_config
from venturescope.core.exceptions import ValidationError
from venturescope.models.enums import PlanTier

UNLIMITED = -1


@dataclass(frozen=True)
class Plan:
    tier: PlanTier
    name: str
    description: str
    price: int | None
    price_id: str | None
    assessments_per_month: int
    features: tuple[str, ...]

    @property
    def is_unlimited(self) -> bool:
        return self.assessments_per_month == UNLIMITED


def build_plan_catalog(config: Config | None = None) -> dict[PlanTier, Plan]:
    """Return the tier catalog with price ids resolved from configuration."""
    cfg = config or get_config()
    return {
        PlanTier.FREE: Plan(
            tier=PlanTier.FREE,
            name="Free",
            description="For individuals getting started",
            price=0,
            price_id=None,
            assessments_per_month=3,
            features=(
                "3 assessments per month",
                "5 companies",
                "Basic document processing",
                "Email support",
            ),
        ),
        PlanTier.ANGEL: Plan(
            tier=PlanTier.ANGEL,
            name="Angel",
            description="For angel investors",
            price=49,
            price_id=cfg.STRIPE_ANGEL_PRICE_ID,
            assessments_per_month=20,
            features=(
                "20 assessments per month",
                "25 companies",
                "Full document processing",
                "AI chat assistant",
                "Priority support",
            ),
        ),
        PlanTier.PRO: Plan(
            tier=PlanTier.PRO,
            name="Pro",
            description="For VC analysts and partners",
            price=149,
            price_id=cfg.STRIPE_PRO_PRICE_ID,
            assessments_per_month=100,
            features=(
                "100 assessments per month",
                "Unlimited companies",
                "Full document processing",
                "AI chat assistant",
                "Team collaboration",
                "Custom branding",
                "Priority support",
            ),
        ),
        PlanTier.ENTERPRISE: Plan(
            tier=PlanTier.ENTERPRISE,
            name="Enterprise",
            description="For VC firms and family offices",
            price=None,
            price_id=cfg.STRIPE_ENTERPRISE_PRICE_ID,
            assessments_per_month=UNLIMITED,
            features=(
                "Unlimited assessments",
                "Unlimited companies",
                "Full document processing",
                "AI chat assistant",
                "Team collaboration",
                "Custom branding",
                "API access",
                "Dedicated support",
                "Custom integrations",
            ),
        ),
    }


def resolve_tier(tier: PlanTier | str) -> PlanTier:
    """Coerce a tier name to ``PlanTier``; unknown names raise ``ValidationError``."""
    try:
        return PlanTier(str(tier.value if isinstance(tier, PlanTier) else tier).lower())
    except ValueError as exc:
        raise ValidationError(f"Unknown plan tier: {tier}") from exc


def get_plan(tier: PlanTier | str, config: Config | None = None) -> Plan:
    return build_plan_catalog(config)[resolve_tier(tier)]


def can_create_assessment(tier: PlanTier | str, used_this_month: int) -> bool:
    """Return whether an org on ``tier`` that has used ``used_this_month`` may run another assessment."""
    if used_this_month < 0:
        raise ValidationError("Usage count cannot be negative.")
    limit = get_plan(tier).assessments_per_month
    if limit == UNLIMITED:
        return True
    return used_this_month < limit


def price_id_to_tier(price_id: str | None, config: Config | None = None) -> PlanTier:
    """Map a provider price id back to its tier; unknown ids fall back to free."""
    if price_id:
        for plan in build_plan_catalog(config).values():
            if plan.price_id and plan.price_id == price_id:
                return plan.tier
    return PlanTier.FREE
