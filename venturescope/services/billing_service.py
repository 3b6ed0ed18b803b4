"""Subscription checkout, billing portal, usage reporting, and webhook reconciliation."""

from __future__ import annotations

import logging
from typing import Any

from venturescope.auth.tenant_context import OrgContext
from venturescope.billing.plans import build_plan_catalog, price_id_to_tier, resolve_tier
from venturescope.billing.stripe_gateway import StripeGateway, WebhookEvent
from venturescope.billing.usage import build_usage_report, usage_window_start
from venturescope.core.exceptions import NotFoundError, ValidationError
from venturescope.models import Organization, PlanTier, UsageRecord, User
from venturescope.models.base import utcnow
from venturescope.services.base_service import BaseService

logger = logging.getLogger(__name__)


class BillingService(BaseService):
    """Billing state lives on the organization row; Stripe is the source of truth for payments."""

    def __init__(self, db=None, gateway: StripeGateway | None = None) -> None:
        super().__init__(db)
        self._gateway = gateway

    @property
    def gateway(self) -> StripeGateway:
        if self._gateway is None:
            self._gateway = StripeGateway()
        return self._gateway

    def _org(self, org_id: int) -> Organization:
        org = self.db.get(Organization, org_id)
        if org is None:
            raise NotFoundError("Organization not found")
        return org

    def create_checkout(self, context: OrgContext, plan_id: str) -> str:
        """Return a hosted checkout URL, creating the provider customer on first use."""
        try:
            tier = resolve_tier(plan_id)
        except ValidationError as exc:
            raise ValidationError("Invalid plan") from exc
        plan = build_plan_catalog()[tier]
        if not plan.price_id:
            raise ValidationError("This plan does not support self-service checkout")

        org = self._org(context.org_id)
        customer_id = org.stripe_customer_id
        if not customer_id:
            user = self.db.get(User, context.user_id)
            customer_id = self.gateway.create_customer(
                email=user.email if user else "",
                name=org.name,
                metadata={"orgId": str(org.id), "userId": str(context.user_id)},
            )
            org.stripe_customer_id = customer_id
            self.commit()
            logger.info(
                "billing.customer.created",
                extra={"event": "billing.customer.created", "org_id": org.id},
            )

        url = self.gateway.create_checkout_session(
            customer_id=customer_id,
            price_id=plan.price_id,
            metadata={"orgId": str(org.id), "planId": tier.value},
        )
        logger.info(
            "billing.checkout.created",
            extra={"event": "billing.checkout.created", "org_id": org.id, "plan_id": tier.value},
        )
        return url

    def create_portal(self, context: OrgContext) -> str:
        org = self._org(context.org_id)
        if not org.stripe_customer_id:
            raise ValidationError("No billing account found")
        return self.gateway.create_portal_session(org.stripe_customer_id)

    def usage_report(self, context: OrgContext) -> dict[str, Any]:
        org = self._org(context.org_id)
        window_start = usage_window_start(org.billing_cycle_start)
        records = (
            self.db.query(UsageRecord)
            .filter(UsageRecord.org_id == org.id, UsageRecord.created_at >= window_start)
            .all()
        )
        return build_usage_report(org, records)

    # Webhooks

    def handle_webhook(self, payload: bytes, signature: str | None) -> None:
        self.apply_event(self.gateway.construct_event(payload, signature))

    def apply_event(self, event: WebhookEvent) -> None:
        """Reconcile one verified provider event against organization billing state."""
        data = event.data_object
        handlers = {
            "checkout.session.completed": self._on_checkout_completed,
            "customer.subscription.updated": self._on_subscription_updated,
            "customer.subscription.deleted": self._on_subscription_deleted,
            "invoice.payment_succeeded": self._on_payment_succeeded,
            "invoice.payment_failed": self._on_payment_failed,
        }
        handler = handlers.get(event.type)
        if handler is None:
            logger.info(
                "billing.webhook.unhandled",
                extra={"event": "billing.webhook.unhandled", "event_type": event.type},
            )
            return
        handler(data)
        self.commit()

    def _org_for_customer(self, customer_id: str | None) -> Organization | None:
        if not customer_id:
            return None
        return self.db.query(Organization).filter(Organization.stripe_customer_id == customer_id).first()

    def _on_checkout_completed(self, data: dict[str, Any]) -> None:
        metadata = data.get("metadata") or {}
        org_id = metadata.get("orgId")
        plan_id = metadata.get("planId")
        if not org_id or not plan_id:
            return
        try:
            tier = resolve_tier(plan_id)
            org = self.db.get(Organization, int(org_id))
        except (ValidationError, TypeError, ValueError):
            # Unusable metadata is logged and acknowledged.
            logger.warning(
                "billing.webhook.invalid_metadata",
                extra={"event": "billing.webhook.invalid_metadata", "org_id": org_id, "plan_id": plan_id},
            )
            return
        if org is None:
            return
        org.plan_tier = tier
        org.stripe_subscription_id = data.get("subscription")
        logger.info(
            "billing.plan.upgraded",
            extra={"event": "billing.plan.upgraded", "org_id": org.id, "plan_tier": org.plan_tier.value},
        )

    def _on_subscription_updated(self, data: dict[str, Any]) -> None:
        org = self._org_for_customer(data.get("customer"))
        if org is None:
            return
        items = ((data.get("items") or {}).get("data")) or []
        price_id = ((items[0].get("price") or {}).get("id")) if items else None
        org.plan_tier = price_id_to_tier(price_id)
        org.stripe_subscription_id = data.get("id")
        logger.info(
            "billing.subscription.updated",
            extra={"event": "billing.subscription.updated", "org_id": org.id, "plan_tier": org.plan_tier.value},
        )

    def _on_subscription_deleted(self, data: dict[str, Any]) -> None:
        org = self._org_for_customer(data.get("customer"))
        if org is None:
            return
        org.plan_tier = PlanTier.FREE
        org.stripe_subscription_id = None
        logger.info("billing.plan.downgraded", extra={"event": "billing.plan.downgraded", "org_id": org.id})

    def _on_payment_succeeded(self, data: dict[str, Any]) -> None:
        org = self._org_for_customer(data.get("customer"))
        if org is None:
            return
        org.assessments_used_this_month = 0
        org.billing_cycle_start = utcnow()
        logger.info("billing.usage.reset", extra={"event": "billing.usage.reset", "org_id": org.id})

    def _on_payment_failed(self, data: dict[str, Any]) -> None:
        logger.warning(
            "billing.payment.failed",
            extra={"event": "billing.payment.failed", "invoice_id": data.get("id"), "customer": data.get("customer")},
        )
