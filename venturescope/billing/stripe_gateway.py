"""Thin adapter over the Stripe SDK for customers, checkout, portal, and webhooks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import stripe

from venturescope.core.config import Config, get_config
from venturescope.core.exceptions import ConfigurationError, ExternalServiceError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WebhookEvent:
    id: str
    type: str
    data_object: dict[str, Any]


class StripeGateway:
    """Calls the payment provider; every SDK failure surfaces as ``ExternalServiceError``."""

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or get_config()

    @property
    def api_key(self) -> str:
        if not self.config.STRIPE_SECRET_KEY:
            raise ConfigurationError("STRIPE_SECRET_KEY is not configured.")
        return self.config.STRIPE_SECRET_KEY

    def create_customer(self, email: str, name: str, metadata: dict[str, str]) -> str:
        try:
            customer = stripe.Customer.create(api_key=self.api_key, email=email, name=name, metadata=metadata)
        except stripe.StripeError as exc:
            self._log_failure("customer.create", exc)
            raise ExternalServiceError("Failed to create billing customer") from exc
        return customer["id"]

    def create_checkout_session(self, customer_id: str, price_id: str, metadata: dict[str, str]) -> str:
        app_url = self.config.APP_URL.rstrip("/")
        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                customer=customer_id,
                mode="subscription",
                payment_method_types=["card"],
                line_items=[{"price": price_id, "quantity": 1}],
                success_url=f"{app_url}/dashboard/settings?success=true",
                cancel_url=f"{app_url}/dashboard/settings?canceled=true",
                metadata=metadata,
            )
        except stripe.StripeError as exc:
            self._log_failure("checkout.create", exc)
            raise ExternalServiceError("Failed to create checkout session") from exc
        return session["url"]

    def create_portal_session(self, customer_id: str) -> str:
        try:
            session = stripe.billing_portal.Session.create(
                api_key=self.api_key,
                customer=customer_id,
                return_url=f"{self.config.APP_URL.rstrip('/')}/dashboard/settings",
            )
        except stripe.StripeError as exc:
            self._log_failure("portal.create", exc)
            raise ExternalServiceError("Failed to create billing portal session") from exc
        return session["url"]

    def construct_event(self, payload: bytes, signature: str | None) -> WebhookEvent:
        """Verify the webhook signature and unwrap the event."""
        if not signature:
            raise ValidationError("Missing signature")
        if not self.config.STRIPE_WEBHOOK_SECRET:
            raise ConfigurationError("STRIPE_WEBHOOK_SECRET is not configured.")
        try:
            event = stripe.Webhook.construct_event(payload, signature, self.config.STRIPE_WEBHOOK_SECRET)
        except (ValueError, stripe.SignatureVerificationError) as exc:
            logger.warning(
                "billing.webhook.signature_invalid",
                extra={"event": "billing.webhook.signature_invalid", "error": str(exc)},
            )
            raise ValidationError("Invalid signature") from exc
        data_object = event["data"]["object"]
        if hasattr(data_object, "to_dict"):
            data_object = data_object.to_dict()
        return WebhookEvent(id=event["id"], type=event["type"], data_object=dict(data_object))

    @staticmethod
    def _log_failure(operation: str, exc: Exception) -> None:
        logger.error(
            "billing.stripe.failed",
            extra={"event": "billing.stripe.failed", "operation": operation, "error": str(exc)},
        )


def get_stripe_gateway() -> StripeGateway:
    return StripeGateway()
