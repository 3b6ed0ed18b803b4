from __future__ import annotations

import asyncio
import json

from tests.factories import auth_headers, make_org, make_user
from venturescope.models import OrgRole, Organization, PlanTier
from venturescope.services.billing_service import BillingService

API = "/api/v1"


def _webhook(client, event_type, data, signature="valid"):
    payload = json.dumps({"id": "evt_1", "type": event_type, "data": {"object": data}})
    return client.post(f"{API}/billing/webhook", content=payload, headers={"Stripe-Signature": signature})


def test_checkout_creates_customer_once(client, db_session, fake_gateway):
    org = make_org(db_session)
    headers = auth_headers(db_session, make_user(db_session, "owner@acme.example", org=org))

    first = client.post(f"{API}/billing/checkout", json={"planId": "pro"}, headers=headers)
    assert first.status_code == 200
    assert first.json() == {"url": "https://checkout.test/session"}
    client.post(f"{API}/billing/checkout", json={"planId": "angel"}, headers=headers)

    assert len(fake_gateway.customers) == 1
    assert fake_gateway.checkouts[0]["price_id"] == "price_pro"
    assert fake_gateway.checkouts[1]["metadata"] == {"orgId": str(org.id), "planId": "angel"}

    invalid = client.post(f"{API}/billing/checkout", json={"planId": "platinum"}, headers=headers)
    assert invalid.status_code == 400
    assert invalid.json() == {"error": "Invalid plan"}

    portal = client.post(f"{API}/billing/portal", headers=headers)
    assert portal.json() == {"url": "https://billing.test/portal/cus_1"}


def test_portal_requires_billing_account(client, db_session):
    org = make_org(db_session)
    headers = auth_headers(db_session, make_user(db_session, "owner@acme.example", org=org))
    response = client.post(f"{API}/billing/portal", headers=headers)
    assert response.status_code == 400
    assert response.json() == {"error": "No billing account found"}


def test_usage_report(client, db_session):
    org = make_org(db_session, used=2)
    member = make_user(db_session, "member@acme.example", org=org, role=OrgRole.MEMBER)
    body = client.get(f"{API}/billing/usage", headers=auth_headers(db_session, member)).json()
    assert body["plan"]["tier"] == "free"
    assert body["usage"]["assessmentsUsed"] == 2
    assert body["usage"]["assessmentsLimit"] == 3
    assert body["billing"]["hasPaymentMethod"] is False


def test_webhook_rejects_bad_signature(client):
    response = _webhook(client, "invoice.payment_succeeded", {"customer": "cus_x"}, signature="forged")
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid signature"}


def test_webhook_lifecycle_updates_org(client, db_session):
    org = make_org(db_session, used=3)
    org.stripe_customer_id = "cus_live"
    db_session.commit()

    upgraded = _webhook(
        client,
        "checkout.session.completed",
        {"metadata": {"orgId": str(org.id), "planId": "pro"}, "subscription": "sub_1"},
    )
    assert upgraded.json() == {"received": True}
    db_session.expire_all()
    refreshed = db_session.get(Organization, org.id)
    assert refreshed.plan_tier == PlanTier.PRO
    assert refreshed.stripe_subscription_id == "sub_1"

    _webhook(client, "invoice.payment_succeeded", {"customer": "cus_live"})
    db_session.expire_all()
    assert db_session.get(Organization, org.id).assessments_used_this_month == 0

    _webhook(
        client,
        "customer.subscription.updated",
        {"id": "sub_2", "customer": "cus_live", "items": {"data": [{"price": {"id": "price_angel"}}]}},
    )
    db_session.expire_all()
    assert db_session.get(Organization, org.id).plan_tier == PlanTier.ANGEL

    _webhook(client, "customer.subscription.deleted", {"customer": "cus_live"})
    db_session.expire_all()
    downgraded = db_session.get(Organization, org.id)
    assert downgraded.plan_tier == PlanTier.FREE
    assert downgraded.stripe_subscription_id is None

    assert _webhook(client, "charge.refunded", {}).json() == {"received": True}


def test_webhook_acknowledges_unusable_checkout_metadata(client, db_session, caplog):
    org = make_org(db_session)

    unknown_plan = _webhook(
        client,
        "checkout.session.completed",
        {"metadata": {"orgId": str(org.id), "planId": "platinum"}, "subscription": "sub_9"},
    )
    assert unknown_plan.status_code == 200
    assert unknown_plan.json() == {"received": True}

    bad_org = _webhook(
        client,
        "checkout.session.completed",
        {"metadata": {"orgId": "not-a-number", "planId": "pro"}, "subscription": "sub_9"},
    )
    assert bad_org.status_code == 200
    assert bad_org.json() == {"received": True}

    db_session.expire_all()
    untouched = db_session.get(Organization, org.id)
    assert untouched.plan_tier == PlanTier.FREE
    assert untouched.stripe_subscription_id is None
    assert [r.message for r in caplog.records].count("billing.webhook.invalid_metadata") == 2


def test_webhook_processing_runs_off_the_event_loop(client, db_session, monkeypatch):
    loops_seen = []
    original = BillingService.handle_webhook

    def _tracking(self, payload, signature):
        try:
            loops_seen.append(asyncio.get_running_loop())
        except RuntimeError:
            loops_seen.append(None)
        return original(self, payload, signature)

    monkeypatch.setattr(BillingService, "handle_webhook", _tracking)
    response = _webhook(client, "invoice.payment_succeeded", {"customer": "cus_unknown"})
    assert response.json() == {"received": True}
    assert loops_seen == [None]
