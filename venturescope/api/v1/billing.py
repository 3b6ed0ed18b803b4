"""Billing endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from venturescope.api.v1._authz import authorize
from venturescope.billing.stripe_gateway import get_stripe_gateway
from venturescope.core.dependencies import get_db_session
from venturescope.schemas.billing import CheckoutRequest, RedirectResponse, WebhookAck
from venturescope.services.billing_service import BillingService

router = APIRouter(prefix="/billing", tags=["billing"])


@router.post("/checkout", response_model=RedirectResponse)
def create_checkout(
    payload: CheckoutRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> RedirectResponse:
    user = authorize(db, authorization, scopes=["billing.manage"])
    url = BillingService(db, gateway=get_stripe_gateway()).create_checkout(user.org_context(), payload.plan_id)
    return RedirectResponse(url=url)


@router.post("/portal", response_model=RedirectResponse)
def create_portal(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> RedirectResponse:
    user = authorize(db, authorization, scopes=["billing.manage"])
    url = BillingService(db, gateway=get_stripe_gateway()).create_portal(user.org_context())
    return RedirectResponse(url=url)


@router.get("/usage")
def get_usage(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> dict:
    user = authorize(db, authorization, scopes=["billing.read"])
    return BillingService(db).usage_report(user.org_context())


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None, alias="Stripe-Signature"),
    db: Session = Depends(get_db_session),
) -> WebhookAck:
    payload = await request.body()
    service = BillingService(db, gateway=get_stripe_gateway())
    await run_in_threadpool(service.handle_webhook, payload, stripe_signature)
    return WebhookAck(received=True)
