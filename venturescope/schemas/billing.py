"""Billing schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CheckoutRequest(BaseModel):
    plan_id: str = Field(min_length=1, max_length=40, alias="planId")

    model_config = ConfigDict(populate_by_name=True)


class RedirectResponse(BaseModel):
    url: str


class WebhookAck(BaseModel):
    received: bool = True
