from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class CheckoutRequest(BaseModel):
    email: Optional[str] = None


class CheckoutResponse(BaseModel):
    url: str


class WebhookAck(BaseModel):
    received: bool = True
    event_type: str
    applied: Optional[str] = None
