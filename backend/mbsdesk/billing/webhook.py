"""Stripe webhook processing.

Verified events move ``users/{email}.subscription`` between ``active`` and
``inactive``. Each write is a flat overwrite, so replayed or reordered
deliveries simply reapply a state; no event ids are tracked.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

import stripe

from mbsdesk.config.settings import StripeSettings
from mbsdesk.errors import InvalidRequest
from mbsdesk.normalize.tables import USERS_COLLECTION
from mbsdesk.schemas.billing import WebhookAck
from mbsdesk.store.base import DocumentStore

logger = logging.getLogger(__name__)

SUBSCRIPTION_TRANSITIONS = {
    "checkout.session.completed": "active",
    "customer.subscription.deleted": "inactive",
    "invoice.payment_failed": "inactive",
}


def verify_event(payload: bytes, signature: str | None, config: StripeSettings) -> dict[str, Any]:
    if not signature:
        raise InvalidRequest("Webhook Error: missing stripe-signature header")
    if not config.webhook_secret:
        raise InvalidRequest("Webhook Error: signing secret is not configured")
    try:
        body = payload.decode("utf-8")
        stripe.WebhookSignature.verify_header(
            body, signature, config.webhook_secret, tolerance=stripe.Webhook.DEFAULT_TOLERANCE
        )
        event = json.loads(body)
    except (ValueError, stripe.SignatureVerificationError) as exc:
        logger.warning("Webhook error: %s", exc)
        raise InvalidRequest(f"Webhook Error: {exc}") from exc
    if not isinstance(event, dict):
        raise InvalidRequest("Webhook Error: event payload must be a JSON object")
    return event


def extract_email(event_object: Mapping[str, Any]) -> str | None:
    """Email tagged on the session at checkout, else the one Stripe recorded on the object."""
    metadata = event_object.get("metadata") or {}
    candidates = [
        metadata.get("email"),
        event_object.get("customer_email"),
        (event_object.get("customer_details") or {}).get("email"),
    ]
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return None


async def apply_event(event: Mapping[str, Any], store: DocumentStore) -> WebhookAck:
    event_type = str(event.get("type") or "")
    new_state = SUBSCRIPTION_TRANSITIONS.get(event_type)
    if new_state is None:
        logger.info("Ignoring webhook event %s", event_type)
        return WebhookAck(event_type=event_type)

    event_object = (event.get("data") or {}).get("object") or {}
    email = extract_email(event_object)
    if email is None:
        logger.warning("No email on %s event; skipping subscription update.", event_type)
        return WebhookAck(event_type=event_type)

    await store.merge(
        USERS_COLLECTION,
        email,
        {"subscription": new_state},
        timestamp_field="updated",
    )
    logger.info("Subscription for %s set to %s (%s)", email, new_state, event_type)
    return WebhookAck(event_type=event_type, applied=new_state)


async def handle_webhook(
    payload: bytes, signature: str | None, store: DocumentStore, config: StripeSettings
) -> WebhookAck:
    event = verify_event(payload, signature, config)
    return await apply_event(event, store)
