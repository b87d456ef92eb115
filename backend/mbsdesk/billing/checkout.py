from __future__ import annotations

import asyncio
import logging

import stripe

from mbsdesk.config.settings import StripeSettings
from mbsdesk.errors import InvalidRequest, UpstreamFailure
from mbsdesk.schemas.billing import CheckoutResponse

logger = logging.getLogger(__name__)


def _create_session(email: str, config: StripeSettings) -> stripe.checkout.Session:
    return stripe.checkout.Session.create(
        api_key=config.secret_key,
        payment_method_types=["card"],
        customer_email=email,
        line_items=[{"price": config.price_id, "quantity": 1}],
        mode="subscription",
        success_url=config.success_url,
        cancel_url=config.cancel_url,
        metadata={"email": email},
    )


async def create_checkout_session(email: str | None, config: StripeSettings) -> CheckoutResponse:
    cleaned = (email or "").strip()
    if not cleaned:
        raise InvalidRequest("Missing email")
    if not config.secret_key or not config.price_id:
        raise UpstreamFailure("Stripe is not configured on the server.")

    try:
        session = await asyncio.to_thread(_create_session, cleaned, config)
    except stripe.StripeError as exc:
        logger.error("Stripe error: %s", exc)
        raise UpstreamFailure(exc.user_message or str(exc)) from exc

    logger.info("Created checkout session %s for %s", session.id, cleaned)
    return CheckoutResponse(url=session.url)
