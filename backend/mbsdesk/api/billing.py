import json

from fastapi import APIRouter, Depends, Header, Request
from pydantic import ValidationError

from mbsdesk.api.deps import get_settings, get_store
from mbsdesk.billing.checkout import create_checkout_session
from mbsdesk.billing.webhook import handle_webhook
from mbsdesk.config.settings import Settings
from mbsdesk.errors import InvalidRequest
from mbsdesk.schemas.billing import CheckoutRequest, CheckoutResponse, WebhookAck
from mbsdesk.store.base import DocumentStore

router = APIRouter(prefix="/billing")


async def read_checkout_request(request: Request) -> CheckoutRequest:
    """Parse the checkout body, reporting any malformed input as a 400."""
    body = await request.body()
    if not body.strip():
        return CheckoutRequest()
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise InvalidRequest("Invalid JSON body") from exc
    if not isinstance(data, dict):
        raise InvalidRequest("Missing email")
    try:
        return CheckoutRequest.model_validate(data)
    except ValidationError as exc:
        raise InvalidRequest("Missing email") from exc


@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    payload: CheckoutRequest = Depends(read_checkout_request),
    config: Settings = Depends(get_settings),
) -> CheckoutResponse:
    return await create_checkout_session(payload.email, config.stripe)


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None, alias="stripe-signature"),
    store: DocumentStore = Depends(get_store),
    config: Settings = Depends(get_settings),
) -> WebhookAck:
    payload = await request.body()
    return await handle_webhook(payload, stripe_signature, store, config.stripe)
