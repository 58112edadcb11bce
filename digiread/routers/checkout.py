"""
Checkout & Payment Webhook Router

- POST /checkout: turn the caller's cart into a Stripe Checkout session
- POST /webhook: Stripe events; a completed checkout fills the buyer's library
"""

import logging

from fastapi import APIRouter, Request

from digiread.dependencies import CurrentUser, DbSession
from digiread.exceptions import BadRequest, NotFound
from digiread.models import Cart
from digiread.schemas.cart import CheckoutRequest, CheckoutResponse
from digiread.services.payments import (
    CHECKOUT_COMPLETED,
    construct_webhook_event,
    create_checkout_session,
    fulfil_checkout,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Checkout"])


@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    summary="Start checkout",
)
def checkout(
    checkout_data: CheckoutRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> CheckoutResponse:
    cart = db.get(Cart, checkout_data.cart_id)
    if cart is None or cart.user_id != current_user.id:
        raise NotFound("Cart not found!")
    if not cart.items:
        raise BadRequest("Cart is empty!")

    return CheckoutResponse(checkout_url=create_checkout_session(cart, current_user.id))


@router.post(
    "/webhook",
    summary="Stripe webhook",
    include_in_schema=False,
)
async def payment_webhook(request: Request, db: DbSession) -> dict:
    payload = await request.body()
    event = construct_webhook_event(payload, request.headers.get("stripe-signature"))

    if event["type"] == CHECKOUT_COMPLETED:
        metadata = event["data"]["object"]["metadata"] or {}
        fulfil_checkout(db, dict(metadata))
    else:
        logger.info(f"Ignoring webhook event {event['type']}")

    return {"received": True}
