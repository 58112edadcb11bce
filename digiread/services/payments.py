"""
Payments Service

Stripe Checkout integration.

- create_checkout_session: one line item per cart item, priced from the
  book's sale price (already in cents)
- construct_webhook_event: signature-checked parsing of webhook payloads
- fulfil_checkout: on a completed session, move the cart's books into the
  buyer's library and empty the cart
"""

import logging

import stripe
from sqlalchemy.orm import Session

from digiread.config import get_settings
from digiread.exceptions import BadRequest
from digiread.models import Book, Cart, User

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


def create_checkout_session(cart: Cart, user_id: int) -> str:
    """
    Create a Stripe Checkout session for a cart and return its URL.

    Args:
        cart: Cart with items and their books loaded
        user_id: Buyer, echoed back through metadata

    Returns:
        Hosted checkout page URL
    """
    settings = get_settings()

    line_items = []
    for item in cart.items:
        product_data = {"name": item.book.title}
        if item.book.cover_url:
            product_data["images"] = [item.book.cover_url]
        line_items.append(
            {
                "price_data": {
                    "currency": settings.stripe_currency,
                    "unit_amount": item.book.price_sale,
                    "product_data": product_data,
                },
                "quantity": item.quantity,
            }
        )

    session = stripe.checkout.Session.create(
        api_key=settings.stripe_secret_key,
        mode="payment",
        line_items=line_items,
        success_url=settings.payment_success_url,
        cancel_url=settings.payment_cancel_url,
        metadata={"user_id": str(user_id), "cart_id": str(cart.id)},
    )
    logger.info(f"Checkout session created for cart {cart.id}")

    return session.url


def construct_webhook_event(payload: bytes, signature: str | None):
    """
    Verify a webhook payload against the endpoint secret.

    Raises:
        BadRequest: missing or invalid signature, or unparseable payload
    """
    if not signature:
        raise BadRequest("Could not complete payment!")

    try:
        return stripe.Webhook.construct_event(
            payload,
            signature,
            get_settings().stripe_webhook_secret,
        )
    except (stripe.SignatureVerificationError, ValueError) as e:
        logger.warning(f"Rejected webhook payload: {e}")
        raise BadRequest("Could not complete payment!") from e


def fulfil_checkout(db: Session, metadata: dict) -> None:
    """
    Grant the purchased books and clear the cart.

    Unknown users or carts are logged and ignored so Stripe does not keep
    retrying an event that can never succeed.
    """
    try:
        user_id = int(metadata.get("user_id", 0) or 0)
        cart_id = int(metadata.get("cart_id", 0) or 0)
    except (TypeError, ValueError):
        logger.warning(f"Checkout metadata is not numeric: {metadata}")
        return

    user = db.get(User, user_id)
    cart = db.get(Cart, cart_id)
    if user is None or cart is None or cart.user_id != user.id:
        logger.warning(f"Checkout metadata does not match a cart: {metadata}")
        return

    owned = set(user.book_ids)
    for item in cart.items:
        if item.book_id in owned:
            continue
        book = db.get(Book, item.book_id)
        if book is None:
            logger.warning(f"Skipping missing book {item.book_id} in cart {cart.id}")
            continue
        user.books.append(book)
        owned.add(item.book_id)

    cart.items.clear()
    db.commit()
    logger.info(f"Fulfilled checkout of cart {cart.id} for user {user.id}")
