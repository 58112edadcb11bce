"""
Cart Router

One cart per user. Updates carry quantity deltas so the client can add or
remove copies without knowing the current state.
"""

import logging

from fastapi import APIRouter
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from digiread.dependencies import CurrentUser, DbSession
from digiread.exceptions import NotFound
from digiread.models import Book, Cart, CartItem
from digiread.schemas.cart import (
    CartEnvelope,
    CartItemResponse,
    CartProduct,
    CartResponse,
    CartUpdate,
)
from digiread.schemas.user import MessageResponse
from digiread.utils import format_price

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/cart",
    tags=["Cart"],
)


def get_user_cart(db: DbSession, user_id: int) -> Cart | None:
    stmt = (
        select(Cart)
        .options(selectinload(Cart.items).selectinload(CartItem.book))
        .where(Cart.user_id == user_id)
    )
    return db.execute(stmt).scalar_one_or_none()


def to_cart_response(cart: Cart | None) -> CartEnvelope:
    if cart is None:
        return CartEnvelope(cart=CartResponse())

    return CartEnvelope(
        cart=CartResponse(
            id=cart.id,
            items=[
                CartItemResponse(
                    product=CartProduct(
                        id=item.book.id,
                        title=item.book.title,
                        slug=item.book.slug,
                        cover=item.book.cover_url,
                        price={
                            "mrp": format_price(item.book.price_mrp),
                            "sale": format_price(item.book.price_sale),
                        },
                    ),
                    quantity=item.quantity,
                )
                for item in cart.items
            ],
        )
    )


@router.get(
    "",
    response_model=CartEnvelope,
    summary="Get the current cart",
)
def get_cart(current_user: CurrentUser, db: DbSession) -> CartEnvelope:
    return to_cart_response(get_user_cart(db, current_user.id))


@router.put(
    "",
    response_model=CartEnvelope,
    summary="Update the cart",
    description="""
    Apply quantity deltas.

    - existing items get the delta added
    - missing items are created when the delta is positive
    - items whose quantity drops to zero or below are removed
    """,
)
def update_cart(
    cart_data: CartUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> CartEnvelope:
    for entry in cart_data.items:
        if db.get(Book, entry.product) is None:
            raise NotFound("Book not found!")

    cart = get_user_cart(db, current_user.id)
    if cart is None:
        cart = Cart(user_id=current_user.id)
        db.add(cart)

    for entry in cart_data.items:
        item = next((i for i in cart.items if i.book_id == entry.product), None)
        if item is None:
            if entry.quantity > 0:
                cart.items.append(CartItem(book_id=entry.product, quantity=entry.quantity))
            continue

        quantity = item.quantity + entry.quantity
        if quantity <= 0:
            cart.items.remove(item)
        else:
            item.quantity = quantity

    db.commit()

    return to_cart_response(get_user_cart(db, current_user.id))


@router.post(
    "/clear",
    response_model=MessageResponse,
    summary="Remove every item from the cart",
)
def clear_cart(current_user: CurrentUser, db: DbSession) -> MessageResponse:
    cart = get_user_cart(db, current_user.id)
    if cart is not None:
        cart.items.clear()
        db.commit()

    return MessageResponse(message="Cart cleared successfully.")
