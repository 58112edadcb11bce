"""
Cart & Checkout Schemas

Quantities in a cart update are deltas: they are added to the existing
quantity, and an item whose total drops to zero or below is removed.
"""

from pydantic import BaseModel, Field


class CartItemInput(BaseModel):
    product: int = Field(..., ge=1, description="Book id")
    quantity: int = Field(..., description="Quantity delta (may be negative)")


class CartUpdate(BaseModel):
    items: list[CartItemInput] = Field(..., min_length=1)


class CartProduct(BaseModel):
    id: int
    title: str
    slug: str | None
    cover: str | None = None
    price: dict[str, str]


class CartItemResponse(BaseModel):
    product: CartProduct
    quantity: int


class CartResponse(BaseModel):
    id: int | None = None
    items: list[CartItemResponse] = Field(default_factory=list)


class CartEnvelope(BaseModel):
    cart: CartResponse


class CheckoutRequest(BaseModel):
    cart_id: int = Field(..., ge=1)


class CheckoutResponse(BaseModel):
    checkout_url: str
