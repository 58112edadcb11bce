"""
Cart Models

Each user owns at most one cart; a cart holds one item per book.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from digiread.database import Base

if TYPE_CHECKING:
    from digiread.models.book import Book


class Cart(Base):
    """
    Table: carts

    Relationships:
    - items: One-to-Many (deleted with the cart)
    """

    __tablename__ = "carts"

    id: Mapped[int] = mapped_column(primary_key=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    items: Mapped[list["CartItem"]] = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.id",
    )

    def __repr__(self) -> str:
        return f"Cart(id={self.id}, user_id={self.user_id})"


class CartItem(Base):
    """Table: cart_items"""

    __tablename__ = "cart_items"

    id: Mapped[int] = mapped_column(primary_key=True)

    cart_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("carts.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    book_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    cart: Mapped["Cart"] = relationship("Cart", back_populates="items")
    book: Mapped["Book"] = relationship("Book")

    __table_args__ = (
        UniqueConstraint("cart_id", "book_id", name="uq_cart_item_book"),
        CheckConstraint("quantity > 0", name="ck_cart_item_quantity_positive"),
    )

    def __repr__(self) -> str:
        return f"CartItem(cart_id={self.cart_id}, book_id={self.book_id}, quantity={self.quantity})"
