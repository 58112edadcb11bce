"""
Review Model

A rating (1-5) with optional text, left by a reader on a book they own.
Each reader has at most one review per book; adding again overwrites it.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from digiread.database import Base

if TYPE_CHECKING:
    from digiread.models.book import Book
    from digiread.models.user import User


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Review(Base):
    """
    Table: reviews

    Timestamps are set in Python so newest-first ordering also holds for
    reviews written within the same database transaction.
    """

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    book_id: Mapped[int] = mapped_column(
        ForeignKey("books.id", ondelete="CASCADE"),
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )

    rating: Mapped[int] = mapped_column(Integer, comment="1 to 5 stars")
    content: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
    )

    book: Mapped["Book"] = relationship(back_populates="reviews")
    user: Mapped["User"] = relationship(back_populates="reviews")

    __table_args__ = (
        UniqueConstraint("book_id", "user_id", name="uq_review_book_user"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_review_rating_range"),
    )

    def __repr__(self) -> str:
        return f"Review(id={self.id}, book_id={self.book_id}, user_id={self.user_id}, rating={self.rating})"
