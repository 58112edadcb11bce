"""
Book Ratings

Books carry a denormalized average_rating and review_count so catalog pages
never aggregate reviews on read. Whenever a review is added or replaced the
pair is recomputed from the reviews table.
"""

from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from digiread.models import Book, Review

TWO_PLACES = Decimal("0.01")


def recalculate_book_rating(db: Session, book_id: int) -> None:
    """
    Refresh average_rating and review_count of one book, then commit.

    A book without reviews gets a null average and a zero count.
    """
    book = db.get(Book, book_id)
    if book is None:
        return

    average, count = db.execute(
        select(func.avg(Review.rating), func.count(Review.id)).where(Review.book_id == book_id)
    ).one()

    book.average_rating = (
        Decimal(str(average)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
        if average is not None
        else None
    )
    book.review_count = count
    db.commit()


def format_rating(average: Decimal | None) -> str | None:
    """One decimal place for display ("4.3"), None when unrated."""
    if average is None:
        return None
    return f"{float(average):.1f}"
