"""
Book Model

The central catalog model: a digital book (epub) sold by one author.

Money is stored as integer cents (mrp and sale price) so arithmetic is exact;
the API converts to and from decimal amounts.

Files live in object storage. The row keeps only their keys:
- cover_id / cover_url: image in the public bucket
- file_id: epub in the private bucket (or the local books directory)
"""

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from digiread.database import Base

if TYPE_CHECKING:
    from digiread.models.author import Author
    from digiread.models.review import Review


class Book(Base):
    """
    Book model representing books for sale.

    Table: books

    Relationships:
    - author: Many-to-One
    - reviews: One-to-Many

    Indexes:
    - slug: Unique, used in public URLs
    - genre: For browsing by genre
    - average_rating: For sorting
    """

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(primary_key=True)

    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("authors.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    # -------------------------------------------------------------------------
    # Basic Fields
    # -------------------------------------------------------------------------
    title: Mapped[str] = mapped_column(
        String(500),
        index=True,
        nullable=False,
        comment="Book title"
    )

    slug: Mapped[str | None] = mapped_column(
        String(600),
        unique=True,
        index=True,
        nullable=True,
        comment="URL-friendly identifier (title + id)"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Book description or summary"
    )

    language: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    publication_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Publisher name"
    )

    genre: Mapped[str] = mapped_column(
        String(100),
        index=True,
        nullable=False,
    )

    published_at: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Date of publication"
    )

    # -------------------------------------------------------------------------
    # Price (cents)
    # -------------------------------------------------------------------------
    price_mrp: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="List price in cents"
    )

    price_sale: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Selling price in cents"
    )

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------
    cover_id: Mapped[str | None] = mapped_column(String(600), nullable=True)
    cover_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    file_id: Mapped[str] = mapped_column(
        String(600),
        default="",
        nullable=False,
        comment="Object key (or local filename) of the epub"
    )

    file_size: Mapped[str] = mapped_column(
        String(20),
        default="",
        nullable=False,
        comment="Human-readable file size, e.g. '1.25MB'"
    )

    # -------------------------------------------------------------------------
    # Rating aggregation (denormalized, see services/ratings.py)
    # -------------------------------------------------------------------------
    average_rating: Mapped[Decimal | None] = mapped_column(
        Numeric(3, 2),
        index=True,
        nullable=True,
        comment="Average review rating (1.00-5.00), null if no reviews"
    )

    review_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default="0",
        nullable=False,
    )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------
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

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------
    author: Mapped["Author"] = relationship("Author", back_populates="books")

    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="book",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("price_sale <= price_mrp", name="ck_book_sale_le_mrp"),
        CheckConstraint("price_sale >= 0", name="ck_book_sale_non_negative"),
    )

    def __repr__(self) -> str:
        return f"Book(id={self.id}, title='{self.title}', slug='{self.slug}')"
