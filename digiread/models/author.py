"""
Author Model

Represents an author profile registered by a signed-up user.

SQLAlchemy 2.0 Features Used:
- mapped_column(): New way to define columns with full type support
- Mapped[]: Type hint wrapper for SQLAlchemy columns
- relationship(): One-to-Many to Book
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from digiread.database import Base

# TYPE_CHECKING prevents circular imports at runtime while enabling type hints
if TYPE_CHECKING:
    from digiread.models.book import Book


class Author(Base):
    """
    Author model representing writers who sell books in the store.

    Table: authors

    Relationships:
    - books: One-to-Many (a book has exactly one author)

    Indexes:
    - user_id: Unique, one author profile per user
    - slug: Unique, used in public URLs

    Example:
        author = Author(
            name="Jane Writer",
            about="...at least one hundred characters about the author...",
            user_id=user.id,
        )
    """

    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Basic Fields
    # -------------------------------------------------------------------------
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        comment="User who owns this author profile"
    )

    name: Mapped[str] = mapped_column(
        String(255),
        index=True,
        nullable=False,
        comment="Author's public name"
    )

    about: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Author biography"
    )

    # Filled in right after the row gets its id
    slug: Mapped[str | None] = mapped_column(
        String(300),
        unique=True,
        index=True,
        nullable=True,
        comment="URL-friendly identifier (name + id)"
    )

    # JSON keeps the list of links without an extra table
    social_links: Mapped[list[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
        comment="List of social profile URLs"
    )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="When the author record was created"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        comment="When the author record was last updated"
    )

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------
    books: Mapped[list["Book"]] = relationship(
        "Book",
        back_populates="author",
        order_by="Book.created_at",
    )

    def __repr__(self) -> str:
        return f"Author(id={self.id}, name='{self.name}')"
