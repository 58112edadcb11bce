"""
User Model

Represents a reader (and optionally an author) of the store.

Users never have passwords: they are created on their first magic-link
request and become "signed up" the first time a link is verified.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from digiread.database import Base

if TYPE_CHECKING:
    from digiread.models.book import Book
    from digiread.models.review import Review


class UserRole(str, Enum):
    """
    Roles a user can hold.

    - USER: Regular reader
    - AUTHOR: Reader who registered an author profile
    """
    USER = "user"
    AUTHOR = "author"


# Books a user has purchased (their library)
user_books = Table(
    "user_books",
    Base.metadata,
    Column(
        "user_id",
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "book_id",
        Integer,
        ForeignKey("books.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    comment="Association table linking users to the books they own",
)


class User(Base):
    """
    User model.

    Table: users

    Relationships:
    - books: Many-to-Many (purchased books) through user_books
    - reviews: One-to-Many

    Example:
        user = User(email="reader@example.com")
        db.add(user)
        db.commit()
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Identity Fields
    # -------------------------------------------------------------------------
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
        comment="User's email address (magic links are sent here)"
    )

    name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Display name, unset until the profile is completed"
    )

    role: Mapped[str] = mapped_column(
        String(20),
        default=UserRole.USER.value,
        nullable=False,
        comment="user or author"
    )

    author_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("authors.id", ondelete="SET NULL", use_alter=True),
        nullable=True,
        comment="Linked author profile, if any"
    )

    signed_up: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        comment="False until the first successful link verification"
    )

    # -------------------------------------------------------------------------
    # Avatar (object storage)
    # -------------------------------------------------------------------------
    avatar_id: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        comment="Object key of the avatar in the public bucket"
    )

    avatar_url: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Public URL of the avatar"
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
    books: Mapped[list["Book"]] = relationship(
        "Book",
        secondary=user_books,
    )

    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def book_ids(self) -> list[int]:
        return [book.id for book in self.books]

    def __repr__(self) -> str:
        return f"User(id={self.id}, email='{self.email}', role='{self.role}')"
