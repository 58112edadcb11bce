"""
History Model

Tracks where a reader left off in a book and the passages they highlighted.
"""

from datetime import datetime

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from digiread.database import Base


class History(Base):
    """
    Reading history of one reader for one book.

    Table: histories

    highlights is a JSON list of {"selection": str, "fill": str} objects.
    """

    __tablename__ = "histories"

    id: Mapped[int] = mapped_column(primary_key=True)

    reader_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    book_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("books.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    last_location: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        comment="Reader position (epub CFI)"
    )

    highlights: Mapped[list[dict]] = mapped_column(
        JSON,
        default=list,
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

    __table_args__ = (
        UniqueConstraint("reader_id", "book_id", name="uq_history_reader_book"),
    )

    def __repr__(self) -> str:
        return f"History(id={self.id}, reader_id={self.reader_id}, book_id={self.book_id})"
