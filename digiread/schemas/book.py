"""
Book Pydantic Schemas

The most involved schemas, handling:
- Multipart form input where price and file_info arrive as JSON strings
- Price validation (non-negative, sale not above mrp) and cents conversion
- Public detail and library responses
"""

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, Json, field_validator, model_validator


class PriceInput(BaseModel):
    """
    Price in currency units as sent by the client.

    Example: {"mrp": 12.5, "sale": 9.99}
    """

    mrp: Decimal = Field(..., ge=0, le=Decimal("99999.99"))
    sale: Decimal = Field(..., ge=0, le=Decimal("99999.99"))

    @model_validator(mode="after")
    def sale_not_above_mrp(self) -> "PriceInput":
        if self.sale > self.mrp:
            raise ValueError("Sale price must not exceed mrp")
        return self

    @property
    def mrp_cents(self) -> int:
        return int((self.mrp * 100).to_integral_value())

    @property
    def sale_cents(self) -> int:
        return int((self.sale * 100).to_integral_value())


class FileInfo(BaseModel):
    """Metadata of the epub the client is about to upload."""

    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1, examples=["application/epub+zip"])
    size: int = Field(..., gt=0, description="Size in bytes")


class BookForm(BaseModel):
    """
    Fields of POST /book/create.

    The router collects the multipart fields into a dict and validates it
    with this model, so price and file_info are parsed from JSON strings.
    """

    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1)
    genre: str = Field(..., min_length=1, max_length=100)
    language: str = Field(..., min_length=1, max_length=50)
    publication_name: str = Field(..., min_length=1, max_length=255)
    published_at: date
    price: Json[PriceInput]
    file_info: Json[FileInfo]
    upload_method: Literal["aws", "local"]

    @field_validator("title", "description", "genre", "language", "publication_name")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Field cannot be empty or whitespace")
        return v.strip()


class BookUpdateForm(BookForm):
    """
    Fields of PATCH /book.

    The book is addressed by slug; file_info is only needed when a new
    file is uploaded.
    """

    slug: str = Field(..., min_length=1)
    file_info: Json[FileInfo] | None = None


class BookUploadResponse(BaseModel):
    """Presigned PUT URL for the epub (empty for local uploads)."""

    upload_url: str = ""


class BookAuthor(BaseModel):
    id: int
    name: str
    slug: str | None


class BookDetailResponse(BaseModel):
    id: int
    title: str
    slug: str | None
    description: str
    genre: str
    language: str
    publication_name: str
    published_at: date
    price: dict[str, str] = Field(..., examples=[{"mrp": "12.00", "sale": "9.50"}])
    cover: str | None = None
    file_size: str
    rating: str | None = None
    review_count: int
    author: BookAuthor


class LibraryBook(BaseModel):
    id: int
    title: str
    slug: str | None
    cover: str | None = None
    author: BookAuthor


class LibraryResponse(BaseModel):
    books: list[LibraryBook]
