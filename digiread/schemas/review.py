"""
Review Pydantic Schemas

Schemas for book reviews with ratings.

Business Rules:
- Rating must be 1-5 (validated at schema level)
- One review per user per book; adding again replaces the previous one
- Only owners of a book can review it
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReviewCreate(BaseModel):
    """
    Schema for POST /review/add.

    Example request body:
    {
        "book_id": 42,
        "rating": 5,
        "content": "One of the best books I've ever read..."
    }
    """

    book_id: int = Field(..., ge=1, description="Reviewed book")

    rating: int = Field(
        ...,
        ge=1,
        le=5,
        description="Rating from 1 to 5 stars",
        examples=[4, 5],
    )

    content: str | None = Field(
        default=None,
        max_length=5000,
        description="Review text content",
    )

    @field_validator("content")
    @classmethod
    def content_must_not_be_empty_if_provided(cls, v: str | None) -> str | None:
        """Blank content is stored as no content."""
        if v is not None:
            v = v.strip()
            if not v:
                return None
        return v


class ReviewResponse(BaseModel):
    """The caller's own review."""

    id: int
    book_id: int
    rating: int
    content: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReviewAuthor(BaseModel):
    """Who wrote a public review."""

    id: int
    name: str | None = None
    avatar: str | None = None


class PublicReviewResponse(BaseModel):
    id: int
    rating: int
    content: str | None = None
    created_at: datetime
    user: ReviewAuthor


class ReviewListResponse(BaseModel):
    """One page of a book's public reviews, newest first."""

    items: list[PublicReviewResponse]
    total: int = Field(..., ge=0, description="Reviews of the book across all pages")
    page: int = Field(..., ge=1)
    per_page: int = Field(..., ge=1, le=100)
    pages: int = Field(..., ge=0, description="0 when the book has no reviews")
