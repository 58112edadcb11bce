"""
Reviews Router

Endpoints for book reviews.

Endpoints:
- POST /review/add - Add or replace the caller's review (book owners only)
- GET /review/{book_id} - The caller's review of a book
- GET /review/list/{book_id} - Public paginated reviews of a book

Business Rules:
- One review per user per book; adding again replaces it
- Only users who own the book can review it
- Every add recalculates the book's average rating
"""

import logging
import math

from fastapi import APIRouter, Request
from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from digiread.config import get_settings
from digiread.dependencies import CurrentUser, DbSession, Pagination, ensure_book_purchased
from digiread.exceptions import NotFound
from digiread.models import Book, Review
from digiread.schemas.review import (
    PublicReviewResponse,
    ReviewAuthor,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
)
from digiread.schemas.user import MessageResponse
from digiread.services.rate_limiter import limiter
from digiread.services.ratings import recalculate_book_rating

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(
    prefix="/review",
    tags=["Reviews"],
    responses={
        404: {"description": "Review or book not found"},
    },
)


@router.post(
    "/add",
    response_model=MessageResponse,
    summary="Add or update a review",
)
@limiter.limit(settings.rate_limit_write)
def add_review(
    request: Request,
    review_data: ReviewCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> MessageResponse:
    ensure_book_purchased(current_user, review_data.book_id)

    stmt = select(Review).where(
        Review.book_id == review_data.book_id,
        Review.user_id == current_user.id,
    )
    review = db.execute(stmt).scalar_one_or_none()

    if review is None:
        review = Review(book_id=review_data.book_id, user_id=current_user.id)
        db.add(review)

    review.rating = review_data.rating
    review.content = review_data.content
    db.commit()

    recalculate_book_rating(db, review_data.book_id)
    logger.info(f"User {current_user.id} reviewed book {review_data.book_id}")

    return MessageResponse(message="Review added successfully.")


@router.get(
    "/list/{book_id}",
    response_model=ReviewListResponse,
    summary="List reviews for a book",
    description="Get a paginated list of reviews for a specific book.",
)
def list_book_reviews(
    book_id: int,
    db: DbSession,
    pagination: Pagination,
) -> ReviewListResponse:
    if db.get(Book, book_id) is None:
        raise NotFound("Book not found!")

    count_stmt = select(func.count()).select_from(Review).where(Review.book_id == book_id)
    total = db.execute(count_stmt).scalar() or 0

    pages = math.ceil(total / pagination.per_page) if total > 0 else 0

    stmt = (
        select(Review)
        .options(selectinload(Review.user))
        .where(Review.book_id == book_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .offset(pagination.skip)
        .limit(pagination.per_page)
    )
    reviews = db.execute(stmt).scalars().all()

    return ReviewListResponse(
        items=[
            PublicReviewResponse(
                id=r.id,
                rating=r.rating,
                content=r.content,
                created_at=r.created_at,
                user=ReviewAuthor(id=r.user.id, name=r.user.name, avatar=r.user.avatar_url),
            )
            for r in reviews
        ],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pages,
    )


@router.get(
    "/{book_id}",
    response_model=ReviewResponse,
    summary="Get your review of a book",
)
def get_my_review(
    book_id: int,
    current_user: CurrentUser,
    db: DbSession,
) -> ReviewResponse:
    stmt = select(Review).where(
        Review.book_id == book_id,
        Review.user_id == current_user.id,
    )
    review = db.execute(stmt).scalar_one_or_none()
    if review is None:
        raise NotFound("Review not found!")

    return ReviewResponse.model_validate(review)
