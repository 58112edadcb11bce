"""
Authors Router

Endpoints for author profiles:
- Register the current user as an author
- Update the current author's details
- Public author page and book list
"""

import logging

from fastapi import APIRouter, status
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from digiread.dependencies import AuthorUser, DbSession, SignedUpUser
from digiread.exceptions import BadRequest, Forbidden, NotFound
from digiread.models import Author, User, UserRole
from digiread.schemas import (
    AuthorBookItem,
    AuthorBooksResponse,
    AuthorBookSummary,
    AuthorDetailResponse,
    AuthorRegister,
    AuthorRegisterResponse,
    AuthorUpdate,
    MessageResponse,
)
from digiread.services.magic_link import format_profile
from digiread.services.ratings import format_rating
from digiread.utils import format_price, slugify

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/author",
    tags=["Authors"],
    responses={
        404: {"description": "Author not found"},
    },
)


def get_author_or_404(db: DbSession, author_id: int) -> Author:
    """Get an author (with books) by ID or raise 404."""
    stmt = (
        select(Author)
        .options(selectinload(Author.books))
        .where(Author.id == author_id)
    )
    author = db.execute(stmt).scalar_one_or_none()

    if author is None:
        raise NotFound("Author not found!")
    return author


@router.post(
    "/register",
    response_model=AuthorRegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register as an author",
    description="Create an author profile for the current (signed up) user.",
)
def register_author(
    author_data: AuthorRegister,
    current_user: SignedUpUser,
    db: DbSession,
) -> AuthorRegisterResponse:
    if current_user.author_id is not None:
        raise BadRequest("You are already registered as an author!")

    author = Author(
        user_id=current_user.id,
        name=author_data.name,
        about=author_data.about,
        social_links=[str(link) for link in author_data.social_links],
    )
    db.add(author)
    db.flush()  # assigns author.id for the slug

    author.slug = slugify(f"{author.name} {author.id}")

    user = db.get(User, current_user.id)
    user.role = UserRole.AUTHOR.value
    user.author_id = author.id

    db.commit()
    db.refresh(user)

    logger.info(f"User {user.id} registered as author {author.id}")

    return AuthorRegisterResponse(user=format_profile(user))


@router.patch(
    "",
    response_model=MessageResponse,
    summary="Update author details",
)
def update_author(
    author_data: AuthorUpdate,
    current_user: AuthorUser,
    db: DbSession,
) -> MessageResponse:
    author = get_author_or_404(db, current_user.author_id)

    author.name = author_data.name
    author.about = author_data.about
    author.social_links = [str(link) for link in author_data.social_links]
    db.commit()

    return MessageResponse(message="Your details updated successfully.")


@router.get(
    "/books/{author_id}",
    response_model=AuthorBooksResponse,
    summary="List an author's books",
)
def get_author_books(author_id: int, db: DbSession) -> AuthorBooksResponse:
    author = db.get(Author, author_id)
    if author is None:
        raise Forbidden("Invalid request!")

    return AuthorBooksResponse(
        books=[AuthorBookItem.model_validate(book) for book in author.books]
    )


@router.get(
    "/{author_id}",
    response_model=AuthorDetailResponse,
    summary="Get an author by ID",
    description="Public author page with the author's books.",
)
def get_author(author_id: int, db: DbSession) -> AuthorDetailResponse:
    author = get_author_or_404(db, author_id)

    return AuthorDetailResponse(
        id=author.id,
        name=author.name,
        about=author.about,
        slug=author.slug,
        social_links=author.social_links,
        books=[
            AuthorBookSummary(
                id=book.id,
                title=book.title,
                slug=book.slug,
                genre=book.genre,
                price={
                    "mrp": format_price(book.price_mrp),
                    "sale": format_price(book.price_sale),
                },
                cover=book.cover_url,
                rating=format_rating(book.average_rating),
            )
            for book in author.books
        ],
    )
