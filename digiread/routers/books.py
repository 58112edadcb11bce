"""
Books Router

Endpoints for the book catalog:
- Create and update books (authors only, multipart form)
- Public book details
- The current user's library

Book files:
=========
- upload_method "aws": the client PUTs the epub to the private bucket using
  the presigned URL returned here; covers go to the public bucket
- upload_method "local": the epub is part of the form and is written to the
  configured books directory
"""

import logging
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from digiread.config import get_settings
from digiread.dependencies import AuthorUser, CurrentUser, DbSession, ObjectStorage
from digiread.exceptions import DigiReadError, NotFound
from digiread.models import Book, User
from digiread.schemas import (
    BookAuthor,
    BookDetailResponse,
    BookForm,
    BookUpdateForm,
    BookUploadResponse,
    LibraryBook,
    LibraryResponse,
)
from digiread.services.rate_limiter import limiter
from digiread.services.ratings import format_rating
from digiread.services.storage import ObjectStore
from digiread.utils import format_file_size, format_price, slugify

logger = logging.getLogger(__name__)
settings = get_settings()

EPUB_CONTENT_TYPE = "application/epub+zip"

router = APIRouter(
    prefix="/book",
    tags=["Books"],
    responses={
        404: {"description": "Book not found"},
    },
)


# =============================================================================
# Form parsing
# =============================================================================
def _validate_form(model: type[BookForm], data: dict) -> BookForm:
    """Validate collected form fields, reporting errors like a JSON body would."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e


def book_form(
    title: Annotated[str, Form()],
    description: Annotated[str, Form()],
    genre: Annotated[str, Form()],
    language: Annotated[str, Form()],
    publication_name: Annotated[str, Form()],
    published_at: Annotated[str, Form()],
    price: Annotated[str, Form(description='JSON: {"mrp": 12.5, "sale": 9.99}')],
    file_info: Annotated[str, Form(description='JSON: {"name", "type", "size"}')],
    upload_method: Annotated[str, Form(description="aws or local")],
) -> BookForm:
    return _validate_form(BookForm, locals())


def book_update_form(
    slug: Annotated[str, Form()],
    title: Annotated[str, Form()],
    description: Annotated[str, Form()],
    genre: Annotated[str, Form()],
    language: Annotated[str, Form()],
    publication_name: Annotated[str, Form()],
    published_at: Annotated[str, Form()],
    price: Annotated[str, Form()],
    upload_method: Annotated[str, Form()],
    file_info: Annotated[str | None, Form()] = None,
) -> BookUpdateForm:
    return _validate_form(BookUpdateForm, locals())


# =============================================================================
# Helpers
# =============================================================================
def _is_epub(upload: UploadFile | None) -> bool:
    return upload is not None and upload.content_type == EPUB_CONTENT_TYPE


def _is_image(upload: UploadFile | None) -> bool:
    return upload is not None and bool(upload.content_type) and upload.content_type.startswith("image")


def _file_key(book: Book) -> str:
    return f"{slugify(f'{book.id} {book.title}')}.epub"


def _cover_key(book: Book) -> str:
    return f"{slugify(f'{book.id} {book.title}')}.png"


def _save_local_file(key: str, data: bytes) -> None:
    directory = Path(settings.local_books_dir)
    directory.mkdir(parents=True, exist_ok=True)
    (directory / key).write_bytes(data)


def _store_cover(storage: ObjectStore, book: Book, cover: UploadFile) -> None:
    bucket = settings.aws_public_bucket
    if book.cover_id:
        storage.delete(bucket, book.cover_id)

    key = _cover_key(book)
    book.cover_url = storage.put(bucket, key, cover.file.read(), cover.content_type)
    book.cover_id = key


def _book_author(book: Book) -> BookAuthor:
    return BookAuthor(id=book.author.id, name=book.author.name, slug=book.author.slug)


# =============================================================================
# Endpoints
# =============================================================================
@router.post(
    "/create",
    response_model=BookUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a book",
    description="""
    Create a book owned by the current author.

    Returns the presigned URL the epub must be uploaded to (aws method) or
    an empty string (local method, the epub is sent in the form).
    """,
)
@limiter.limit(settings.rate_limit_write)
def create_book(
    request: Request,
    current_user: AuthorUser,
    db: DbSession,
    storage: ObjectStorage,
    form: Annotated[BookForm, Depends(book_form)],
    cover: Annotated[UploadFile | None, File()] = None,
    book: Annotated[UploadFile | None, File()] = None,
) -> BookUploadResponse:
    if form.upload_method == "local" and not _is_epub(book):
        raise DigiReadError("Invalid book file!", status_code=422)

    new_book = Book(
        author_id=current_user.author_id,
        title=form.title,
        description=form.description,
        genre=form.genre,
        language=form.language,
        publication_name=form.publication_name,
        published_at=form.published_at,
        price_mrp=form.price.mrp_cents,
        price_sale=form.price.sale_cents,
        file_size=format_file_size(form.file_info.size),
    )
    db.add(new_book)
    db.flush()  # assigns new_book.id for slug and keys

    new_book.slug = slugify(f"{new_book.title} {new_book.id}")
    new_book.file_id = _file_key(new_book)

    upload_url = ""
    if form.upload_method == "local":
        _save_local_file(new_book.file_id, book.file.read())
    else:
        upload_url = storage.signed_upload_url(
            settings.aws_private_bucket,
            new_book.file_id,
            form.file_info.type,
        )

    if _is_image(cover):
        _store_cover(storage, new_book, cover)

    db.commit()
    logger.info(f"Author {current_user.author_id} created book {new_book.id}")

    return BookUploadResponse(upload_url=upload_url)


@router.patch(
    "",
    response_model=BookUploadResponse,
    summary="Update a book",
    description="Update one of the current author's books; replaces file and cover when sent.",
)
@limiter.limit(settings.rate_limit_write)
def update_book(
    request: Request,
    current_user: AuthorUser,
    db: DbSession,
    storage: ObjectStorage,
    form: Annotated[BookUpdateForm, Depends(book_update_form)],
    cover: Annotated[UploadFile | None, File()] = None,
    book: Annotated[UploadFile | None, File()] = None,
) -> BookUploadResponse:
    stmt = select(Book).where(
        Book.slug == form.slug,
        Book.author_id == current_user.author_id,
    )
    existing = db.execute(stmt).scalar_one_or_none()
    if existing is None:
        raise NotFound("Book not found!")

    existing.title = form.title
    existing.description = form.description
    existing.genre = form.genre
    existing.language = form.language
    existing.publication_name = form.publication_name
    existing.published_at = form.published_at
    existing.price_mrp = form.price.mrp_cents
    existing.price_sale = form.price.sale_cents

    upload_url = ""
    if _is_epub(book):
        data = book.file.read()
        size = form.file_info.size if form.file_info else len(data)
        new_key = _file_key(existing)

        if form.upload_method == "local":
            (Path(settings.local_books_dir) / existing.file_id).unlink(missing_ok=True)
            _save_local_file(new_key, data)
        else:
            storage.delete(settings.aws_private_bucket, existing.file_id)
            upload_url = storage.signed_upload_url(
                settings.aws_private_bucket,
                new_key,
                form.file_info.type if form.file_info else EPUB_CONTENT_TYPE,
            )

        existing.file_id = new_key
        existing.file_size = format_file_size(size)

    if _is_image(cover):
        _store_cover(storage, existing, cover)

    db.commit()

    return BookUploadResponse(upload_url=upload_url)


@router.get(
    "/details/{slug}",
    response_model=BookDetailResponse,
    summary="Get book details",
)
def get_book_details(slug: str, db: DbSession) -> BookDetailResponse:
    stmt = select(Book).options(selectinload(Book.author)).where(Book.slug == slug)
    book = db.execute(stmt).scalar_one_or_none()
    if book is None:
        raise NotFound("Book not found!")

    return BookDetailResponse(
        id=book.id,
        title=book.title,
        slug=book.slug,
        description=book.description,
        genre=book.genre,
        language=book.language,
        publication_name=book.publication_name,
        published_at=book.published_at,
        price={
            "mrp": format_price(book.price_mrp),
            "sale": format_price(book.price_sale),
        },
        cover=book.cover_url,
        file_size=book.file_size,
        rating=format_rating(book.average_rating),
        review_count=book.review_count,
        author=_book_author(book),
    )


@router.get(
    "/purchased",
    response_model=LibraryResponse,
    summary="List purchased books",
)
def get_purchased_books(current_user: CurrentUser, db: DbSession) -> LibraryResponse:
    user = db.get(User, current_user.id)

    return LibraryResponse(
        books=[
            LibraryBook(
                id=book.id,
                title=book.title,
                slug=book.slug,
                cover=book.cover_url,
                author=_book_author(book),
            )
            for book in user.books
        ]
    )
