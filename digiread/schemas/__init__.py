"""
Pydantic Schemas Package

This package contains Pydantic models for request/response validation.

Schemas are kept apart from SQLAlchemy models so the API controls exactly
what is exposed (a user's tokens, for example, never are).
"""

from digiread.schemas.author import (
    AuthorBookItem,
    AuthorBooksResponse,
    AuthorBookSummary,
    AuthorDetailResponse,
    AuthorRegister,
    AuthorRegisterResponse,
    AuthorUpdate,
)
from digiread.schemas.book import (
    BookAuthor,
    BookDetailResponse,
    BookForm,
    BookUpdateForm,
    BookUploadResponse,
    FileInfo,
    LibraryBook,
    LibraryResponse,
    PriceInput,
)
from digiread.schemas.cart import (
    CartEnvelope,
    CartItemInput,
    CartItemResponse,
    CartProduct,
    CartResponse,
    CartUpdate,
    CheckoutRequest,
    CheckoutResponse,
)
from digiread.schemas.history import Highlight, HistoryResponse, HistoryUpdate
from digiread.schemas.review import (
    PublicReviewResponse,
    ReviewAuthor,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
)
from digiread.schemas.user import (
    AuthenticatedContext,
    ExchangeTokenRequest,
    ExchangeTokenResponse,
    GenerateLinkRequest,
    MessageResponse,
    ProfileEnvelope,
    ProfileResponse,
    VerifyResponse,
)

__all__ = [
    # Auth / user schemas
    "AuthenticatedContext",
    "ExchangeTokenRequest",
    "ExchangeTokenResponse",
    "GenerateLinkRequest",
    "MessageResponse",
    "ProfileEnvelope",
    "ProfileResponse",
    "VerifyResponse",
    # Author schemas
    "AuthorBookItem",
    "AuthorBooksResponse",
    "AuthorBookSummary",
    "AuthorDetailResponse",
    "AuthorRegister",
    "AuthorRegisterResponse",
    "AuthorUpdate",
    # Book schemas
    "BookAuthor",
    "BookDetailResponse",
    "BookForm",
    "BookUpdateForm",
    "BookUploadResponse",
    "FileInfo",
    "LibraryBook",
    "LibraryResponse",
    "PriceInput",
    # Review schemas
    "PublicReviewResponse",
    "ReviewAuthor",
    "ReviewCreate",
    "ReviewListResponse",
    "ReviewResponse",
    # History schemas
    "Highlight",
    "HistoryResponse",
    "HistoryUpdate",
    # Cart / checkout schemas
    "CartEnvelope",
    "CartItemInput",
    "CartItemResponse",
    "CartProduct",
    "CartResponse",
    "CartUpdate",
    "CheckoutRequest",
    "CheckoutResponse",
]
