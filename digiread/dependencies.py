"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.
FastAPI's Depends() function manages their lifecycle.

Common Dependency Patterns:
- Database sessions (per-request)
- Authentication (resolve the caller from the session credential)
- External collaborators (mail, object storage), overridable in tests
- Pagination parameters
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Query
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from digiread.config import get_settings
from digiread.database import get_db
from digiread.exceptions import Forbidden, Unauthorized
from digiread.models import User, UserRole
from digiread.schemas.user import AuthenticatedContext
from digiread.services.mail import MailSender, MailtrapMailSender
from digiread.services.security import decode_session_token
from digiread.services.storage import ObjectStore, S3ObjectStore

settings = get_settings()

# =============================================================================
# Type Aliases with Annotated
# =============================================================================
# Instead of writing:
#   def get_books(db: Session = Depends(get_db)):
#
# You can write:
#   def get_books(db: DbSession):

DbSession = Annotated[Session, Depends(get_db)]


# =============================================================================
# Pagination Parameters
# =============================================================================
class PaginationParams:
    """
    Common pagination parameters for list endpoints.

    - page: Which page to return (1-indexed for user-friendliness)
    - per_page: How many items per page
    - skip: Calculated offset for database query
    """

    def __init__(
        self,
        page: int = Query(
            default=1,
            ge=1,
            description="Page number (1-indexed)",
            examples=[1, 2, 3],
        ),
        per_page: int = Query(
            default=10,
            ge=1,
            le=100,
            description="Number of items per page (max 100)",
            examples=[10, 25, 50],
        ),
    ) -> None:
        self.page = page
        self.per_page = per_page

    @property
    def skip(self) -> int:
        """
        Number of records to skip.

        Page 1 -> skip 0 items, page 2 -> skip per_page items.
        """
        return (self.page - 1) * self.per_page


Pagination = Annotated[PaginationParams, Depends()]


# =============================================================================
# Collaborators
# =============================================================================
# Built once per process. Tests replace them through app.dependency_overrides.

@lru_cache
def get_mail_sender() -> MailSender:
    return MailtrapMailSender(get_settings())


@lru_cache
def get_object_store() -> ObjectStore:
    return S3ObjectStore(get_settings())


Mailer = Annotated[MailSender, Depends(get_mail_sender)]
ObjectStorage = Annotated[ObjectStore, Depends(get_object_store)]


# =============================================================================
# Session Authentication
# =============================================================================
# Both schemes are optional (auto_error=False): the cookie wins, the bearer
# header is the fallback, and absence of both is reported by get_current_user.
# Declaring them here also documents them in Swagger UI.

session_cookie = APIKeyCookie(name=settings.session_cookie_name, auto_error=False)
bearer_scheme = HTTPBearer(auto_error=False)


def build_context(user: User) -> AuthenticatedContext:
    return AuthenticatedContext(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        avatar=user.avatar_url,
        signed_up=user.signed_up,
        author_id=user.author_id,
        book_ids=user.book_ids,
    )


def get_current_user(
    db: DbSession,
    cookie_token: str | None = Depends(session_cookie),
    bearer: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthenticatedContext:
    """
    Resolve the caller from the session credential.

    This dependency:
    1. Reads the credential from the session cookie, else the Bearer header
    2. Verifies it (a JWTError propagates and is rendered as 401 by main.py)
    3. Loads the user it names

    Raises:
        Unauthorized: no credential, or the user no longer exists
    """
    token = cookie_token or (bearer.credentials if bearer else None)
    if not token:
        raise Unauthorized()

    user_id = decode_session_token(token)

    user = db.get(User, user_id)
    if user is None:
        raise Unauthorized("Unauthorized request user not found!")

    return build_context(user)


CurrentUser = Annotated[AuthenticatedContext, Depends(get_current_user)]


# =============================================================================
# Guards
# =============================================================================
def require_signed_up(current_user: CurrentUser) -> AuthenticatedContext:
    if not current_user.signed_up:
        raise Unauthorized("User must be signed up before registering as author!")
    return current_user


def require_author(current_user: CurrentUser) -> AuthenticatedContext:
    if current_user.role != UserRole.AUTHOR.value or current_user.author_id is None:
        raise Forbidden("Invalid request!", status_code=401)
    return current_user


def ensure_book_purchased(current_user: AuthenticatedContext, book_id: int) -> None:
    """Raise Forbidden unless book_id is in the caller's library."""
    if book_id not in current_user.book_ids:
        raise Forbidden("Sorry, we didn't find the book inside your library!")


SignedUpUser = Annotated[AuthenticatedContext, Depends(require_signed_up)]
AuthorUser = Annotated[AuthenticatedContext, Depends(require_author)]
