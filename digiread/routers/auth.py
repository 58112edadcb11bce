"""
Authentication Router

Handles passwordless authentication endpoints:
- Request a magic link (email → link in inbox)
- Verify the link (token + user id → session credential)
- Exchange the credential for an http-only session cookie
- Read and update the current profile
- Logout (clear the cookie)

Security:
=========
- Link tokens are single use and expire after 24 hours
- The session credential is a signed JWT valid for 15 days
- The cookie is http-only; secure with SameSite=None outside development
"""

import logging
from typing import Annotated

from fastapi import APIRouter, File, Form, Query, Request, Response, UploadFile

from digiread.config import get_settings
from digiread.dependencies import CurrentUser, DbSession, Mailer, ObjectStorage
from digiread.exceptions import BadRequest
from digiread.models import Author, User, UserRole
from digiread.schemas.user import (
    ExchangeTokenRequest,
    ExchangeTokenResponse,
    GenerateLinkRequest,
    MessageResponse,
    ProfileEnvelope,
    VerifyResponse,
)
from digiread.services.magic_link import (
    build_redirect_url,
    exchange_credential,
    format_profile,
    issue_magic_link,
    render_verification_response,
    verify_magic_link,
)
from digiread.services.rate_limiter import limiter
from digiread.services.session import clear_session_cookie, set_session_cookie
from digiread.utils import slugify

logger = logging.getLogger(__name__)
settings = get_settings()

AVATAR_EXTENSIONS = {"png", "jpg", "jpeg", "webp"}

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        400: {"description": "Bad request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Invalid or mismatched link"},
    },
)


# -------------------------------------------------------------------------
# Magic Link
# -------------------------------------------------------------------------
@router.post(
    "/generate-link",
    response_model=MessageResponse,
    summary="Email a sign-in link",
    description="""
    Send a single-use sign-in link to the given address.

    The user is created on first request. Requesting again replaces the
    previous link. The response is the same for new and existing users.
    """,
)
@limiter.limit(settings.rate_limit_auth_link)
async def generate_link(
    request: Request,
    payload: GenerateLinkRequest,
    db: DbSession,
    mailer: Mailer,
) -> MessageResponse:
    message = await issue_magic_link(db, payload.email, mailer)
    return MessageResponse(message=message)


@router.get(
    "/verify",
    summary="Verify a sign-in link",
    description="""
    Consume the link token and issue a session credential.

    Browsers (Accept: text/html) are forwarded to the app with the
    credential and profile in the query string; other clients get JSON.
    """,
    responses={200: {"model": VerifyResponse}},
)
def verify(
    request: Request,
    db: DbSession,
    token: str | None = Query(default=None),
    user_id: str | None = Query(default=None, alias="userId"),
) -> Response:
    credential, profile = verify_magic_link(db, token, user_id)

    payload = VerifyResponse(
        redirect_url=build_redirect_url(credential, profile),
        token=credential,
        profile=profile,
    )
    status_code, media_type, body = render_verification_response(
        request.headers.get("accept"), payload
    )
    return Response(content=body, status_code=status_code, media_type=media_type)


@router.post(
    "/exchange-token",
    response_model=ExchangeTokenResponse,
    summary="Exchange a credential for a session cookie",
)
def exchange_token(
    response: Response,
    db: DbSession,
    payload: ExchangeTokenRequest | None = None,
) -> ExchangeTokenResponse:
    token = payload.token if payload else None
    profile = exchange_credential(db, token)

    set_session_cookie(response, token, settings)
    logger.info(f"Session cookie issued for user {profile.id}")

    return ExchangeTokenResponse(profile=profile)


# -------------------------------------------------------------------------
# Profile
# -------------------------------------------------------------------------
@router.get(
    "/profile",
    response_model=ProfileEnvelope,
    summary="Get current profile",
)
def get_profile(current_user: CurrentUser) -> ProfileEnvelope:
    return ProfileEnvelope(profile=current_user.to_profile())


@router.put(
    "/profile",
    response_model=ProfileEnvelope,
    summary="Update current profile",
    description="""
    Update the display name (and optionally the avatar).

    Completing the profile also marks the user as signed up. Authors have
    their public author name renamed as well.

    **Avatar:** png, jpg, jpeg or webp.
    """,
)
def update_profile(
    current_user: CurrentUser,
    db: DbSession,
    storage: ObjectStorage,
    name: Annotated[str, Form(min_length=3, max_length=255)],
    avatar: Annotated[UploadFile | None, File()] = None,
) -> ProfileEnvelope:
    name = name.strip()
    if len(name) < 3:
        raise BadRequest("Name must be at least 3 characters long!")

    extension = None
    if avatar is not None and avatar.filename:
        extension = avatar.filename.rsplit(".", 1)[-1].lower() if "." in avatar.filename else ""
        if extension not in AVATAR_EXTENSIONS:
            raise BadRequest("Invalid file type. Only PNG, JPG, and WEBP allowed.")

    user = db.get(User, current_user.id)
    user.name = name
    user.signed_up = True

    if user.role == UserRole.AUTHOR.value and user.author_id is not None:
        author = db.get(Author, user.author_id)
        if author is not None:
            author.name = name

    if extension is not None:
        bucket = settings.aws_public_bucket
        if user.avatar_id:
            storage.delete(bucket, user.avatar_id)

        key = f"{user.id}-{slugify(name, fallback='user')}.{extension}"
        user.avatar_url = storage.put(bucket, key, avatar.file.read(), avatar.content_type)
        user.avatar_id = key

    db.commit()
    db.refresh(user)

    return ProfileEnvelope(profile=format_profile(user))


@router.post(
    "/logout",
    summary="Clear the session cookie",
    description="Requires a session; the cookie is cleared with the attributes it was set with.",
)
def logout(current_user: CurrentUser) -> Response:
    response = Response(status_code=200)
    clear_session_cookie(response, settings)
    logger.info(f"User {current_user.id} logged out")
    return response
