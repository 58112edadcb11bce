"""
Magic Link Service

Passwordless sign-in in three steps:

1. issue_magic_link: find or create the user, store a fresh single-use
   token (replacing any previous one) and mail the link
2. verify_magic_link: check and consume the token, mark the user signed up
   and mint a session credential
3. exchange_credential: turn a session credential into the user's profile
   (the router then stores it in an http-only cookie)

Security Features:
=================
1. Tokens are random (secrets), stored as SHA-256 digests only
2. A token verifies at most once; a new request supersedes the old token
3. Tokens expire after the configured TTL (24 hours by default)
4. The acknowledgement never reveals whether the address was known
"""

import html
import json
import logging
from datetime import UTC, datetime, timedelta
from urllib.parse import quote, urlencode

from jose import JWTError
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from digiread.config import get_settings
from digiread.exceptions import (
    BadRequest,
    InvalidOrExpiredCredential,
    InvalidRequest,
    TokenMismatch,
    UserNotFound,
)
from digiread.models import User, VerificationToken
from digiread.schemas.user import ProfileResponse, VerifyResponse
from digiread.services.mail import MailSender
from digiread.services.security import (
    create_session_token,
    decode_session_token,
    generate_verification_token,
    hash_token,
    token_matches,
)

logger = logging.getLogger(__name__)

LINK_SENT_MESSAGE = "Please check your email for the verification link."


# =============================================================================
# Verification token store
# =============================================================================
def store_verification_token(db: Session, user_id: int) -> str:
    """
    Create the user's new verification token and return its plain value.

    Any previous token of the user is deleted first, and expired tokens of
    all users are purged. Only the digest is persisted.
    """
    settings = get_settings()
    now = datetime.now(UTC)

    db.execute(delete(VerificationToken).where(VerificationToken.user_id == user_id))
    db.execute(
        delete(VerificationToken)
        .where(VerificationToken.expires_at <= now)
        .execution_options(synchronize_session="fetch")
    )

    token = generate_verification_token()
    db.add(
        VerificationToken(
            user_id=user_id,
            token_hash=hash_token(token),
            expires_at=now + timedelta(hours=settings.verification_token_ttl_hours),
        )
    )
    db.commit()
    return token


def find_live_token(db: Session, user_id: int) -> VerificationToken | None:
    """The user's token if one exists and has not expired."""
    stmt = select(VerificationToken).where(
        VerificationToken.user_id == user_id,
        VerificationToken.expires_at > datetime.now(UTC),
    )
    return db.execute(stmt).scalar_one_or_none()


# =============================================================================
# Profile projection
# =============================================================================
def format_profile(user: User) -> ProfileResponse:
    return ProfileResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        avatar=user.avatar_url,
        signed_up=user.signed_up,
        author_id=user.author_id,
    )


# =============================================================================
# Flow
# =============================================================================
def build_verification_link(token: str, user_id: int) -> str:
    query = urlencode({"token": token, "userId": user_id}, quote_via=quote)
    return f"{get_settings().verification_link}?{query}"


async def issue_magic_link(db: Session, email: str, mailer: MailSender) -> str:
    """
    Send a sign-in link to email, creating the user on first contact.

    Args:
        db: Database session
        email: Validated address
        mailer: Collaborator that delivers the link

    Returns:
        Acknowledgement message (same for new and existing users)
    """
    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user is None:
        user = User(email=email, signed_up=False)
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"Created user {user.id} on first link request")

    token = store_verification_token(db, user.id)
    link = build_verification_link(token, user.id)

    await mailer.send_verification_link(
        to=user.email,
        link=link,
        name=user.name or email.split("@")[0],
    )
    logger.info(f"Verification link issued for user {user.id}")

    return LINK_SENT_MESSAGE


def verify_magic_link(db: Session, token: object, user_id: object) -> tuple[str, ProfileResponse]:
    """
    Consume a verification token and sign the user in.

    Args:
        db: Database session
        token: Token value from the link
        user_id: User id from the link (a string of digits)

    Returns:
        Tuple of (session credential, profile)

    Raises:
        InvalidRequest: token or user_id missing or malformed
        TokenMismatch: no live token for the user, or a different value
        UserNotFound: the token outlived its user (reported as 500)
    """
    if not isinstance(token, str) or not token:
        raise InvalidRequest()
    if not isinstance(user_id, str) or not user_id.isdigit():
        raise InvalidRequest()

    owner_id = int(user_id)
    record = find_live_token(db, owner_id)
    if record is None or not token_matches(token, record.token_hash):
        logger.warning(f"Verification failed for user id {owner_id}")
        raise TokenMismatch()

    db.delete(record)
    db.commit()

    user = db.get(User, owner_id)
    if user is None:
        raise UserNotFound("Something went wrong, user not found!", status_code=500)

    user.signed_up = True
    db.commit()
    db.refresh(user)

    credential = create_session_token(user.id)
    logger.info(f"User {user.id} verified sign-in link")

    return credential, format_profile(user)


def build_redirect_url(credential: str, profile: ProfileResponse) -> str:
    query = urlencode(
        {"token": credential, "profile": profile.model_dump_json()},
        quote_via=quote,
    )
    return f"{get_settings().auth_success_url}?{query}"


def render_verification_response(accept: str | None, payload: VerifyResponse) -> tuple[int, str, str]:
    """
    Decide how a successful verification is returned.

    Browsers (Accept contains text/html) get a page that forwards them to
    the redirect URL; every other client gets the JSON payload.

    Returns:
        Tuple of (status code, media type, body)
    """
    if accept and "text/html" in accept:
        target = payload.redirect_url
        page = (
            "<!DOCTYPE html>\n"
            "<html>\n"
            "<head><title>Redirecting...</title></head>\n"
            "<body>\n"
            f"<script>window.location.href = {json.dumps(target)};</script>\n"
            "<noscript>\n"
            f'<p>Verification successful. <a href="{html.escape(target)}">Continue</a></p>\n'
            "</noscript>\n"
            "</body>\n"
            "</html>\n"
        )
        return 200, "text/html", page

    return 200, "application/json", payload.model_dump_json(by_alias=True)


def exchange_credential(db: Session, token: object) -> ProfileResponse:
    """
    Validate a session credential and return the profile it belongs to.

    Raises:
        BadRequest: no token supplied
        InvalidOrExpiredCredential: bad signature, expired, or malformed
        UserNotFound: the credential names a user that no longer exists
    """
    if not isinstance(token, str) or not token:
        raise BadRequest("Token is required")

    try:
        user_id = decode_session_token(token)
    except JWTError as e:
        logger.warning(f"Credential exchange rejected: {e}")
        raise InvalidOrExpiredCredential() from e

    user = db.get(User, user_id)
    if user is None:
        raise UserNotFound("User not found")

    return format_profile(user)
