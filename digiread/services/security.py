"""
Security Service

Handles magic-link token values and session credential (JWT) operations.

Security Features:
==================
1. Verification tokens come from the secrets module (36 random bytes, hex)
2. Only the SHA-256 digest of a verification token is stored
3. Digests are compared in constant time
4. Session credentials are HS256 JWTs with an expiry claim

Usage:
    from digiread.services.security import create_session_token, decode_session_token

    token = create_session_token(user.id)
    user_id = decode_session_token(token)  # raises JWTError when invalid
"""

import hashlib
import hmac
import logging
import secrets
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from digiread.config import get_settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
SESSION_TOKEN_TYPE = "session"
VERIFICATION_TOKEN_BYTES = 36


# -------------------------------------------------------------------------
# Verification tokens
# -------------------------------------------------------------------------
def generate_verification_token() -> str:
    """
    Generate a new single-use verification token value.

    Returns:
        72 hex characters (36 random bytes)
    """
    return secrets.token_hex(VERIFICATION_TOKEN_BYTES)


def hash_token(token: str) -> str:
    """
    Hash a verification token using SHA-256.

    Args:
        token: The plain token value

    Returns:
        SHA-256 hash of the token (64 hex characters)
    """
    return hashlib.sha256(token.encode()).hexdigest()


def token_matches(token: str, token_hash: str) -> bool:
    """Constant-time check of a plain token against a stored digest."""
    return hmac.compare_digest(hash_token(token), token_hash)


# -------------------------------------------------------------------------
# Session credentials (JWT)
# -------------------------------------------------------------------------
def create_session_token(
    user_id: int,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed session credential for a user.

    Args:
        user_id: Id of the authenticated user (stored as "sub")
        expires_delta: Optional custom lifetime (defaults to the session lifetime)

    Returns:
        Encoded JWT string

    Example:
        >>> token = create_session_token(42)
        >>> token.count(".") == 2  # JWT format: header.payload.signature
        True
    """
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(days=settings.session_expire_days)

    payload = {
        "sub": str(user_id),
        "type": SESSION_TOKEN_TYPE,
        "exp": datetime.now(UTC) + expires_delta,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_session_token(token: str) -> int:
    """
    Verify a session credential and return the user id it names.

    Raises:
        JWTError: Bad signature, expired, wrong type or malformed subject.
            Callers decide how to report it.
    """
    payload = jwt.decode(token, get_settings().secret_key, algorithms=[ALGORITHM])

    if payload.get("type") != SESSION_TOKEN_TYPE:
        raise JWTError("Token type mismatch")

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject.isdigit():
        raise JWTError("Token subject is not a user id")

    return int(subject)
