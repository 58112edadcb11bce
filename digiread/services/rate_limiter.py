"""
Rate Limiting

slowapi limiter shared by every router.

Limits (see config):
- every route: RATE_LIMIT_DEFAULT
- create/update routes: RATE_LIMIT_WRITE
- sign-in link requests: RATE_LIMIT_AUTH_LINK, since each one sends a mail

Counters live in Redis so all workers share them. With limiting disabled
(tests, local runs) the limiter never counts and needs no Redis.
"""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from digiread.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

RETRY_AFTER_SECONDS = 60


def get_client_ip(request: Request) -> str:
    """Client address, preferring proxy headers over the socket peer."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # "client, proxy1, proxy2"
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


def create_limiter() -> Limiter:
    storage_uri = settings.redis_url if settings.rate_limit_enabled else "memory://"

    limiter = Limiter(
        key_func=get_client_ip,
        default_limits=[settings.rate_limit_default],
        storage_uri=storage_uri,
        strategy="fixed-window",
        enabled=settings.rate_limit_enabled,
    )
    logger.info(
        f"Rate limiting {'enabled' if settings.rate_limit_enabled else 'disabled'} "
        f"(default {settings.rate_limit_default}, sign-in links {settings.rate_limit_auth_link})"
    )
    return limiter


limiter = create_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 with Retry-After and the limit that was hit."""
    limit = str(exc.detail)
    logger.warning(f"Rate limit {limit} exceeded by {get_client_ip(request)} on {request.url.path}")

    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": "Too many requests. Please slow down.",
            "detail": limit,
        },
        headers={
            "Retry-After": str(RETRY_AFTER_SECONDS),
            "X-RateLimit-Limit": limit,
        },
    )
