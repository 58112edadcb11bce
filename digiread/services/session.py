"""
Session Cookie Helpers

The session credential lives in an http-only cookie. Setting and clearing
must use the same attributes or browsers keep the old cookie.
"""

from datetime import UTC, datetime, timedelta

from fastapi import Response

from digiread.config import Settings


def cookie_attributes(settings: Settings) -> dict:
    """secure/samesite depend on the environment; everything else is fixed."""
    if settings.is_development:
        return {"httponly": True, "secure": False, "samesite": "strict", "path": "/"}
    return {"httponly": True, "secure": True, "samesite": "none", "path": "/"}


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    lifetime = timedelta(days=settings.session_expire_days)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=int(lifetime.total_seconds()),
        expires=datetime.now(UTC) + lifetime,
        **cookie_attributes(settings),
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        **cookie_attributes(settings),
    )
