"""Session cookie helpers for applications that issue sessions after their own login flow."""

from fastapi import Response

from sessiongate.config import Config
from sessiongate.core.modules.session.models import IssuedSession


def set_session_cookie(response: Response, issued: IssuedSession, config: Config) -> None:
    max_age = int((issued.session.expires_at - issued.session.created_at).total_seconds())
    response.set_cookie(
        key=config.cookie_name,
        value=issued.token,
        httponly=True,
        samesite="lax",
        secure=config.cookie_secure,
        max_age=max_age,  # matches session TTL
    )


def clear_session_cookie(response: Response, config: Config) -> None:
    response.delete_cookie(config.cookie_name, httponly=True, samesite="lax", secure=config.cookie_secure)
