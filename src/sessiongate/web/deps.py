from typing import Annotated, NamedTuple, cast

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from sessiongate.app import App
from sessiongate.config import Config
from sessiongate.core.modules.session.models import SessionToken, SessionView
from sessiongate.errors import AuthenticationError, InvalidSessionError

# Security schemes
bearer_scheme = HTTPBearer(auto_error=False)


class CurrentSession(NamedTuple):
    """The token presented with the request and the session it resolved to."""

    token: SessionToken
    session: SessionView


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_config(request: Request) -> Config:
    return cast(Config, request.app.state.config)


async def get_current_session(
    request: Request,
    app: Annotated[App, Depends(get_app)],
    config: Annotated[Config, Depends(get_config)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
) -> CurrentSession:
    """Resolve the session from the Authorization Bearer header, falling back to the cookie."""
    candidates: list[str] = []
    if credentials and credentials.scheme.lower() == "bearer":
        candidates.append(credentials.credentials)
    # Cookie name is configurable, so read it directly instead of through APIKeyCookie
    token_cookie = request.cookies.get(config.cookie_name)
    if token_cookie:
        candidates.append(token_cookie)

    for candidate in candidates:
        token = SessionToken(candidate)
        try:
            return CurrentSession(token=token, session=await app.validate_token(token))
        except InvalidSessionError:
            continue

    raise AuthenticationError


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
ConfigDep = Annotated[Config, Depends(get_config)]
CurrentSessionDep = Annotated[CurrentSession, Depends(get_current_session)]
