from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sessiongate.config import Config
from sessiongate.core.core import Core
from sessiongate.core.modules.session.models import IssuedSession, SessionToken, SessionView
from sessiongate.core.modules.session.store import SessionStore


class App:
    """Facade for session operations used by the HTTP adapter and embedding applications."""

    def __init__(self, config: Config, store: SessionStore | None = None) -> None:
        self._core = Core(config, store)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def create_session(self) -> IssuedSession:
        """Issue a session. Call only after the user's credentials have been verified."""
        return await self._core.services.session.create_session()

    async def validate_token(self, token: SessionToken) -> SessionView:
        """Return the public view of a live session, raising InvalidSessionError otherwise."""
        session = await self._core.services.session.validate_token(token)
        return self._core.services.session.get_view(session)

    async def is_token_valid(self, token: SessionToken) -> bool:
        return await self._core.services.session.is_token_valid(token)

    async def logout(self, token: SessionToken) -> None:
        """Revoke the session behind a still-valid token."""
        await self._core.services.session.revoke_token(token)

    async def revoke_session(self, session_id: str) -> None:
        """Revoke a session by id (administrative sign-out)."""
        await self._core.services.session.revoke_session(session_id)
