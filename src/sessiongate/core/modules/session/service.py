from collections.abc import Callable
from datetime import timedelta

import structlog

from sessiongate.core.modules.session.hashing import constant_time_equal, hash_secret
from sessiongate.core.modules.session.models import IssuedSession, Session, SessionView
from sessiongate.core.modules.session.store import SessionStore
from sessiongate.core.modules.session.tokens import (
    MIN_ENTROPY_BYTES,
    decode_token,
    encode_token,
    generate_secure_random_string,
)
from sessiongate.core.service import Service
from sessiongate.errors import (
    InvalidSessionError,
    MalformedTokenError,
    SessionCreationFailedError,
    SessionFailureReason,
    StoreError,
)
from sessiongate.utils import unix_now

logger = structlog.get_logger(__name__)

DEFAULT_SESSION_TTL = timedelta(hours=24)


class SessionService(Service):
    """Issues, validates and revokes split bearer tokens.

    Holds no session state between calls: every validation reads the store,
    so a revoke is visible to the next validation.
    """

    def __init__(
        self,
        store: SessionStore,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        entropy_bytes: int = MIN_ENTROPY_BYTES,
        clock: Callable[[], int] = unix_now,
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError("Session TTL must be positive")
        self._store = store
        self._ttl = ttl
        self._entropy_bytes = entropy_bytes
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    async def on_start(self) -> None:
        """Create the sessions table on startup."""
        await self._store.ensure_schema()

    async def create_session(self) -> IssuedSession:
        """Mint a session for a caller whose credentials were already verified."""
        session_id = generate_secure_random_string(self._entropy_bytes)
        secret = generate_secure_random_string(self._entropy_bytes)
        session = Session(id=session_id, secret_hash=hash_secret(secret), created_at=self._clock())

        try:
            await self._store.insert(session)
        except StoreError as e:
            logger.error("session_creation_failed", session_id=session_id, error=type(e).__name__)
            raise SessionCreationFailedError("Failed to create session") from e

        logger.info("session_created", session_id=session_id)
        return IssuedSession(token=encode_token(session_id, secret), session=self.get_view(session))

    async def validate_token(self, token: str) -> Session:
        """Resolve a bearer token to its live session or raise InvalidSessionError."""
        try:
            session_id, secret = decode_token(token)
        except MalformedTokenError:
            raise self._rejection(SessionFailureReason.MALFORMED) from None

        session = await self._store.fetch_by_id(session_id)
        if session is None:
            raise self._rejection(SessionFailureReason.NOT_FOUND, session_id)

        if not constant_time_equal(hash_secret(secret), session.secret_hash):
            raise self._rejection(SessionFailureReason.SECRET_MISMATCH, session_id)

        if self._clock() - session.created_at >= self._ttl.total_seconds():
            await self._store.delete_by_id(session_id)
            logger.info("session_expired", session_id=session_id)
            raise self._rejection(SessionFailureReason.EXPIRED, session_id)

        return session

    async def is_token_valid(self, token: str) -> bool:
        try:
            await self.validate_token(token)
        except InvalidSessionError:
            return False
        return True

    async def revoke_session(self, session_id: str) -> None:
        """Delete a session. Revoking an unknown id is not an error."""
        await self._store.delete_by_id(session_id)
        logger.info("session_revoked", session_id=session_id)

    async def revoke_token(self, token: str) -> None:
        """Sign out the session behind a token, which must still be valid."""
        session = await self.validate_token(token)
        await self.revoke_session(session.id)

    def get_view(self, session: Session) -> SessionView:
        return SessionView.from_domain(session, self._ttl)

    def _rejection(self, reason: SessionFailureReason, session_id: str | None = None) -> InvalidSessionError:
        logger.info("session_rejected", reason=reason.value, session_id=session_id)
        return InvalidSessionError(reason)
