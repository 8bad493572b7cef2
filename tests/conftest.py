"""Shared pytest fixtures."""

import pytest

from sessiongate.config import Config
from sessiongate.core.modules.session.models import Session
from sessiongate.core.modules.session.service import SessionService
from sessiongate.errors import DuplicateIdError, StoreUnavailableError

T0 = 1_700_000_000


class InMemorySessionStore:
    """Dict-backed SessionStore double. Set ``available = False`` to simulate an outage."""

    def __init__(self) -> None:
        self.rows: dict[str, Session] = {}
        self.available = True
        self.schema_created = False
        self.deleted: list[str] = []

    def _check_available(self) -> None:
        if not self.available:
            raise StoreUnavailableError("store is down")

    async def ensure_schema(self) -> None:
        self._check_available()
        self.schema_created = True

    async def insert(self, session: Session) -> None:
        self._check_available()
        if session.id in self.rows:
            raise DuplicateIdError(f"Session '{session.id}' already exists")
        self.rows[session.id] = session

    async def fetch_by_id(self, session_id: str) -> Session | None:
        self._check_available()
        return self.rows.get(session_id)

    async def delete_by_id(self, session_id: str) -> None:
        self._check_available()
        self.deleted.append(session_id)
        self.rows.pop(session_id, None)


class FakeClock:
    """Controllable unix-seconds clock."""

    def __init__(self, now: int = T0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(store, clock):
    return SessionService(store, clock=clock)


@pytest.fixture
def config():
    return Config(database_url="mongodb://localhost:27017/sessiongate_test", cookie_secure=False)
