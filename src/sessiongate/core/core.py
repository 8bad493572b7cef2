from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any
from urllib.parse import urlparse

from pymongo import AsyncMongoClient

from sessiongate.config import Config
from sessiongate.core.modules.session.service import SessionService
from sessiongate.core.modules.session.store import MongoSessionStore, SessionStore
from sessiongate.core.service import Service


class Services:
    """Service registry with explicit dependencies."""

    session: SessionService

    def __init__(self, config: Config, store: SessionStore) -> None:
        self.session = SessionService(
            store,
            ttl=timedelta(seconds=config.session_ttl_seconds),
            entropy_bytes=config.token_entropy_bytes,
        )
        self._services: list[Service] = [self.session]

    async def start_all(self) -> None:
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        for service in reversed(self._services):
            await service.on_stop()


class Core:
    """Container providing config, session store and all service instances.

    Without an explicit store, a MongoDB-backed one is built from config.database_url.
    """

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]] | None
    store: SessionStore
    services: Services

    def __init__(self, config: Config, store: SessionStore | None = None) -> None:
        self.config = config
        self.mongo_client = None
        if store is None:
            database_name = urlparse(config.database_url).path[1:]
            if not database_name:
                raise ValueError("database_url must include a database name, e.g. mongodb://localhost/sessiongate")
            # Connects lazily on first operation
            self.mongo_client = AsyncMongoClient(config.database_url)
            store = MongoSessionStore(self.mongo_client.get_database(database_name))
        self.store = store
        self.services = Services(config, store)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services and close MongoDB connection on shutdown."""
        await self.services.stop_all()
        if self.mongo_client is not None:
            await self.mongo_client.aclose()
