"""Durable named-value storage used to persist favorites."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db_models import StorageEntry


class KeyValueStorage(Protocol):
    """Minimal storage contract: one string value per named key."""

    async def read(self, key: str) -> str | None: ...

    async def write(self, key: str, value: str) -> None: ...


class DatabaseStorage:
    """Key/value storage persisted in the ``storage_entries`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def read(self, key: str) -> str | None:
        async with self._session_factory() as session:
            entry = await session.get(StorageEntry, key)
            if entry is None:
                return None
            return entry.value

    async def write(self, key: str, value: str) -> None:
        """Store ``value`` under ``key`` in a single committed transaction."""

        async with self._session_factory() as session:
            async with session.begin():
                entry = await session.get(StorageEntry, key)
                if entry is None:
                    session.add(StorageEntry(key=key, value=value))
                else:
                    entry.value = value
                    entry.updated_at = datetime.utcnow()


class MemoryStorage:
    """In-process storage for ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    async def read(self, key: str) -> str | None:
        return self.values.get(key)

    async def write(self, key: str, value: str) -> None:
        self.values[key] = value
