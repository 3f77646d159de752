"""Persisted favorites set with transient change announcements."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Iterable

from ..config import DEFAULT_STORAGE_KEY
from ..validation import parse_id
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

DEFAULT_CLEAR_AFTER = 2.0


class Announcement:
    """Holds the latest favorites message and clears it after a delay.

    Only one clear is ever pending: announcing again cancels the previous
    timer before scheduling a new one.
    """

    def __init__(
        self,
        clear_after: float = DEFAULT_CLEAR_AFTER,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._clear_after = clear_after
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self.message = ""

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def announce(self, message: str) -> None:
        self.cancel()
        self.message = message
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self._clear_after, self._clear)

    def cancel(self) -> None:
        """Drop the pending clear, if any, leaving the message in place."""

        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _clear(self) -> None:
        self._handle = None
        self.message = ""


class FavoritesStore:
    """The visitor's favorited post ids, mirrored to durable storage."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clear_after: float = DEFAULT_CLEAR_AFTER,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._storage = storage
        self._storage_key = storage_key
        self._favorites: dict[int, bool] = {}
        self._announcement = Announcement(clear_after, loop=loop)

    @property
    def announcement(self) -> str:
        return self._announcement.message

    @property
    def announcer(self) -> Announcement:
        return self._announcement

    async def load(self) -> None:
        """Read the persisted set once; any failure starts from an empty set."""

        try:
            raw = await self._storage.read(self._storage_key)
        except Exception:
            logger.exception("Error loading favorites from storage")
            self._favorites = {}
            return

        self._favorites = self._parse(raw)
        logger.info("Loaded %d favorites", len(self._favorites))

    async def toggle(self, record_id: int, label: str) -> bool:
        """Flip membership of ``record_id`` and return the new state."""

        was_favorite = self.is_favorite(record_id)
        if was_favorite:
            del self._favorites[record_id]
        else:
            self._favorites[record_id] = True

        await self._persist()

        if was_favorite:
            self._announcement.announce(f"Removed {label} from favorites")
        else:
            self._announcement.announce(f"Added {label} to favorites")
        return not was_favorite

    def is_favorite(self, record_id: int) -> bool:
        return self._favorites.get(record_id, False)

    def count(self) -> int:
        return sum(1 for flag in self._favorites.values() if flag)

    def ids(self) -> frozenset[int]:
        return frozenset(key for key, flag in self._favorites.items() if flag)

    def as_mapping(self) -> dict[str, bool]:
        """Return the set in its persisted shape."""

        return {str(key): True for key in sorted(self.ids())}

    def close(self) -> None:
        self._announcement.cancel()

    async def _persist(self) -> None:
        payload = json.dumps(self.as_mapping())
        try:
            await self._storage.write(self._storage_key, payload)
        except Exception:
            logger.exception("Error saving favorites to storage")

    @staticmethod
    def _parse(raw: str | None) -> dict[int, bool]:
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Stored favorites are corrupt; starting empty")
            return {}
        if not isinstance(data, dict):
            logger.warning("Stored favorites are not an object; starting empty")
            return {}
        return dict(_valid_entries(data.items()))


def _valid_entries(items: Iterable[tuple[object, object]]) -> Iterable[tuple[int, bool]]:
    for key, flag in items:
        record_id = parse_id(key)
        if flag is True and record_id is not None:
            yield record_id, True
