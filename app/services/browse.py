"""Coordinates the post collection, detail resolution and publish cycles."""

from __future__ import annotations

import logging
from typing import Container

from ..config import Settings
from ..models import (
    DetailView,
    FilterState,
    Record,
    ResolutionError,
    ResolutionErrorKind,
    ResolutionResult,
)
from ..validation import ClientGuard, compose_detail
from .filtering import FilterEngine
from .pregenerator import PathPregenerator, PregenerationPlan
from .records import RecordStore, RecordStoreError
from .resolver import NOT_FOUND_MESSAGE, RecordResolver

logger = logging.getLogger(__name__)


class BrowseService:
    """Owns everything the list and detail views read from."""

    def __init__(
        self,
        store: RecordStore,
        resolver: RecordResolver,
        pregenerator: PathPregenerator,
        guard: ClientGuard,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._pregenerator = pregenerator
        self._guard = guard
        self._engine = FilterEngine()
        self._plan = PregenerationPlan()
        self.collection_error: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings, store: RecordStore) -> "BrowseService":
        pregenerator = PathPregenerator(
            settings.pregenerate_count,
            source=settings.pregenerate_source,
            on_demand=settings.on_demand_fallback,
            store=store,
        )
        return cls(
            store,
            RecordResolver(store),
            pregenerator,
            ClientGuard(settings.client_id_ceiling),
        )

    @property
    def plan(self) -> PregenerationPlan:
        return self._plan

    @property
    def collection(self) -> tuple[Record, ...]:
        return self._engine.collection

    async def publish(self) -> PregenerationPlan:
        """Refresh the collection and pre-resolve the planned detail views."""

        await self._load_collection()
        self._resolver.reset()
        self._plan = await self._pregenerator.pregenerate(
            self._resolver, self._engine.collection
        )
        return self._plan

    async def detail(self, raw_id: str, live_id: str | None = None) -> DetailView:
        """Return the detail view for ``raw_id`` as displayed at ``live_id``."""

        result = await self._resolve(raw_id)
        return compose_detail(result, raw_id if live_id is None else live_id, self._guard)

    def visible(self, state: FilterState, favorites: Container[int]) -> list[Record]:
        return self._engine.visible(state, favorites)

    def find(self, record_id: int) -> Record | None:
        return self._engine.find(record_id)

    async def _resolve(self, raw_id: str) -> ResolutionResult:
        if not self._plan.allows(raw_id):
            return ResolutionError(
                kind=ResolutionErrorKind.NOT_FOUND,
                message=NOT_FOUND_MESSAGE,
                requested_id=raw_id,
            )
        return await self._resolver.resolve(raw_id)

    async def _load_collection(self) -> None:
        try:
            records = await self._store.fetch_collection()
        except RecordStoreError as exc:
            logger.warning("Error fetching post collection: %s", exc.message)
            self._engine.replace_collection(())
            self.collection_error = exc.message
            return
        self._engine.replace_collection(records)
        self.collection_error = None
        logger.info("Loaded %d posts", len(records))
