"""Selection of detail identifiers resolved ahead of any request."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Sequence

from ..models import Record, ResolutionError
from .records import RecordStore
from .resolver import RecordResolver

logger = logging.getLogger(__name__)

PregenerationSource = Literal["prefix", "collection"]


@dataclass(slots=True, frozen=True)
class PregenerationPlan:
    """Identifiers to resolve at publish time and the fallback policy."""

    identifiers: tuple[str, ...] = ()
    on_demand: bool = True

    def allows(self, raw_id: str) -> bool:
        """Return whether ``raw_id`` may be served under this plan."""

        return self.on_demand or raw_id in self.identifiers

    def to_payload(self) -> dict[str, object]:
        return {"paths": list(self.identifiers), "fallback": self.on_demand}


class PathPregenerator:
    """Decide which identifiers get their detail view prepared up front."""

    def __init__(
        self,
        count: int,
        *,
        source: PregenerationSource = "prefix",
        on_demand: bool = True,
        store: RecordStore | None = None,
    ) -> None:
        if source == "collection" and store is None:
            raise ValueError("A record store is required for collection pregeneration")
        self._count = count
        self._source = source
        self._on_demand = on_demand
        self._store = store

    async def plan(self, collection: Sequence[Record] | None = None) -> PregenerationPlan:
        """Return the identifiers to pre-resolve; an empty plan on any failure.

        A ``collection`` already loaded by the caller is enumerated instead of
        fetching it again.
        """

        try:
            identifiers = await self._identifiers(collection)
        except Exception:
            logger.exception("Pregeneration planning failed; serving every post on demand")
            identifiers = ()
        return PregenerationPlan(identifiers=identifiers, on_demand=self._on_demand)

    async def pregenerate(
        self, resolver: RecordResolver, collection: Sequence[Record] | None = None
    ) -> PregenerationPlan:
        """Resolve every planned identifier through ``resolver``."""

        plan = await self.plan(collection)
        failures = 0
        for raw_id in plan.identifiers:
            result = await resolver.resolve(raw_id)
            if isinstance(result, ResolutionError):
                failures += 1
                logger.warning(
                    "Pregeneration of post %s failed: %s", raw_id, result.message
                )
        logger.info(
            "Pregenerated %d posts (%d failed)", len(plan.identifiers), failures
        )
        return plan

    async def _identifiers(self, collection: Sequence[Record] | None) -> tuple[str, ...]:
        if self._count <= 0:
            return ()
        if self._source == "prefix":
            return tuple(str(index) for index in range(1, self._count + 1))

        records = collection
        if records is None:
            assert self._store is not None
            records = await self._store.fetch_collection()
        return tuple(str(record.id) for record in records[: self._count])
