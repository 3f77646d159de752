"""Derivation of the visible post list from the filter inputs."""

from __future__ import annotations

from typing import Container, Iterable, Sequence

from ..models import FilterState, Record


def filter_records(
    collection: Iterable[Record],
    favorites: Container[int],
    state: FilterState,
) -> list[Record]:
    """Return posts whose title contains the query, optionally favorites only."""

    needle = state.query.casefold()
    visible = [record for record in collection if needle in record.title.casefold()]
    if state.favorites_only:
        visible = [record for record in visible if record.id in favorites]
    return visible


class FilterEngine:
    """Recomputes the visible list from the unfiltered collection on every call."""

    def __init__(self, collection: Sequence[Record] = ()) -> None:
        self._collection: tuple[Record, ...] = tuple(collection)

    @property
    def collection(self) -> tuple[Record, ...]:
        return self._collection

    def replace_collection(self, collection: Sequence[Record]) -> None:
        self._collection = tuple(collection)

    def find(self, record_id: int) -> Record | None:
        for record in self._collection:
            if record.id == record_id:
                return record
        return None

    def visible(self, state: FilterState, favorites: Container[int]) -> list[Record]:
        return filter_records(self._collection, favorites, state)
