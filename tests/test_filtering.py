"""Tests for the visible-list derivation."""

from __future__ import annotations

import asyncio

from app.models import FilterState, Record
from app.services.favorites import FavoritesStore
from app.services.filtering import FilterEngine, filter_records
from app.services.storage import MemoryStorage

ALPHA = Record(id=1, title="Alpha", body="first", owner_id=1)
BETA = Record(id=2, title="Beta", body="second", owner_id=1)
GAMMA = Record(id=3, title="Gamma ray", body="third", owner_id=2)
COLLECTION = [ALPHA, BETA, GAMMA]


def test_empty_filter_is_identity() -> None:
    assert filter_records(COLLECTION, frozenset(), FilterState()) == COLLECTION


def test_query_matches_titles_case_insensitively() -> None:
    assert filter_records(COLLECTION, frozenset(), FilterState(query="al")) == [ALPHA]
    assert filter_records(COLLECTION, frozenset(), FilterState(query="GAMMA")) == [GAMMA]
    assert filter_records(COLLECTION, frozenset(), FilterState(query="a")) == COLLECTION


def test_favorites_only_with_no_favorites_is_empty() -> None:
    for query in ("", "a", "zzz"):
        state = FilterState(query=query, favorites_only=True)
        assert filter_records(COLLECTION, frozenset(), state) == []


def test_favorites_only_intersects_with_query() -> None:
    favorites = frozenset({1, 3})

    assert filter_records(COLLECTION, favorites, FilterState(favorites_only=True)) == [
        ALPHA,
        GAMMA,
    ]
    assert filter_records(
        COLLECTION, favorites, FilterState(query="ray", favorites_only=True)
    ) == [GAMMA]


def test_output_is_always_a_subset_in_source_order() -> None:
    states = [
        FilterState(query=query, favorites_only=flag)
        for query in ("", "a", "et", "nothing")
        for flag in (False, True)
    ]
    for state in states:
        visible = filter_records(COLLECTION, frozenset({2}), state)
        assert all(record in COLLECTION for record in visible)
        assert visible == [record for record in COLLECTION if record in visible]


def test_engine_recomputes_from_unfiltered_collection() -> None:
    engine = FilterEngine(COLLECTION)

    assert engine.visible(FilterState(query="beta"), frozenset()) == [BETA]
    # A broader query after a narrow one still sees the whole collection.
    assert engine.visible(FilterState(query="a"), frozenset()) == COLLECTION

    engine.replace_collection([BETA])
    assert engine.visible(FilterState(), frozenset()) == [BETA]
    assert engine.find(2) == BETA
    assert engine.find(1) is None


def test_browse_scenario_with_favorites(fake_loop) -> None:
    """Filter, favorite, switch to favorites only, then let the announcement clear."""

    collection = [Record(id=1, title="Alpha"), Record(id=2, title="Beta")]
    engine = FilterEngine(collection)
    favorites = FavoritesStore(MemoryStorage(), loop=fake_loop)

    assert engine.visible(FilterState(query="al"), favorites.ids()) == [collection[0]]

    asyncio.run(favorites.toggle(2, "Beta"))
    visible = engine.visible(FilterState(favorites_only=True), favorites.ids())

    assert visible == [collection[1]]
    assert favorites.announcement == "Added Beta to favorites"
    assert fake_loop.handles[-1].delay == 2.0
    fake_loop.fire_pending()
    assert favorites.announcement == ""
