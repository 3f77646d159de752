"""Identifier validation and display-time guard tests."""

from __future__ import annotations

import pytest

from app.models import (
    ClientErrorKind,
    Record,
    ResolutionError,
    ResolutionErrorKind,
    ResolvedRecord,
)
from app.validation import ClientGuard, compose_detail, is_valid_id, parse_id


@pytest.mark.parametrize("raw", ["1", "5", "42", "0007", "999999"])
def test_is_valid_id_accepts_positive_digit_strings(raw: str) -> None:
    assert is_valid_id(raw) is True


@pytest.mark.parametrize(
    "raw", ["", "0", "000", "-3", "+3", "1.5", "abc", "12a", " 1", "1 ", "٣", None, 3]
)
def test_is_valid_id_rejects_everything_else(raw: object) -> None:
    assert is_valid_id(raw) is False


def test_guard_accepts_ids_within_ceiling() -> None:
    guard = ClientGuard()

    assert guard.check("1") is None
    assert guard.check("1000") is None


def test_guard_rejects_ids_above_ceiling() -> None:
    error = ClientGuard().check("1001")

    assert error is not None
    assert error.kind is ClientErrorKind.OUT_OF_RANGE
    assert error.requested_id == "1001"
    assert error.message == "The ID must be between 1 and 1000."


def test_very_long_ids_are_checked_without_conversion() -> None:
    assert is_valid_id("9" * 5000) is True
    assert is_valid_id("0" * 5000) is False
    assert parse_id("9" * 5000) is None
    assert parse_id("0042") == 42


def test_guard_rejects_very_long_ids_as_out_of_range() -> None:
    guard = ClientGuard()
    error = guard.check("9" * 5000)

    assert error is not None
    assert error.kind is ClientErrorKind.OUT_OF_RANGE
    assert guard.check("0" * 4000 + "1000") is None
    assert guard.check("0" * 4000 + "1001") is not None


def test_guard_rejects_malformed_ids() -> None:
    error = ClientGuard(ceiling=50).check("-3")

    assert error is not None
    assert error.kind is ClientErrorKind.INVALID_FORMAT
    assert error.message == "The ID must be a positive number."


def test_guard_requires_positive_ceiling() -> None:
    with pytest.raises(ValueError):
        ClientGuard(ceiling=0)


def test_guard_error_wins_over_resolved_record() -> None:
    """A record resolved for "5" is hidden when the live id is out of range."""

    record = Record(id=5, title="Five", body="", owner_id=1)
    view = compose_detail(ResolvedRecord(record=record), "5000", ClientGuard())

    assert view.ok is False
    assert view.record is None
    assert view.error is not None
    assert view.error.kind is ClientErrorKind.OUT_OF_RANGE
    assert view.requested_id == "5000"
    assert view.status_code == 400


def test_compose_detail_passes_through_resolution() -> None:
    record = Record(id=5, title="Five", body="", owner_id=1)
    view = compose_detail(ResolvedRecord(record=record), "5", ClientGuard())

    assert view.ok is True
    assert view.record == record
    assert view.to_payload()["post"]["ownerId"] == 1


def test_compose_detail_keeps_resolution_errors() -> None:
    failure = ResolutionError(
        kind=ResolutionErrorKind.NOT_FOUND,
        message="The requested post could not be found.",
        requested_id="77",
    )
    view = compose_detail(failure, "77", ClientGuard())

    assert view.error == failure
    assert view.status_code == 404
