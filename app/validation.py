"""Identifier checks applied when resolving and when displaying detail views."""

from __future__ import annotations

import re

from .models import (
    ClientErrorKind,
    ClientGuardError,
    DetailView,
    ResolutionResult,
    ResolvedRecord,
)

DIGITS_RE = re.compile(r"[0-9]+")

INVALID_ID_MESSAGE = "The ID must be a positive number."
DEFAULT_ID_CEILING = 1_000


def is_valid_id(raw: object) -> bool:
    """Return ``True`` when ``raw`` is a string of digits naming an id >= 1."""

    if not isinstance(raw, str) or not DIGITS_RE.fullmatch(raw):
        return False
    return raw.lstrip("0") != ""


def parse_id(raw: object) -> int | None:
    """Return ``raw`` as an int, or ``None`` when it is invalid or too long to convert."""

    if not is_valid_id(raw):
        return None
    assert isinstance(raw, str)
    try:
        return int(raw)
    except ValueError:
        return None


class ClientGuard:
    """Re-validates the identifier a detail view is actually displayed for.

    Unlike resolution, this check also enforces an upper bound, so a record
    that resolved successfully can still be hidden behind a client error.
    """

    def __init__(self, ceiling: int = DEFAULT_ID_CEILING) -> None:
        if ceiling < 1:
            raise ValueError("ceiling must be at least 1")
        self._ceiling = ceiling

    @property
    def ceiling(self) -> int:
        return self._ceiling

    def check(self, live_id: str) -> ClientGuardError | None:
        if not is_valid_id(live_id):
            return ClientGuardError(
                kind=ClientErrorKind.INVALID_FORMAT,
                message=INVALID_ID_MESSAGE,
                requested_id=live_id,
            )
        if _exceeds(live_id.lstrip("0"), self._ceiling):
            return ClientGuardError(
                kind=ClientErrorKind.OUT_OF_RANGE,
                message=f"The ID must be between 1 and {self._ceiling}.",
                requested_id=live_id,
            )
        return None


def _exceeds(digits: str, ceiling: int) -> bool:
    # Digit strings of any length; never converted with int().
    limit = str(ceiling)
    if len(digits) != len(limit):
        return len(digits) > len(limit)
    return digits > limit


def compose_detail(
    result: ResolutionResult, live_id: str, guard: ClientGuard
) -> DetailView:
    """Combine a resolution result with the display-time guard.

    A guard failure always wins over a resolved record.
    """

    client_error = guard.check(live_id)
    if client_error is not None:
        return DetailView(requested_id=live_id, error=client_error)
    if isinstance(result, ResolvedRecord):
        return DetailView(requested_id=live_id, record=result.record)
    return DetailView(requested_id=result.requested_id, error=result)
