"""Resolution of raw detail identifiers into records or typed errors."""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any

from pydantic import ValidationError

from ..models import (
    Record,
    ResolutionError,
    ResolutionErrorKind,
    ResolutionResult,
    ResolvedRecord,
)
from ..validation import INVALID_ID_MESSAGE, is_valid_id, parse_id
from .records import RecordNotFoundError, RecordStore, RecordStoreError

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "The requested post could not be found."
INVALID_DATA_MESSAGE = "The post data appears to be invalid or empty."
EXCEPTION_MESSAGE = "An unexpected error occurred while retrieving the post."


class RecordResolver:
    """Resolve identifiers once per publish cycle and retain every outcome."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store
        self._results: dict[str, ResolutionResult] = {}
        self._pending: dict[str, asyncio.Task[ResolutionResult]] = {}
        self._cycle = 0

    @property
    def cycle(self) -> int:
        return self._cycle

    def cached(self, raw_id: str) -> ResolutionResult | None:
        """Return the stored result for ``raw_id`` without resolving it."""

        return self._results.get(raw_id)

    def reset(self) -> None:
        """Start a new publish cycle, forgetting every stored result."""

        self._cycle += 1
        self._results.clear()
        self._pending.clear()

    async def resolve(self, raw_id: str) -> ResolutionResult:
        """Return the result for ``raw_id``, resolving it only if absent."""

        existing = self._results.get(raw_id)
        if existing is not None:
            return existing

        task = self._pending.get(raw_id)
        if task is None:
            task = asyncio.create_task(self._resolve_guarded(raw_id))
            task.add_done_callback(functools.partial(self._settle, raw_id, self._cycle))
            self._pending[raw_id] = task
        # A waiter being cancelled must not cancel the fetch other waiters share.
        return await asyncio.shield(task)

    def _settle(
        self, raw_id: str, cycle: int, task: asyncio.Task[ResolutionResult]
    ) -> None:
        if self._pending.get(raw_id) is task:
            del self._pending[raw_id]
        if cycle != self._cycle or task.cancelled() or task.exception() is not None:
            return
        self._results.setdefault(raw_id, task.result())

    async def _resolve_guarded(self, raw_id: str) -> ResolutionResult:
        try:
            return await self._resolve_uncached(raw_id)
        except Exception:
            logger.exception("Unexpected failure resolving post %s", raw_id)
            return self._error(ResolutionErrorKind.EXCEPTION, EXCEPTION_MESSAGE, raw_id)

    async def _resolve_uncached(self, raw_id: str) -> ResolutionResult:
        if not is_valid_id(raw_id):
            return self._error(ResolutionErrorKind.INVALID_FORMAT, INVALID_ID_MESSAGE, raw_id)
        record_id = parse_id(raw_id)
        if record_id is None:
            # Too many digits to name any stored record.
            return self._error(ResolutionErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE, raw_id)

        try:
            payload = await self._store.fetch_one(record_id)
        except RecordNotFoundError:
            return self._error(ResolutionErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE, raw_id)
        except RecordStoreError as exc:
            detail = exc.status if exc.status is not None else exc.message
            return self._error(
                ResolutionErrorKind.API_ERROR,
                f"Error retrieving post: {detail}",
                raw_id,
            )
        except Exception:
            logger.exception("Unexpected failure resolving post %s", raw_id)
            return self._error(ResolutionErrorKind.EXCEPTION, EXCEPTION_MESSAGE, raw_id)

        record = self._validate_payload(payload)
        if record is None:
            logger.warning("Post %s returned invalid data: %r", raw_id, payload)
            return self._error(ResolutionErrorKind.INVALID_DATA, INVALID_DATA_MESSAGE, raw_id)
        return ResolvedRecord(record=record)

    @staticmethod
    def _validate_payload(payload: Any) -> Record | None:
        if not isinstance(payload, dict) or not payload:
            return None
        if not payload.get("id"):
            return None
        try:
            return Record.model_validate(payload)
        except ValidationError:
            return None

    @staticmethod
    def _error(kind: ResolutionErrorKind, message: str, raw_id: str) -> ResolutionError:
        return ResolutionError(kind=kind, message=message, requested_id=raw_id)
