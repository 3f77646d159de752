"""Client for the external post collection endpoints."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ..models import Record

logger = logging.getLogger(__name__)


class RecordStoreError(RuntimeError):
    """Raised when the record source cannot satisfy a request."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


class RecordNotFoundError(RecordStoreError):
    """Raised when the record source reports that a record does not exist."""


class RecordStore:
    """Thin wrapper around the collection and single-record endpoints."""

    def __init__(
        self, http_client: httpx.AsyncClient, *, collection_path: str = "/posts"
    ) -> None:
        self._client = http_client
        self._collection_path = "/" + collection_path.strip("/")

    async def fetch_collection(self) -> list[Record]:
        """Return every record in the collection, skipping malformed entries."""

        response = await self._get(self._collection_path)
        if response.status_code >= 400:
            raise RecordStoreError(
                f"Failed to fetch posts, status: {response.status_code}",
                status=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise RecordStoreError(
                "Post collection response was not valid JSON",
                status=response.status_code,
            ) from exc
        if not isinstance(payload, list):
            raise RecordStoreError(
                "Post collection response was not a list",
                status=response.status_code,
            )

        records: list[Record] = []
        for entry in payload:
            if not isinstance(entry, dict):
                logger.warning("Skipping malformed post in collection: %r", entry)
                continue
            try:
                records.append(Record.model_validate(entry))
            except ValidationError:
                logger.warning("Skipping malformed post in collection: %r", entry)
        return records

    async def fetch_one(self, record_id: int) -> Any:
        """Return the decoded payload for ``record_id``.

        The payload is returned as-is (``None`` when the body is not JSON) so
        callers can apply their own shape checks.
        """

        response = await self._get(f"{self._collection_path}/{record_id}")
        if response.status_code == 404:
            raise RecordNotFoundError(
                f"Post {record_id} was not found", status=404
            )
        if response.status_code >= 400:
            raise RecordStoreError(
                f"Failed to fetch post {record_id}, status: {response.status_code}",
                status=response.status_code,
            )
        try:
            return response.json()
        except ValueError:
            logger.warning("Post %s response was not valid JSON", record_id)
            return None

    async def _get(self, path: str) -> httpx.Response:
        try:
            return await self._client.get(path)
        except httpx.HTTPError as exc:
            logger.warning("Record source request to %s failed: %s", path, exc)
            raise RecordStoreError(str(exc) or exc.__class__.__name__) from exc
