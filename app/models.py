"""Pydantic models and result types describing records and detail views."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PositiveInt


class Record(BaseModel):
    """A single browsable post returned by the record source."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: PositiveInt
    title: str = ""
    body: str = ""
    owner_id: int = Field(
        default=0,
        validation_alias=AliasChoices("userId", "ownerId", "owner_id"),
        serialization_alias="ownerId",
    )

    def display_title(self) -> str:
        """Return a human-friendly label for announcements and links."""

        title = (self.title or "").strip()
        return title or f"Post {self.id}"

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


@dataclass(slots=True, frozen=True)
class FilterState:
    """Text query and favorites-only flag driving the visible list."""

    query: str = ""
    favorites_only: bool = False


class ResolutionErrorKind(str, Enum):
    """Every way resolving a detail identifier can fail, in precedence order."""

    INVALID_FORMAT = "invalid_format"
    NOT_FOUND = "not_found"
    API_ERROR = "api_error"
    INVALID_DATA = "invalid_data"
    EXCEPTION = "exception"

    @property
    def heading(self) -> str:
        return _RESOLUTION_HEADINGS[self]

    @property
    def status_code(self) -> int:
        return _RESOLUTION_STATUS[self]


_RESOLUTION_HEADINGS = {
    ResolutionErrorKind.INVALID_FORMAT: "Invalid Post ID",
    ResolutionErrorKind.NOT_FOUND: "Post Not Found",
    ResolutionErrorKind.API_ERROR: "Error Loading Post",
    ResolutionErrorKind.INVALID_DATA: "Invalid Post Data",
    ResolutionErrorKind.EXCEPTION: "Something Went Wrong",
}

_RESOLUTION_STATUS = {
    ResolutionErrorKind.INVALID_FORMAT: 400,
    ResolutionErrorKind.NOT_FOUND: 404,
    ResolutionErrorKind.API_ERROR: 502,
    ResolutionErrorKind.INVALID_DATA: 502,
    ResolutionErrorKind.EXCEPTION: 500,
}


class ClientErrorKind(str, Enum):
    """Failures detected when a detail view is displayed."""

    INVALID_FORMAT = "client_invalid_format"
    OUT_OF_RANGE = "client_out_of_range"

    @property
    def heading(self) -> str:
        if self is ClientErrorKind.OUT_OF_RANGE:
            return "Post ID Out of Range"
        return "Invalid Post ID"

    @property
    def status_code(self) -> int:
        return 400


@dataclass(slots=True, frozen=True)
class ResolvedRecord:
    """Successful resolution of a detail identifier."""

    record: Record


@dataclass(slots=True, frozen=True)
class ResolutionError:
    """Typed failure produced while resolving a detail identifier."""

    kind: ResolutionErrorKind
    message: str
    requested_id: str

    def to_payload(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "title": self.kind.heading,
            "message": self.message,
            "requestedId": self.requested_id,
        }


ResolutionResult = ResolvedRecord | ResolutionError


@dataclass(slots=True, frozen=True)
class ClientGuardError:
    """Failure raised by the navigation-time identifier check."""

    kind: ClientErrorKind
    message: str
    requested_id: str

    def to_payload(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "title": self.kind.heading,
            "message": self.message,
            "requestedId": self.requested_id,
        }


@dataclass(slots=True, frozen=True)
class DetailView:
    """What a detail page displays once every check has been applied."""

    requested_id: str
    record: Record | None = None
    error: ResolutionError | ClientGuardError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.record is not None

    @property
    def status_code(self) -> int:
        if self.error is None:
            return 200
        return self.error.kind.status_code

    def to_payload(self) -> dict[str, object]:
        if self.error is not None:
            return {"status": "error", "error": self.error.to_payload()}
        assert self.record is not None
        return {"status": "ok", "post": self.record.to_payload()}
