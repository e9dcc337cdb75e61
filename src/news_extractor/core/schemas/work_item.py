"""Pydantic schema and lifecycle rules for extraction work items.

:class:`WorkItem` is the typed view of one store row that the pipeline works
with.  Store clients build it from raw rows with :meth:`WorkItem.from_row`;
rows that fail validation never reach the dispatcher.

Lifecycle::

    pending ──► attempting ──► extracted            (terminal)
                    │  ▲
                    ▼  │
                  failed ──► given_up               (terminal)

``attempting → attempting`` is also allowed: it is how an item whose previous
run crashed after the retry-ledger pre-write gets retried.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from news_extractor.core.exceptions import InvalidTransitionError


class WorkStatus(str, Enum):
    """Lifecycle state of a work item (stored as its lowercase value)."""

    PENDING = "pending"
    ATTEMPTING = "attempting"
    EXTRACTED = "extracted"
    FAILED = "failed"
    GIVEN_UP = "given_up"

    @property
    def is_terminal(self) -> bool:
        return self in (WorkStatus.EXTRACTED, WorkStatus.GIVEN_UP)


_ALLOWED_TRANSITIONS: dict[WorkStatus, frozenset[WorkStatus]] = {
    WorkStatus.PENDING: frozenset({WorkStatus.ATTEMPTING}),
    WorkStatus.ATTEMPTING: frozenset(
        {
            WorkStatus.ATTEMPTING,
            WorkStatus.EXTRACTED,
            WorkStatus.FAILED,
            WorkStatus.GIVEN_UP,
        }
    ),
    WorkStatus.FAILED: frozenset({WorkStatus.ATTEMPTING}),
    WorkStatus.EXTRACTED: frozenset(),
    WorkStatus.GIVEN_UP: frozenset(),
}


def can_transition(source: WorkStatus, target: WorkStatus) -> bool:
    """Return ``True`` if ``source -> target`` is a legal lifecycle step."""
    return target in _ALLOWED_TRANSITIONS[source]


def check_transition(source: WorkStatus, target: WorkStatus) -> None:
    """Raise :class:`InvalidTransitionError` unless ``source -> target`` is legal."""
    if not can_transition(source, target):
        raise InvalidTransitionError(source.value, target.value)


class WorkItem(BaseModel):
    """A unit of extraction work as read from the store.

    Attributes:
        id: Opaque stable identifier (store primary key).
        source_url: URL to render; required and non-empty.
        title: Article title, used only in log lines.
        published_at: Publication timestamp used for recency ordering.
        extracted_content: Previously extracted text.  When non-empty the
            item is never attempted again.
        attempt_count: Attempts already started (and persisted).
        last_status: Current lifecycle state.
        last_error: Attempt-tagged diagnostic from the latest write.
        needs_extraction: ``False`` once the item left the pending pool.
        processed_at: Timestamp of the latest state-changing write.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    source_url: str = Field(min_length=1)
    title: Optional[str] = None
    published_at: Optional[datetime] = None
    extracted_content: Optional[str] = None
    attempt_count: int = Field(default=0, ge=0)
    last_status: WorkStatus = WorkStatus.PENDING
    last_error: Optional[str] = None
    needs_extraction: bool = True
    processed_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # D1 returns integer primary keys as JSON numbers.
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("source_url", mode="before")
    @classmethod
    def _strip_url(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("attempt_count", mode="before")
    @classmethod
    def _null_count_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("published_at", "processed_at", mode="before")
    @classmethod
    def _lenient_timestamp(cls, value: Any) -> Any:
        # Producers write ISO 8601 strings or epoch milliseconds; anything
        # unparseable is treated as unknown rather than rejecting the row.
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.strip())
            except ValueError:
                return None
        return value

    @property
    def has_content(self) -> bool:
        """``True`` if text was already extracted for this item."""
        return bool(self.extracted_content and self.extracted_content.strip())

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "WorkItem":
        """Validate a raw store row (column name -> value) into a WorkItem.

        Unknown columns are ignored.

        Raises:
            pydantic.ValidationError: If required fields are missing or invalid.
        """
        known = {name: row[name] for name in cls.model_fields if name in row}
        return cls.model_validate(known)
