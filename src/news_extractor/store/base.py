"""Abstract work-item store and helpers shared by the concrete clients.

The store client is the only component that talks to the remote store.  It
exposes two operations:

``fetch_pending(limit, max_attempts)``
    Items still in the pending pool: ``pending``, or ``failed`` /
    ``attempting`` below the retry ceiling, newest first.  ``attempting``
    rows are ones whose previous run died after the ledger pre-write.

``apply_update(item_id, fields)``
    A partial field merge executed as one parameterized statement.  Only the
    supplied keys change; ``None`` writes NULL.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import ValidationError

from news_extractor.core.schemas.work_item import WorkItem, WorkStatus

logger = logging.getLogger(__name__)

#: Columns read by ``fetch_pending``, in SELECT order.
SELECT_COLUMNS: tuple[str, ...] = (
    "id",
    "source_url",
    "title",
    "published_at",
    "extracted_content",
    "attempt_count",
    "last_status",
    "last_error",
    "needs_extraction",
    "processed_at",
)

#: Columns the pipeline is allowed to change.
UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {
        "extracted_content",
        "attempt_count",
        "last_status",
        "last_error",
        "needs_extraction",
        "processed_at",
    }
)

#: Statuses eligible for a retry while ``attempt_count < max_attempts``.
RETRYABLE_STATUSES: tuple[str, ...] = (
    WorkStatus.FAILED.value,
    WorkStatus.ATTEMPTING.value,
)


def normalise_update(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Validate update keys and unwrap enum values.

    Raises:
        ValueError: If a key is not an updatable column.
    """
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown work item fields: {', '.join(sorted(unknown))}")
    return {
        key: value.value if isinstance(value, Enum) else value
        for key, value in fields.items()
    }


def rows_to_items(rows: Iterable[Mapping[str, Any]]) -> list[WorkItem]:
    """Validate raw rows into WorkItems, dropping (and logging) invalid ones."""
    items: list[WorkItem] = []
    for row in rows:
        try:
            items.append(WorkItem.from_row(row))
        except ValidationError as exc:
            logger.warning(
                "extractor: dropping invalid work item row id=%s: %s",
                row.get("id"),
                exc.errors()[0].get("msg") if exc.errors() else exc,
            )
    return items


def to_wire_value(value: Any) -> Any:
    """Convert a Python value into a JSON/SQL parameter value."""
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


class WorkItemStore(ABC):
    """Typed query/update access to the work-item store.

    Stores are async context managers; leaving the block releases transport
    resources via :meth:`aclose`.
    """

    @abstractmethod
    async def fetch_pending(self, limit: int, max_attempts: int) -> list[WorkItem]:
        """Return up to ``limit`` items still in the pending pool, newest first.

        Raises:
            StoreError: On transport failure or a non-success response.
        """

    @abstractmethod
    async def apply_update(self, item_id: str, fields: Mapping[str, Any]) -> None:
        """Apply a partial update to one item in a single statement.

        Raises:
            ValueError: If ``fields`` names a column that may not be updated.
            StoreError: On transport failure, a non-success response, or if
                no row has ``item_id``.  The update was not applied.
        """

    async def aclose(self) -> None:
        """Release transport resources.  The default does nothing."""

    async def __aenter__(self) -> "WorkItemStore":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
