"""Local spill file for post-attempt writes that did not reach the store.

When the result writer's update fails, the pending field set is appended to a
JSON-lines file.  The next invocation replays the file before fetching new
work so that an extracted text or a give-up decision is not silently lost.

Line format::

    {"item_id": "42", "fields": {...}, "recorded_at": "2026-01-01T00:00:00+00:00"}

Datetime field values are stored as ISO 8601 strings and parsed back on
replay.  The file is rewritten atomically (temporary file + ``os.replace``)
with only the entries that still fail.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from news_extractor.core.exceptions import ItemNotFoundError, StoreError
from news_extractor.store.base import WorkItemStore, to_wire_value

logger = logging.getLogger(__name__)

_DATETIME_FIELDS = frozenset({"processed_at"})


@dataclass(frozen=True)
class OutboxEntry:
    """One unflushed update."""

    item_id: str
    fields: dict[str, Any]
    recorded_at: str

    def to_json(self) -> str:
        return json.dumps(
            {
                "item_id": self.item_id,
                "fields": {
                    key: _encode_value(value) for key, value in self.fields.items()
                },
                "recorded_at": self.recorded_at,
            },
            ensure_ascii=False,
        )

    @classmethod
    def from_json(cls, line: str) -> "OutboxEntry":
        data = json.loads(line)
        fields = {
            key: _decode_value(key, value) for key, value in data["fields"].items()
        }
        return cls(
            item_id=str(data["item_id"]),
            fields=fields,
            recorded_at=str(data.get("recorded_at", "")),
        )


def _encode_value(value: Any) -> Any:
    # Booleans stay JSON booleans; only datetimes and enums need conversion.
    if isinstance(value, bool):
        return value
    return to_wire_value(value)


def _decode_value(key: str, value: Any) -> Any:
    if key in _DATETIME_FIELDS and isinstance(value, str):
        return datetime.fromisoformat(value)
    return value


class Outbox:
    """Append-only JSON-lines outbox with replay.

    Args:
        path: File location.  Parent directories are created on first append.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def append(self, item_id: str, fields: Mapping[str, Any]) -> None:
        """Record one update that failed to persist."""
        entry = OutboxEntry(
            item_id=item_id,
            fields=dict(fields),
            recorded_at=datetime.now(tz=timezone.utc).isoformat(),
        )
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as fh:
            fh.write(entry.to_json() + "\n")
        logger.warning(
            "extractor: spilled update for item %s to outbox %s", item_id, self._path
        )

    def load(self) -> list[OutboxEntry]:
        """Return all readable entries, skipping corrupt lines."""
        if not self._path.exists():
            return []
        entries: list[OutboxEntry] = []
        with self._path.open(encoding="utf-8") as fh:
            for lineno, line in enumerate(fh, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(OutboxEntry.from_json(line))
                except (ValueError, KeyError, TypeError) as exc:
                    logger.error(
                        "extractor: skipping corrupt outbox line %d in %s: %s",
                        lineno,
                        self._path,
                        exc,
                    )
        return entries

    def pending_ids(self) -> set[str]:
        """IDs of items that still have an unflushed update."""
        return {entry.item_id for entry in self.load()}

    async def flush(self, store: WorkItemStore) -> int:
        """Replay every entry against ``store``.

        Entries that fail with :class:`StoreError` are kept; entries whose
        item no longer exists or whose fields are invalid are dropped.  The
        file is rewritten with only the kept entries (or removed when none
        remain).

        Returns:
            Number of entries applied.
        """
        entries = self.load()
        if not entries:
            return 0

        remaining: list[OutboxEntry] = []
        flushed = 0
        for entry in entries:
            try:
                await store.apply_update(entry.item_id, entry.fields)
            except ItemNotFoundError as exc:
                logger.error(
                    "extractor: discarding outbox entry for deleted item %s: %s",
                    entry.item_id,
                    exc,
                )
                continue
            except StoreError as exc:
                logger.warning(
                    "extractor: outbox replay failed for item %s: %s",
                    entry.item_id,
                    exc,
                )
                remaining.append(entry)
                continue
            except ValueError as exc:
                logger.error(
                    "extractor: discarding invalid outbox entry for item %s: %s",
                    entry.item_id,
                    exc,
                )
                continue
            flushed += 1

        self._rewrite(remaining)
        logger.info(
            "extractor: outbox replay applied=%d remaining=%d", flushed, len(remaining)
        )
        return flushed

    def _rewrite(self, entries: list[OutboxEntry]) -> None:
        if not entries:
            self._path.unlink(missing_ok=True)
            return
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            for entry in entries:
                fh.write(entry.to_json() + "\n")
        os.replace(tmp_path, self._path)
