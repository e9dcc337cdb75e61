"""Translate a final attempt outcome into one store update.

Field sets written per outcome:

=============  ==============================================================
Extracted      extracted_content, last_status=extracted, last_error=NULL,
               needs_extraction=false, processed_at
Failed         last_status=failed, last_error="<reason> (n/max)", processed_at
GivenUp        last_status=given_up, last_error="<reason> (n/max)",
               needs_extraction=false, processed_at
=============  ==============================================================

A write that fails with :class:`StoreError` is logged and, when an
:class:`~news_extractor.pipeline.outbox.Outbox` is configured, spilled there
for replay by the next invocation.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from news_extractor.core.exceptions import StoreError
from news_extractor.core.schemas.work_item import WorkStatus
from news_extractor.pipeline.outbox import Outbox
from news_extractor.pipeline.outcomes import Extracted, Failed, FinalOutcome, GivenUp
from news_extractor.store.base import WorkItemStore

logger = logging.getLogger(__name__)


def format_attempt_tag(code: str, attempt: int, max_attempts: int) -> str:
    """Return ``"<code> (<attempt>/<max_attempts>)"``."""
    return f"{code} ({attempt}/{max_attempts})"


class ResultWriter:
    """Persist final outcomes through the store client.

    Args:
        store: Store client.
        outbox: Optional spill file for updates that fail to persist.
    """

    def __init__(self, store: WorkItemStore, outbox: Optional[Outbox] = None) -> None:
        self._store = store
        self._outbox = outbox

    @staticmethod
    def build_fields(
        outcome: FinalOutcome,
        attempt: int,
        max_attempts: int,
        now: Optional[datetime] = None,
    ) -> dict[str, Any]:
        """Return the partial update for ``outcome``.

        Raises:
            ValueError: For an :class:`Extracted` outcome with empty text.
        """
        fields: dict[str, Any] = {"processed_at": now or datetime.now(tz=timezone.utc)}
        if isinstance(outcome, Extracted):
            if not outcome.text:
                raise ValueError("Extracted outcome must carry non-empty text")
            fields.update(
                extracted_content=outcome.text,
                last_status=WorkStatus.EXTRACTED.value,
                last_error=None,
                needs_extraction=False,
            )
        elif isinstance(outcome, GivenUp):
            fields.update(
                last_status=WorkStatus.GIVEN_UP.value,
                last_error=format_attempt_tag(outcome.reason, attempt, max_attempts),
                needs_extraction=False,
            )
        elif isinstance(outcome, Failed):
            fields.update(
                last_status=WorkStatus.FAILED.value,
                last_error=format_attempt_tag(outcome.reason, attempt, max_attempts),
            )
        else:
            raise TypeError(f"Unsupported outcome: {outcome!r}")
        return fields

    async def write(self, item_id: str, fields: dict[str, Any]) -> bool:
        """Apply ``fields`` to ``item_id``.

        Returns:
            ``True`` if the update persisted, ``False`` if it was spilled to
            the outbox (or lost when no outbox is configured).
        """
        try:
            await self._store.apply_update(item_id, fields)
        except StoreError as exc:
            if self._outbox is None:
                logger.error(
                    "extractor: result for item %s not persisted and no outbox "
                    "configured: %s",
                    item_id,
                    exc,
                )
            else:
                logger.warning(
                    "extractor: result for item %s not persisted: %s", item_id, exc
                )
                try:
                    self._outbox.append(item_id, fields)
                except OSError as io_exc:
                    logger.error(
                        "extractor: outbox append failed for item %s: %s",
                        item_id,
                        io_exc,
                    )
            return False
        return True
