"""Per-item attempt accounting.

Every attempt is counted *before* any page work starts: :meth:`begin_attempt`
persists the incremented ``attempt_count`` and the ``attempting`` status, so a
crash, timeout or kill during extraction still consumes one attempt.
:meth:`finish_attempt` decides between a retryable failure and a give-up and
hands the final write to the :class:`ResultWriter`.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from news_extractor.core.schemas.work_item import WorkItem, WorkStatus, check_transition
from news_extractor.pipeline.outcomes import (
    AttemptOutcome,
    Extracted,
    Failed,
    FinalOutcome,
    GivenUp,
)
from news_extractor.pipeline.result_writer import ResultWriter, format_attempt_tag
from news_extractor.store.base import WorkItemStore

logger = logging.getLogger(__name__)

_ATTEMPT_CODE = "fetch_attempt"


def _status_of(outcome: FinalOutcome) -> WorkStatus:
    if isinstance(outcome, Extracted):
        return WorkStatus.EXTRACTED
    if isinstance(outcome, GivenUp):
        return WorkStatus.GIVEN_UP
    return WorkStatus.FAILED


class RetryLedger:
    """Counts attempts and enforces the retry ceiling.

    Args:
        store: Store client used for the pre-attempt write.
        writer: Result writer used for the post-attempt write.
        max_attempts: Retry ceiling.
    """

    def __init__(
        self, store: WorkItemStore, writer: ResultWriter, max_attempts: int
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._store = store
        self._writer = writer
        self._max_attempts = max_attempts

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def tag(self, code: str, attempt: int) -> str:
        return format_attempt_tag(code, attempt, self._max_attempts)

    async def begin_attempt(self, item: WorkItem) -> int:
        """Persist the attempt marker for ``item`` and return its attempt number.

        Raises:
            InvalidTransitionError: If ``item`` is already terminal.
            StoreError: If the write failed; no attempt was counted and the
                caller must not start page work.
        """
        check_transition(item.last_status, WorkStatus.ATTEMPTING)
        next_attempt = item.attempt_count + 1
        await self._store.apply_update(
            item.id,
            {
                "attempt_count": next_attempt,
                "last_status": WorkStatus.ATTEMPTING.value,
                "last_error": self.tag(_ATTEMPT_CODE, next_attempt),
                "processed_at": datetime.now(tz=timezone.utc),
            },
        )
        logger.debug(
            "extractor: item %s attempt %d/%d started",
            item.id,
            next_attempt,
            self._max_attempts,
        )
        return next_attempt

    def resolve(self, outcome: AttemptOutcome, next_attempt: int) -> FinalOutcome:
        """Promote a failure to :class:`GivenUp` once the ceiling is reached."""
        if isinstance(outcome, Extracted):
            if outcome.text:
                return outcome
            outcome = Failed("fetch_failed")
        if next_attempt >= self._max_attempts:
            return GivenUp(outcome.reason)
        return outcome

    async def finish_attempt(
        self, item: WorkItem, next_attempt: int, outcome: AttemptOutcome
    ) -> tuple[FinalOutcome, bool]:
        """Resolve ``outcome`` and write it.

        Returns:
            The resolved outcome and whether its write persisted.
        """
        final = self.resolve(outcome, next_attempt)
        check_transition(WorkStatus.ATTEMPTING, _status_of(final))
        fields = self._writer.build_fields(final, next_attempt, self._max_attempts)
        persisted = await self._writer.write(item.id, fields)

        if isinstance(final, GivenUp):
            logger.warning(
                "extractor: item %s given up after %d attempts (%s)",
                item.id,
                next_attempt,
                final.reason,
            )
        return final, persisted
