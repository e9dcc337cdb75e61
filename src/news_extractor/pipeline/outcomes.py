"""Tagged outcome values for a single extraction attempt.

Per-item control flow never uses exceptions: the page fetcher returns
:class:`Extracted` or :class:`Failed`, the retry ledger may promote a
:class:`Failed` to :class:`GivenUp`, and the result writer turns the final
value into a store update.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from news_extractor.scraper.config import MAX_ERROR_MESSAGE_CHARS


@dataclass(frozen=True)
class Extracted:
    """The page produced non-empty text."""

    text: str


@dataclass(frozen=True)
class Failed:
    """The attempt failed and may be retried.

    ``reason`` is a failure code such as ``"navigation_timeout"``,
    ``"fetch_failed"``, ``"http_404"``, ``"item_timeout"`` or
    ``"fetch_error: <message>"``.
    """

    reason: str


@dataclass(frozen=True)
class GivenUp:
    """The attempt failed and the retry budget is exhausted."""

    reason: str


AttemptOutcome = Union[Extracted, Failed]
FinalOutcome = Union[Extracted, Failed, GivenUp]


def error_reason(exc: BaseException) -> str:
    """Build a ``fetch_error`` reason from an unexpected exception."""
    message = str(exc) or type(exc).__name__
    return f"fetch_error: {message[:MAX_ERROR_MESSAGE_CHARS]}"


@dataclass
class BatchReport:
    """Aggregate counts for one dispatcher run.

    Attributes:
        succeeded: Items recorded as extracted.
        failed: Items whose attempt failed (including given-up items and
            items aborted because the ledger pre-write failed).
        skipped: Items not attempted (already extracted or terminal).
        given_up: Subset of ``failed`` that exhausted the retry budget.
        unflushed: Post-attempt writes that did not reach the store and
            were spilled to the outbox (or lost when it is disabled).
        errors: ``item_id -> reason`` for every failed item.
    """

    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    given_up: int = 0
    unflushed: int = 0
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed + self.skipped

    def as_dict(self) -> dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "given_up": self.given_up,
            "unflushed": self.unflushed,
            "total": self.total,
            "errors": dict(self.errors),
        }
