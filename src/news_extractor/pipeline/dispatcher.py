"""Run one batch of work items with bounded concurrency and fault isolation.

Each item goes through the same sequence inside its own asyncio task::

    skip check ─► ledger pre-write ─► page work (per-item deadline)
               ─► ledger post-write

At most ``config.batch_size`` item tasks hold the semaphore at once.  All
tasks are awaited with ``asyncio.gather(..., return_exceptions=True)``, so a
failure in one item never cancels or hides the others, and
:meth:`BatchDispatcher.run_batch` always returns a :class:`BatchReport`.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence

from news_extractor.config.pipeline import PipelineConfig
from news_extractor.core.exceptions import StoreError
from news_extractor.core.schemas.work_item import WorkItem
from news_extractor.pipeline.ledger import RetryLedger
from news_extractor.pipeline.outbox import Outbox
from news_extractor.pipeline.outcomes import (
    AttemptOutcome,
    BatchReport,
    Extracted,
    Failed,
    GivenUp,
    error_reason,
)
from news_extractor.pipeline.result_writer import ResultWriter
from news_extractor.scraper.browser_session import BrowserSession
from news_extractor.scraper.page_fetcher import fetch_and_extract
from news_extractor.store.base import WorkItemStore

logger = logging.getLogger(__name__)

PageFetcher = Callable[[BrowserSession, str], Awaitable[AttemptOutcome]]


@dataclass(frozen=True)
class _ItemResult:
    kind: str  # "succeeded" | "failed" | "skipped"
    reason: Optional[str] = None
    given_up: bool = False
    persisted: bool = True


_SKIPPED = _ItemResult("skipped")


class BatchDispatcher:
    """Executes the per-item extraction sequence for a batch.

    Args:
        store: Store client.
        config: Pipeline configuration (concurrency, deadlines, retry ceiling).
        writer: Result writer; built from ``store`` and ``config.outbox_path``
            when omitted.
        fetch_page: Page work for one URL.  Tests substitute a fake.
    """

    def __init__(
        self,
        store: WorkItemStore,
        config: PipelineConfig,
        writer: Optional[ResultWriter] = None,
        fetch_page: PageFetcher = fetch_and_extract,
    ) -> None:
        if writer is None:
            outbox = Outbox(config.outbox_path) if config.outbox_path else None
            writer = ResultWriter(store, outbox)
        self._config = config
        self._ledger = RetryLedger(store, writer, config.max_attempts)
        self._fetch_page = fetch_page

    async def run_batch(
        self, items: Sequence[WorkItem], session: BrowserSession
    ) -> BatchReport:
        """Process ``items`` and return aggregate counts.  Never raises."""
        unique: list[WorkItem] = []
        seen: set[str] = set()
        for item in items:
            if item.id in seen:
                logger.warning("extractor: duplicate item %s in batch ignored", item.id)
                continue
            seen.add(item.id)
            unique.append(item)

        semaphore = asyncio.Semaphore(self._config.batch_size)

        async def _bounded(item: WorkItem) -> _ItemResult:
            async with semaphore:
                return await self._process(item, session)

        results = await asyncio.gather(
            *(_bounded(item) for item in unique), return_exceptions=True
        )

        report = BatchReport()
        for item, result in zip(unique, results):
            if isinstance(result, BaseException):
                logger.error(
                    "extractor: item %s task crashed: %r",
                    item.id,
                    result,
                    exc_info=result,
                )
                result = _ItemResult("failed", reason=error_reason(result))
            self._record(report, item, result)

        logger.info(
            "extractor: batch done succeeded=%d failed=%d skipped=%d given_up=%d",
            report.succeeded,
            report.failed,
            report.skipped,
            report.given_up,
        )
        return report

    @staticmethod
    def _record(report: BatchReport, item: WorkItem, result: _ItemResult) -> None:
        if result.kind == "succeeded":
            report.succeeded += 1
        elif result.kind == "skipped":
            report.skipped += 1
        else:
            report.failed += 1
            report.errors[item.id] = result.reason or "unknown"
            if result.given_up:
                report.given_up += 1
        if not result.persisted:
            report.unflushed += 1

    async def _process(self, item: WorkItem, session: BrowserSession) -> _ItemResult:
        if item.last_status.is_terminal or item.has_content:
            logger.debug(
                "extractor: skipping item %s (status=%s, has_content=%s)",
                item.id,
                item.last_status.value,
                item.has_content,
            )
            return _SKIPPED

        try:
            attempt = await self._ledger.begin_attempt(item)
        except StoreError as exc:
            # The attempt was not counted, so no page work may start.
            logger.warning(
                "extractor: pre-attempt write failed for item %s, skipping this run: %s",
                item.id,
                exc,
            )
            return _ItemResult("failed", reason=f"store_error: {exc}")

        outcome = await self._attempt(item, session)
        final, persisted = await self._ledger.finish_attempt(item, attempt, outcome)

        if isinstance(final, Extracted):
            logger.info(
                "extractor: item %s extracted (%d chars, attempt %d/%d)",
                item.id,
                len(final.text),
                attempt,
                self._ledger.max_attempts,
            )
            return _ItemResult("succeeded", persisted=persisted)
        return _ItemResult(
            "failed",
            reason=final.reason,
            given_up=isinstance(final, GivenUp),
            persisted=persisted,
        )

    async def _attempt(self, item: WorkItem, session: BrowserSession) -> AttemptOutcome:
        try:
            return await asyncio.wait_for(
                self._fetch_page(session, item.source_url),
                timeout=self._config.item_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "extractor: item %s exceeded %.1fs deadline (%s)",
                item.id,
                self._config.item_timeout,
                item.source_url,
            )
            return Failed("item_timeout")
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "extractor: item %s failed on %s: %s", item.id, item.source_url, exc
            )
            return Failed(error_reason(exc))
