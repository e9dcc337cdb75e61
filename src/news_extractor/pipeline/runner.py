"""One end-to-end extraction invocation.

:func:`run_extraction` is what the Celery task and the CLI call:

1. Bind a fresh ``invocation_id`` into the logging context.
2. Replay the outbox (writes a previous invocation could not persist).
3. Fetch up to ``batch_size`` pending items.
4. Return early, without launching a browser, when there is nothing to do.
5. Otherwise launch one browser, run the batch, tear the browser down.

Only :class:`~news_extractor.core.exceptions.BrowserLaunchError` and a
:class:`~news_extractor.core.exceptions.StoreError` from the initial fetch
escape; both happen before any work item is touched.
"""

from __future__ import annotations

import uuid
from typing import Any, Optional

import structlog

from news_extractor.config.pipeline import PipelineConfig
from news_extractor.config.settings import Settings, get_settings
from news_extractor.core.logging_config import invocation_id_var
from news_extractor.core.schemas.work_item import WorkItem
from news_extractor.pipeline.dispatcher import BatchDispatcher, PageFetcher
from news_extractor.pipeline.outbox import Outbox
from news_extractor.pipeline.outcomes import BatchReport
from news_extractor.pipeline.result_writer import ResultWriter
from news_extractor.scraper.browser_session import with_session
from news_extractor.scraper.page_fetcher import fetch_and_extract
from news_extractor.store import WorkItemStore, build_store

logger = structlog.get_logger(__name__)


def _describe(item: WorkItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "source_url": item.source_url,
        "title": item.title,
        "attempt_count": item.attempt_count,
        "last_status": item.last_status.value,
    }


async def run_extraction(
    settings: Optional[Settings] = None,
    config: Optional[PipelineConfig] = None,
    *,
    store: Optional[WorkItemStore] = None,
    dry_run: bool = False,
    fetch_page: PageFetcher = fetch_and_extract,
) -> dict[str, Any]:
    """Run one extraction invocation and return its report.

    Args:
        settings: Application settings; defaults to :func:`get_settings`.
        config: Runtime config; defaults to ``PipelineConfig.from_settings``.
        store: Store client to use.  When omitted one is built from
            ``settings`` and closed on return.
        dry_run: Only list the pending items; no browser, no writes (the
            outbox is not replayed either).
        fetch_page: Page work for one URL, passed to the dispatcher.

    Returns:
        ``BatchReport.as_dict()`` plus ``invocation_id``, ``outbox_flushed``
        and ``idle``.  Dry runs return ``pending`` instead of counts.

    Raises:
        BrowserLaunchError: The browser could not be started.
        StoreError: The pending items could not be fetched.
    """
    if config is None:
        config = PipelineConfig.from_settings(settings or get_settings())
    invocation_id = uuid.uuid4().hex
    token = invocation_id_var.set(invocation_id)
    owns_store = store is None
    if store is None:
        store = build_store(settings or get_settings())

    try:
        outbox = Outbox(config.outbox_path) if config.outbox_path else None

        if dry_run:
            items = await store.fetch_pending(config.batch_size, config.max_attempts)
            logger.info("extraction_dry_run", pending=len(items))
            return {
                "invocation_id": invocation_id,
                "dry_run": True,
                "pending": [_describe(item) for item in items],
            }

        flushed = await outbox.flush(store) if outbox is not None else 0
        unflushed_ids = outbox.pending_ids() if outbox is not None else set()

        # An item with a still-unflushed result must not be attempted again
        # until that result lands; it must not use up a batch slot either.
        items = await store.fetch_pending(
            config.batch_size + len(unflushed_ids), config.max_attempts
        )
        held = [item for item in items if item.id in unflushed_ids]
        runnable = [item for item in items if item.id not in unflushed_ids][
            : config.batch_size
        ]

        if not runnable:
            logger.info("extraction_idle", held=len(held), outbox_flushed=flushed)
            report = BatchReport(skipped=len(held))
            return _finalise(report, invocation_id, flushed, idle=True)

        logger.info(
            "extraction_started",
            items=len(runnable),
            batch_size=config.batch_size,
            max_attempts=config.max_attempts,
        )
        dispatcher = BatchDispatcher(
            store, config, ResultWriter(store, outbox), fetch_page=fetch_page
        )
        report = await with_session(
            config, lambda session: dispatcher.run_batch(runnable, session)
        )
        report.skipped += len(held)

        logger.info(
            "extraction_finished",
            succeeded=report.succeeded,
            failed=report.failed,
            skipped=report.skipped,
            given_up=report.given_up,
            unflushed=report.unflushed,
        )
        return _finalise(report, invocation_id, flushed, idle=False)
    finally:
        if owns_store:
            await store.aclose()
        invocation_id_var.reset(token)


def _finalise(
    report: BatchReport, invocation_id: str, flushed: int, *, idle: bool
) -> dict[str, Any]:
    result = report.as_dict()
    result.update(invocation_id=invocation_id, outbox_flushed=flushed, idle=idle)
    return result
