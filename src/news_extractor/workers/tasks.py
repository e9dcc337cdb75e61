"""Celery task for the extraction pipeline.

``extract_pending_task``
    Runs one invocation (:func:`~news_extractor.pipeline.runner.run_extraction`)
    via ``asyncio.run()`` and returns the invocation report.

Task naming convention::

    news_extractor.workers.tasks.<action>

Retry policy:
    ``max_retries=0``.  Per-item retries are owned by the retry ledger in the
    store; re-running the whole invocation on failure would only fetch the
    same items early.

Time limits:
    The soft limit raises ``SoftTimeLimitExceeded`` inside the task so the
    browser is torn down by its context manager; the hard limit kills the
    process.  Attempts started before either limit stay counted.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from news_extractor.config.pipeline import PipelineConfig
from news_extractor.config.settings import get_settings
from news_extractor.pipeline.runner import run_extraction
from news_extractor.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(
    name="news_extractor.workers.tasks.extract_pending_task",
    bind=True,
    acks_late=True,
    max_retries=0,
    soft_time_limit=240,
    time_limit=300,
)
def extract_pending_task(
    self: Any,
    batch_size: Optional[int] = None,
    max_attempts: Optional[int] = None,
) -> dict[str, Any]:
    """Extract text for the next batch of pending work items.

    Args:
        batch_size: Override for ``settings.batch_size``.
        max_attempts: Override for ``settings.max_attempts``.

    Returns:
        The invocation report (JSON-serialisable dict).
    """
    settings = get_settings()
    config = PipelineConfig.from_settings(settings).with_overrides(
        batch_size=batch_size, max_attempts=max_attempts
    )
    logger.info("extractor: extract_pending_task started (task=%s)", self.request.id)
    try:
        report = asyncio.run(run_extraction(settings, config))
    except Exception as exc:
        logger.error("extractor: extract_pending_task failed: %s", exc)
        raise

    logger.info(
        "extractor: extract_pending_task done succeeded=%s failed=%s",
        report.get("succeeded"),
        report.get("failed"),
    )
    return report
