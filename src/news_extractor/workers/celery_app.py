"""Celery application for News Extractor.

Configures the broker, result backend and serialization.  All configuration
values are sourced from ``Settings`` so that no secrets or
environment-specific values are hard-coded here.

Scheduling is left to whatever triggers the task (Celery Beat configured by
the deployment, an external cron, ``celery call``); this module defines no
beat schedule.

Usage (starting a worker)::

    celery -A news_extractor.workers.celery_app worker --loglevel=info

Usage (triggering one invocation)::

    from news_extractor.workers.celery_app import celery_app

    celery_app.send_task("news_extractor.workers.tasks.extract_pending_task")
"""

from __future__ import annotations

import logging

from celery import Celery
from celery.signals import worker_process_init
from dotenv import load_dotenv

_logger = logging.getLogger(__name__)

# Load .env into os.environ before settings are read so that the worker and
# any subprocesses it spawns see the same configuration.
load_dotenv()

from news_extractor.config.settings import get_settings  # noqa: E402

settings = get_settings()

#: The global Celery application instance.
celery_app = Celery(
    "news_extractor",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["news_extractor.workers.tasks"],
)

# ---------------------------------------------------------------------------
# Core configuration
# ---------------------------------------------------------------------------

celery_app.conf.update(
    # Serialization: task arguments and the returned report are plain JSON.
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    # Acknowledge only after the task has completed so a worker crash
    # re-delivers the invocation.  Attempts already counted stay counted.
    task_acks_late=True,
    # One invocation per worker process at a time; each owns a browser.
    worker_prefetch_multiplier=1,
    # Keep invocation reports for 24 hours.
    result_expires=86_400,
    task_routes={
        "news_extractor.workers.tasks.extract_pending_task": {"queue": "extraction"},
    },
)


# ---------------------------------------------------------------------------
# Logging setup per worker process
# ---------------------------------------------------------------------------
@worker_process_init.connect
def _configure_worker_logging(**kwargs: object) -> None:  # noqa: ARG001
    """Install the structlog configuration in each forked worker process."""
    from news_extractor.core.logging_config import configure_logging  # noqa: PLC0415

    configure_logging(settings.log_level)
    _logger.debug("extractor: worker process logging configured")
