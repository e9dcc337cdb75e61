"""Shared pytest fixtures for News Extractor tests.

Fixture summary
---------------
pipeline_config — PipelineConfig with fast timings and no outbox.
sqlite_engine   — Async SQLite engine (aiosqlite) with ``work_items`` created.
sql_store       — SqlWorkItemStore bound to ``sqlite_engine``.
memory_store    — In-memory WorkItemStore with failure injection.
insert_rows     — Coroutine fixture inserting row dicts into ``sqlite_engine``.

No test needs a browser, a network connection or a Cloudflare account:
Playwright objects are mocked with ``unittest.mock`` and the D1 HTTP API is
mocked with ``respx``.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

# ---------------------------------------------------------------------------
# Test environment bootstrap
# ---------------------------------------------------------------------------
# Set required env vars before any application modules are imported so that
# Settings() does not raise a ValidationError during collection (the Celery
# app reads settings at import time).

_TEST_ENV_DEFAULTS: dict[str, str] = {
    "STORE_BACKEND": "d1",
    "D1_ACCOUNT_ID": "test-account",
    "D1_DATABASE_ID": "test-database",
    "D1_API_TOKEN": "test-token-not-a-secret",
    "OUTBOX_PATH": "",
    "CELERY_BROKER_URL": "memory://",
    "CELERY_RESULT_BACKEND": "cache+memory://",
}

for _key, _default in _TEST_ENV_DEFAULTS.items():
    os.environ.setdefault(_key, _default)

# ---------------------------------------------------------------------------
# Application imports (after env bootstrap)
# ---------------------------------------------------------------------------

from news_extractor.config.pipeline import PipelineConfig  # noqa: E402
from news_extractor.config.settings import get_settings  # noqa: E402
from news_extractor.core.models import Base, WorkItemRecord  # noqa: E402
from news_extractor.store.sql_store import SqlWorkItemStore  # noqa: E402
from tests.factories.stores import InMemoryWorkItemStore  # noqa: E402

# Clear the lru_cache so Settings() re-reads from the patched environment.
get_settings.cache_clear()


@pytest.fixture
def pipeline_config() -> PipelineConfig:
    """Return a config with fast timings, three-way concurrency and no outbox."""
    return PipelineConfig(
        max_chars=1_000,
        max_attempts=3,
        batch_size=3,
        page_timeout=1.0,
        settle_delay=0.0,
        item_timeout=2.0,
        outbox_path=None,
    )


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Yield an aiosqlite engine on a per-test database file.

    Yields:
        AsyncEngine with the ``work_items`` table created.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'work_items.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def sql_store(sqlite_engine: AsyncEngine) -> SqlWorkItemStore:
    return SqlWorkItemStore(sqlite_engine)


@pytest.fixture
def insert_rows(
    sqlite_engine: AsyncEngine,
) -> Callable[[list[dict[str, Any]]], Awaitable[None]]:
    """Return a coroutine function that inserts work-item row dicts."""

    async def _insert(rows: list[dict[str, Any]]) -> None:
        async with sqlite_engine.begin() as conn:
            await conn.execute(insert(WorkItemRecord.__table__), rows)

    return _insert


@pytest.fixture
def memory_store() -> InMemoryWorkItemStore:
    return InMemoryWorkItemStore()
