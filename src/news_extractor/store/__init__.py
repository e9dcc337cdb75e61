"""Work-item store clients.

Sub-modules:
- ``base``       — abstract :class:`WorkItemStore` and shared helpers
- ``d1_client``  — Cloudflare D1 SQL-over-HTTP client (``httpx``)
- ``sql_store``  — direct SQLAlchemy async client

Use :func:`build_store` to get the client selected by settings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from news_extractor.store.base import WorkItemStore

if TYPE_CHECKING:
    from news_extractor.config.settings import Settings


def build_store(settings: "Settings") -> WorkItemStore:
    """Return the store client selected by ``settings.store_backend``."""
    if settings.store_backend == "sql":
        from news_extractor.store.sql_store import SqlWorkItemStore  # noqa: PLC0415

        return SqlWorkItemStore.from_url(settings.database_url)

    from news_extractor.store.d1_client import D1WorkItemStore  # noqa: PLC0415

    return D1WorkItemStore(
        account_id=settings.d1_account_id,
        database_id=settings.d1_database_id,
        api_token=settings.d1_api_token,
        api_base=settings.d1_api_base,
        timeout=settings.d1_request_timeout_seconds,
    )


__all__ = ["WorkItemStore", "build_store"]
