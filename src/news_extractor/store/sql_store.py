"""Work-item store client backed by a direct SQLAlchemy async connection.

Used when the work-item table lives in a database this process can reach
directly (PostgreSQL via ``asyncpg`` in deployments, SQLite via ``aiosqlite``
in tests).  Statements are built with SQLAlchemy Core, so every value is a
bound parameter and each update is one ``UPDATE ... WHERE id = :id``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from news_extractor.core.database import build_engine
from news_extractor.core.exceptions import ItemNotFoundError, StoreError
from news_extractor.core.models.work_items import WorkItemRecord
from news_extractor.core.schemas.work_item import WorkItem, WorkStatus
from news_extractor.store.base import (
    RETRYABLE_STATUSES,
    SELECT_COLUMNS,
    WorkItemStore,
    normalise_update,
    rows_to_items,
)

logger = logging.getLogger(__name__)

_work_items = WorkItemRecord.__table__


class SqlWorkItemStore(WorkItemStore):
    """SQLAlchemy Core implementation of :class:`WorkItemStore`.

    Args:
        engine: Async engine bound to the database holding ``work_items``.
        owns_engine: Dispose the engine in :meth:`aclose`.
    """

    def __init__(self, engine: AsyncEngine, *, owns_engine: bool = False) -> None:
        self._engine = engine
        self._owns_engine = owns_engine

    @classmethod
    def from_url(cls, database_url: str) -> "SqlWorkItemStore":
        """Create a store with its own engine for ``database_url``."""
        return cls(build_engine(database_url), owns_engine=True)

    async def aclose(self) -> None:
        if self._owns_engine:
            await self._engine.dispose()

    async def fetch_pending(self, limit: int, max_attempts: int) -> list[WorkItem]:
        stmt = (
            select(*(_work_items.c[name] for name in SELECT_COLUMNS))
            .where(
                _work_items.c.needs_extraction.is_(True),
                _work_items.c.source_url.is_not(None),
                _work_items.c.source_url != "",
                or_(
                    _work_items.c.last_status == WorkStatus.PENDING.value,
                    and_(
                        _work_items.c.last_status.in_(RETRYABLE_STATUSES),
                        _work_items.c.attempt_count < max_attempts,
                    ),
                ),
            )
            .order_by(_work_items.c.published_at.desc())
            .limit(limit)
        )
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(stmt)
                rows = [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as exc:
            raise StoreError(
                f"fetch_pending failed: {exc}", operation="fetch_pending"
            ) from exc

        items = rows_to_items(rows)
        logger.info("extractor: fetched %d pending work items", len(items))
        return items

    async def apply_update(self, item_id: str, fields: Mapping[str, Any]) -> None:
        values = normalise_update(fields)
        if not values:
            return

        stmt = update(_work_items).where(_work_items.c.id == item_id).values(**values)
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(
                f"apply_update failed for {item_id}: {exc}",
                operation="apply_update",
                item_id=item_id,
            ) from exc

        if result.rowcount == 0:
            raise ItemNotFoundError(
                f"work item {item_id} not found",
                operation="apply_update",
                item_id=item_id,
            )
