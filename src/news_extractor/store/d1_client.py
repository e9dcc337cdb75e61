"""Work-item store client for a Cloudflare D1 database over its HTTP API.

Each operation is one ``POST .../d1/database/{database_id}/query`` call with
a JSON body ``{"sql": ..., "params": [...]}``.  Every value travels as a bound
``?`` parameter; column names in UPDATE statements come only from
:data:`~news_extractor.store.base.UPDATABLE_FIELDS`.

Response envelope (abridged)::

    {
      "success": true,
      "errors": [],
      "result": [{"results": [...rows...], "success": true,
                  "meta": {"changes": 1, ...}}]
    }
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from news_extractor.core.exceptions import ItemNotFoundError, StoreError
from news_extractor.core.schemas.work_item import WorkItem, WorkStatus
from news_extractor.store.base import (
    RETRYABLE_STATUSES,
    SELECT_COLUMNS,
    WorkItemStore,
    normalise_update,
    rows_to_items,
    to_wire_value,
)

logger = logging.getLogger(__name__)

_FETCH_PENDING_SQL = f"""
SELECT {", ".join(SELECT_COLUMNS)}
FROM work_items
WHERE needs_extraction = 1
  AND source_url IS NOT NULL
  AND source_url <> ''
  AND (last_status = ? OR (last_status IN (?, ?) AND attempt_count < ?))
ORDER BY published_at DESC
LIMIT ?
""".strip()


class D1WorkItemStore(WorkItemStore):
    """SQL-over-HTTP client for the ``work_items`` table in Cloudflare D1.

    Args:
        account_id: Cloudflare account ID.
        database_id: D1 database UUID.
        api_token: API token sent as a bearer credential.
        api_base: Client API base URL.
        timeout: Per-request timeout in seconds.
        client: Optional pre-built ``httpx.AsyncClient`` (tests inject one);
            when given, the caller owns its lifecycle.
    """

    def __init__(
        self,
        account_id: str,
        database_id: str,
        api_token: str,
        *,
        api_base: str = "https://api.cloudflare.com/client/v4",
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._query_url = (
            f"{api_base.rstrip('/')}/accounts/{account_id}"
            f"/d1/database/{database_id}/query"
        )
        self._headers = {
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json",
        }
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _query(
        self,
        sql: str,
        params: list[Any],
        *,
        operation: str,
        item_id: str | None = None,
    ) -> dict[str, Any]:
        """Run one statement and return its result object.

        Raises:
            StoreError: On transport failure, non-2xx status, ``success:
                false`` or a malformed envelope.
        """
        try:
            response = await self._client.post(
                self._query_url,
                json={"sql": sql, "params": params},
                headers=self._headers,
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            raise StoreError(
                f"D1 {operation} transport error: {exc}",
                operation=operation,
                item_id=item_id,
            ) from exc

        if response.status_code >= 400:
            raise StoreError(
                f"D1 {operation} failed: HTTP {response.status_code}",
                operation=operation,
                item_id=item_id,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise StoreError(
                f"D1 {operation} returned non-JSON body",
                operation=operation,
                item_id=item_id,
            ) from exc

        if not isinstance(payload, dict) or not payload.get("success"):
            errors = payload.get("errors") if isinstance(payload, dict) else None
            detail = "unknown error"
            if errors and isinstance(errors[0], dict):
                detail = str(errors[0].get("message", detail))
            raise StoreError(
                f"D1 {operation} failed: {detail}",
                operation=operation,
                item_id=item_id,
            )

        results = payload.get("result")
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            raise StoreError(
                f"D1 {operation} returned an invalid result envelope",
                operation=operation,
                item_id=item_id,
            )
        return results[0]

    # ------------------------------------------------------------------
    # WorkItemStore
    # ------------------------------------------------------------------

    async def fetch_pending(self, limit: int, max_attempts: int) -> list[WorkItem]:
        params = [
            WorkStatus.PENDING.value,
            *RETRYABLE_STATUSES,
            max_attempts,
            limit,
        ]
        result = await self._query(_FETCH_PENDING_SQL, params, operation="fetch_pending")
        rows = result.get("results") or []
        items = rows_to_items(rows)
        logger.info("extractor: fetched %d pending work items from D1", len(items))
        return items

    async def apply_update(self, item_id: str, fields: Mapping[str, Any]) -> None:
        values = normalise_update(fields)
        if not values:
            return

        columns = sorted(values)
        set_clause = ", ".join(f"{column} = ?" for column in columns)
        params = [to_wire_value(values[column]) for column in columns]
        params.append(item_id)

        result = await self._query(
            f"UPDATE work_items SET {set_clause} WHERE id = ?",
            params,
            operation="apply_update",
            item_id=item_id,
        )
        changes = (result.get("meta") or {}).get("changes")
        if changes == 0:
            raise ItemNotFoundError(
                f"work item {item_id} not found",
                operation="apply_update",
                item_id=item_id,
            )
