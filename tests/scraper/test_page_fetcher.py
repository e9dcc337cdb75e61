"""Unit tests for the page fetcher (navigation + extraction outcome mapping)."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from news_extractor.config.pipeline import PipelineConfig
from news_extractor.pipeline.outcomes import Extracted, Failed
from news_extractor.scraper.page_fetcher import fetch_and_extract

_URL = "https://news.example.com/articles/1"
_HTML = "<html><body><nav>Menu</nav><p>Rendered article text.</p></body></html>"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_page(html: str = _HTML, status: int | None = 200) -> Any:
    page = MagicMock()
    response = None
    if status is not None:
        response = MagicMock()
        response.status = status
    page.goto = AsyncMock(return_value=response)
    page.wait_for_timeout = AsyncMock()
    page.content = AsyncMock(return_value=html)
    return page


def _make_session(page: Any, config: PipelineConfig | None = None) -> Any:
    session = MagicMock()
    session.config = config or PipelineConfig(settle_delay=0.0)

    @asynccontextmanager
    async def _new_page():
        yield page

    session.new_page = _new_page
    return session


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
class TestFetchAndExtract:
    async def test_success_returns_extracted_text(self) -> None:
        page = _make_page()
        outcome = await fetch_and_extract(_make_session(page), _URL)
        assert outcome == Extracted("Rendered article text.")

    async def test_navigates_with_network_idle_and_page_timeout(self) -> None:
        page = _make_page()
        config = PipelineConfig(page_timeout=7.5, settle_delay=0.0)
        await fetch_and_extract(_make_session(page, config), _URL)
        page.goto.assert_awaited_once_with(
            _URL, wait_until="networkidle", timeout=7500
        )

    async def test_waits_settle_delay_before_reading_dom(self) -> None:
        page = _make_page()
        config = PipelineConfig(settle_delay=2.0)
        await fetch_and_extract(_make_session(page, config), _URL)
        page.wait_for_timeout.assert_awaited_once_with(2000)

    async def test_zero_settle_delay_skips_wait(self) -> None:
        page = _make_page()
        await fetch_and_extract(_make_session(page), _URL)
        page.wait_for_timeout.assert_not_awaited()

    async def test_respects_max_chars(self) -> None:
        page = _make_page(html="<body><p>" + "x" * 500 + "</p></body>")
        config = PipelineConfig(max_chars=100, settle_delay=0.0)
        outcome = await fetch_and_extract(_make_session(page, config), _URL)
        assert isinstance(outcome, Extracted)
        assert len(outcome.text) == 100

    async def test_navigation_timeout_returns_failed(self) -> None:
        page = _make_page()
        page.goto = AsyncMock(side_effect=PlaywrightTimeoutError("Timeout 10000ms exceeded."))
        outcome = await fetch_and_extract(_make_session(page), _URL)
        assert outcome == Failed("navigation_timeout")
        page.content.assert_not_awaited()

    async def test_http_error_status_returns_failed(self) -> None:
        page = _make_page(status=404)
        outcome = await fetch_and_extract(_make_session(page), _URL)
        assert outcome == Failed("http_404")

    async def test_missing_response_is_not_an_error(self) -> None:
        page = _make_page(status=None)
        outcome = await fetch_and_extract(_make_session(page), _URL)
        assert isinstance(outcome, Extracted)

    async def test_empty_extraction_returns_fetch_failed(self) -> None:
        page = _make_page(html="<html><body><script>app()</script></body></html>")
        outcome = await fetch_and_extract(_make_session(page), _URL)
        assert outcome == Failed("fetch_failed")

    async def test_unexpected_errors_propagate(self) -> None:
        page = _make_page()
        page.content = AsyncMock(side_effect=RuntimeError("Target page has been closed"))
        with pytest.raises(RuntimeError, match="Target page"):
            await fetch_and_extract(_make_session(page), _URL)
