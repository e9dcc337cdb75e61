"""Playwright browser session scoped to one batch invocation.

Exactly one Chromium process is launched per invocation and it is closed on
every exit path, including when the batch body raises.  Item tasks share the
browser handle read-only: each one only asks it for a new, isolated page.

Install Playwright and download the Chromium browser binary::

    pip install playwright>=1.48
    playwright install chromium
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from playwright.async_api import Browser, Page, async_playwright

from news_extractor.config.pipeline import PipelineConfig
from news_extractor.core.exceptions import BrowserLaunchError
from news_extractor.scraper.config import IDENTIFICATION_HEADER

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BrowserSession:
    """Handle on the invocation's browser, given to every item task.

    Args:
        browser: Launched Playwright browser.
        config: Pipeline configuration (user agent, timeouts).
    """

    def __init__(self, browser: Browser, config: PipelineConfig) -> None:
        self._browser = browser
        self._config = config

    @property
    def config(self) -> PipelineConfig:
        return self._config

    @asynccontextmanager
    async def new_page(self) -> AsyncIterator[Page]:
        """Open a page in its own browser context and close it afterwards.

        The page carries the fixed identifying user agent and header.  It is
        closed in a ``finally`` block, so a timed-out or failed item never
        leaks a tab into its siblings' browser.
        """
        header_name, header_value = IDENTIFICATION_HEADER
        context = await self._browser.new_context(
            user_agent=self._config.user_agent,
            extra_http_headers={header_name: header_value},
        )
        try:
            page = await context.new_page()
            page.set_default_navigation_timeout(self._config.page_timeout_ms)
            try:
                yield page
            finally:
                await page.close()
        finally:
            await context.close()


@asynccontextmanager
async def browser_session(config: PipelineConfig) -> AsyncIterator[BrowserSession]:
    """Launch headless Chromium for one invocation and always tear it down.

    Args:
        config: Pipeline configuration.

    Yields:
        A :class:`BrowserSession` bound to the launched browser.

    Raises:
        BrowserLaunchError: If Playwright or Chromium cannot be started.
            Nothing has been attempted at that point.
    """
    playwright = await _start_playwright()
    try:
        try:
            browser = await playwright.chromium.launch(headless=config.headless)
        except Exception as exc:
            raise BrowserLaunchError(f"chromium launch failed: {exc}") from exc

        logger.info("extractor: browser launched (headless=%s)", config.headless)
        try:
            yield BrowserSession(browser, config)
        finally:
            await browser.close()
            logger.info("extractor: browser closed")
    finally:
        await playwright.stop()


async def _start_playwright() -> Any:
    try:
        return await async_playwright().start()
    except Exception as exc:
        raise BrowserLaunchError(f"playwright start failed: {exc}") from exc


async def with_session(
    config: PipelineConfig,
    batch_fn: Callable[[BrowserSession], Awaitable[T]],
) -> T:
    """Run ``batch_fn`` inside a browser session and return its result.

    The browser is torn down after ``batch_fn`` completes or raises.
    """
    async with browser_session(config) as session:
        return await batch_fn(session)
