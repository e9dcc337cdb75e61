"""Render one article URL in the shared browser and extract its text.

Navigation waits for the ``"networkidle"`` signal, then an extra fixed
settle delay for late-rendered content, then reads the rendered DOM and runs
:func:`~news_extractor.scraper.content_extractor.extract_from_html`.

Expected failures (navigation timeout, HTTP error status, empty page) come
back as :class:`~news_extractor.pipeline.outcomes.Failed`.  Anything else
propagates to the dispatcher, which records it as a ``fetch_error``.
"""

from __future__ import annotations

import logging

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from news_extractor.core.exceptions import (
    ExtractionError,
    NavigationTimeout,
    NoContentExtracted,
)
from news_extractor.pipeline.outcomes import AttemptOutcome, Extracted, Failed
from news_extractor.scraper.browser_session import BrowserSession
from news_extractor.scraper.content_extractor import extract_from_html

logger = logging.getLogger(__name__)


class _HttpStatusError(ExtractionError):
    def __init__(self, status: int, url: str) -> None:
        super().__init__(f"HTTP {status}", url=url)
        self.code = f"http_{status}"


async def _render_and_extract(session: BrowserSession, url: str) -> str:
    config = session.config
    async with session.new_page() as page:
        try:
            response = await page.goto(
                url,
                wait_until="networkidle",
                timeout=config.page_timeout_ms,
            )
        except PlaywrightTimeoutError as exc:
            raise NavigationTimeout(str(exc), url=url) from exc

        if response is not None and response.status >= 400:
            raise _HttpStatusError(response.status, url)

        if config.settle_delay_ms:
            await page.wait_for_timeout(config.settle_delay_ms)

        html = await page.content()

    text = extract_from_html(html, config.max_chars)
    if not text:
        raise NoContentExtracted("DOM walk produced no text", url=url)
    return text


async def fetch_and_extract(session: BrowserSession, url: str) -> AttemptOutcome:
    """Navigate to ``url`` in an isolated page and extract bounded text.

    Args:
        session: The invocation's browser session.
        url: Article URL.

    Returns:
        :class:`Extracted` with the text, or :class:`Failed` with a failure
        code (``navigation_timeout``, ``http_<status>``, ``fetch_failed``).
    """
    logger.debug("extractor: navigating to %s", url)
    try:
        text = await _render_and_extract(session, url)
    except ExtractionError as exc:
        logger.info("extractor: %s for %s", exc.code, url)
        return Failed(exc.code)

    logger.debug("extractor: extracted %d chars from %s", len(text), url)
    return Extracted(text)
