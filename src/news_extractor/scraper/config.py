"""Constants and tuning parameters for the browser extraction pipeline.

These are defaults only.  Every value here can be overridden through
:class:`~news_extractor.config.settings.Settings`; runtime code receives the
effective values through :class:`~news_extractor.config.pipeline.PipelineConfig`
and never reads these module attributes directly.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Content budget and retry ceiling
# ---------------------------------------------------------------------------

#: Maximum characters of extracted text stored per work item (10 KB).
DEFAULT_MAX_CHARS: int = 10 * 1024

#: Attempts after which a failing work item is given up.
DEFAULT_MAX_ATTEMPTS: int = 3

# ---------------------------------------------------------------------------
# Throughput and timing
# ---------------------------------------------------------------------------

#: Work items fetched per invocation, and concurrent pages per browser.
DEFAULT_BATCH_SIZE: int = 2

#: Navigation timeout per page (seconds).  Converted to milliseconds for
#: Playwright.
DEFAULT_PAGE_TIMEOUT: float = 10.0

#: Extra wait after the network-idle signal for late-rendered content (seconds).
DEFAULT_SETTLE_DELAY: float = 2.0

#: Hard deadline for one work item's page work: navigation, settle delay,
#: and extraction together (seconds).
DEFAULT_ITEM_TIMEOUT: float = 20.0

# ---------------------------------------------------------------------------
# Identification
# ---------------------------------------------------------------------------

#: User-agent string sent with every page navigation.
USER_AGENT: str = (
    "NewsExtractor/1.0 (+https://github.com/news-extractor; "
    "content extraction bot)"
)

#: Extra header attached to every page request so site operators can
#: identify (and filter) extraction traffic.
IDENTIFICATION_HEADER: tuple[str, str] = ("X-News-Extractor", "1.0")

# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

#: Maximum length of an exception message embedded in ``last_error``.
MAX_ERROR_MESSAGE_CHARS: int = 100

#: Default location of the unflushed-outcome outbox (JSON lines).
DEFAULT_OUTBOX_PATH: str = "./data/unflushed_outcomes.jsonl"
