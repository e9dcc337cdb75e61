"""Application-wide exception hierarchy for News Extractor.

All custom exceptions subclass ``NewsExtractorError``, enabling
consistent error handling and structured logging across the pipeline.

Hierarchy::

    NewsExtractorError
    ├── StoreError                (operation, item_id)
    │   └── ItemNotFoundError
    ├── BrowserLaunchError
    ├── ExtractionError
    │   ├── NavigationTimeout     (url)
    │   └── NoContentExtracted    (url)
    └── InvalidTransitionError    (source, target)

Only ``BrowserLaunchError`` (and a ``StoreError`` while fetching the batch)
escapes an invocation.  Per-item failures are carried as outcome values; see
:mod:`news_extractor.pipeline.outcomes`.
"""

from __future__ import annotations


class NewsExtractorError(Exception):
    """Base class for all News Extractor exceptions.

    All application-specific exceptions inherit from this class so that
    callers can catch the entire hierarchy with a single ``except`` clause
    when needed.
    """


# ---------------------------------------------------------------------------
# Store exceptions
# ---------------------------------------------------------------------------


class StoreError(NewsExtractorError):
    """Raised when a query or update against the work-item store fails.

    Covers transport failures, non-success responses, malformed payloads and
    updates that matched no row.  An update that raised this error was not
    applied: every update is a single remote statement.

    Args:
        message: Human-readable description of the failure.
        operation: ``"fetch_pending"`` or ``"apply_update"``.
        item_id: Work item targeted by the failed update, if any.
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        item_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.item_id = item_id


class ItemNotFoundError(StoreError):
    """Raised when an update matched no row (the item no longer exists)."""


# ---------------------------------------------------------------------------
# Browser exceptions
# ---------------------------------------------------------------------------


class BrowserLaunchError(NewsExtractorError):
    """Raised when the headless browser cannot be started.

    Fatal for the whole invocation.  It is raised before any retry-ledger
    write, so no work item state is touched.
    """


# ---------------------------------------------------------------------------
# Extraction exceptions
# ---------------------------------------------------------------------------


class ExtractionError(NewsExtractorError):
    """Base class for per-page extraction failures.

    Args:
        message: Description of the failure.
        url: URL of the page being extracted.
    """

    #: Failure code recorded in ``last_error`` for this error.
    code: str = "fetch_error"

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class NavigationTimeout(ExtractionError):
    """Raised when a page does not finish loading within the page timeout."""

    code = "navigation_timeout"


class NoContentExtracted(ExtractionError):
    """Raised when a page loaded but the DOM walk produced no text."""

    code = "fetch_failed"


# ---------------------------------------------------------------------------
# Lifecycle exceptions
# ---------------------------------------------------------------------------


class InvalidTransitionError(NewsExtractorError):
    """Raised when a work item status change is not allowed by the lifecycle.

    Args:
        source: Current status value.
        target: Requested status value.
    """

    def __init__(self, source: str, target: str) -> None:
        super().__init__(f"Invalid work item transition: {source} -> {target}")
        self.source = source
        self.target = target
