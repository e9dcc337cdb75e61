"""Immutable runtime configuration for one extraction invocation.

:class:`PipelineConfig` is built once from :class:`Settings` and passed
explicitly to the session manager, dispatcher and runner, so no component
reads process-wide mutable state.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Optional

from news_extractor.scraper.config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_ITEM_TIMEOUT,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_CHARS,
    DEFAULT_PAGE_TIMEOUT,
    DEFAULT_SETTLE_DELAY,
    USER_AGENT,
)

if TYPE_CHECKING:
    from news_extractor.config.settings import Settings


@dataclass(frozen=True)
class PipelineConfig:
    """Effective tuning values for one invocation.

    Attributes:
        max_chars: Character budget for extracted text.
        max_attempts: Retry ceiling per work item.
        batch_size: Items fetched per invocation and pages run concurrently.
        page_timeout: Navigation timeout in seconds.
        settle_delay: Post-load wait in seconds before reading the DOM.
        item_timeout: Hard deadline in seconds for one item's page work.
        headless: Whether Chromium runs headless.
        user_agent: Identifying client string for navigations.
        outbox_path: Unflushed-outcome outbox file, or ``None`` if disabled.
    """

    max_chars: int = DEFAULT_MAX_CHARS
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    batch_size: int = DEFAULT_BATCH_SIZE
    page_timeout: float = DEFAULT_PAGE_TIMEOUT
    settle_delay: float = DEFAULT_SETTLE_DELAY
    item_timeout: float = DEFAULT_ITEM_TIMEOUT
    headless: bool = True
    user_agent: str = USER_AGENT
    outbox_path: Optional[str] = None

    @property
    def page_timeout_ms(self) -> int:
        return int(self.page_timeout * 1000)

    @property
    def settle_delay_ms(self) -> int:
        return int(self.settle_delay * 1000)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "PipelineConfig":
        """Build a config from validated application settings."""
        return cls(
            max_chars=settings.max_chars,
            max_attempts=settings.max_attempts,
            batch_size=settings.batch_size,
            page_timeout=settings.page_timeout_seconds,
            settle_delay=settings.settle_delay_seconds,
            item_timeout=settings.item_timeout_seconds,
            headless=settings.headless,
            user_agent=settings.user_agent,
            outbox_path=settings.outbox_file,
        )

    def with_overrides(self, **changes: object) -> "PipelineConfig":
        """Return a copy with the given non-``None`` fields replaced."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
