"""Configuration package for News Extractor.

Re-exports the most commonly used configuration symbols so that
callers can write::

    from news_extractor.config import get_settings, PipelineConfig

without needing to know which sub-module each symbol lives in.
"""

from __future__ import annotations

from news_extractor.config.pipeline import PipelineConfig
from news_extractor.config.settings import Settings, get_settings

__all__ = [
    "PipelineConfig",
    "Settings",
    "get_settings",
]
