"""News Extractor: crash-safe batch extraction of news article text.

Pending work items are read from a remote store, rendered in a headless
Chromium browser, reduced to bounded plain text, and written back with
retry accounting that survives process crashes.
"""

__version__ = "1.0.0"
