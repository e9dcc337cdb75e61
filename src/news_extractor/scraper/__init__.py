"""Headless-browser page rendering and text extraction.

Sub-modules:
- ``config``             — constants and tuning defaults
- ``browser_session``    — scoped Playwright/Chromium lifecycle
- ``page_fetcher``       — render one URL and extract its text
- ``content_extractor``  — deterministic DOM walk with skip rules
"""
