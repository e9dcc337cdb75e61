"""Bounded visible-text extraction from rendered page HTML.

The browser renders the page; this module turns the rendered document into
plain text.  It is pure and deterministic: the same HTML and budget always
produce the same output, with no I/O, so it is tested without a browser.

Algorithm (:func:`extract_text`):

1. Depth-first walk starting at ``<body>``.
2. Elements whose tag is in :attr:`SkipRules.tags` are skipped with their
   whole subtree.  Otherwise, elements whose ``class`` + ``id`` match a skip
   token (:meth:`SkipRules.matches`) are skipped with their subtree.
3. Each stripped, non-empty text node is appended to the output buffer and
   its length added to the character counter.
4. The walk stops as soon as the counter reaches ``max_chars``.
5. The buffer is joined with single spaces and truncated to ``max_chars``.
6. An empty buffer yields ``None``.

Parsing uses BeautifulSoup with the ``html.parser`` backend; character
references are decoded by the parser, so the output contains no HTML
entities.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Union

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Skip rules
# ---------------------------------------------------------------------------

_DEFAULT_SKIP_TAGS: frozenset[str] = frozenset(
    {
        "script", "style", "noscript", "title", "template",
        "nav", "header", "footer", "aside", "menu", "form",
        "svg", "canvas", "iframe", "video", "audio",
        "button", "input", "select", "textarea",
    }
)

_DEFAULT_SKIP_TOKENS: frozenset[str] = frozenset(
    {
        "nav", "menu", "header", "footer", "sidebar", "aside",
        "advertisement", "ad", "ads", "promo", "banner", "widget",
        "share", "social", "comment", "comments", "related", "recommend",
    }
)

_TOKEN_SPLIT_RE = re.compile(r"\s+")
_PART_SPLIT_RE = re.compile(r"[-_]")


@dataclass(frozen=True)
class SkipRules:
    """Static rules identifying DOM subtrees that carry no article text.

    Attributes:
        tags: Lower-case tag names whose subtree is always skipped.
        tokens: Lower-case class/id markers (navigation, ads, promos, social
            widgets, comments, related content).  Matched against whole
            class/id tokens and against the leading ``-``/``_``-separated
            part of a token only, so ``post-header`` and ``article-footer``
            are kept while ``nav-primary`` and ``ad-slot`` are skipped.
    """

    tags: frozenset[str] = _DEFAULT_SKIP_TAGS
    tokens: frozenset[str] = _DEFAULT_SKIP_TOKENS

    def matches(self, class_and_id: str) -> bool:
        """Return ``True`` if any class/id token marks the element as boilerplate.

        ``"nav-primary"`` matches (leading part ``nav``); ``"navigation-free"``,
        ``"post-header"`` and ``"shared"`` do not.  Case-insensitive.
        """
        for token in _TOKEN_SPLIT_RE.split(class_and_id.lower()):
            if not token:
                continue
            if token in self.tokens:
                return True
            if _PART_SPLIT_RE.split(token, maxsplit=1)[0] in self.tokens:
                return True
        return False


DEFAULT_SKIP_RULES = SkipRules()

# String nodes that are markup, not visible text.
_NON_TEXT_STRINGS = (Comment, CData, Declaration, Doctype, ProcessingInstruction)


def parse_html(html: str) -> BeautifulSoup:
    """Parse rendered HTML into a BeautifulSoup document."""
    return BeautifulSoup(html, "html.parser")


def _class_and_id(element: Tag) -> str:
    classes = element.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    element_id = element.get("id") or ""
    return " ".join([*classes, str(element_id)])


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


class _TextBudget:
    """Ordered text buffer with a running character counter."""

    def __init__(self, max_chars: int) -> None:
        self.max_chars = max_chars
        self.chunks: list[str] = []
        self.count = 0

    @property
    def exhausted(self) -> bool:
        return self.count >= self.max_chars

    def add(self, text: str) -> None:
        self.chunks.append(text)
        self.count += len(text)

    def render(self) -> str | None:
        text = " ".join(self.chunks)[: self.max_chars]
        return text or None


def extract_text(
    document: Tag,
    max_chars: int,
    rules: SkipRules = DEFAULT_SKIP_RULES,
) -> str | None:
    """Extract bounded visible text from a parsed document.

    Args:
        document: Soup returned by :func:`parse_html` (or any element).
        max_chars: Character budget; output is never longer than this.
        rules: Skip tags and class/id tokens.

    Returns:
        Text of at most ``max_chars`` characters, or ``None`` if the page
        produced no text.
    """
    if max_chars <= 0:
        return None

    start = document.body or document
    budget = _TextBudget(max_chars)
    stack: list[Union[Tag, NavigableString]] = [start]

    while stack and not budget.exhausted:
        node = stack.pop()
        if isinstance(node, NavigableString):
            if isinstance(node, _NON_TEXT_STRINGS):
                continue
            text = node.strip()
            if text:
                budget.add(text)
            continue
        if not isinstance(node, Tag):
            continue
        # The soup itself is named "[document]" and never matches a rule.
        if node.name in rules.tags:
            continue
        class_and_id = _class_and_id(node)
        if class_and_id.strip() and rules.matches(class_and_id):
            continue
        stack.extend(reversed(node.contents))

    return budget.render()


def extract_from_html(
    html: str,
    max_chars: int,
    rules: SkipRules = DEFAULT_SKIP_RULES,
) -> str | None:
    """Parse rendered HTML and extract bounded visible text.

    Args:
        html: Serialized DOM of the rendered page (e.g. ``page.content()``).
        max_chars: Character budget.
        rules: Skip tags and class/id tokens.

    Returns:
        Extracted text, or ``None`` if nothing was extracted.
    """
    if not html:
        return None
    text = extract_text(parse_html(html), max_chars, rules)
    logger.debug(
        "extractor: extracted %d chars (budget %d)", len(text or ""), max_chars
    )
    return text
