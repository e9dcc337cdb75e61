"""Unit tests for the content extractor module.

Tests the bounded DOM walk on synthetic news-page HTML: the character budget,
skip tags, class/id skip tokens, entity decoding and determinism.
"""

from __future__ import annotations

import pytest

from news_extractor.scraper.content_extractor import (
    DEFAULT_SKIP_RULES,
    SkipRules,
    extract_from_html,
    extract_text,
    parse_html,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

_ARTICLE_HTML = """
<!DOCTYPE html>
<html lang="en">
<head><title>Harbour expansion approved | Example News</title>
<style>body { color: red; }</style></head>
<body>
  <header class="site-header"><a href="/">Example News</a></header>
  <nav><ul><li>Home</li><li>World</li></ul></nav>
  <article>
    <h1>Harbour expansion approved</h1>
    <p>The city council approved the harbour expansion on Tuesday.</p>
    <div class="share-buttons">Share on social media</div>
    <p>Construction starts next spring.</p>
  </article>
  <aside>Most read</aside>
  <div id="comments">Reader comments</div>
  <footer>Copyright</footer>
  <script>var tracking = 1;</script>
</body>
</html>
"""


# ---------------------------------------------------------------------------
# SkipRules
# ---------------------------------------------------------------------------


class TestSkipRules:
    @pytest.mark.parametrize(
        "class_and_id",
        [
            "nav-primary",
            "sidebar",
            "AD",
            "ad-slot",
            "promo_box",
            "related-stories wide",
            " comments",
        ],
    )
    def test_matches_boilerplate_markers(self, class_and_id: str) -> None:
        assert DEFAULT_SKIP_RULES.matches(class_and_id) is True

    @pytest.mark.parametrize(
        "class_and_id",
        ["navigation-free", "shared", "article-body", "headline", "", "adventure",
         "post-header", "article-footer"],
    )
    def test_keeps_content_markers(self, class_and_id: str) -> None:
        assert DEFAULT_SKIP_RULES.matches(class_and_id) is False

    def test_custom_rules(self) -> None:
        rules = SkipRules(tags=frozenset({"p"}), tokens=frozenset({"paywall"}))
        assert rules.matches("paywall-overlay") is True
        assert rules.matches("nav") is False


# ---------------------------------------------------------------------------
# Walk over the parsed document
# ---------------------------------------------------------------------------


class TestExtractText:
    def test_void_elements_do_not_swallow_siblings(self) -> None:
        soup = parse_html("<body><p>a<br>b</p><img src='x'><p>c</p></body>")
        assert extract_text(soup, 100) == "a b c"

    def test_stray_end_tag_ignored(self) -> None:
        soup = parse_html("<body></span><p>kept</p></body>")
        assert extract_text(soup, 100) == "kept"

    def test_uppercase_attributes_still_match_skip_tokens(self) -> None:
        soup = parse_html('<body><div CLASS="Nav-Primary" ID="Top">menu</div><p>x</p></body>')
        assert extract_text(soup, 100) == "x"

    def test_multi_valued_class_matched_per_token(self) -> None:
        soup = parse_html('<body><div class="wide promo">Buy now</div><p>story</p></body>')
        assert extract_text(soup, 100) == "story"

    def test_id_alone_can_skip_subtree(self) -> None:
        soup = parse_html('<body><section id="sidebar">links</section><p>story</p></body>')
        assert extract_text(soup, 100) == "story"

    def test_comments_and_doctype_contribute_nothing(self) -> None:
        soup = parse_html("<!DOCTYPE html><body><!-- tracking pixel --><p>story</p></body>")
        assert extract_text(soup, 100) == "story"

    def test_walk_can_start_from_any_element(self) -> None:
        soup = parse_html("<body><article><p>inner</p></article><p>outer</p></body>")
        assert extract_text(soup.article, 100) == "inner"

    def test_post_header_class_is_kept(self) -> None:
        soup = parse_html(
            '<body><div class="post-header"><h1>Headline</h1></div><p>story</p></body>'
        )
        assert extract_text(soup, 100) == "Headline story"


# ---------------------------------------------------------------------------
# extract_from_html
# ---------------------------------------------------------------------------


class TestExtractFromHtml:
    def test_extracts_article_text_only(self) -> None:
        result = extract_from_html(_ARTICLE_HTML, 10_240)
        assert result == (
            "Harbour expansion approved "
            "The city council approved the harbour expansion on Tuesday. "
            "Construction starts next spring."
        )

    def test_skipped_subtrees_contribute_nothing(self) -> None:
        result = extract_from_html(_ARTICLE_HTML, 10_240)
        assert result is not None
        for boilerplate in ("Home", "Share", "Most read", "Reader comments",
                            "Copyright", "tracking", "color"):
            assert boilerplate not in result

    def test_nav_primary_class_contributes_zero_characters(self) -> None:
        html = (
            "<body><div class='nav-primary'>" + "menu entry " * 20 + "</div>"
            "<p>Body text.</p></body>"
        )
        assert extract_from_html(html, 10_240) == "Body text."

    def test_budget_of_100_on_500_chars_yields_exactly_100(self) -> None:
        html = "<body><p>" + "a" * 500 + "</p></body>"
        result = extract_from_html(html, 100)
        assert result is not None
        assert len(result) == 100

    def test_output_never_exceeds_budget(self) -> None:
        paragraphs = "".join(f"<p>Paragraph number {n} of the story.</p>" for n in range(200))
        for budget in (1, 7, 50, 333, 1024):
            result = extract_from_html(f"<body>{paragraphs}</body>", budget)
            assert result is not None
            assert len(result) <= budget

    def test_traversal_stops_once_budget_reached(self) -> None:
        html = "<body><p>first</p><p>second</p><p>third</p></body>"
        # "first" alone exhausts a 5-char budget; nothing else is appended.
        assert extract_from_html(html, 5) == "first"

    def test_entities_decoded(self) -> None:
        html = "<body><p>Fish &amp; chips &lt;3 &#8212; caf&eacute;</p></body>"
        assert extract_from_html(html, 100) == "Fish & chips <3 — café"

    def test_whitespace_only_text_nodes_ignored(self) -> None:
        html = "<body>\n   <p>  one  </p>\n\t<p>two</p>   </body>"
        assert extract_from_html(html, 100) == "one two"

    def test_empty_html_returns_none(self) -> None:
        assert extract_from_html("", 100) is None

    def test_page_without_text_returns_none(self) -> None:
        html = "<html><body><div id='root'></div><script>app()</script></body></html>"
        assert extract_from_html(html, 100) is None

    def test_zero_budget_returns_none(self) -> None:
        assert extract_from_html("<body><p>text</p></body>", 0) is None

    def test_document_without_body_walks_from_root(self) -> None:
        assert extract_from_html("<p>fragment</p>", 100) == "fragment"

    def test_head_content_outside_body_ignored(self) -> None:
        html = "<html><head><meta name='x'><title>T</title></head><body><p>B</p></body></html>"
        assert extract_from_html(html, 100) == "B"

    def test_deterministic(self) -> None:
        results = {extract_from_html(_ARTICLE_HTML, 64) for _ in range(5)}
        assert len(results) == 1

    def test_deeply_nested_markup_does_not_recurse(self) -> None:
        depth = 2_000
        html = "<body>" + "<div>" * depth + "deep" + "</div>" * depth + "</body>"
        assert extract_from_html(html, 100) == "deep"
