"""Tests for strategy resolution and cascades."""

import pytest

from stratachunk.chunking.errors import UnknownStrategyError
from stratachunk.chunking.strategies import (
    DocumentFormat,
    HtmlStrategy,
    MarkdownStrategy,
    TextStrategy,
    default_strategy,
    list_strategies,
    resolve_format,
    resolve_strategy,
)

pytestmark = pytest.mark.unit


def names(strategy):
    return [splitter.name for splitter in strategy.cascade()]


class TestCascades:
    def test_markdown_header_cascade_falls_through_every_layer(self):
        assert names(MarkdownStrategy.BY_HEADER) == [
            "#",
            "##",
            "###",
            "####",
            "#####",
            "######",
            "```",
            "horizontal-line",
            "paragraph",
            "line",
            "sentence",
            "word",
            "character",
        ]

    def test_character_cascade_is_single_splitter(self):
        assert names(MarkdownStrategy.BY_CHARACTER) == ["character"]

    def test_html_paragraph_cascade(self):
        assert names(HtmlStrategy.HTML_PARAGRAPH) == [
            "<p>",
            "<br>",
            "sentence",
            "word",
            "character",
        ]

    def test_text_cascade(self):
        assert names(TextStrategy.PARAGRAPH) == [
            "paragraph",
            "line",
            "sentence",
            "word",
            "character",
        ]

    @pytest.mark.parametrize(
        "strategy",
        list(MarkdownStrategy) + list(HtmlStrategy) + list(TextStrategy),
        ids=lambda s: s.value,
    )
    def test_every_cascade_ends_at_characters(self, strategy):
        assert names(strategy)[-1] == "character"

    def test_cascades_are_fresh_per_call(self):
        first = MarkdownStrategy.BY_PARAGRAPH.cascade()
        second = MarkdownStrategy.BY_PARAGRAPH.cascade()
        assert first[0] is not second[0]

    def test_non_mergeable_types(self):
        assert MarkdownStrategy.BY_WORD.non_mergeable_types == {"code_block"}
        assert HtmlStrategy.HTML_HEADER.non_mergeable_types == frozenset()
        assert TextStrategy.LINE.non_mergeable_types == frozenset()


class TestResolution:
    """Boundary tokens resolve case-insensitively per format."""

    def test_default_is_most_structural(self):
        assert resolve_strategy("markdown") is MarkdownStrategy.BY_HEADER
        assert resolve_strategy("html", "") is HtmlStrategy.HTML_HEADER
        assert default_strategy(DocumentFormat.TEXT) is TextStrategy.PARAGRAPH

    @pytest.mark.parametrize(
        "token,expected",
        [
            ("BY_PARAGRAPH", MarkdownStrategy.BY_PARAGRAPH),
            ("by_word", MarkdownStrategy.BY_WORD),
            ("MARKDOWN_HEADER", MarkdownStrategy.BY_HEADER),
            ("code_block", MarkdownStrategy.BY_CODE_BLOCK),
            (" sentence ", MarkdownStrategy.BY_SENTENCE),
        ],
    )
    def test_markdown_tokens(self, token, expected):
        assert resolve_strategy("markdown", token) is expected

    def test_html_token(self):
        assert resolve_strategy("HTML", "html_paragraph") is HtmlStrategy.HTML_PARAGRAPH

    def test_unknown_token(self):
        with pytest.raises(UnknownStrategyError, match="unknown chunking strategy BY_HEADER"):
            resolve_strategy("html", "BY_HEADER")

    def test_unknown_format(self):
        with pytest.raises(UnknownStrategyError, match="unknown document format"):
            resolve_format("pdf")

    def test_list_strategies(self):
        assert list_strategies("text") == list(TextStrategy)
