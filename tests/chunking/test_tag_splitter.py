"""Tests for the structural tag splitters."""

import pytest

from stratachunk.chunking.errors import MalformedInputError
from stratachunk.chunking.tags import (
    HtmlHeaderSplitter,
    HtmlParagraphSplitter,
    TagSplitter,
)

pytestmark = pytest.mark.unit


def texts(pieces):
    return [piece.text for piece in pieces]


class TestTagSplitter:
    """Walk of prefix, tag and suffix pieces."""

    def test_prefix_tag_suffix(self):
        pieces = list(TagSplitter("div").split("a<div>x</div>b"))
        assert texts(pieces) == ["a", "<div>x</div>", "b"]

    def test_adjacent_tags_emit_empty_prefix_and_suffix(self):
        pieces = list(HtmlParagraphSplitter().split("<p>1</p><p>2</p>"))

        assert texts(pieces) == ["", "<p>1</p>", "", "", "<p>2</p>", ""]
        assert "".join(texts(pieces)) == "<p>1</p><p>2</p>"

    def test_nested_same_tag_matches_first_close(self):
        content = "<div><div>in</div>out</div>"
        pieces = list(TagSplitter("div").split(content))

        assert texts(pieces) == ["", "<div><div>in</div>", "out</div>"]

    def test_content_without_tags_is_one_piece(self):
        assert texts(TagSplitter("p").split("plain text")) == ["plain text"]

    def test_empty_content_yields_nothing(self):
        assert list(TagSplitter("p").split("")) == []

    def test_opening_tag_may_carry_attributes(self):
        pieces = list(HtmlParagraphSplitter().split('<p class="x">hi</p>'))
        assert texts(pieces) == ["", '<p class="x">hi</p>', ""]

    def test_tag_name_prefix_is_not_a_match(self):
        pieces = list(HtmlParagraphSplitter().split("<pre>code</pre>"))
        assert texts(pieces) == ["<pre>code</pre>"]

    def test_matching_is_case_sensitive(self):
        assert texts(HtmlParagraphSplitter().split("<P>x</P>")) == ["<P>x</P>"]

    def test_unclosed_tag_fails_before_any_piece(self):
        pieces = TagSplitter("div").split("before<div>never closed")

        with pytest.raises(MalformedInputError, match="<div> is not properly terminated"):
            next(iter(pieces))

    def test_later_unclosed_tag_fails(self):
        with pytest.raises(MalformedInputError):
            list(HtmlParagraphSplitter().split("<p>ok</p> then <p>broken"))

    def test_malformed_input_is_a_value_error(self):
        with pytest.raises(ValueError):
            list(TagSplitter("div").split("<div>"))


class TestHtmlHeaderSplitter:
    def test_header_text_is_stripped_of_markup(self):
        pieces = list(HtmlHeaderSplitter(1).split("<h1>Title <b>x</b></h1>body"))

        assert texts(pieces) == ["", "<h1>Title <b>x</b></h1>", "body"]
        assert pieces[0].metadata == {}
        expected = {"header1": "Title x", "header": "Title x"}
        assert pieces[1].metadata == expected
        assert pieces[2].metadata == expected

    def test_empty_header_still_labels_its_section(self):
        pieces = list(HtmlHeaderSplitter(1).split("a<h1></h1>b"))

        assert texts(pieces) == ["a", "<h1></h1>", "b"]
        assert pieces[0].metadata == {}
        assert pieces[1].metadata == {"header1": "", "header": ""}
        assert pieces[2].metadata == {"header1": "", "header": ""}

    def test_header_text_is_trimmed(self):
        pieces = list(HtmlHeaderSplitter(2).split("<h2>  Spaced  </h2>"))
        assert pieces[1].metadata["header2"] == "Spaced"

    def test_paragraphs_carry_no_metadata(self):
        pieces = HtmlParagraphSplitter().split("a<p>b</p>c")
        assert all(piece.metadata == {} for piece in pieces)
