"""Tests for the boundary text reader."""

import pytest

from stratachunk.chunking.strategies import DocumentFormat
from stratachunk.loaders import detect_format, load_text, normalize_newlines


class TestLoadText:
    def test_markdown_with_crlf(self, tmp_path):
        path = tmp_path / "doc.md"
        path.write_bytes(b"# Title\r\nbody\r\n")

        content, fmt = load_text(path)

        assert content == "# Title\nbody\n"
        assert fmt is DocumentFormat.MARKDOWN

    def test_unknown_suffix_uses_default(self, tmp_path):
        path = tmp_path / "notes.rst"
        path.write_text("plain", encoding="utf-8")

        assert load_text(path)[1] is DocumentFormat.TEXT
        assert load_text(path, DocumentFormat.MARKDOWN)[1] is DocumentFormat.MARKDOWN

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_text(tmp_path / "missing.md")


@pytest.mark.parametrize(
    "name,expected",
    [
        ("a.md", DocumentFormat.MARKDOWN),
        ("a.markdown", DocumentFormat.MARKDOWN),
        ("a.HTML", DocumentFormat.HTML),
        ("a.htm", DocumentFormat.HTML),
        ("a.txt", DocumentFormat.TEXT),
    ],
)
def test_detect_format(name, expected):
    assert detect_format(name) is expected


def test_normalize_newlines():
    assert normalize_newlines("a\r\nb\rc\n") == "a\nb\nc\n"
