"""Tests for record binding and the golden text layout."""

import pytest

from stratachunk.chunking.errors import UnknownStrategyError
from stratachunk.chunking.pieces import Piece
from stratachunk.chunking.records import chunk_document, format_chunks, to_text_chunks
from stratachunk.core.models import Document, TextChunk

pytestmark = pytest.mark.unit


class TestRecords:
    def test_document_metadata_is_merged_into_every_chunk(self):
        doc = Document(content="aaa\n\nbbb", metadata={"source": "a.md"})

        records = chunk_document(doc, "text", "PARAGRAPH", 5, 0)

        assert [r.content for r in records] == ["aaa\n\n", "bbb"]
        assert [r.index for r in records] == [0, 1]
        assert all(r.metadata["source"] == "a.md" for r in records)
        assert records[1].metadata["index"] == 1

    def test_chunk_keys_win_over_document_keys(self):
        piece = Piece(3, "text", {"index": "0", "header": "Chunk"})

        (record,) = to_text_chunks([piece], {"header": "Document", "author": "x"})

        assert isinstance(record, TextChunk)
        assert record.metadata == {"index": 0, "header": "Chunk", "author": "x"}

    def test_unknown_strategy(self):
        with pytest.raises(UnknownStrategyError):
            chunk_document(Document(content="x"), "markdown", "BY_PAGE")


class TestGoldenFormat:
    def test_layout(self):
        chunks = [
            Piece(0, "alpha", {"index": "0", "header": "A"}),
            Piece(1, "beta", {"index": "1"}),
        ]

        assert format_chunks(chunks, 10, 0) == (
            "10 0\n\n"
            "--- Chunk 1 ---\n"
            'Metadata: {"header": "A","index": "0"}\n'
            "alpha\n\n"
            "--- Chunk 2 ---\n"
            'Metadata: {"index": "1"}\n'
            "beta"
        )

    def test_accepts_records(self):
        records = [TextChunk(content="only", index=0, metadata={"index": 0})]
        assert format_chunks(records, 5, 1).endswith('Metadata: {"index": "0"}\nonly')
