"""
Conversion of engine chunks into caller-facing records and golden text.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..core.models import Document, TextChunk
from .engine import chunk
from .pieces import IdCounter, Piece
from .strategies import DocumentFormat, resolve_strategy


def to_text_chunks(
    chunks: Sequence[Piece], document_metadata: Optional[Mapping[str, Any]] = None
) -> List[TextChunk]:
    """Build records, merging document metadata under each chunk's own keys.

    ``index`` becomes an int both on the record and in its metadata.
    """
    records = []
    for position, piece in enumerate(chunks):
        metadata: Dict[str, Any] = dict(document_metadata or {})
        metadata.update(piece.metadata)
        index = int(metadata.get("index", position))
        metadata["index"] = index
        records.append(TextChunk(content=piece.text, index=index, metadata=metadata))
    return records


def chunk_document(
    document: Document,
    doc_format: Union[str, DocumentFormat] = DocumentFormat.MARKDOWN,
    strategy: Optional[str] = None,
    max_chunk_size: int = 500,
    max_overlap_size: int = 50,
    non_mergeable_types: Optional[Sequence[str]] = None,
    ids: Optional[IdCounter] = None,
) -> List[TextChunk]:
    """Chunk a document record using a boundary strategy token."""
    resolved = resolve_strategy(doc_format, strategy)
    chunks = chunk(
        document.content,
        resolved,
        max_chunk_size,
        max_overlap_size,
        non_mergeable_types=non_mergeable_types,
        ids=ids,
    )
    return to_text_chunks(chunks, document.metadata)


def format_chunks(
    chunks: Sequence[Union[Piece, TextChunk]], max_chunk_size: int, max_overlap_size: int
) -> str:
    """Render chunks in the golden-file layout used by regression tests."""
    parts = [f"{max_chunk_size} {max_overlap_size}\n\n"]
    for position, item in enumerate(chunks):
        if isinstance(item, TextChunk):
            text, metadata = item.content, item.metadata
        else:
            text, metadata = item.text, item.metadata
        body = ",".join(f'"{key}": "{metadata[key]}"' for key in sorted(metadata))
        parts.append(f"--- Chunk {position + 1} ---\n")
        parts.append(f"Metadata: {{{body}}}\n")
        parts.append(text)
        if position < len(chunks) - 1:
            parts.append("\n\n")
    return "".join(parts)
