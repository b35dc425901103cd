"""
Chunk assurance and quality reporting.
"""

import json
import statistics
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..core.models import TextChunk
from .boundaries import CODE_BLOCK_TYPE
from .pieces import Piece

ChunkLike = Union[Piece, TextChunk, Mapping[str, Any]]


def _text_and_metadata(chunk: ChunkLike) -> Tuple[str, Mapping[str, Any]]:
    if isinstance(chunk, Piece):
        return chunk.text, chunk.metadata
    if isinstance(chunk, TextChunk):
        return chunk.content, chunk.metadata
    return chunk.get("content", ""), chunk.get("metadata") or {}


def load_chunk_records(path: Path) -> List[Dict[str, Any]]:
    """Read ``{"index", "content", "metadata"}`` records from NDJSON."""
    records = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            if line.strip():
                records.append(json.loads(line))
    return records


def _first_mismatch(content: str, rebuilt: str) -> Optional[int]:
    for position, (expected, actual) in enumerate(zip(content, rebuilt)):
        if expected != actual:
            return position
    if len(content) != len(rebuilt):
        return min(len(content), len(rebuilt))
    return None


def build_chunk_assurance(
    content: str,
    chunks: Sequence[ChunkLike],
    max_chunk_size: int,
    max_overlap_size: int = 0,
) -> Dict[str, Any]:
    """
    Build an assurance report for one chunked document.

    Args:
        content: The text that was chunked
        chunks: Chunks in output order
        max_chunk_size: Size bound every chunk must respect
        max_overlap_size: Overlap used; preservation is only checked at 0

    Returns:
        Assurance report dictionary with a PASS/FAIL status
    """
    texts: List[str] = []
    breaches = []
    code_blocks = 0
    hard_split_fragments = 0
    indices_ok = True

    for position, item in enumerate(chunks):
        text, metadata = _text_and_metadata(item)
        texts.append(text)
        if len(text) > max_chunk_size:
            breaches.append({"index": position, "size": len(text)})
        if metadata.get("type") == CODE_BLOCK_TYPE:
            code_blocks += 1
        if "prev" in metadata:
            hard_split_fragments += 1
        if "index" in metadata and str(metadata["index"]) != str(position):
            indices_ok = False

    char_counts = [len(text) for text in texts]
    char_stats = {
        "min": min(char_counts) if char_counts else 0,
        "median": int(statistics.median(char_counts)) if char_counts else 0,
        "p95": int(statistics.quantiles(char_counts, n=20)[18])
        if len(char_counts) > 20
        else (max(char_counts) if char_counts else 0),
        "max": max(char_counts) if char_counts else 0,
        "total": sum(char_counts),
    }

    preservation: Dict[str, Any] = {"checked": max_overlap_size == 0}
    if max_overlap_size == 0:
        mismatch = _first_mismatch(content, "".join(texts))
        preservation["ok"] = mismatch is None
        preservation["firstMismatchAt"] = mismatch
    else:
        preservation["ok"] = True

    status = (
        "PASS"
        if not breaches and preservation["ok"] and indices_ok
        else "FAIL"
    )

    return {
        "budget": {
            "maxChunkSize": max_chunk_size,
            "maxOverlapSize": max_overlap_size,
        },
        "chunkCount": len(texts),
        "charStats": char_stats,
        "breaches": {
            "count": len(breaches),
            "examples": breaches[:10],  # Limit examples
        },
        "preservation": preservation,
        "nonMergeable": {
            "codeBlocks": code_blocks,
            "hardSplitFragments": hard_split_fragments,
        },
        "indicesContiguous": indices_ok,
        "status": status,
    }
