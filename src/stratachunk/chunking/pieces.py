"""
Piece and budget value types shared by splitters, the assembler and the
overlap pass.
"""

import itertools
import threading
from functools import reduce
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional

from .errors import InvalidBudgetError


class IdCounter:
    """Thread-safe source of unique piece ids."""

    def __init__(self, start: int = 0):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            return next(self._counter)


class Piece(NamedTuple):
    """A fragment of text with its string metadata.

    Pieces are values: every transformation returns a new Piece and the
    metadata mapping is never changed after construction.
    """

    id: int
    text: str
    metadata: Mapping[str, str]

    @property
    def size(self) -> int:
        return len(self.text)

    def is_empty(self) -> bool:
        return not self.text

    def with_metadata(self, metadata: Mapping[str, str]) -> "Piece":
        """Same piece (and id) carrying a different metadata mapping."""
        return self._replace(metadata=dict(metadata))


class Budget(NamedTuple):
    """Size limits for one chunking call, in characters."""

    max_chunk_size: int
    max_overlap_size: int = 0

    def validate(self) -> "Budget":
        if self.max_chunk_size <= 0:
            raise InvalidBudgetError("Chunk size must be greater than 0")
        if self.max_overlap_size < 0:
            raise InvalidBudgetError(
                "Max overlap size must be greater than or equal to 0"
            )
        if self.max_overlap_size > self.max_chunk_size:
            raise InvalidBudgetError(
                "Max overlap size must be less than or equal to chunk size"
            )
        return self


def make_piece(
    ids: IdCounter, text: str, metadata: Optional[Mapping[str, str]] = None
) -> Piece:
    """Create a piece with a fresh id."""
    return Piece(ids.next_id(), text, dict(metadata) if metadata else {})


def merge_pieces(first: Piece, second: Piece, ids: IdCounter) -> Piece:
    """Concatenate two pieces.

    A metadata key survives only when both pieces carry it with the same
    value.
    """
    metadata = {
        key: value
        for key, value in first.metadata.items()
        if key in second.metadata and second.metadata[key] == value
    }
    return make_piece(ids, first.text + second.text, metadata)


def merge_all(pieces: Iterable[Piece], ids: IdCounter) -> Optional[Piece]:
    """Merge pieces left to right; None when there is nothing to merge."""
    pieces = list(pieces)
    if not pieces:
        return None
    return reduce(lambda a, b: merge_pieces(a, b, ids), pieces)


def inherit_metadata(piece: Piece, parent_metadata: Mapping[str, str]) -> Piece:
    """Union parent metadata under the piece's own keys."""
    metadata: Dict[str, str] = dict(parent_metadata)
    metadata.update(piece.metadata)
    return piece.with_metadata(metadata)


def hard_split(piece: Piece, max_chunk_size: int, ids: IdCounter) -> List[Piece]:
    """Slice a piece into fixed-length fragments chained by ``prev`` ids."""
    fragments: List[Piece] = []
    previous: Optional[Piece] = None
    for start in range(0, len(piece.text), max_chunk_size):
        metadata = dict(piece.metadata)
        if previous is not None:
            metadata["prev"] = str(previous.id)
        fragment = make_piece(
            ids, piece.text[start : start + max_chunk_size], metadata
        )
        fragments.append(fragment)
        previous = fragment
    return fragments
