"""
Recursive chunk assembler.

Pieces from the first splitter of a cascade are buffered until the next
one would overflow ``max_chunk_size``. A piece that is too large on its
own is chunked again with the remaining splitters, and its chunks inherit
the piece's metadata.
"""

from typing import AbstractSet, Iterable, List, Mapping, Optional, Sequence, Union

from ..core.logging import log
from .boundaries import Splitter
from .errors import CascadeExhaustedError, MalformedInputError
from .overlap import merge_with_overlap
from .pieces import (
    Budget,
    IdCounter,
    Piece,
    hard_split,
    inherit_metadata,
    merge_all,
)
from .strategies import Strategy


class RecursiveChunker:
    """Assemble size-bounded chunks from a cascade of splitters."""

    def __init__(
        self,
        non_mergeable_types: Iterable[str] = (),
        ids: Optional[IdCounter] = None,
    ):
        self.non_mergeable_types: AbstractSet[str] = frozenset(non_mergeable_types)
        self.ids = ids or IdCounter()

    def is_non_mergeable(self, piece: Piece) -> bool:
        return piece.metadata.get("type") in self.non_mergeable_types

    def chunk_using_splitters(
        self, content: str, cascade: Sequence[Splitter], budget: Budget
    ) -> List[Piece]:
        """Chunk ``content``; overlap is stitched once over the flat result."""
        budget.validate()
        return self._chunk(content, tuple(cascade), budget, {}, stitch_overlap=True)

    def _chunk(
        self,
        content: str,
        cascade: Sequence[Splitter],
        budget: Budget,
        parent_metadata: Mapping[str, str],
        stitch_overlap: bool,
    ) -> List[Piece]:
        if not cascade:
            raise CascadeExhaustedError(
                "No splitter left to break up an oversized piece"
            )
        splitter, rest = cascade[0], cascade[1:]
        max_size = budget.max_chunk_size
        chunks: List[Piece] = []
        buffer: List[Piece] = []
        buffer_size = 0

        def flush() -> None:
            nonlocal buffer_size
            merged = merge_all(buffer, self.ids)
            if merged is not None and merged.text:
                chunks.append(merged)
            buffer.clear()
            buffer_size = 0

        for piece in splitter.split(content, self.ids):
            if self.is_non_mergeable(piece):
                flush()
                if piece.size > max_size:
                    log.debug("chunk.hard_split", size=piece.size, max_size=max_size)
                    chunks.extend(hard_split(piece, max_size, self.ids))
                else:
                    chunks.append(piece)
                continue

            if buffer_size + piece.size <= max_size:
                buffer.append(piece)
                buffer_size += piece.size
                continue

            flush()
            if piece.size <= max_size:
                buffer.append(piece)
                buffer_size += piece.size
                continue

            if not rest:
                raise CascadeExhaustedError(
                    f"Piece of {piece.size} characters exceeds max chunk size "
                    f"{max_size} and {splitter!r} is the last splitter"
                )
            log.debug(
                "chunk.recurse",
                splitter=splitter.name,
                next_splitter=rest[0].name,
                size=piece.size,
            )
            piece_chunks = self._chunk(
                piece.text, rest, budget, piece.metadata, stitch_overlap=False
            )
            if not piece_chunks:
                continue
            chunks.extend(piece_chunks[:-1])
            last = piece_chunks[-1]
            if self.is_non_mergeable(last):
                chunks.append(last)
            else:
                buffer.append(last)
                buffer_size += last.size
        flush()

        overlap_budget = budget if stitch_overlap else budget._replace(max_overlap_size=0)
        chunks = merge_with_overlap(
            chunks,
            overlap_budget,
            self.ids,
            self.is_non_mergeable,
            lambda donor, size: self._narrow_donor(donor, cascade, size),
        )
        if parent_metadata:
            chunks = [inherit_metadata(chunk, parent_metadata) for chunk in chunks]
        return [chunk for chunk in chunks if chunk.text]

    def _narrow_donor(
        self, flushed: Piece, cascade: Sequence[Splitter], max_overlap_size: int
    ) -> Optional[Piece]:
        """Last structural fragment of ``flushed`` that fits the overlap."""
        try:
            fragments = self._chunk(
                flushed.text,
                cascade,
                Budget(max_overlap_size, 0),
                flushed.metadata,
                stitch_overlap=False,
            )
        except (CascadeExhaustedError, MalformedInputError) as e:
            # A chunk cut inside markup, or a cascade that cannot reach overlap
            # granularity, gets no overlap at this seam.
            log.debug("chunk.overlap_skipped", size=flushed.size, reason=str(e))
            return None
        return fragments[-1] if fragments else None


def stamp_indices(chunks: Sequence[Piece]) -> List[Piece]:
    """Expose sequence position and id as ``index`` and ``id`` metadata."""
    stamped = []
    for index, piece in enumerate(chunks):
        metadata = dict(piece.metadata)
        metadata["id"] = str(piece.id)
        metadata["index"] = str(index)
        stamped.append(piece.with_metadata(metadata))
    return stamped


def chunk(
    content: str,
    strategy: Union[Strategy, Sequence[Splitter]],
    max_chunk_size: int,
    max_overlap_size: int = 0,
    non_mergeable_types: Optional[Iterable[str]] = None,
    ids: Optional[IdCounter] = None,
) -> List[Piece]:
    """Split ``content`` into chunks of at most ``max_chunk_size`` characters.

    Args:
        content: Already-extracted document text.
        strategy: A resolved strategy, or an explicit cascade of splitters.
        max_chunk_size: Upper bound on every chunk's length (> 0).
        max_overlap_size: Upper bound on the tail copied from one chunk to
            the start of the next (0 disables overlap).
        non_mergeable_types: ``type`` metadata values that are never merged.
            Defaults to the strategy's own set, or none for a raw cascade.
        ids: Piece id source; a fresh counter is used when omitted.

    Returns:
        Chunks in document order, each with ``id`` and ``index`` metadata.

    Raises:
        InvalidBudgetError: If the budget is rejected.
        MalformedInputError: If a structural tag is never closed.
    """
    budget = Budget(max_chunk_size, max_overlap_size).validate()
    if isinstance(strategy, (list, tuple)):
        cascade = tuple(strategy)
        default_types: AbstractSet[str] = frozenset()
        strategy_name = "custom"
    else:
        cascade = strategy.cascade()
        default_types = strategy.non_mergeable_types
        strategy_name = strategy.value

    chunker = RecursiveChunker(
        default_types if non_mergeable_types is None else non_mergeable_types,
        ids=ids or IdCounter(),
    )
    chunks = stamp_indices(chunker.chunk_using_splitters(content, cascade, budget))
    log.info(
        "chunk.complete",
        strategy=strategy_name,
        chars=len(content),
        chunks=len(chunks),
        max_chunk_size=max_chunk_size,
        max_overlap_size=max_overlap_size,
    )
    return chunks
