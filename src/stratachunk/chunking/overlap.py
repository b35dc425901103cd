"""
Overlap pass: coalesce assembled chunks and stitch a bounded tail of each
chunk onto the start of its successor.
"""

from typing import Callable, List, Optional

from ..core.logging import log
from .pieces import Budget, IdCounter, Piece, hard_split, merge_all, merge_pieces

NarrowDonor = Callable[[Piece, int], Optional[Piece]]


class _MergeBuffer:
    def __init__(self, ids: IdCounter):
        self.ids = ids
        self.pieces: List[Piece] = []
        self.size = 0

    def add(self, piece: Piece) -> None:
        self.pieces.append(piece)
        self.size += piece.size

    def is_empty(self) -> bool:
        return not self.pieces

    def flush_into(self, chunks: List[Piece]) -> Optional[Piece]:
        merged = merge_all(self.pieces, self.ids)
        self.pieces = []
        self.size = 0
        if merged is not None and merged.text:
            chunks.append(merged)
        return merged


def _stitch(donor: Optional[Piece], piece: Piece, budget: Budget, ids: IdCounter) -> Piece:
    if donor is None or not donor.text:
        return piece
    if donor.size > budget.max_overlap_size:
        return piece
    if donor.size + piece.size > budget.max_chunk_size:
        return piece
    return merge_pieces(donor, piece, ids)


def merge_with_overlap(
    chunks: List[Piece],
    budget: Budget,
    ids: IdCounter,
    is_non_mergeable: Callable[[Piece], bool],
    narrow_donor: NarrowDonor,
) -> List[Piece]:
    """Re-merge chunks that still fit together and add overlap at seams.

    Non-mergeable chunks pass through unchanged and reset the overlap, so
    they neither donate nor receive overlap text. A flushed chunk longer
    than ``max_overlap_size`` is narrowed by ``narrow_donor`` before its
    tail is reused.
    """
    result: List[Piece] = []
    buffer = _MergeBuffer(ids)
    donor: Optional[Piece] = None

    for piece in chunks:
        if is_non_mergeable(piece):
            buffer.flush_into(result)
            if piece.size > budget.max_chunk_size:
                result.extend(hard_split(piece, budget.max_chunk_size, ids))
            else:
                result.append(piece)
            donor = None
            continue

        if piece.size > budget.max_chunk_size:
            buffer.flush_into(result)
            fragments = hard_split(piece, budget.max_chunk_size, ids)
            result.extend(fragments[:-1])
            piece = fragments[-1]
            donor = None

        if buffer.is_empty():
            buffer.add(_stitch(donor, piece, budget, ids))
        elif buffer.size + piece.size <= budget.max_chunk_size:
            buffer.add(piece)
        else:
            flushed = buffer.flush_into(result)
            donor = None
            if budget.max_overlap_size > 0 and flushed is not None and flushed.text:
                if flushed.size <= budget.max_overlap_size:
                    donor = flushed
                else:
                    donor = narrow_donor(flushed, budget.max_overlap_size)
                    log.debug(
                        "chunk.overlap_donor",
                        flushed_size=flushed.size,
                        donor_size=donor.size if donor else 0,
                    )
            buffer.add(_stitch(donor, piece, budget, ids))

    buffer.flush_into(result)
    return result
