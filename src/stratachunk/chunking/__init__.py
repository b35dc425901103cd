"""
Stratachunk Chunking Package

Structure-aware recursive chunking with hard character caps, bounded
overlap and metadata carried from the boundaries that produced each chunk.
"""

from .assurance import build_chunk_assurance
from .engine import RecursiveChunker, chunk
from .errors import (
    CascadeExhaustedError,
    ChunkingError,
    InvalidBudgetError,
    MalformedInputError,
    UnknownStrategyError,
)
from .pieces import Budget, IdCounter, Piece
from .records import chunk_document, format_chunks, to_text_chunks
from .strategies import (
    DocumentFormat,
    HtmlStrategy,
    MarkdownStrategy,
    TextStrategy,
    list_strategies,
    resolve_strategy,
)

__all__ = [
    "Budget",
    "CascadeExhaustedError",
    "ChunkingError",
    "DocumentFormat",
    "HtmlStrategy",
    "IdCounter",
    "InvalidBudgetError",
    "MalformedInputError",
    "MarkdownStrategy",
    "Piece",
    "RecursiveChunker",
    "TextStrategy",
    "UnknownStrategyError",
    "build_chunk_assurance",
    "chunk",
    "chunk_document",
    "format_chunks",
    "list_strategies",
    "resolve_strategy",
    "to_text_chunks",
]
