"""
Chunking strategies and the splitter cascades they select.

Each strategy family is an ordered list of layers from most to least
structural. Picking a strategy takes its own layer and every layer below
it, so every cascade ends at character granularity.
"""

from enum import Enum
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple, Union

from .boundaries import (
    CODE_BLOCK_TYPE,
    CodeBlockSplitter,
    HeaderSplitter,
    Splitter,
    character_splitter,
    horizontal_line_splitter,
    html_line_splitter,
    line_splitter,
    paragraph_splitter,
    sentence_splitter,
    word_splitter,
)
from .errors import UnknownStrategyError
from .tags import HtmlHeaderSplitter, HtmlParagraphSplitter

Cascade = Tuple[Splitter, ...]
Layer = Callable[[], List[Splitter]]


class DocumentFormat(str, Enum):
    """Document formats with their own strategy family."""

    MARKDOWN = "markdown"
    HTML = "html"
    TEXT = "text"


class MarkdownStrategy(str, Enum):
    BY_HEADER = "BY_HEADER"
    BY_CODE_BLOCK = "BY_CODE_BLOCK"
    BY_HORIZONTAL_LINE = "BY_HORIZONTAL_LINE"
    BY_PARAGRAPH = "BY_PARAGRAPH"
    BY_LINE = "BY_LINE"
    BY_SENTENCE = "BY_SENTENCE"
    BY_WORD = "BY_WORD"
    BY_CHARACTER = "BY_CHARACTER"

    @property
    def non_mergeable_types(self) -> FrozenSet[str]:
        return frozenset({CODE_BLOCK_TYPE})

    def cascade(self) -> Cascade:
        return _fallthrough(self, _MARKDOWN_LAYERS)


class HtmlStrategy(str, Enum):
    HTML_HEADER = "HTML_HEADER"
    HTML_PARAGRAPH = "HTML_PARAGRAPH"
    HTML_LINE = "HTML_LINE"
    SENTENCE = "SENTENCE"
    WORD = "WORD"
    CHARACTER = "CHARACTER"

    @property
    def non_mergeable_types(self) -> FrozenSet[str]:
        return frozenset()

    def cascade(self) -> Cascade:
        return _fallthrough(self, _HTML_LAYERS)


class TextStrategy(str, Enum):
    PARAGRAPH = "PARAGRAPH"
    LINE = "LINE"
    SENTENCE = "SENTENCE"
    WORD = "WORD"
    CHARACTER = "CHARACTER"

    @property
    def non_mergeable_types(self) -> FrozenSet[str]:
        return frozenset()

    def cascade(self) -> Cascade:
        return _fallthrough(self, _TEXT_LAYERS)


Strategy = Union[MarkdownStrategy, HtmlStrategy, TextStrategy]


_MARKDOWN_LAYERS: Sequence[Tuple[MarkdownStrategy, Layer]] = (
    (
        MarkdownStrategy.BY_HEADER,
        lambda: [HeaderSplitter(level) for level in range(1, 7)],
    ),
    (MarkdownStrategy.BY_CODE_BLOCK, lambda: [CodeBlockSplitter()]),
    (MarkdownStrategy.BY_HORIZONTAL_LINE, lambda: [horizontal_line_splitter()]),
    (MarkdownStrategy.BY_PARAGRAPH, lambda: [paragraph_splitter()]),
    (MarkdownStrategy.BY_LINE, lambda: [line_splitter()]),
    (MarkdownStrategy.BY_SENTENCE, lambda: [sentence_splitter()]),
    (MarkdownStrategy.BY_WORD, lambda: [word_splitter()]),
    (MarkdownStrategy.BY_CHARACTER, lambda: [character_splitter()]),
)

_HTML_LAYERS: Sequence[Tuple[HtmlStrategy, Layer]] = (
    (
        HtmlStrategy.HTML_HEADER,
        lambda: [HtmlHeaderSplitter(level) for level in range(1, 7)],
    ),
    (HtmlStrategy.HTML_PARAGRAPH, lambda: [HtmlParagraphSplitter()]),
    (HtmlStrategy.HTML_LINE, lambda: [html_line_splitter()]),
    (HtmlStrategy.SENTENCE, lambda: [sentence_splitter()]),
    (HtmlStrategy.WORD, lambda: [word_splitter()]),
    (HtmlStrategy.CHARACTER, lambda: [character_splitter()]),
)

_TEXT_LAYERS: Sequence[Tuple[TextStrategy, Layer]] = (
    (TextStrategy.PARAGRAPH, lambda: [paragraph_splitter()]),
    (TextStrategy.LINE, lambda: [line_splitter()]),
    (TextStrategy.SENTENCE, lambda: [sentence_splitter()]),
    (TextStrategy.WORD, lambda: [word_splitter()]),
    (TextStrategy.CHARACTER, lambda: [character_splitter()]),
)


def _fallthrough(strategy, layers) -> Cascade:
    splitters: List[Splitter] = []
    selected = False
    for member, layer in layers:
        selected = selected or member is strategy
        if selected:
            splitters.extend(layer())
    return tuple(splitters)


_STRATEGIES = {
    DocumentFormat.MARKDOWN: MarkdownStrategy,
    DocumentFormat.HTML: HtmlStrategy,
    DocumentFormat.TEXT: TextStrategy,
}

# Boundary names that differ from the enum member names.
_MARKDOWN_ALIASES = {
    "MARKDOWN_HEADER": MarkdownStrategy.BY_HEADER,
    "CODE_BLOCK": MarkdownStrategy.BY_CODE_BLOCK,
    "HORIZONTAL_LINE": MarkdownStrategy.BY_HORIZONTAL_LINE,
    "PARAGRAPH": MarkdownStrategy.BY_PARAGRAPH,
    "LINE": MarkdownStrategy.BY_LINE,
    "SENTENCE": MarkdownStrategy.BY_SENTENCE,
    "WORD": MarkdownStrategy.BY_WORD,
    "CHARACTER": MarkdownStrategy.BY_CHARACTER,
}


def resolve_format(token: Union[str, DocumentFormat]) -> DocumentFormat:
    """Resolve a document format name such as ``"markdown"``."""
    if isinstance(token, DocumentFormat):
        return token
    try:
        return DocumentFormat(token.strip().lower())
    except ValueError:
        known = ", ".join(f.value for f in DocumentFormat)
        raise UnknownStrategyError(
            f"unknown document format {token!r} (expected one of: {known})"
        ) from None


def default_strategy(doc_format: Union[str, DocumentFormat]) -> Strategy:
    """Most structural strategy of a format's family."""
    return next(iter(_STRATEGIES[resolve_format(doc_format)]))


def resolve_strategy(
    doc_format: Union[str, DocumentFormat], token: Optional[str] = None
) -> Strategy:
    """Resolve a boundary strategy token for a document format.

    ``None`` or an empty token selects the format's default strategy.
    Matching is case-insensitive.
    """
    doc_format = resolve_format(doc_format)
    if token is None or not token.strip():
        return default_strategy(doc_format)

    name = token.strip().upper()
    family = _STRATEGIES[doc_format]
    if name in family.__members__:
        return family[name]
    if doc_format is DocumentFormat.MARKDOWN and name in _MARKDOWN_ALIASES:
        return _MARKDOWN_ALIASES[name]
    raise UnknownStrategyError(f"unknown chunking strategy {token}")


def list_strategies(doc_format: Union[str, DocumentFormat]) -> List[Strategy]:
    return list(_STRATEGIES[resolve_format(doc_format)])
