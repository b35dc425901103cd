"""
Boundary splitters: delimiter, Markdown header and fenced code block.

Every splitter partitions its input exactly: joining the text of the pieces
it yields reproduces the content it was given.
"""

import re
from typing import Iterator, Optional, Pattern

from .pieces import IdCounter, Piece, make_piece

CODE_BLOCK_TYPE = "code_block"
UNKNOWN_LANGUAGE = "unknown"


class Splitter:
    """Partition content into pieces along one kind of boundary."""

    name = "splitter"

    def split(self, content: str, ids: Optional[IdCounter] = None) -> Iterator[Piece]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class DelimiterSplitter(Splitter):
    """Alternate the text between matches with the matched delimiters.

    The pattern is literal unless ``regex=True``. An empty literal matches
    between every character, which reduces content to single characters.
    """

    def __init__(self, delimiter: str, regex: bool = False, name: Optional[str] = None):
        self.delimiter = delimiter
        self.pattern: Pattern[str] = re.compile(
            delimiter if regex else re.escape(delimiter),
            re.MULTILINE if regex else 0,
        )
        self.name = name or repr(delimiter)

    def split(self, content: str, ids: Optional[IdCounter] = None) -> Iterator[Piece]:
        ids = ids or IdCounter()
        position = 0
        for match in self.pattern.finditer(content):
            if match.start() > position:
                yield make_piece(ids, content[position : match.start()])
            if match.end() > match.start():
                yield make_piece(ids, match.group(0))
            position = match.end()
        if position < len(content):
            yield make_piece(ids, content[position:])


class HeaderSplitter(Splitter):
    """Split Markdown on ``\\n#{level} title\\n`` header lines.

    Pieces from a header line up to the next header of the same level carry
    ``header`` and ``header<level>`` metadata. Text before the first header
    carries none.
    """

    def __init__(self, level: int):
        if not 1 <= level <= 6:
            raise ValueError(f"Header level must be between 1 and 6, got {level}")
        self.level = level
        self.pattern = re.compile(r"\n#{%d} (.*)\n" % level)
        self.name = "#" * level

    def _metadata(self, header: Optional[str]):
        if header is None:
            return {}
        return {"header": header, f"header{self.level}": header}

    def split(self, content: str, ids: Optional[IdCounter] = None) -> Iterator[Piece]:
        ids = ids or IdCounter()
        last_header: Optional[str] = None
        position = 0
        for match in self.pattern.finditer(content):
            if match.start() > position:
                yield make_piece(
                    ids, content[position : match.start()], self._metadata(last_header)
                )
            last_header = match.group(1).strip()
            yield make_piece(ids, match.group(0), self._metadata(last_header))
            position = match.end()
        if position < len(content):
            yield make_piece(ids, content[position:], self._metadata(last_header))


class CodeBlockSplitter(Splitter):
    """Isolate fenced code blocks as non-mergeable pieces.

    A fence without a closing line runs to the end of the content.
    """

    name = "```"

    OPEN_FENCE = re.compile(r"^```[ \t]*([^\s`]*)[^\n]*\n", re.MULTILINE)
    CLOSE_FENCE = re.compile(r"^```[ \t]*(?:\n|\Z)", re.MULTILINE)

    def split(self, content: str, ids: Optional[IdCounter] = None) -> Iterator[Piece]:
        ids = ids or IdCounter()
        position = 0
        while position < len(content):
            opening = self.OPEN_FENCE.search(content, position)
            if opening is None:
                break
            if opening.start() > position:
                yield make_piece(ids, content[position : opening.start()])
            closing = self.CLOSE_FENCE.search(content, opening.end())
            end = closing.end() if closing else len(content)
            language = opening.group(1) or UNKNOWN_LANGUAGE
            yield make_piece(
                ids,
                content[opening.start() : end],
                {"type": CODE_BLOCK_TYPE, "language": language},
            )
            position = end
        if position < len(content):
            yield make_piece(ids, content[position:])


def character_splitter() -> DelimiterSplitter:
    return DelimiterSplitter("", name="character")


def word_splitter() -> DelimiterSplitter:
    return DelimiterSplitter(" ", name="word")


def line_splitter() -> DelimiterSplitter:
    return DelimiterSplitter("\n", name="line")


def paragraph_splitter() -> DelimiterSplitter:
    return DelimiterSplitter("\n\n", name="paragraph")


def sentence_splitter() -> DelimiterSplitter:
    # The whitespace after terminal punctuation is the delimiter piece.
    return DelimiterSplitter(r"(?<=[.!?])\s+", regex=True, name="sentence")


def horizontal_line_splitter() -> DelimiterSplitter:
    return DelimiterSplitter(
        r"^ {0,3}(?:(?:-[ \t]*){3,}|(?:\*[ \t]*){3,}|(?:_[ \t]*){3,})$",
        regex=True,
        name="horizontal-line",
    )


def html_line_splitter() -> DelimiterSplitter:
    return DelimiterSplitter("<br>", name="<br>")
