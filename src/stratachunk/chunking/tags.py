"""
Structural tag splitters for HTML-like markup.

The splitter walks ``prefix -> tag -> suffix`` triples:

    [prefix] <tag>body</tag> [suffix] [<tag> ...rest]

The tag span runs from the opening tag to the first closing tag after it.
Same-named nested tags are not depth-counted, so ``<div><div></div></div>``
matches the inner ``</div>``.
"""

import re
from enum import Enum
from typing import Dict, Iterator, Optional

from .boundaries import Splitter
from .errors import MalformedInputError
from .pieces import IdCounter, Piece, make_piece

_MARKUP = re.compile(r"<[^>]*>")


class SplitterState(Enum):
    """States of the tag splitter walk."""

    INIT = "init"
    PREFIX = "prefix"
    TAG = "tag"
    SUFFIX = "suffix"
    END = "end"


class TagSplitter(Splitter):
    """Split content around every ``<tag_name>...</tag_name>`` span.

    Subclasses override ``tag_metadata`` to label the tag piece and the
    suffix that follows it.
    """

    def __init__(self, tag_name: str):
        self.tag_name = tag_name
        self.name = f"<{tag_name}>"
        self.open_tag = re.compile(r"<%s(?:\s[^>]*)?>" % re.escape(tag_name))
        self.close_tag = re.compile(r"</%s\s*>" % re.escape(tag_name))

    def tag_metadata(self, tag: str) -> Dict[str, str]:
        return {}

    def split(self, content: str, ids: Optional[IdCounter] = None) -> Iterator[Piece]:
        ids = ids or IdCounter()
        state = SplitterState.INIT
        remaining = content
        prefix = tag = suffix = ""
        metadata: Dict[str, str] = {}

        while True:
            if state is SplitterState.INIT:
                opening = self.open_tag.search(remaining)
                if opening is None:
                    state = SplitterState.END
                    continue
                closing = self.close_tag.search(remaining, opening.end())
                if closing is None:
                    raise MalformedInputError(self.tag_name)
                prefix = remaining[: opening.start()]
                tag = remaining[opening.start() : closing.end()]
                metadata = self.tag_metadata(tag)
                remaining = remaining[closing.end() :]
                following = self.open_tag.search(remaining)
                if following is None:
                    suffix, remaining = remaining, ""
                else:
                    suffix = remaining[: following.start()]
                    remaining = remaining[following.start() :]
                state = SplitterState.PREFIX
            elif state is SplitterState.PREFIX:
                yield make_piece(ids, prefix)
                state = SplitterState.TAG
            elif state is SplitterState.TAG:
                yield make_piece(ids, tag, metadata)
                state = SplitterState.SUFFIX
            elif state is SplitterState.SUFFIX:
                yield make_piece(ids, suffix, metadata)
                state = SplitterState.INIT if remaining else SplitterState.END
                if state is SplitterState.END:
                    return
            else:
                if remaining:
                    yield make_piece(ids, remaining)
                return


class HtmlHeaderSplitter(TagSplitter):
    """``<hN>`` splitter labelling the header and its section.

    Both the header piece and the suffix carry ``headerN`` and ``header``
    set to the header text with inner markup removed.
    """

    def __init__(self, level: int):
        if not 1 <= level <= 6:
            raise ValueError(f"Header level must be between 1 and 6, got {level}")
        super().__init__(f"h{level}")
        self.level = level

    def tag_metadata(self, tag: str) -> Dict[str, str]:
        text = _MARKUP.sub("", tag).strip()
        return {f"header{self.level}": text, "header": text}


class HtmlParagraphSplitter(TagSplitter):
    """``<p>`` splitter; paragraphs carry no metadata."""

    def __init__(self):
        super().__init__("p")
