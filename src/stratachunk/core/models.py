from typing import Any

from pydantic import BaseModel


class Document(BaseModel):
    content: str
    metadata: dict[str, Any] = {}  # caller-supplied, merged into every chunk


class TextChunk(BaseModel):
    content: str
    index: int  # zero-based position in the chunk sequence
    metadata: dict[str, Any] = {}
