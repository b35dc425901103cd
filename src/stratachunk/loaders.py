"""
Boundary reader: load already-extracted text and pick its document format.
"""

import re
from pathlib import Path
from typing import Tuple, Union

from .chunking.strategies import DocumentFormat

_SUFFIX_FORMATS = {
    ".md": DocumentFormat.MARKDOWN,
    ".markdown": DocumentFormat.MARKDOWN,
    ".html": DocumentFormat.HTML,
    ".htm": DocumentFormat.HTML,
}


def normalize_newlines(text: str) -> str:
    """Normalize line endings CRLF/CR -> LF."""
    return re.sub(r"\r\n?", "\n", text)


def detect_format(
    path: Union[str, Path], default: DocumentFormat = DocumentFormat.TEXT
) -> DocumentFormat:
    """Infer the document format from the file suffix."""
    return _SUFFIX_FORMATS.get(Path(path).suffix.lower(), default)


def load_text(
    path: Union[str, Path], default_format: DocumentFormat = DocumentFormat.TEXT
) -> Tuple[str, DocumentFormat]:
    """
    Read a UTF-8 text document.

    Args:
        path: Path to a Markdown, HTML or plain text file
        default_format: Format used when the suffix is not recognised

    Returns:
        Tuple of (content with normalized newlines, detected format)

    Raises:
        FileNotFoundError: If the file does not exist
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    content = file_path.read_text(encoding="utf-8")
    return normalize_newlines(content), detect_format(file_path, default_format)
