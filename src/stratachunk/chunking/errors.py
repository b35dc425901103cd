"""
Error taxonomy for the chunking engine.
"""


class ChunkingError(Exception):
    """Base class for all chunking failures."""

    pass


class InvalidBudgetError(ChunkingError, ValueError):
    """Raised when the size budget is rejected before any splitting."""

    pass


class MalformedInputError(ChunkingError, ValueError):
    """Raised when structural markup cannot be split safely."""

    def __init__(self, tag_name: str):
        self.tag_name = tag_name
        super().__init__(f"Invalid HTML <{tag_name}> is not properly terminated")


class UnknownStrategyError(ChunkingError, ValueError):
    """Raised when a strategy or format token cannot be resolved."""

    pass


class CascadeExhaustedError(ChunkingError):
    """Raised when an oversized piece remains and no splitter is left."""

    pass
