"""Error taxonomy shared by the Core, adapters and CLI.

Every failure is terminal for the invocation: the CLI catches
`BlockFixError` once, prints the message and exits non-zero.
"""

from __future__ import annotations


class BlockFixError(Exception):
    """Base class for every error the tool reports to the operator."""


class InputParseError(BlockFixError):
    """Malformed hash, block number or range text."""


class ResolutionError(BlockFixError):
    """A selector could not be resolved to cached blocks."""


class NotFoundError(ResolutionError):
    """Zero matches where exactly one was expected."""


class AmbiguousError(ResolutionError):
    """Several matches where exactly one was expected."""

    def __init__(self, message: str, *, count: int) -> None:
        super().__init__(message)
        self.count = count


class UpstreamError(BlockFixError):
    """The JSON-RPC provider failed, lied about a hash or returned a short batch."""


class StoreError(BlockFixError):
    """The block store failed on lookup, delete or truncate."""
