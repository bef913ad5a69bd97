"""Custom exceptions for the rmap package."""

from __future__ import annotations


class RemoteMapError(Exception):
    """Base exception for all rmap errors."""


class InvalidArgumentError(RemoteMapError, ValueError):
    """Raised when a key or value cannot be stored in a remote hash.

    Checked locally before any remote call, so a failing operation never
    leaves a partial write behind.
    """

    def __init__(self, argument: str, message: str) -> None:
        self.argument = argument
        super().__init__(f"Invalid {argument}: {message}")


class HandleClosedError(RemoteMapError):
    """Raised when a released handle is used."""

    def __init__(self, data_key: str) -> None:
        self.data_key = data_key
        super().__init__(f"Handle for '{data_key}' has been closed")


class ScanError(RemoteMapError):
    """Raised when a full scan does not complete within its page cap."""

    def __init__(self, data_key: str, max_pages: int) -> None:
        self.data_key = data_key
        self.max_pages = max_pages
        super().__init__(
            f"Scan of '{data_key}' did not return to the start cursor "
            f"within {max_pages} pages"
        )


class IllegalStateError(RemoteMapError):
    """Raised when an iterator's ``remove`` is called out of order."""
