"""HashStore protocol — the remote operations a map handle relies on."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping

SCAN_START = 0
"""Cursor that starts a scan and, when returned again, ends it."""


class HashStore(ABC):
    """Abstract base for the remote key-value backends.

    A store is one synchronous connection.  It addresses *hashes* (string
    fields mapped to string values) and plain integer *counters*, each by
    its own top-level key.  Every call blocks until the round trip is done;
    transport failures propagate to the caller unchanged.
    """

    # ── hash fields ──────────────────────────────────────────

    @abstractmethod
    def exists(self, key: str, field: str) -> bool:
        """Return ``True`` if *field* is present in the hash."""
        ...

    @abstractmethod
    def get(self, key: str, field: str) -> str | None:
        """Return the field's value, or ``None`` if absent."""
        ...

    @abstractmethod
    def set(self, key: str, field: str, value: str) -> None:
        """Create or overwrite a field."""
        ...

    @abstractmethod
    def delete(self, key: str, field: str) -> int:
        """Delete a field and return how many were removed (0 or 1)."""
        ...

    @abstractmethod
    def bulk_set(self, key: str, mapping: Mapping[str, str]) -> None:
        """Create or overwrite every field of *mapping* in one call."""
        ...

    @abstractmethod
    def length(self, key: str) -> int:
        """Return the number of fields in the hash (0 if it does not exist)."""
        ...

    @abstractmethod
    def scan(
        self,
        key: str,
        cursor: int,
        count: int | None = None,
    ) -> tuple[int, dict[str, str]]:
        """Return the next cursor and one page of fields.

        Start with :data:`SCAN_START`; the enumeration is complete once the
        returned cursor equals :data:`SCAN_START` again.  Pages may repeat
        fields already returned.
        """
        ...

    # ── atomic read-then-write ───────────────────────────────

    @abstractmethod
    def get_and_set(self, key: str, field: str, value: str) -> str | None:
        """Atomically overwrite a field and return its previous value."""
        ...

    @abstractmethod
    def get_and_delete(self, key: str, field: str) -> str | None:
        """Atomically delete a field and return its previous value."""
        ...

    @abstractmethod
    def set_default(self, key: str, field: str, value: str) -> str:
        """Atomically set a field only if absent and return the stored value."""
        ...

    # ── keys and counters ────────────────────────────────────

    @abstractmethod
    def delete_keys(self, *keys: str) -> int:
        """Delete whole keys.  Missing keys are ignored; returns how many existed."""
        ...

    @abstractmethod
    def incr(self, key: str) -> int:
        """Atomically increment a counter (created at 0) and return the new value."""
        ...

    @abstractmethod
    def decr(self, key: str) -> int:
        """Atomically decrement a counter (created at 0) and return the new value."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the underlying connection.  Safe to call more than once."""
        ...
