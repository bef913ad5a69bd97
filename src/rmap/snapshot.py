"""Snapshot enumeration of a remote hash.

A remote hash has no "give me a stable copy" primitive, so enumeration walks
the whole ``HSCAN`` cycle and materializes the result before anything is
yielded.  The result is only approximately consistent: fields added or
removed by other writers while the scan runs may or may not appear, but every
field that existed, unchanged, both before and after the scan is included.
Memory use is bounded by the size of the whole collection, not by one page.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Generic, TypeVar

from rmap.exceptions import IllegalStateError, ScanError
from rmap.stores.base import SCAN_START

if TYPE_CHECKING:
    from rmap.stores.base import HashStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def snapshot_entries(
    store: HashStore,
    data_key: str,
    *,
    page_size: int | None = None,
    max_pages: int | None = None,
) -> dict[str, str]:
    """Return every field of *data_key* gathered over one full scan cycle.

    The loop ends when the store hands back :data:`SCAN_START`, however many
    pages that takes.  Fields seen on several pages are kept once.

    Raises:
        ScanError: If *max_pages* is given and the cycle is still open
                   after that many pages.
    """
    entries: dict[str, str] = {}
    cursor = SCAN_START
    pages = 0
    while True:
        if max_pages is not None and pages >= max_pages:
            raise ScanError(data_key, max_pages)
        cursor, page = store.scan(data_key, cursor, count=page_size)
        pages += 1
        entries.update(page)
        if cursor == SCAN_START:
            break
    logger.debug("Scanned %d fields of %s in %d pages", len(entries), data_key, pages)
    return entries


class SnapshotIterator(Generic[T]):
    """Iterator over one materialized snapshot of a remote hash.

    The snapshot is taken when the iterator is created, so later writes to
    the hash never change what it yields.

    Parameters:
        store:     Connection used for the scan and for :meth:`remove`.
        data_key:  Hash to enumerate.
        project:   Turns each ``(key, value)`` pair into the yielded element.
        page_size: ``HSCAN`` page size hint.
    """

    def __init__(
        self,
        store: HashStore,
        data_key: str,
        project: Callable[[str, str], T],
        *,
        page_size: int | None = None,
    ) -> None:
        self._store = store
        self._data_key = data_key
        self._project = project
        self._entries = snapshot_entries(store, data_key, page_size=page_size)
        self._keys = iter(list(self._entries))
        self._current: str | None = None

    def __iter__(self) -> SnapshotIterator[T]:
        return self

    def __next__(self) -> T:
        key = next(self._keys)
        self._current = key
        return self._project(key, self._entries[key])

    def __len__(self) -> int:
        """Number of entries still held by this snapshot."""
        return len(self._entries)

    def remove(self) -> None:
        """Drop the last yielded element here and delete its remote field.

        Other snapshots and iterators are not affected.
        """
        if self._current is None:
            raise IllegalStateError("remove() called before next() or twice in a row")
        key, self._current = self._current, None
        del self._entries[key]
        self._store.delete(self._data_key, key)
