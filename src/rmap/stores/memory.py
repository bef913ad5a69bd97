"""InMemoryHashStore — zero-config, process-local stand-in for a Redis server.

Several stores attached to the same :class:`InMemoryServer` behave like
several connections to one server: they see the same keys, and every
operation runs under the server lock, so the atomic methods really are
atomic across threads.
"""

from __future__ import annotations

import itertools
import threading
from bisect import bisect_right
from collections.abc import Mapping

from rmap.stores.base import SCAN_START, HashStore

DEFAULT_SCAN_COUNT = 10


class InMemoryServer:
    """Keyspace shared by every :class:`InMemoryHashStore` connected to it.

    Data is lost on process exit.  Each logical database index gets its own
    keyspace, mirroring ``SELECT``.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._databases: dict[int, dict[str, dict[str, str] | int]] = {}

    def keyspace(self, db: int = 0) -> dict[str, dict[str, str] | int]:
        return self._databases.setdefault(db, {})

    def connect(self, db: int = 0) -> InMemoryHashStore:
        return InMemoryHashStore(self, db=db)


class InMemoryHashStore(HashStore):
    """One connection to an :class:`InMemoryServer`.

    Parameters:
        server: Server to attach to.  A private one is created when omitted.
        db:     Logical database index.
    """

    def __init__(self, server: InMemoryServer | None = None, db: int = 0) -> None:
        self.server = server or InMemoryServer()
        self.db = db
        self.closed = False
        self._cursors: dict[int, str] = {}
        self._cursor_ids = itertools.count(1)

    def _keyspace(self) -> dict[str, dict[str, str] | int]:
        if self.closed:
            raise ConnectionError("Connection to in-memory server is closed")
        return self.server.keyspace(self.db)

    def _hash(self, key: str, *, create: bool = False) -> dict[str, str] | None:
        keyspace = self._keyspace()
        value = keyspace.get(key)
        if value is None:
            if not create:
                return None
            value = keyspace[key] = {}
        if not isinstance(value, dict):
            raise TypeError(f"WRONGTYPE key '{key}' does not hold a hash")
        return value

    def _drop_if_empty(self, key: str, fields: dict[str, str]) -> None:
        # Redis removes a hash once its last field is gone
        if not fields:
            self._keyspace().pop(key, None)

    def _add(self, key: str, delta: int) -> int:
        with self.server.lock:
            keyspace = self._keyspace()
            current = keyspace.get(key, 0)
            if not isinstance(current, int):
                raise TypeError(f"WRONGTYPE key '{key}' does not hold a counter")
            keyspace[key] = current + delta
            return current + delta

    # ── HashStore protocol ───────────────────────────────────

    def exists(self, key: str, field: str) -> bool:
        with self.server.lock:
            fields = self._hash(key)
            return fields is not None and field in fields

    def get(self, key: str, field: str) -> str | None:
        with self.server.lock:
            fields = self._hash(key)
            return None if fields is None else fields.get(field)

    def set(self, key: str, field: str, value: str) -> None:
        with self.server.lock:
            self._hash(key, create=True)[field] = value

    def delete(self, key: str, field: str) -> int:
        with self.server.lock:
            fields = self._hash(key)
            if fields is None or field not in fields:
                return 0
            del fields[field]
            self._drop_if_empty(key, fields)
            return 1

    def bulk_set(self, key: str, mapping: Mapping[str, str]) -> None:
        with self.server.lock:
            self._hash(key, create=True).update(mapping)

    def length(self, key: str) -> int:
        with self.server.lock:
            fields = self._hash(key)
            return 0 if fields is None else len(fields)

    def scan(
        self,
        key: str,
        cursor: int,
        count: int | None = None,
    ) -> tuple[int, dict[str, str]]:
        """Return the fields sorting after the last name handed out for *cursor*.

        Cursors resume by name rather than by position, so fields deleted or
        added elsewhere in the hash never shift an unchanged field past the
        scan.
        """
        page_size = count or DEFAULT_SCAN_COUNT
        with self.server.lock:
            if cursor == SCAN_START:
                start_after = None
            else:
                try:
                    start_after = self._cursors.pop(cursor)
                except KeyError:
                    raise ValueError(f"Unknown scan cursor {cursor}") from None
            fields = self._hash(key)
            if fields is None:
                return SCAN_START, {}
            names = sorted(fields)
            start = 0 if start_after is None else bisect_right(names, start_after)
            page = names[start : start + page_size]
            if start + page_size >= len(names):
                return SCAN_START, {name: fields[name] for name in page}
            next_cursor = next(self._cursor_ids)
            self._cursors[next_cursor] = page[-1]
            return next_cursor, {name: fields[name] for name in page}

    def get_and_set(self, key: str, field: str, value: str) -> str | None:
        with self.server.lock:
            fields = self._hash(key, create=True)
            previous = fields.get(field)
            fields[field] = value
            return previous

    def get_and_delete(self, key: str, field: str) -> str | None:
        with self.server.lock:
            fields = self._hash(key)
            if fields is None:
                return None
            previous = fields.pop(field, None)
            self._drop_if_empty(key, fields)
            return previous

    def set_default(self, key: str, field: str, value: str) -> str:
        with self.server.lock:
            return self._hash(key, create=True).setdefault(field, value)

    def delete_keys(self, *keys: str) -> int:
        with self.server.lock:
            keyspace = self._keyspace()
            return sum(1 for key in keys if keyspace.pop(key, None) is not None)

    def incr(self, key: str) -> int:
        return self._add(key, 1)

    def decr(self, key: str) -> int:
        return self._add(key, -1)

    def close(self) -> None:
        self.closed = True
