"""RemoteMap — a MutableMapping persisted in a shared remote hash."""

from __future__ import annotations

from collections.abc import Callable, Mapping, MutableMapping
from typing import TYPE_CHECKING, Any, TypeVar

from rmap._internal.ids import IdFactory, UuidFactory
from rmap.config import ConnectionSettings
from rmap.exceptions import HandleClosedError, InvalidArgumentError
from rmap.lifecycle import LifecycleTracker
from rmap.namespace import DEFAULT_PREFIX, Namespace
from rmap.snapshot import SnapshotIterator, snapshot_entries
from rmap.stores.redis_store import RedisStore
from rmap.views import RemoteItemsView, RemoteKeysView, RemoteValuesView

if TYPE_CHECKING:
    from rmap.stores.base import HashStore

T = TypeVar("T")

_MISSING: Any = object()


def _require_key(key: object) -> str:
    if key is None:
        raise InvalidArgumentError("key", "must not be None")
    if not isinstance(key, str):
        raise InvalidArgumentError("key", f"expected str, got {type(key).__name__}")
    return key


def _require_value(value: object) -> str:
    if value is None:
        raise InvalidArgumentError("value", "must not be None")
    if not isinstance(value, str):
        raise InvalidArgumentError("value", f"expected str, got {type(value).__name__}")
    return value


def validate_entries(entries: Mapping[Any, Any]) -> dict[str, str]:
    """Check every pair of *entries* and return them as a plain dict.

    Nested mappings are walked first so a ``None`` buried anywhere is
    reported as such; they are then rejected, since a hash field holds
    only a string.
    """
    checked: dict[str, str] = {}
    for key, value in entries.items():
        if key is None:
            raise InvalidArgumentError("key", "must not be None")
        if value is None:
            raise InvalidArgumentError("value", f"for key {key!r} must not be None")
        if isinstance(value, Mapping):
            validate_entries(value)
        checked[_require_key(key)] = _require_value(value)
    return checked


class RemoteMap(MutableMapping[str, str]):
    """A ``str -> str`` mapping whose entries live in a remote Redis hash.

    Every handle talks to the hash through its own connection.  Handles
    created with the same *map_id* share one namespace and therefore one
    set of entries; a handle created without an id gets a private,
    randomly named namespace.

    Single-entry writes (:meth:`put`, :meth:`remove`, :meth:`setdefault`)
    read the old value and write the new one inside one remote transaction.
    Enumeration (iteration, :meth:`keys`, :meth:`values`, :meth:`items`,
    equality) walks a full ``HSCAN`` snapshot; see :mod:`rmap.snapshot`.

    A handle must be released with :meth:`close` or by using it as a
    context manager.  Releasing an exclusive handle deletes its hash;
    releasing the last handle of a shared namespace deletes the hash and
    its reference counter.

    Parameters:
        map_id:   Logical id of a shared namespace.  ``None`` creates an
                  exclusive namespace with a fresh unique id.
        host:     Redis host; overrides *settings*.
        port:     Redis port; overrides *settings*.
        db:       Logical database index; overrides *settings*.
        store:    Pre-built connection.  The handle takes ownership and
                  closes it on release.  When given, host/port/db are unused.
        settings: Connection settings.  Read from the environment only when
                  neither *settings* nor *store* is given.
        id_factory: Source of ids for exclusive namespaces.
    """

    def __init__(
        self,
        map_id: str | None = None,
        host: str | None = None,
        port: int | None = None,
        db: int | None = None,
        *,
        store: HashStore | None = None,
        settings: ConnectionSettings | None = None,
        id_factory: IdFactory | None = None,
    ) -> None:
        if store is None:
            settings = (settings or ConnectionSettings()).with_overrides(
                host=host, port=port, db=db
            )
            store = RedisStore.from_settings(settings)
        prefix = settings.key_prefix if settings is not None else DEFAULT_PREFIX
        shared = map_id is not None
        logical_id = map_id if shared else (id_factory or UuidFactory()).new_id()
        self._namespace = Namespace.resolve(logical_id, shared=shared, prefix=prefix)
        self._page_size = settings.scan_count if settings is not None else None
        self._store: HashStore = store
        try:
            self._tracker = LifecycleTracker.acquire(self._store, self._namespace)
        except Exception:
            self._store.close()
            raise

        self._keys: RemoteKeysView | None = None
        self._values: RemoteValuesView | None = None
        self._items: RemoteItemsView | None = None

    # ── lifecycle ────────────────────────────────────────────

    @property
    def namespace(self) -> Namespace:
        return self._namespace

    @property
    def shared(self) -> bool:
        return self._namespace.shared

    @property
    def closed(self) -> bool:
        return self._tracker.released

    def close(self) -> None:
        """Release this handle.  Further calls are no-ops."""
        self._tracker.release()

    def __enter__(self) -> RemoteMap:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _live_store(self) -> HashStore:
        if self._tracker.released:
            raise HandleClosedError(self._namespace.data_key)
        return self._store

    # ── size and lookup ──────────────────────────────────────

    def __len__(self) -> int:
        return self._live_store().length(self._namespace.data_key)

    def is_empty(self) -> bool:
        return len(self) == 0

    def contains_key(self, key: object) -> bool:
        return self._live_store().exists(self._namespace.data_key, _require_key(key))

    __contains__ = contains_key

    def contains_value(self, value: object) -> bool:
        """Return ``True`` if any field currently holds *value* (full scan)."""
        _require_value(value)
        return value in self._snapshot().values()

    def get(self, key: str, default: T | None = None) -> str | T | None:
        value = self._live_store().get(self._namespace.data_key, _require_key(key))
        return default if value is None else value

    def __getitem__(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value

    # ── single-entry writes ──────────────────────────────────

    def put(self, key: str, value: str) -> str | None:
        """Store *value* under *key*; return the value it replaced, or ``None``.

        The read of the old value and the write of the new one run in one
        remote transaction, so no concurrent write lands between them.
        """
        key, value = _require_key(key), _require_value(value)
        return self._live_store().get_and_set(self._namespace.data_key, key, value)

    def remove(self, key: str) -> str | None:
        """Delete *key*; return the value it held, or ``None`` if absent."""
        key = _require_key(key)
        return self._live_store().get_and_delete(self._namespace.data_key, key)

    def __setitem__(self, key: str, value: str) -> None:
        key, value = _require_key(key), _require_value(value)
        self._live_store().set(self._namespace.data_key, key, value)

    def __delitem__(self, key: str) -> None:
        if not self._delete_field(key):
            raise KeyError(key)

    def pop(self, key: str, default: Any = _MISSING) -> Any:
        value = self.remove(key)
        if value is not None:
            return value
        if default is _MISSING:
            raise KeyError(key)
        return default

    def setdefault(self, key: str, default: str | None = None) -> str:
        """Store *default* only if *key* is absent; return the value now stored."""
        key, default = _require_key(key), _require_value(default)
        return self._live_store().set_default(self._namespace.data_key, key, default)

    # ── bulk writes ──────────────────────────────────────────

    def put_all(self, entries: Mapping[str, str]) -> None:
        """Write every pair of *entries* with one bulk ``HSET``.

        All pairs are validated first; nothing is written if any is invalid.
        """
        if entries is None:
            raise InvalidArgumentError("entries", "must not be None")
        checked = validate_entries(entries)
        if checked:
            self._live_store().bulk_set(self._namespace.data_key, checked)

    def update(self, other: Any = (), /, **kwargs: str) -> None:
        entries: dict[Any, Any] = {}
        if isinstance(other, Mapping):
            entries.update(other.items())
        elif hasattr(other, "keys"):
            entries.update((key, other[key]) for key in other.keys())
        else:
            entries.update(other)
        entries.update(kwargs)
        self.put_all(entries)

    def clear(self) -> None:
        """Delete the whole remote hash in one call."""
        self._live_store().delete_keys(self._namespace.data_key)

    # ── enumeration ──────────────────────────────────────────

    def _snapshot(self) -> dict[str, str]:
        return snapshot_entries(
            self._live_store(), self._namespace.data_key, page_size=self._page_size
        )

    def _snapshot_iterator(self, project: Callable[[str, str], T]) -> SnapshotIterator[T]:
        return SnapshotIterator(
            self._live_store(),
            self._namespace.data_key,
            project,
            page_size=self._page_size,
        )

    def _delete_field(self, key: str) -> bool:
        key = _require_key(key)
        return self._live_store().delete(self._namespace.data_key, key) != 0

    def __iter__(self) -> SnapshotIterator[str]:
        return self._snapshot_iterator(lambda key, value: key)

    def keys(self) -> RemoteKeysView:
        if self._keys is None:
            self._keys = RemoteKeysView(self)
        return self._keys

    def values(self) -> RemoteValuesView:
        if self._values is None:
            self._values = RemoteValuesView(self)
        return self._values

    def items(self) -> RemoteItemsView:
        if self._items is None:
            self._items = RemoteItemsView(self)
        return self._items

    def copy(self) -> dict[str, str]:
        """Return a plain dict holding one snapshot of the entries."""
        return self._snapshot()

    # ── comparison ───────────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Mapping):
            return NotImplemented
        if isinstance(other, RemoteMap):
            return self._snapshot() == other._snapshot()
        return self._snapshot() == dict(other.items())

    __hash__ = None  # type: ignore[assignment]

    def content_hash(self) -> int:
        """Hash of the current entries; equal maps give equal results."""
        return sum(hash(key) ^ hash(value) for key, value in self._snapshot().items())

    def __repr__(self) -> str:
        mode = "shared" if self.shared else "exclusive"
        state = ", closed" if self.closed else ""
        return f"RemoteMap({self._namespace.data_key!r}, {mode}{state})"
