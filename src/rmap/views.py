"""Live views over a RemoteMap and the Entry snapshot pair."""

from __future__ import annotations

from collections.abc import ItemsView, KeysView, ValuesView
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rmap.mapping import RemoteMap
    from rmap.snapshot import SnapshotIterator


class Entry(tuple):
    """A ``(key, value)`` pair captured while enumerating a remote hash.

    Behaves as a plain 2-tuple for comparison, hashing and unpacking.  The
    pair itself never changes; :meth:`set_value` writes the new value to
    the remote hash through the map that produced it.
    """

    def __new__(cls, key: str, value: str, owner: RemoteMap | None = None) -> Entry:
        self = super().__new__(cls, (key, value))
        self._owner = owner
        return self

    @property
    def key(self) -> str:
        return self[0]

    @property
    def value(self) -> str:
        return self[1]

    def set_value(self, value: str) -> str | None:
        """Store *value* under this entry's key and return the previous remote value."""
        if self._owner is None:
            raise TypeError("Entry is detached from any map")
        return self._owner.put(self.key, value)

    def __reduce__(self) -> tuple[type[Entry], tuple[str, str]]:
        # copies and pickles come back detached from the owning map
        return (Entry, (self.key, self.value))

    def __repr__(self) -> str:
        return f"Entry(key={self.key!r}, value={self.value!r})"


class RemoteKeysView(KeysView):
    """Key set of a remote map.  Iteration walks a fresh snapshot."""

    _mapping: RemoteMap

    def __iter__(self) -> SnapshotIterator[str]:
        return self._mapping._snapshot_iterator(lambda key, value: key)

    def remove(self, key: str) -> bool:
        """Delete the field *key* remotely; return whether it existed."""
        return self._mapping._delete_field(key)


class RemoteValuesView(ValuesView):
    """Value collection of a remote map.  Iteration walks a fresh snapshot."""

    _mapping: RemoteMap

    def __iter__(self) -> SnapshotIterator[str]:
        return self._mapping._snapshot_iterator(lambda key, value: value)

    def __contains__(self, value: object) -> bool:
        return self._mapping.contains_value(value)

    def remove(self, value: str) -> bool:
        """Delete the first field found holding *value*; return whether one was found."""
        iterator = iter(self)
        for candidate in iterator:
            if candidate == value:
                iterator.remove()
                return True
        return False


class RemoteItemsView(ItemsView):
    """Entry set of a remote map.  Iteration yields :class:`Entry` pairs."""

    _mapping: RemoteMap

    def __iter__(self) -> SnapshotIterator[Entry]:
        mapping = self._mapping
        return mapping._snapshot_iterator(lambda key, value: Entry(key, value, mapping))

    def remove(self, entry: Any) -> bool:
        """Delete the field named by *entry*'s key; return whether it existed."""
        key, _ = entry
        return self._mapping._delete_field(key)
