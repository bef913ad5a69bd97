"""LifecycleTracker — reference counting and teardown of a remote namespace."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rmap.namespace import Namespace
    from rmap.stores.base import HashStore

logger = logging.getLogger(__name__)


class LifecycleTracker:
    """Owns one handle's claim on a namespace and the connection behind it.

    Build it with :meth:`acquire`, which registers the claim remotely, and
    end it with :meth:`release`.  Release runs its teardown at most once no
    matter how often, or from how many threads, it is called.

    * **Exclusive** namespaces are deleted unconditionally on release.
    * **Shared** namespaces are reference counted with ``INCR``/``DECR``;
      the data and counter keys go away once the count drops to zero.

    Deleting keys that are already gone is a no-op.
    """

    def __init__(self, store: HashStore, namespace: Namespace) -> None:
        self._store = store
        self._namespace = namespace
        self._lock = threading.Lock()
        self._released = False

    @classmethod
    def acquire(cls, store: HashStore, namespace: Namespace) -> LifecycleTracker:
        """Register a new handle on *namespace* and return its tracker."""
        if namespace.ref_count_key is not None:
            count = store.incr(namespace.ref_count_key)
            logger.debug("Acquired %s (references=%d)", namespace.data_key, count)
        else:
            logger.debug("Acquired exclusive %s", namespace.data_key)
        return cls(store, namespace)

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Drop this handle's claim and close its connection.

        Never raises.  Remote failures are logged and swallowed, and the
        connection is closed either way.
        """
        with self._lock:
            if self._released:
                return
            self._released = True
        try:
            self._teardown()
        except Exception:
            logger.exception("Failed to release %s", self._namespace.data_key)
        finally:
            self._close_store()

    def _teardown(self) -> None:
        namespace = self._namespace
        if namespace.ref_count_key is None:
            self._store.delete_keys(namespace.data_key)
            logger.debug("Deleted exclusive %s", namespace.data_key)
            return

        count = self._store.decr(namespace.ref_count_key)
        if count < 0:
            logger.warning(
                "Reference count %s dropped below zero (%d); "
                "a handle was probably released twice",
                namespace.ref_count_key,
                count,
            )
        if count <= 0:
            self._store.delete_keys(namespace.ref_count_key, namespace.data_key)
            logger.debug("Deleted shared %s, no references left", namespace.data_key)
        else:
            logger.debug("Released %s (references=%d)", namespace.data_key, count)

    def _close_store(self) -> None:
        try:
            self._store.close()
        except Exception:
            logger.exception("Failed to close connection for %s", self._namespace.data_key)
