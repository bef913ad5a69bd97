"""rmap — a dict-like view of a shared remote Redis hash.

Handles opened with the same id share one hash.  The hash is deleted when
the last handle referencing it is closed.
"""

from rmap.config import ConnectionSettings
from rmap.exceptions import (
    HandleClosedError,
    IllegalStateError,
    InvalidArgumentError,
    RemoteMapError,
    ScanError,
)
from rmap.mapping import RemoteMap
from rmap.namespace import Namespace
from rmap.views import Entry

__all__ = [
    "ConnectionSettings",
    "Entry",
    "HandleClosedError",
    "IllegalStateError",
    "InvalidArgumentError",
    "Namespace",
    "RemoteMap",
    "RemoteMapError",
    "ScanError",
]
