"""Remote store backends for map handles."""

from rmap.stores.base import SCAN_START, HashStore
from rmap.stores.memory import InMemoryHashStore, InMemoryServer
from rmap.stores.redis_store import RedisStore

__all__ = ["SCAN_START", "HashStore", "InMemoryHashStore", "InMemoryServer", "RedisStore"]
