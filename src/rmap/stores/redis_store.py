"""RedisStore — HashStore backed by a redis-py connection."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

try:
    import redis
except ImportError as exc:
    raise ImportError(
        "RedisStore requires the 'redis' package. Install it with: pip install redis"
    ) from exc

from rmap.stores.base import HashStore

if TYPE_CHECKING:
    from rmap.config import ConnectionSettings

logger = logging.getLogger(__name__)


class RedisStore(HashStore):
    """Store that talks to a Redis server through one synchronous client.

    The atomic read-then-write operations queue their commands in a
    ``MULTI``/``EXEC`` pipeline, so Redis runs the read and the write back to
    back with no other client's command in between.

    Parameters:
        client: A ``redis.Redis`` created with ``decode_responses=True``.
    """

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: ConnectionSettings) -> RedisStore:
        logger.debug(
            "Connecting to redis at %s:%s db=%s", settings.host, settings.port, settings.db
        )
        client = redis.Redis(
            host=settings.host,
            port=settings.port,
            db=settings.db,
            password=settings.password,
            socket_timeout=settings.socket_timeout,
            decode_responses=True,
        )
        return cls(client)

    @property
    def client(self) -> redis.Redis:
        return self._client

    # ── HashStore protocol ───────────────────────────────────

    def exists(self, key: str, field: str) -> bool:
        return bool(self._client.hexists(key, field))

    def get(self, key: str, field: str) -> str | None:
        return self._client.hget(key, field)

    def set(self, key: str, field: str, value: str) -> None:
        self._client.hset(key, field, value)

    def delete(self, key: str, field: str) -> int:
        return int(self._client.hdel(key, field))

    def bulk_set(self, key: str, mapping: Mapping[str, str]) -> None:
        self._client.hset(key, mapping=dict(mapping))

    def length(self, key: str) -> int:
        return int(self._client.hlen(key))

    def scan(
        self,
        key: str,
        cursor: int,
        count: int | None = None,
    ) -> tuple[int, dict[str, str]]:
        next_cursor, page = self._client.hscan(key, cursor=cursor, count=count)
        return int(next_cursor), page

    def get_and_set(self, key: str, field: str, value: str) -> str | None:
        with self._client.pipeline(transaction=True) as pipe:
            pipe.hget(key, field)
            pipe.hset(key, field, value)
            previous, _ = pipe.execute()
        return previous

    def get_and_delete(self, key: str, field: str) -> str | None:
        with self._client.pipeline(transaction=True) as pipe:
            pipe.hget(key, field)
            pipe.hdel(key, field)
            previous, _ = pipe.execute()
        return previous

    def set_default(self, key: str, field: str, value: str) -> str:
        with self._client.pipeline(transaction=True) as pipe:
            pipe.hsetnx(key, field, value)
            pipe.hget(key, field)
            _, current = pipe.execute()
        return current

    def delete_keys(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(self._client.delete(*keys))

    def incr(self, key: str) -> int:
        return int(self._client.incr(key))

    def decr(self, key: str) -> int:
        return int(self._client.decr(key))

    def close(self) -> None:
        self._client.close()
