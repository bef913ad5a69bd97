"""Connection settings for the remote store."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from rmap.namespace import DEFAULT_PREFIX


class ConnectionSettings(BaseSettings):
    """Where and how to reach the Redis server backing remote maps.

    Every field can be set from an ``RMAP_``-prefixed environment variable
    (``RMAP_HOST``, ``RMAP_PORT``, ``RMAP_DB`` ...).

    Attributes:
        host:           Redis host name.
        port:           Redis TCP port.
        db:             Logical database index selected on connect.
        password:       Optional AUTH password.
        socket_timeout: Per-call timeout in seconds; ``None`` blocks forever.
        scan_count:     Page size hint passed to ``HSCAN``.
        key_prefix:     Literal prefix distinguishing rmap keys from other
                        users of the same database.
    """

    model_config = SettingsConfigDict(
        env_prefix="RMAP_",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    host: str = "localhost"
    port: int = Field(default=6379, ge=1, le=65535)
    db: int = Field(default=0, ge=0)
    password: str | None = None
    socket_timeout: float | None = Field(default=None, gt=0)
    scan_count: int | None = Field(default=None, gt=0)
    key_prefix: str = Field(default=DEFAULT_PREFIX, min_length=1)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        db: int | None = None,
    ) -> ConnectionSettings:
        """Return a copy with every non-``None`` argument applied."""
        overrides = {
            name: value
            for name, value in (("host", host), ("port", port), ("db", db))
            if value is not None
        }
        if not overrides:
            return self
        # model_copy(update=...) does not validate
        return type(self).model_validate({**self.model_dump(), **overrides})


__all__ = ["ConnectionSettings"]
