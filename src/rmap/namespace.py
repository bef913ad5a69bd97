"""Namespace — the pair of remote keys backing one logical map."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PREFIX = "rmap"


@dataclass(frozen=True)
class Namespace:
    """Immutable identity of a remote map.

    Attributes:
        data_key:      Remote hash holding the map's entries.
        ref_count_key: Remote counter of live handles, or ``None`` for an
                       exclusive (single-owner) namespace.
    """

    data_key: str
    ref_count_key: str | None = None

    @property
    def shared(self) -> bool:
        return self.ref_count_key is not None

    @classmethod
    def resolve(
        cls,
        logical_id: str,
        *,
        shared: bool,
        prefix: str = DEFAULT_PREFIX,
    ) -> Namespace:
        """Derive the remote keys for *logical_id*.

        Two calls with the same id, prefix and ``shared=True`` always yield
        equal namespaces, which is what lets separate handles see the same data.
        """
        data_key = f"{prefix}_{logical_id}_repository"
        if not shared:
            return cls(data_key=data_key)
        return cls(
            data_key=data_key,
            ref_count_key=f"{prefix}_{logical_id}_connectionCount",
        )
