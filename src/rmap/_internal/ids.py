"""Id factory abstraction for testable namespace generation."""

from __future__ import annotations

import uuid
from typing import Protocol


class IdFactory(Protocol):
    """Protocol for generating logical map ids.  Inject a fake in tests."""

    def new_id(self) -> str: ...


class UuidFactory:
    """Default factory backed by random UUIDs."""

    def new_id(self) -> str:
        return str(uuid.uuid4())
