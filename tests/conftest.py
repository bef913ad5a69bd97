"""Shared test fixtures."""

import pytest

from rmap import RemoteMap
from rmap.stores import InMemoryServer


@pytest.fixture
def server():
    return InMemoryServer()


@pytest.fixture
def open_map(server):
    """Factory for handles on the shared in-memory server; closes them afterwards."""
    handles: list[RemoteMap] = []

    def _open(map_id=None, **kwargs):
        handle = RemoteMap(map_id, store=server.connect(kwargs.pop("db", 0)), **kwargs)
        handles.append(handle)
        return handle

    yield _open
    for handle in handles:
        handle.close()


@pytest.fixture
def rmap(open_map):
    return open_map()
