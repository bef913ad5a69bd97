"""End-to-end checks against a real Redis server.

Skipped unless ``RMAP_INTEGRATION_REDIS=1``; connection settings come from
the usual ``RMAP_`` variables.
"""

import os
import uuid

import pytest

from rmap import ConnectionSettings, RemoteMap
from rmap.stores import RedisStore

pytestmark = pytest.mark.skipif(
    os.getenv("RMAP_INTEGRATION_REDIS") != "1",
    reason="set RMAP_INTEGRATION_REDIS=1 to run against a live Redis",
)


@pytest.fixture
def map_id():
    return f"it-{uuid.uuid4()}"


@pytest.fixture
def inspector():
    store = RedisStore.from_settings(ConnectionSettings())
    yield store.client
    store.close()


def test_put_get_remove():
    with RemoteMap() as handle:
        assert handle.put("key", "value") is None
        assert handle.put("key", "new") == "value"
        assert handle.remove("key") == "new"
        assert handle.get("key") is None


def test_scan_covers_large_hash():
    entries = {f"k{i}": str(i) for i in range(1000)}
    with RemoteMap() as handle:
        handle.put_all(entries)
        assert handle.copy() == entries


def test_shared_cleanup(map_id, inspector):
    first = RemoteMap(map_id)
    second = RemoteMap(map_id)
    first.put("key", "value")
    first.close()
    assert second["key"] == "value"
    second.close()
    data_key = second.namespace.data_key
    count_key = second.namespace.ref_count_key
    assert inspector.exists(data_key, count_key) == 0
