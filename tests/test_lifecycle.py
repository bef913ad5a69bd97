"""Tests for reference counting and namespace teardown."""

import logging

import pytest

from rmap import Namespace, RemoteMap
from rmap.lifecycle import LifecycleTracker
from rmap.stores import InMemoryHashStore


class FailingDeleteStore(InMemoryHashStore):
    def delete_keys(self, *keys):
        raise ConnectionError("connection reset")


def test_exclusive_release_deletes_data(server):
    handle = RemoteMap(store=server.connect())
    handle.put("key", "value")
    data_key = handle.namespace.data_key
    assert data_key in server.keyspace()
    handle.close()
    assert data_key not in server.keyspace()


def test_shared_handles_increment_counter(server):
    first = RemoteMap("test", store=server.connect())
    second = RemoteMap("test", store=server.connect())
    assert server.keyspace()["rmap_test_connectionCount"] == 2
    first.close()
    second.close()


def test_last_shared_release_deletes_namespace(server):
    first = RemoteMap("test", store=server.connect())
    second = RemoteMap("test", store=server.connect())
    first.put("key", "value")

    first.close()
    assert second.get("key") == "value"
    assert server.keyspace()["rmap_test_connectionCount"] == 1

    second.close()
    assert "rmap_test_repository" not in server.keyspace()
    assert "rmap_test_connectionCount" not in server.keyspace()


def test_release_closes_connection(server):
    store = server.connect()
    RemoteMap("test", store=store).close()
    assert store.closed


def test_double_close_releases_once(server):
    first = RemoteMap("test", store=server.connect())
    second = RemoteMap("test", store=server.connect())
    second.put("key", "value")
    first.close()
    first.close()
    assert server.keyspace()["rmap_test_connectionCount"] == 1
    assert second["key"] == "value"
    second.close()


def test_release_of_absent_keys_is_noop(server):
    first = RemoteMap("test", store=server.connect())
    second = RemoteMap("test", store=server.connect())
    server.connect().delete_keys("rmap_test_connectionCount", "rmap_test_repository")
    first.close()
    second.close()
    assert server.keyspace() == {}


def test_negative_count_is_logged_and_cleaned(server, caplog):
    ns = Namespace.resolve("test", shared=True)
    tracker = LifecycleTracker(server.connect(), ns)
    server.connect().set(ns.data_key, "key", "value")
    with caplog.at_level(logging.WARNING, logger="rmap.lifecycle"):
        tracker.release()
    assert "below zero" in caplog.text
    assert ns.data_key not in server.keyspace()
    assert ns.ref_count_key not in server.keyspace()


def test_release_errors_are_swallowed(caplog):
    store = FailingDeleteStore()
    handle = RemoteMap(store=store)
    with caplog.at_level(logging.ERROR, logger="rmap.lifecycle"):
        handle.close()
    assert handle.closed
    assert store.closed
    assert "Failed to release" in caplog.text


@pytest.mark.parametrize("shared", [True, False])
def test_tracker_released_flag(server, shared):
    ns = Namespace.resolve("flag", shared=shared)
    tracker = LifecycleTracker.acquire(server.connect(), ns)
    assert not tracker.released
    tracker.release()
    assert tracker.released
