"""Tests for RedisStore against a mocked redis-py client."""

from unittest.mock import MagicMock, patch

import pytest
import redis

from rmap import ConnectionSettings
from rmap.stores import RedisStore


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def pipe(client):
    pipe = MagicMock()
    client.pipeline.return_value.__enter__.return_value = pipe
    return pipe


@pytest.fixture
def store(client):
    return RedisStore(client)


def test_from_settings_builds_decoding_client():
    settings = ConnectionSettings(host="cache", port=6380, db=2, password="pw", socket_timeout=1.5)
    with patch("redis.Redis") as redis_cls:
        store = RedisStore.from_settings(settings)
    redis_cls.assert_called_once_with(
        host="cache",
        port=6380,
        db=2,
        password="pw",
        socket_timeout=1.5,
        decode_responses=True,
    )
    assert store.client is redis_cls.return_value


def test_field_commands(store, client):
    client.hexists.return_value = 1
    client.hget.return_value = "v"
    client.hdel.return_value = 1
    client.hlen.return_value = 4

    assert store.exists("h", "f") is True
    assert store.get("h", "f") == "v"
    store.set("h", "f", "v")
    assert store.delete("h", "f") == 1
    assert store.length("h") == 4

    client.hexists.assert_called_once_with("h", "f")
    client.hset.assert_called_once_with("h", "f", "v")
    client.hdel.assert_called_once_with("h", "f")


def test_bulk_set_uses_mapping(store, client):
    store.bulk_set("h", {"a": "1"})
    client.hset.assert_called_once_with("h", mapping={"a": "1"})


def test_scan(store, client):
    client.hscan.return_value = (17, {"a": "1"})
    assert store.scan("h", 0, count=5) == (17, {"a": "1"})
    client.hscan.assert_called_once_with("h", cursor=0, count=5)


def test_get_and_set_runs_in_transaction(store, client, pipe):
    pipe.execute.return_value = ["old", 0]
    assert store.get_and_set("h", "f", "new") == "old"
    client.pipeline.assert_called_once_with(transaction=True)
    pipe.hget.assert_called_once_with("h", "f")
    pipe.hset.assert_called_once_with("h", "f", "new")


def test_get_and_delete_runs_in_transaction(store, client, pipe):
    pipe.execute.return_value = [None, 0]
    assert store.get_and_delete("h", "f") is None
    client.pipeline.assert_called_once_with(transaction=True)
    pipe.hdel.assert_called_once_with("h", "f")


def test_set_default_runs_in_transaction(store, client, pipe):
    pipe.execute.return_value = [0, "existing"]
    assert store.set_default("h", "f", "new") == "existing"
    pipe.hsetnx.assert_called_once_with("h", "f", "new")


def test_keys_and_counters(store, client):
    client.delete.return_value = 2
    client.incr.return_value = 1
    client.decr.return_value = 0
    assert store.delete_keys("a", "b") == 2
    assert store.incr("c") == 1
    assert store.decr("c") == 0
    client.delete.assert_called_once_with("a", "b")


def test_delete_no_keys_skips_call(store, client):
    assert store.delete_keys() == 0
    client.delete.assert_not_called()


def test_close(store, client):
    store.close()
    client.close.assert_called_once_with()


def test_errors_propagate(store, client):
    client.hget.side_effect = redis.exceptions.ConnectionError("down")
    with pytest.raises(redis.exceptions.ConnectionError):
        store.get("h", "f")
