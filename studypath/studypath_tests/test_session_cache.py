"""Tests for the Redis-backed session cache."""
from datetime import timedelta
from unittest import mock

import redis

from studypath.studypath.account_service import session_cache as session_cache_module
from studypath.studypath.account_service.session_cache import SessionCache


def test_put_sets_key_with_ttl(session_cache, fake_redis):
    assert session_cache.put("u1", "token-1", timedelta(days=7)) is True
    assert fake_redis.data["session:u1"] == "token-1"
    assert fake_redis.expiry["session:u1"] == 7 * 24 * 60 * 60


def test_put_overwrites_previous_entry(session_cache, fake_redis):
    session_cache.put("u1", "token-1", 60)
    session_cache.put("u1", "token-2", 60)
    assert session_cache.get("u1") == "token-2"
    assert len(fake_redis.data) == 1


def test_delete_removes_entry_and_tolerates_absence(session_cache):
    session_cache.put("u1", "token-1", 60)
    assert session_cache.delete("u1") is True
    assert session_cache.get("u1") is None
    assert session_cache.delete("u1") is True


def test_connect_reports_availability(session_cache, down_cache):
    assert session_cache.is_available() is True
    assert down_cache.is_available() is False


def test_unavailable_cache_skips_commands(down_cache):
    client = down_cache.r
    client.setex.reset_mock()
    assert down_cache.put("u1", "token", 60) is False
    assert down_cache.delete("u1") is False
    assert down_cache.get("u1") is None
    client.setex.assert_not_called()
    client.delete.assert_not_called()


def test_connection_error_during_put_marks_unavailable():
    client = mock.MagicMock()
    client.setex.side_effect = redis.exceptions.ConnectionError("reset by peer")
    cache = SessionCache(client, retry_interval=3600)
    assert cache.connect() is True

    assert cache.put("u1", "token", 60) is False
    assert cache.is_available() is False
    client.ping.assert_called_once()


def test_non_connection_error_keeps_cache_available():
    client = mock.MagicMock()
    client.delete.side_effect = redis.exceptions.ResponseError("WRONGTYPE")
    cache = SessionCache(client)
    cache.connect()

    assert cache.delete("u1") is False
    assert cache.is_available() is True


def test_reconnects_after_retry_interval():
    client = mock.MagicMock()
    client.ping.side_effect = [redis.exceptions.ConnectionError("down"), True]
    cache = SessionCache(client, retry_interval=30)

    with mock.patch.object(session_cache_module.time, "monotonic", return_value=100.0):
        assert cache.connect() is False
    with mock.patch.object(session_cache_module.time, "monotonic", return_value=110.0):
        assert cache.is_available() is False
    with mock.patch.object(session_cache_module.time, "monotonic", return_value=131.0):
        assert cache.is_available() is True
    assert client.ping.call_count == 2


def test_close_marks_unavailable(session_cache):
    session_cache.close()
    assert session_cache._available is False


@mock.patch(f"{session_cache_module.__name__}.redis.Redis.from_url")
def test_from_url_sets_timeouts(mock_from_url):
    cache = SessionCache.from_url("redis://cache:6379", password="pw", socket_timeout=1.5)
    mock_from_url.assert_called_once_with(
        "redis://cache:6379",
        password="pw",
        socket_timeout=1.5,
        socket_connect_timeout=1.5,
        decode_responses=True,
    )
    assert cache.r is mock_from_url.return_value
    assert cache.key("abc") == "session:abc"
