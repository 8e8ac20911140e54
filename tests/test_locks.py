"""
Tests for the writer locks and the Redis fallbacks
"""
import threading
from unittest import mock

import pytest
import redis

from adherence_engine import cache, locks
from adherence_engine.config import settings
from adherence_engine.exceptions import ConcurrencyConflict


class TestLocalLocks:
    def test_same_key_shares_a_lock(self):
        assert locks._local_lock("k1") is locks._local_lock("k1")
        assert locks._local_lock("k1") is not locks._local_lock("k2")

    def test_lock_is_released_after_block(self):
        with locks.engine_lock("completion:u1:2024-06-15"):
            pass
        with locks.engine_lock("completion:u1:2024-06-15"):
            pass

    def test_contended_lock_raises_conflict(self, monkeypatch):
        monkeypatch.setattr(settings, "LOCK_WAIT_SECONDS", 0.01)
        key = locks.completion_lock_key("u2", "2024-06-15")
        acquired = threading.Event()
        release = threading.Event()

        def holder():
            with locks.engine_lock(key):
                acquired.set()
                release.wait(5)

        thread = threading.Thread(target=holder)
        thread.start()
        try:
            acquired.wait(5)
            with pytest.raises(ConcurrencyConflict) as exc:
                with locks.engine_lock(key):
                    pass
            assert exc.value.key == key
        finally:
            release.set()
            thread.join()

    def test_lock_released_when_block_raises(self):
        with pytest.raises(ValueError):
            with locks.engine_lock("streak:u3:overall"):
                raise ValueError("boom")
        assert locks._local_lock("streak:u3:overall").acquire(blocking=False)
        locks._local_lock("streak:u3:overall").release()


class TestRedisLocks:
    def test_uses_redis_lock_when_available(self):
        client = mock.Mock()
        client.lock.return_value.acquire.return_value = True
        with mock.patch.object(locks, "get_redis_client", return_value=client):
            with locks.engine_lock("streak:u1:overall"):
                pass
        client.lock.assert_called_once_with(
            "lock:streak:u1:overall",
            timeout=settings.LOCK_TIMEOUT_SECONDS,
            blocking_timeout=settings.LOCK_WAIT_SECONDS,
        )
        client.lock.return_value.release.assert_called_once()

    def test_unacquired_redis_lock_is_a_conflict(self):
        client = mock.Mock()
        client.lock.return_value.acquire.return_value = False
        with mock.patch.object(locks, "get_redis_client", return_value=client):
            with pytest.raises(ConcurrencyConflict):
                with locks.engine_lock("streak:u1:overall"):
                    pass

    def test_redis_error_is_a_conflict(self):
        client = mock.Mock()
        client.lock.return_value.acquire.side_effect = redis.ConnectionError("down")
        with mock.patch.object(locks, "get_redis_client", return_value=client):
            with pytest.raises(ConcurrencyConflict):
                with locks.engine_lock("streak:u1:overall"):
                    pass


class TestCacheWithoutRedis:
    def test_disabled_cache_is_a_no_op(self):
        assert cache.get_redis_client() is None
        assert cache.get_cached_data("smart_streak:u1:UTC") is None
        assert cache.set_cached_data("smart_streak:u1:UTC", {"a": 1}) is False
        assert cache.invalidate_smart_streak("u1") == 0

    def test_unreachable_redis_disables_cache(self, monkeypatch):
        monkeypatch.setattr(settings, "REDIS_ENABLED", True)
        cache.reset_redis_client()
        with mock.patch.object(cache.redis, "Redis") as redis_cls:
            redis_cls.return_value.ping.side_effect = redis.ConnectionError("refused")
            assert cache.get_redis_client() is None
        # no reconnect attempt once the first one failed
        assert cache.get_redis_client() is None
        redis_cls.assert_called_once()
