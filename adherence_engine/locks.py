"""
Single-writer locks for the completion and streak read-modify-write paths.

With Redis available the lock is a ``redis.lock.Lock`` shared by every
worker; otherwise it is a keyed ``threading.Lock`` local to the process.
"""
import threading
from contextlib import contextmanager
from typing import Dict, Iterator

from redis.exceptions import LockError, RedisError

from adherence_engine.cache import get_redis_client
from adherence_engine.config import settings
from adherence_engine.exceptions import ConcurrencyConflict
from adherence_engine.utils.logger import get_logger

logger = get_logger(__name__)

_local_locks: Dict[str, threading.Lock] = {}
_local_locks_guard = threading.Lock()


def completion_lock_key(user_id: str, log_date: str) -> str:
    return f"completion:{user_id}:{log_date}"

def streak_lock_key(user_id: str, streak_type: str) -> str:
    return f"streak:{user_id}:{streak_type}"

def _local_lock(key: str) -> threading.Lock:
    with _local_locks_guard:
        lock = _local_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _local_locks[key] = lock
        return lock

@contextmanager
def engine_lock(key: str) -> Iterator[None]:
    """
    Hold the writer lock for ``key`` for the duration of the block.

    Raises:
        ConcurrencyConflict: the lock was not acquired within LOCK_WAIT_SECONDS
    """
    client = get_redis_client()
    if client is None:
        lock = _local_lock(key)
        if not lock.acquire(timeout=settings.LOCK_WAIT_SECONDS):
            raise ConcurrencyConflict(key)
        try:
            yield
        finally:
            lock.release()
        return

    redis_lock = client.lock(
        f"lock:{key}",
        timeout=settings.LOCK_TIMEOUT_SECONDS,
        blocking_timeout=settings.LOCK_WAIT_SECONDS,
    )
    try:
        acquired = redis_lock.acquire()
    except RedisError as e:
        logger.error(f"Redis lock acquisition failed for {key}: {e}")
        raise ConcurrencyConflict(key) from e
    if not acquired:
        raise ConcurrencyConflict(key)
    try:
        yield
    finally:
        try:
            redis_lock.release()
        except LockError:
            # Expired while held; the next writer already owns it
            logger.warning(f"Lock {key} expired before release")
