import json
from typing import Any, Optional

import redis
from adherence_engine.config import settings
from adherence_engine.utils.logger import get_logger

logger = get_logger(__name__)

# Lazily created so importing the engine never opens a socket
_redis_client: Optional[redis.Redis] = None
_redis_checked = False


def get_redis_client() -> Optional[redis.Redis]:
    """
    Return a connected Redis client, or None when Redis is disabled or
    unreachable. The connection is attempted once per process.
    """
    global _redis_client, _redis_checked
    if _redis_checked:
        return _redis_client

    _redis_checked = True
    if not settings.REDIS_ENABLED:
        logger.info("Redis disabled by configuration; cache off, locks in-process")
        return None

    try:
        client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=0,
            decode_responses=True,
            retry_on_timeout=True,
            socket_connect_timeout=5,
            socket_timeout=5
        )
        client.ping()
        _redis_client = client
        logger.info(f"Redis connected: {settings.REDIS_HOST}:{settings.REDIS_PORT}")
    except redis.RedisError as e:
        logger.warning(f"Redis connection failed: {e}. Cache will be disabled.")
        _redis_client = None
    return _redis_client

def reset_redis_client() -> None:
    """Forget the cached client so the next call reconnects."""
    global _redis_client, _redis_checked
    _redis_client = None
    _redis_checked = False

def get_cached_data(key: str) -> Optional[Any]:
    """
    Get data from Redis cache.

    Args:
        key: The cache key

    Returns:
        The cached data if found, None otherwise
    """
    client = get_redis_client()
    if client is None:
        return None

    try:
        data = client.get(key)
        if data:
            return json.loads(data)
    except (redis.RedisError, ValueError) as e:
        logger.error(f"Error getting cached data for key {key}: {e}")

    return None

def set_cached_data(key: str, value: Any, expire_seconds: int = 3600) -> bool:
    """
    Set data in Redis cache with expiration.

    Args:
        key: The cache key
        value: JSON-serializable data to cache
        expire_seconds: Time to live in seconds (default: 1 hour)

    Returns:
        True if successful, False otherwise
    """
    client = get_redis_client()
    if client is None:
        return False

    try:
        client.setex(key, expire_seconds, json.dumps(value))
        return True
    except (redis.RedisError, TypeError) as e:
        logger.error(f"Error setting cached data for key {key}: {e}")
        return False

def delete_cached_pattern(pattern: str, count: int = 100) -> int:
    """
    Delete all keys matching a pattern using SCAN (never KEYS).

    Returns:
        Number of keys deleted
    """
    client = get_redis_client()
    if client is None:
        return 0

    try:
        deleted = 0
        cursor = 0
        while True:
            cursor, batch = client.scan(cursor, match=pattern, count=count)
            if batch:
                deleted += client.delete(*batch)
            if cursor == 0:
                break
        return deleted
    except redis.RedisError as e:
        logger.error(f"Error deleting cached keys for pattern {pattern}: {e}")
        return 0

def smart_streak_cache_key(user_id: str, tz_name: str) -> str:
    return f"smart_streak:{user_id}:{tz_name}"

def invalidate_smart_streak(user_id: str) -> int:
    return delete_cached_pattern(f"smart_streak:{user_id}:*")
