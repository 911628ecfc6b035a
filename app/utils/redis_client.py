"""Redis client utilities: JSON cache helpers and per-entity workflow locks."""

import json
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import redis
from redis.exceptions import LockError

logger = logging.getLogger(__name__)


class LockNotAcquired(Exception):
    """Another worker holds the lock."""


class RedisClient:
    """Redis client wrapper with utility methods."""

    def __init__(self, redis_connection: redis.Redis):
        """Initialize Redis client.

        Args:
            redis_connection: Redis connection instance
        """
        self.client = redis_connection

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None
        """
        try:
            value = self.client.get(key)
            if value:
                return json.loads(value)
        except Exception as e:
            logger.error(f"Error getting from cache: {e}")
        return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set value in cache.

        Args:
            key: Cache key
            value: JSON-serializable value
            ttl: Time to live in seconds

        Returns:
            True if successful
        """
        try:
            self.client.set(key, json.dumps(value), ex=ttl)
            return True
        except Exception as e:
            logger.error(f"Error setting cache: {e}")
            return False

    def delete(self, key: str) -> bool:
        """Delete key from cache."""
        try:
            self.client.delete(key)
            return True
        except Exception as e:
            logger.error(f"Error deleting from cache: {e}")
            return False

    @contextmanager
    def lock(self, name: str, timeout: int = 30, blocking_timeout: float = 5) -> Iterator[None]:
        """Hold a redis lock for the duration of the block.

        Args:
            name: Lock key
            timeout: Seconds after which redis releases the lock on its own
            blocking_timeout: Seconds to wait for the lock

        Raises:
            LockNotAcquired: The lock stayed taken for blocking_timeout seconds
        """
        lock = self.client.lock(name, timeout=timeout, blocking_timeout=blocking_timeout)
        if not lock.acquire():
            raise LockNotAcquired(name)
        try:
            yield
        finally:
            try:
                lock.release()
            except LockError:
                logger.warning(f"Lock {name} expired before release")


def cache_key(*args, **kwargs) -> str:
    """Generate cache key from arguments.

    Args:
        *args: Positional arguments
        **kwargs: Keyword arguments

    Returns:
        Generated cache key
    """
    key_parts = [str(arg) for arg in args]
    key_parts.extend([f"{k}:{v}" for k, v in sorted(kwargs.items())])
    return ":".join(key_parts)
