"""Ephemeral token cache backed by Redis or process memory.

Holds short-lived secrets (OTP codes) and login snapshots, each with its
own TTL. Values are JSON-encoded so strings such as ``"004219"`` keep
their leading zeros.

For Cloud deployments with a managed Redis:
- Set REDIS_HOST to the instance address
- Set REDIS_PASSWORD if authentication is enabled
"""
import json
import threading
import time
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

import redis

from edusphere.core.config import Settings
from edusphere.core.logging import get_logger

logger = get_logger(__name__)


class TokenCache(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any, ttl_seconds: int) -> bool: ...

    def delete(self, key: str) -> bool: ...


def create_redis_client(settings: Settings) -> Optional[redis.Redis]:
    """Create a pooled Redis client from settings.

    Returns None if Redis is disabled or not reachable so the caller can
    fall back to the in-memory cache.
    """
    if not settings.redis_enabled:
        return None

    logger.info(f"Initializing Redis connection pool: {settings.redis_host}:{settings.redis_port}")

    try:
        pool = redis.ConnectionPool(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            password=settings.redis_password,
            decode_responses=True,
            max_connections=50,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        client = redis.Redis(connection_pool=pool)

        client.ping()
        logger.info("Redis connection established successfully")
        return client

    except redis.RedisError as e:
        logger.error(f"Failed to connect to Redis: {e}", exc_info=True)
        return None


class RedisTokenCache:
    """Redis-backed token cache.

    Example:
        >>> cache = RedisTokenCache(client)
        >>> cache.set("otp:a@b.com", "004219", ttl_seconds=300)
        >>> cache.get("otp:a@b.com")
        '004219'
    """

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str) -> Optional[Any]:
        """Get a cached value, or None if absent, expired or unreadable."""
        try:
            data = self.redis.get(self._make_key(key))
            if data is None:
                logger.debug("Cache miss", extra={"cache_key": key})
                return None
            logger.debug("Cache hit", extra={"cache_key": key})
            return json.loads(data)

        except (redis.RedisError, ValueError) as e:
            logger.error(f"Error retrieving cache {key}: {e}", exc_info=True)
            return None

    def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        """Set a value with a TTL in seconds. Returns True if stored."""
        try:
            serialized = json.dumps(value, default=str)
            self.redis.setex(self._make_key(key), ttl_seconds, serialized)
            logger.debug(f"Cache set (TTL: {ttl_seconds}s)", extra={"cache_key": key})
            return True

        except (redis.RedisError, TypeError) as e:
            logger.error(f"Error setting cache {key}: {e}", exc_info=True)
            return False

    def delete(self, key: str) -> bool:
        """Delete a value. Deleting a missing key is not an error."""
        try:
            deleted = self.redis.delete(self._make_key(key))
            logger.debug("Cache deleted", extra={"cache_key": key})
            return bool(deleted)
        except redis.RedisError as e:
            logger.error(f"Error deleting cache {key}: {e}", exc_info=True)
            return False

    def ping(self) -> bool:
        try:
            return bool(self.redis.ping())
        except redis.RedisError:
            return False


class MemoryTokenCache:
    """In-process token cache with per-key TTL.

    Expired entries are dropped lazily on read and by ``purge_expired``.
    Both paths and ``delete`` go through the same lock, and removing an
    absent key is a no-op, so expiry can never bring a key back.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[str, Optional[float]]] = {}

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            serialized, expires_at = entry
            if expires_at is not None and self._clock() >= expires_at:
                self._entries.pop(key, None)
                return None
        return json.loads(serialized)

    def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        serialized = json.dumps(value, default=str)
        expires_at = self._clock() + ttl_seconds if ttl_seconds else None
        with self._lock:
            self._entries[key] = (serialized, expires_at)
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        now = self._clock()
        with self._lock:
            expired = [
                key for key, (_, expires_at) in self._entries.items()
                if expires_at is not None and now >= expires_at
            ]
            for key in expired:
                self._entries.pop(key, None)
        return len(expired)

    def ping(self) -> bool:
        return True


def create_token_cache(settings: Settings) -> TokenCache:
    """Build the token cache for this process: Redis if reachable, else memory."""
    client = create_redis_client(settings)
    if client is not None:
        return RedisTokenCache(client)

    logger.warning("Redis unavailable, falling back to in-memory token cache")
    return MemoryTokenCache()
