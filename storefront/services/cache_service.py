# storefront/services/cache_service.py
import json
from typing import Any

import redis
from redis.exceptions import RedisError

from storefront.utils.settings import REDIS_URL, REDIS_SOCKET_TIMEOUT, CACHE_TTL_SECONDS
from storefront.utils.retry import redis_retry
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

BLACKLIST_PREFIX = "blacklist:"


class CacheService:
    """
    -response cache (get / set with ttl / invalidate by pattern)
    -token blacklist with self expiring keys
    -redis down means passthrough, never a failed request
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
            socket_timeout=REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=REDIS_SOCKET_TIMEOUT,
        )

    @redis_retry()
    def _get(self, key: str) -> str | None:
        return self.redis.get(key)

    @redis_retry()
    def _set(self, key: str, value: str, ttl: int):
        # SET key value EX ttl
        return self.redis.set(name=key, value=value, ex=ttl)

    @redis_retry()
    def _delete_matching(self, pattern: str) -> int:
        keys = self.redis.keys(pattern)
        if not keys:
            return 0
        return self.redis.delete(*keys)

    # =====================================================
    # RESPONSE CACHE
    # =====================================================
    def get_json(self, key: str) -> Any | None:
        try:
            raw = self._get(key)
        except RedisError as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None
        if raw is None:
            return None
        logger.info(f"Cache hit {key}")
        return json.loads(raw)

    def set_json(self, key: str, value: Any, ttl: int = CACHE_TTL_SECONDS) -> bool:
        try:
            self._set(key, json.dumps(value), ttl)
            return True
        except RedisError as e:
            logger.warning(f"Cache write failed for {key}: {e}")
            return False

    def invalidate(self, pattern: str) -> int:
        try:
            deleted = self._delete_matching(pattern)
        except RedisError as e:
            logger.warning(f"Cache invalidation failed for {pattern}: {e}")
            return 0
        logger.info(f"Invalidated {deleted} cache keys matching {pattern}")
        return deleted

    # =====================================================
    # TOKEN BLACKLIST
    # =====================================================
    def blacklist_token(self, token: str, ttl: int):
        """Raises RedisError: a logout that was not stored must not look successful."""
        self._set(f"{BLACKLIST_PREFIX}{token}", token, ttl)

    def is_blacklisted(self, token: str) -> bool:
        try:
            return self._get(f"{BLACKLIST_PREFIX}{token}") is not None
        except RedisError as e:
            logger.warning(f"Blacklist lookup failed: {e}")
            return False

    def close(self):
        try:
            self.redis.close()
        except RedisError as e:
            logger.warning(f"Closing redis client failed: {e}")
