# Redis connection and caching logic
# magicstream/data_access/redis_client.py

import json
import logging
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

MOVIE_CACHE_PREFIX = "movie:"


def movie_cache_key(imdb_id: str) -> str:
    return f"{MOVIE_CACHE_PREFIX}{imdb_id}"


class CacheRepository:
    """
    Provides structured access to Redis for caching JSON documents.

    A cache error never fails the caller: reads degrade to a miss and
    writes/deletes report False.
    """
    def __init__(self, client: redis.Redis):
        self.client = client
        logger.debug("Initialized CacheRepository.")

    async def get_json(self, key: str) -> Optional[Any]:
        """Gets a JSON value from cache, None on miss or error."""
        try:
            value = await self.client.get(key)
        except RedisError as e:
            logger.error(f"Redis GET error for key {key}: {e}", exc_info=True)
            return None
        if value is None:
            logger.debug(f"Cache miss for key: {key}")
            return None

        logger.debug(f"Cache hit for key: {key}")
        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            logger.warning(f"Failed to decode JSON from cache key {key}. Treating as a miss.")
            return None

    async def set_json(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        """Serializes value to JSON and stores it with an optional TTL."""
        try:
            logger.debug(f"Setting cache for key: {key} with TTL: {ttl_seconds}s")
            await self.client.set(key, json.dumps(value), ex=ttl_seconds)
            return True
        except (TypeError, ValueError) as e:
            logger.warning(f"Value for cache key {key} is not JSON serializable: {e}")
            return False
        except RedisError as e:
            logger.error(f"Redis SET error for key {key}: {e}", exc_info=True)
            return False

    async def delete(self, key: str) -> bool:
        """Deletes a key from the cache."""
        try:
            deleted_count = await self.client.delete(key)
            logger.debug(f"Deleted {deleted_count} keys for: {key}")
            return deleted_count > 0
        except RedisError as e:
            logger.error(f"Redis DELETE error for key {key}: {e}", exc_info=True)
            return False
