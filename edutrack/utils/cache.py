"""
Redis cache utility for quiz definitions and statistics
"""
import redis
import json
import logging
from typing import Optional, Any
from edutrack.config import settings

logger = logging.getLogger(__name__)


class CacheService:
    """Redis-based caching service; every call is a no-op when redis is unavailable"""

    def __init__(self):
        self.redis_client = None

        if not settings.CACHE_ENABLED:
            logger.info("Caching disabled by configuration")
            return

        try:
            self.redis_client = redis.from_url(
                settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=5
            )
            # Test connection
            self.redis_client.ping()
            logger.info("Redis connection established")
        except redis.RedisError as e:
            logger.warning(f"Redis connection failed: {str(e)}. Caching disabled.")
            self.redis_client = None

    def quiz_key(self, quiz_id: str) -> str:
        return f"quiz:{quiz_id}"

    def stats_key(self, quiz_id: str) -> str:
        return f"quiz_stats:{quiz_id}"

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache

        Args:
            key: Cache key

        Returns:
            Cached value or None
        """
        if not self.redis_client:
            return None

        try:
            value = self.redis_client.get(key)
            if value:
                logger.debug(f"Cache hit: {key}")
                return json.loads(value)
            logger.debug(f"Cache miss: {key}")
            return None
        except redis.RedisError as e:
            logger.error(f"Cache get error: {str(e)}")
            return None

    def set(self, key: str, value: Any, ttl: int = None) -> bool:
        """
        Set value in cache

        Args:
            key: Cache key
            value: Value to cache (must be JSON serializable)
            ttl: Time to live in seconds (default from settings)

        Returns:
            Success status
        """
        if not self.redis_client:
            return False

        try:
            ttl = ttl or settings.CACHE_TTL
            self.redis_client.setex(key, ttl, json.dumps(value))
            logger.debug(f"Cache set: {key} (TTL: {ttl}s)")
            return True
        except (redis.RedisError, TypeError) as e:
            logger.error(f"Cache set error: {str(e)}")
            return False

    def clear_quiz_cache(self, quiz_id: str) -> bool:
        """Drop the cached definition and statistics of a quiz"""
        if not self.redis_client:
            return False

        try:
            self.redis_client.delete(self.quiz_key(quiz_id), self.stats_key(quiz_id))
            logger.info(f"Cleared cache entries for quiz {quiz_id}")
            return True
        except redis.RedisError as e:
            logger.error(f"Cache clear error: {str(e)}")
            return False

    def clear_stats(self, quiz_id: str) -> bool:
        if not self.redis_client:
            return False

        try:
            self.redis_client.delete(self.stats_key(quiz_id))
            return True
        except redis.RedisError as e:
            logger.error(f"Cache delete error: {str(e)}")
            return False


# Global instance
cache_service = CacheService()
