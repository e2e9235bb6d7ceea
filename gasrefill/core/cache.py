from typing import Any, Optional
import json
import logging
from redis import Redis
from redis.exceptions import RedisError
from gasrefill.core.config import settings

logger = logging.getLogger(__name__)


class RedisCache:
    """Best-effort snapshot cache; the database stays the source of truth."""

    def __init__(self, enabled: bool | None = None):
        self.enabled = settings.CACHE_ENABLED if enabled is None else enabled
        self.redis_client = Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            password=settings.REDIS_PASSWORD,
            decode_responses=True
        )
        self.default_expire = settings.REDIS_CACHE_EXPIRE_MINUTES * 60

    def _generate_key(self, key_parts: list[Any]) -> str:
        """Generate a consistent cache key from multiple parts"""
        return ":".join(str(part) for part in key_parts)

    async def get(self, key_parts: list[Any]) -> Optional[Any]:
        """Get a decoded value from cache, None on miss"""
        if not self.enabled:
            return None
        key = self._generate_key(key_parts)
        try:
            raw = self.redis_client.get(key)
        except RedisError as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            return None
        return json.loads(raw) if raw else None

    async def set(
        self,
        key_parts: list[Any],
        value: Any,
        expire: int | None = None
    ) -> None:
        """Set value in cache"""
        if not self.enabled:
            return
        key = self._generate_key(key_parts)
        try:
            self.redis_client.set(
                key,
                json.dumps(value, default=str),
                ex=expire or self.default_expire
            )
        except RedisError as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)

    async def delete(self, key_parts: list[Any]) -> None:
        """Delete value from cache"""
        if not self.enabled:
            return
        key = self._generate_key(key_parts)
        try:
            self.redis_client.delete(key)
        except RedisError as exc:
            logger.warning("Cache delete failed for %s: %s", key, exc)

    async def delete_many(self, prefix: str, ids: list[Any]) -> None:
        """Delete one key per id under a prefix"""
        if not self.enabled or not ids:
            return
        keys = [self._generate_key([prefix, item_id]) for item_id in ids]
        try:
            self.redis_client.delete(*keys)
        except RedisError as exc:
            logger.warning("Cache delete failed for %d keys: %s", len(keys), exc)


# Global cache instance
cache = RedisCache()
