"""
Redis client wrapper; every call degrades to a no-op when Redis is unreachable
"""
import json
import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class ResultEncoder(json.JSONEncoder):
    """JSON encoder for stored API responses"""
    def default(self, obj):
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, Decimal):
            return str(obj)
        return super().default(obj)


class RedisClient:
    """Async Redis client wrapper"""

    def __init__(self, url: str, default_ttl: int = 300):
        self.url = url
        self.default_ttl = default_ttl
        self.redis: Optional[redis.Redis] = None

    @property
    def connected(self) -> bool:
        return self.redis is not None

    async def connect(self):
        """Connect to Redis"""
        try:
            client = redis.from_url(
                self.url,
                encoding="utf-8",
                decode_responses=True,
                max_connections=50
            )
            await client.ping()
            self.redis = client
            logger.info("Redis connected")
        except (redis.RedisError, OSError) as e:
            logger.warning(f"Redis unavailable, continuing without it: {e}")
            self.redis = None

    async def close(self):
        """Close Redis connection"""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            logger.info("Redis connection closed")

    async def get(self, key: str) -> Optional[Any]:
        if not self.redis:
            return None

        try:
            value = await self.redis.get(key)
            if value:
                return json.loads(value)
            return None
        except redis.RedisError as e:
            logger.error(f"Redis GET error for key {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set value with TTL"""
        if not self.redis:
            return False

        try:
            serialized = json.dumps(value, cls=ResultEncoder)
            await self.redis.setex(key, ttl or self.default_ttl, serialized)
            return True
        except redis.RedisError as e:
            logger.error(f"Redis SET error for key {key}: {e}")
            return False

    async def set_nx(self, key: str, value: str, ttl: int) -> Optional[bool]:
        """
        SET NX with expiry.

        Returns None when Redis is not connected so callers can tell
        "not acquired" apart from "no lock service".
        """
        if not self.redis:
            return None

        try:
            return bool(await self.redis.set(key, value, ex=ttl, nx=True))
        except redis.RedisError as e:
            logger.error(f"Redis SETNX error for key {key}: {e}")
            return None

    async def delete(self, *keys: str) -> bool:
        if not self.redis:
            return False

        try:
            await self.redis.delete(*keys)
            return True
        except redis.RedisError as e:
            logger.error(f"Redis DELETE error: {e}")
            return False
