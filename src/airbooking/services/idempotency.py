"""
Idempotency keys for booking submission

Only used when the caller sends X-Idempotency-Key. Without Redis every
call is a no-op and requests go through normally.
"""
import hashlib
import logging
import time
from typing import Any, Optional

from airbooking.core.redis import RedisClient

logger = logging.getLogger(__name__)


class IdempotencyService:
    """
    Stores the first successful result per key so a retried request
    (double click, network timeout, refresh) gets the same booking back.
    """

    def __init__(self, redis: RedisClient, ttl: int = 86400, lock_ttl: int = 30):
        self.redis = redis
        self.ttl = ttl
        self.lock_ttl = lock_ttl

    def make_key(self, user_id: int, operation: str, client_key: str) -> str:
        """
        Scope a client-supplied key to the caller and operation.

        Returns:
            idempotency:{operation}:{sha256}
        """
        digest = hashlib.sha256(f"{user_id}:{client_key.strip()}".encode()).hexdigest()
        return f"idempotency:{operation}:{digest}"

    async def check_operation(self, idempotency_key: str) -> Optional[dict]:
        """
        Returns:
            - None if operation is new
            - Previous result if operation was already completed
        """
        result = await self.redis.get(idempotency_key)
        if result:
            logger.info(f"Idempotent replay: {idempotency_key}")
        return result

    async def store_result(self, idempotency_key: str, result: Any):
        await self.redis.set(idempotency_key, result, ttl=self.ttl)

    async def lock_operation(self, idempotency_key: str) -> bool:
        """
        Acquire the in-flight lock for a key.

        Returns:
            False only when another request holds the lock
        """
        acquired = await self.redis.set_nx(f"{idempotency_key}:lock", str(time.time()), self.lock_ttl)
        # None: Redis not connected, nothing to coordinate
        return acquired is not False

    async def release_lock(self, idempotency_key: str):
        await self.redis.delete(f"{idempotency_key}:lock")
