"""
Idempotency service tests against an in-memory Redis stand-in
"""
import pytest

from airbooking.core.redis import RedisClient
from airbooking.services import IdempotencyService


class MemoryRedis(RedisClient):
    """RedisClient backed by a dict instead of a server"""

    def __init__(self):
        super().__init__("redis://unused")
        self.store = {}

    @property
    def connected(self) -> bool:
        return True

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ttl=None):
        self.store[key] = value
        return True

    async def set_nx(self, key, value, ttl):
        if key in self.store:
            return False
        self.store[key] = value
        return True

    async def delete(self, *keys):
        for key in keys:
            self.store.pop(key, None)
        return True


class TestIdempotencyService:

    def test_keys_are_scoped_to_caller(self):
        service = IdempotencyService(MemoryRedis())

        assert service.make_key(1, "create_booking", "abc") != service.make_key(2, "create_booking", "abc")
        assert service.make_key(1, "create_booking", "abc").startswith("idempotency:create_booking:")

    @pytest.mark.asyncio
    async def test_replay_returns_stored_result(self):
        service = IdempotencyService(MemoryRedis())
        key = service.make_key(1, "create_booking", "abc")

        assert await service.check_operation(key) is None
        await service.store_result(key, {"booking_reference": "K7M2QX"})

        assert await service.check_operation(key) == {"booking_reference": "K7M2QX"}

    @pytest.mark.asyncio
    async def test_lock_blocks_concurrent_duplicate(self):
        service = IdempotencyService(MemoryRedis())
        key = service.make_key(1, "create_booking", "abc")

        assert await service.lock_operation(key) is True
        assert await service.lock_operation(key) is False
        await service.release_lock(key)
        assert await service.lock_operation(key) is True

    @pytest.mark.asyncio
    async def test_without_redis_everything_proceeds(self):
        """Test a disconnected client never blocks a request"""
        service = IdempotencyService(RedisClient("redis://localhost:1/0"))
        key = service.make_key(1, "create_booking", "abc")

        assert await service.lock_operation(key) is True
        assert await service.lock_operation(key) is True
        assert await service.check_operation(key) is None
