import pytest

from infrastructure.cache import NotificationReceiptCache, RedisCache, get_receipt_cache


class FakeRedis:
    """Subset of redis.asyncio.Redis used by RedisCache."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    async def set(self, key, value, ex=None, nx=False):
        if nx and key in self.store:
            return None
        self.store[key] = value
        self.ttls[key] = ex
        return True

    async def exists(self, key):
        return int(key in self.store)


@pytest.mark.asyncio
async def test_receipts_are_namespaced_and_expire():
    redis = FakeRedis()
    receipts = NotificationReceiptCache(RedisCache(redis, namespace="bridge:"), ttl=60)

    assert await receipts.is_processed("T1", "N1") is False
    await receipts.mark_processed("T1", "N1")

    assert await receipts.is_processed("T1", "N1") is True
    assert await receipts.is_processed("T1", "N2") is False
    assert redis.ttls == {"bridge:paghiper:notification:T1:N1": 60}


@pytest.mark.asyncio
async def test_set_once_keeps_first_value():
    cache = RedisCache(FakeRedis())

    assert await cache.set_once("k", "a") is True
    assert await cache.set_once("k", "b") is False


def test_no_receipts_without_redis():
    assert get_receipt_cache() is None
