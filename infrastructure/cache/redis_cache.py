"""Redis缓存实现: remembers PagHiper notifications already applied."""
from __future__ import annotations

import asyncio
from typing import Optional

from redis import asyncio as aioredis

from core.config import settings


class RedisCache:
    """Namespaced key helper over an asyncio Redis client."""

    def __init__(self, client: aioredis.Redis, namespace: str = "") -> None:
        self._client = client
        self._namespace = namespace.strip(":")

    def _format_key(self, key: str) -> str:
        if not self._namespace:
            return key
        return f"{self._namespace}:{key}"

    async def set_once(self, key: str, value: str = "1", ttl: Optional[int] = None) -> bool:
        """SET NX; returns False when the key already existed."""
        expire = ttl if ttl and ttl > 0 else None
        return bool(await self._client.set(self._format_key(key), value, ex=expire, nx=True))

    async def exists(self, key: str) -> bool:
        return bool(await self._client.exists(self._format_key(key)))


class NotificationReceiptCache:
    """NotificationReceipts port backed by redis keys with a TTL."""

    def __init__(self, cache: RedisCache, ttl: Optional[int] = None) -> None:
        self._cache = cache
        self._ttl = settings.redis.notification_receipt_ttl if ttl is None else ttl

    @staticmethod
    def _key(transaction_code: str, notification_id: str) -> str:
        return f"paghiper:notification:{transaction_code}:{notification_id}"

    async def is_processed(self, transaction_code: str, notification_id: str) -> bool:
        return await self._cache.exists(self._key(transaction_code, notification_id))

    async def mark_processed(self, transaction_code: str, notification_id: str) -> None:
        await self._cache.set_once(self._key(transaction_code, notification_id), ttl=self._ttl)


_redis_client: Optional[aioredis.Redis] = None
_cache_instance: Optional[RedisCache] = None
_lock = asyncio.Lock()


async def init_redis_cache(namespace: Optional[str] = None) -> RedisCache:
    """初始化Redis缓存实例"""
    global _redis_client, _cache_instance

    if _cache_instance is not None:
        return _cache_instance

    async with _lock:
        if _cache_instance is not None:
            return _cache_instance

        if not settings.redis.url:
            raise RuntimeError("REDIS__URL is not configured")

        client = aioredis.from_url(
            settings.redis.url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=settings.redis.max_connections,
        )

        _redis_client = client
        _cache_instance = RedisCache(
            client=client,
            namespace=namespace or settings.redis.namespace,
        )
        return _cache_instance


def get_receipt_cache() -> Optional[NotificationReceiptCache]:
    """Receipt cache when redis was initialized, else None (pipeline always runs)."""
    if _cache_instance is None:
        return None
    return NotificationReceiptCache(_cache_instance)


async def shutdown_redis_cache() -> None:
    """关闭Redis连接"""
    global _redis_client, _cache_instance

    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
        _cache_instance = None
