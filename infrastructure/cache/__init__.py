"""缓存层对外暴露的接口"""
from .redis_cache import (
    RedisCache,
    NotificationReceiptCache,
    init_redis_cache,
    shutdown_redis_cache,
    get_receipt_cache,
)

__all__ = [
    "RedisCache",
    "NotificationReceiptCache",
    "init_redis_cache",
    "shutdown_redis_cache",
    "get_receipt_cache",
]
