"""
Redis Repository Implementation Module Initialization
"""

from redisweb.repositories.redis.key_store_repo import RedisKeyStoreRepository

__all__ = [
    "RedisKeyStoreRepository",
]
