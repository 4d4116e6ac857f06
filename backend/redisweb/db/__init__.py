"""
Store Connection Module Initialization
"""

from redisweb.db.redis import close_redis, get_raw_redis, get_redis, get_server

__all__ = [
    "close_redis",
    "get_raw_redis",
    "get_redis",
    "get_server",
]
