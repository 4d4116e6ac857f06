"""
Redis Connection Management Module

Keeps one async client per (server, database) pair and closes them all on
shutdown. Clients keep replies as bytes so binary values survive; a second
"raw" client per pair shares the same connection pool but skips redis-py's
reply parsing, for commands typed by the user.
"""

import logging
import warnings
from urllib.parse import urlparse

from redis.asyncio import Redis

from redisweb.common.errors import UnknownServerError
from redisweb.config import RedisServer, get_settings

logger = logging.getLogger(__name__)

# (server, database) -> client
_clients: dict[tuple[str, int], Redis] = {}
_raw_clients: dict[tuple[str, int], Redis] = {}


def _check_redis_security(redis_url: str) -> None:
    """
    Check Redis connection security.

    Warns if Redis URL has no password and is not a localhost connection.
    """
    parsed = urlparse(redis_url)

    has_password = bool(parsed.password)
    is_localhost = parsed.hostname in ("localhost", "127.0.0.1", "::1")

    if not has_password and not is_localhost:
        warnings.warn(
            f"SECURITY WARNING: Redis server {parsed.hostname} is configured without a password. "
            "Please set a password using the format: redis://:password@host:port",
            UserWarning,
            stacklevel=3,
        )
        logger.warning(
            "Redis connection without password to non-localhost host %s detected.",
            parsed.hostname,
        )


def get_server(name: str) -> RedisServer:
    """
    Look up a configured server by name

    Raises:
        UnknownServerError: No server with that name is configured
    """
    for server in get_settings().get_servers():
        if server.name == name:
            return server
    raise UnknownServerError(name)


def get_redis(server: str, database: int) -> Redis:
    """
    Get (or lazily create) the client for a server and database

    Args:
        server: Configured server name
        database: Database index

    Returns:
        Redis: Async client returning bytes replies
    """
    cache_key = (server, database)
    client = _clients.get(cache_key)
    if client is None:
        config = get_server(server)
        _check_redis_security(config.url)
        client = Redis.from_url(
            config.url,
            db=database,
            decode_responses=False,
            socket_timeout=get_settings().REDIS_SOCKET_TIMEOUT,
        )
        _clients[cache_key] = client
        logger.info("Redis client created for server %s db %d", server, database)
    return client


def get_raw_redis(server: str, database: int) -> Redis:
    """
    Get the client used for user-typed commands

    It shares the connection pool of `get_redis` and has no reply callbacks,
    so replies arrive exactly as the server sent them.
    """
    cache_key = (server, database)
    raw = _raw_clients.get(cache_key)
    if raw is None:
        raw = Redis(connection_pool=get_redis(server, database).connection_pool)
        raw.response_callbacks.clear()
        _raw_clients[cache_key] = raw
    return raw


async def close_redis() -> None:
    """
    Close Redis Connections

    Gracefully closes every client created so far.
    Should be called during application shutdown.
    """
    _raw_clients.clear()
    while _clients:
        (server, database), client = _clients.popitem()
        await client.aclose()
        logger.info("Redis connection closed for server %s db %d", server, database)
