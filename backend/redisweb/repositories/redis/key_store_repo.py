"""
Key Store Repository Redis Implementation

Provides concrete Redis operation implementation for the explorer.
Values are exchanged as bytes and mapped to `str` with UTF-8 and
`surrogateescape`, so any byte string round-trips unchanged.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError, ResponseError, WatchError
from redis.exceptions import TimeoutError as RedisTimeoutError

from redisweb.codec.quoting import from_bytes, is_utf8, to_bytes
from redisweb.common.errors import (
    ConflictError,
    InvalidPatternError,
    KeyExistsError,
    KeyNotFoundError,
    StoreCommandError,
    StoreUnavailableError,
    TypeConflictError,
)
from redisweb.domain.keys import KeyDescriptor, KeyType, StoreRecord, StoreValue
from redisweb.repositories.key_store_repo import KeyStoreRepository

logger = logging.getLogger(__name__)

# Command used to size each collection type in key listings
_LENGTH_COMMANDS = {
    "hash": "hlen",
    "list": "llen",
    "set": "scard",
    "zset": "zcard",
}


def _s(value: Any) -> Any:
    """Convert Redis bytes to str"""
    if isinstance(value, bytes):
        return from_bytes(value)
    return value


@contextmanager
def _store_errors() -> Iterator[None]:
    """Translate redis-py exceptions into application errors"""
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError) as e:
        logger.error("Redis unavailable: %s", e)
        raise StoreUnavailableError(f"Store unavailable: {e}") from e
    except RedisError as e:
        raise StoreCommandError(str(e)) from e


class RedisKeyStoreRepository(KeyStoreRepository):
    """
    Key Store Repository Redis Implementation

    Uses WATCH/MULTI transactions so that creating never overwrites a key
    that appeared concurrently and replacing keeps the key's TTL.
    """

    def __init__(self, client: Redis, raw_client: Optional[Redis] = None, scan_count: int = 10):
        """
        Initialize Repository

        Args:
            client: Async Redis client (bytes replies)
            raw_client: Client without reply callbacks for user commands
            scan_count: COUNT hint for SCAN / SSCAN
        """
        self.client = client
        self.raw_client = raw_client or client
        self.scan_count = scan_count

    async def list_keys(self, pattern: str, max_keys: int) -> list[KeyDescriptor]:
        """Scan matching keys, then fetch their types and lengths in two pipelined round trips"""
        keys: list[bytes] = []
        seen: set[bytes] = set()
        cursor = 0
        with _store_errors():
            try:
                while True:
                    cursor, batch = await self.client.scan(
                        cursor=cursor, match=pattern, count=self.scan_count
                    )
                    for key in batch:
                        # SCAN may return a key more than once
                        if key not in seen:
                            seen.add(key)
                            keys.append(key)
                    if cursor == 0 or len(keys) >= max_keys:
                        break
            except ResponseError as e:
                raise InvalidPatternError(pattern, str(e)) from e
            keys = keys[:max_keys]
            if not keys:
                return []

            async with self.client.pipeline(transaction=False) as pipe:
                for key in keys:
                    pipe.type(key)
                types = [_s(t) for t in await pipe.execute()]

            async with self.client.pipeline(transaction=False) as pipe:
                sized = []
                for key, key_type in zip(keys, types):
                    command = _LENGTH_COMMANDS.get(key_type)
                    if command:
                        getattr(pipe, command)(key)
                        sized.append(key)
                lengths = dict(zip(sized, await pipe.execute(raise_on_error=False)))

        result = []
        for key, key_type in zip(keys, types):
            # Deleted between SCAN and TYPE
            if key_type == "none":
                continue
            name = _s(key)
            if not is_utf8(name):
                logger.warning("Skipping key %r: name is not valid UTF-8", key)
                continue
            length = lengths.get(key, 1)
            result.append(
                KeyDescriptor(
                    key=name,
                    type=key_type,
                    length=length if isinstance(length, int) else 0,
                )
            )
        return result

    async def get_type(self, key: str) -> Optional[str]:
        with _store_errors():
            key_type = _s(await self.client.type(to_bytes(key)))
        return None if key_type == "none" else key_type

    async def exists(self, key: str) -> bool:
        with _store_errors():
            return await self.client.exists(to_bytes(key)) > 0

    async def read_key(self, key: str, key_type: KeyType) -> Optional[StoreRecord]:
        name = to_bytes(key)
        with _store_errors():
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.ttl(name)
                pipe.object("encoding", name)
                if key_type is KeyType.STRING:
                    pipe.get(name)
                    pipe.strlen(name)
                elif key_type is KeyType.HASH:
                    pipe.hgetall(name)
                    pipe.hlen(name)
                elif key_type is KeyType.LIST:
                    pipe.lrange(name, 0, -1)
                    pipe.llen(name)
                elif key_type is KeyType.SET:
                    pipe.scard(name)
                else:
                    pipe.zrange(name, 0, -1, withscores=True)
                    pipe.zcard(name)
                replies = await pipe.execute()

            ttl, encoding = replies[0], _s(replies[1])
            # -2: the key vanished after get_type
            if ttl == -2:
                return None

            if key_type is KeyType.STRING:
                raw, size = replies[2], replies[3]
                if raw is None:
                    return None
                value: StoreValue = from_bytes(raw)
            elif key_type is KeyType.HASH:
                value = {from_bytes(f): from_bytes(v) for f, v in replies[2].items()}
                size = replies[3]
            elif key_type is KeyType.LIST:
                value = [from_bytes(item) for item in replies[2]]
                size = replies[3]
            elif key_type is KeyType.SET:
                # SMEMBERS is parsed into a Python set; SSCAN keeps server order
                size = replies[2]
                value = await self._scan_members(name)
            else:
                value = [(from_bytes(member), float(score)) for member, score in replies[2]]
                size = replies[3]

        return StoreRecord(
            key=key,
            type=key_type,
            value=value,
            ttl=ttl,
            size=size,
            encoding=encoding or "",
        )

    async def _scan_members(self, name: bytes) -> list[str]:
        members: list[str] = []
        seen: set[bytes] = set()
        cursor = 0
        while True:
            cursor, batch = await self.client.sscan(name, cursor=cursor, count=self.scan_count)
            for member in batch:
                if member not in seen:
                    seen.add(member)
                    members.append(from_bytes(member))
            if cursor == 0:
                return members

    def _queue_write(self, pipe: Any, name: bytes, key_type: KeyType, value: StoreValue) -> None:
        if key_type is KeyType.STRING:
            pipe.set(name, to_bytes(value))
        elif key_type is KeyType.HASH:
            pipe.hset(name, mapping={to_bytes(f): to_bytes(v) for f, v in value.items()})
        elif key_type is KeyType.LIST:
            pipe.rpush(name, *[to_bytes(item) for item in value])
        elif key_type is KeyType.SET:
            pipe.sadd(name, *[to_bytes(item) for item in value])
        else:
            pipe.zadd(name, {to_bytes(member): score for member, score in value})

    async def create_key(self, key: str, key_type: KeyType, value: StoreValue) -> None:
        name = to_bytes(key)
        with _store_errors():
            async with self.client.pipeline(transaction=True) as pipe:
                try:
                    await pipe.watch(name)
                    if await pipe.exists(name):
                        raise KeyExistsError(key)
                    pipe.multi()
                    self._queue_write(pipe, name, key_type, value)
                    await pipe.execute()
                except WatchError as e:
                    raise KeyExistsError(key) from e

    async def replace_value(self, key: str, key_type: KeyType, value: StoreValue) -> None:
        name = to_bytes(key)
        with _store_errors():
            async with self.client.pipeline(transaction=True) as pipe:
                try:
                    await pipe.watch(name)
                    actual = _s(await pipe.type(name))
                    if actual == "none":
                        raise KeyNotFoundError(key)
                    if actual != key_type.value:
                        raise TypeConflictError(key, key_type.value, actual)
                    pttl = await pipe.pttl(name)
                    pipe.multi()
                    pipe.delete(name)
                    self._queue_write(pipe, name, key_type, value)
                    if pttl > 0:
                        pipe.pexpire(name, pttl)
                    await pipe.execute()
                except WatchError as e:
                    raise ConflictError(
                        message=f"Key '{key}' was modified while saving, reload and retry",
                        code="concurrent_modification",
                        details={"key": key},
                    ) from e

    async def expire(self, key: str, seconds: int) -> bool:
        with _store_errors():
            return bool(await self.client.expire(to_bytes(key), seconds))

    async def delete_key(self, key: str) -> bool:
        with _store_errors():
            return await self.client.delete(to_bytes(key)) > 0

    async def run_command(self, *args: str) -> Any:
        with _store_errors():
            return await self.raw_client.execute_command(*[to_bytes(arg) for arg in args])

    async def info(self) -> str:
        return _s(await self.run_command("INFO"))

    async def database_count(self) -> int:
        reply = await self.run_command("CONFIG", "GET", "databases")
        # [b"databases", b"16"]
        return int(reply[1])
