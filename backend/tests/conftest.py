"""
Test Configuration Module
"""

import copy
import fnmatch
from typing import Any, Optional

import pytest

from redisweb.common.errors import (
    KeyExistsError,
    KeyNotFoundError,
    StoreCommandError,
    TypeConflictError,
)
from redisweb.domain.keys import KeyDescriptor, KeyType, StoreRecord, StoreValue
from redisweb.repositories.key_store_repo import KeyStoreRepository
from redisweb.services import ExplorerSession, KeyService, ListingService, ServerService
from redisweb.config import RedisServer


class InMemoryKeyStoreRepository(KeyStoreRepository):
    """Dict-backed store that records every call it receives"""

    def __init__(self):
        # key -> (type name, value), in insertion order
        self.data: dict[str, tuple[str, Any]] = {}
        self.ttls: dict[str, int] = {}
        self.calls: list[str] = []
        self.commands: list[tuple[str, ...]] = []

    def put(self, key: str, key_type: str, value: Any, ttl: Optional[int] = None) -> None:
        self.data[key] = (key_type, copy.deepcopy(value))
        if ttl is not None:
            self.ttls[key] = ttl

    def value(self, key: str) -> Any:
        return self.data[key][1]

    async def list_keys(self, pattern: str, max_keys: int) -> list[KeyDescriptor]:
        self.calls.append("list_keys")
        result = []
        for key, (key_type, value) in self.data.items():
            if fnmatch.fnmatchcase(key, pattern):
                length = 1 if key_type == "string" else len(value)
                result.append(KeyDescriptor(key=key, type=key_type, length=length))
        return result[:max_keys]

    async def get_type(self, key: str) -> Optional[str]:
        self.calls.append("get_type")
        entry = self.data.get(key)
        return entry[0] if entry else None

    async def exists(self, key: str) -> bool:
        self.calls.append("exists")
        return key in self.data

    async def read_key(self, key: str, key_type: KeyType) -> Optional[StoreRecord]:
        self.calls.append("read_key")
        if key not in self.data:
            return None
        type_name, value = self.data[key]
        size = len(value.encode("utf-8", "surrogateescape")) if type_name == "string" else len(value)
        return StoreRecord(
            key=key,
            type=key_type,
            value=copy.deepcopy(value),
            ttl=self.ttls.get(key, -1),
            size=size,
            encoding="embstr" if type_name == "string" else "listpack",
        )

    async def create_key(self, key: str, key_type: KeyType, value: StoreValue) -> None:
        self.calls.append("create_key")
        if key in self.data:
            raise KeyExistsError(key)
        self.put(key, key_type.value, value)

    async def replace_value(self, key: str, key_type: KeyType, value: StoreValue) -> None:
        self.calls.append("replace_value")
        if key not in self.data:
            raise KeyNotFoundError(key)
        actual = self.data[key][0]
        if actual != key_type.value:
            raise TypeConflictError(key, key_type.value, actual)
        self.data[key] = (actual, copy.deepcopy(value))

    async def expire(self, key: str, seconds: int) -> bool:
        self.calls.append("expire")
        if key not in self.data:
            return False
        if seconds <= 0:
            del self.data[key]
            self.ttls.pop(key, None)
        else:
            self.ttls[key] = seconds
        return True

    async def delete_key(self, key: str) -> bool:
        self.calls.append("delete_key")
        self.ttls.pop(key, None)
        return self.data.pop(key, None) is not None

    async def run_command(self, *args: str) -> Any:
        self.calls.append("run_command")
        self.commands.append(args)
        name = args[0].upper()
        if name == "PING":
            return b"PONG"
        if name == "DBSIZE":
            return len(self.data)
        if name == "KEYS":
            return [key.encode() for key in self.data if fnmatch.fnmatchcase(key, args[1])]
        raise StoreCommandError(f"ERR unknown command '{args[0]}'")

    async def info(self) -> str:
        self.calls.append("info")
        return "# Server\r\nredis_version:7.2.4\r\n"

    async def database_count(self) -> int:
        self.calls.append("database_count")
        return 16


@pytest.fixture
def memory_repo() -> InMemoryKeyStoreRepository:
    """Empty in-memory store"""
    return InMemoryKeyStoreRepository()


@pytest.fixture
def repo_factory(memory_repo):
    """Factory handing out the same in-memory store for every server/database"""
    return lambda server, database: memory_repo


@pytest.fixture
def key_service(repo_factory) -> KeyService:
    return KeyService(repo_factory)


@pytest.fixture
def listing_service(repo_factory) -> ListingService:
    return ListingService(repo_factory, max_keys=100)


@pytest.fixture
def server_service(repo_factory) -> ServerService:
    return ServerService(repo_factory, [RedisServer(name="default", url="redis://localhost:6379")])


@pytest.fixture
def session(listing_service, key_service) -> ExplorerSession:
    return ExplorerSession(listing_service, key_service)
