"""
Key Store Repository Interface

Defines the data access interface the explorer needs from a key-value store.
One repository instance is bound to one server and database.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from redisweb.domain.keys import KeyDescriptor, KeyType, StoreRecord, StoreValue


class KeyStoreRepository(ABC):
    """Key Store Repository Interface"""

    @abstractmethod
    async def list_keys(self, pattern: str, max_keys: int) -> list[KeyDescriptor]:
        """
        List keys matching a glob-style pattern

        Keys come back in the order the store produced them.

        Args:
            pattern: Match pattern, e.g. "user:*"
            max_keys: Stop once this many keys have been collected

        Returns:
            list[KeyDescriptor]: Matching keys

        Raises:
            InvalidPatternError: The store rejected the pattern
            StoreUnavailableError: The store cannot be reached
        """
        pass

    @abstractmethod
    async def get_type(self, key: str) -> Optional[str]:
        """
        Get the store type of a key

        Returns:
            The type name reported by the store, None if the key does not exist
        """
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Whether the key exists"""
        pass

    @abstractmethod
    async def read_key(self, key: str, key_type: KeyType) -> Optional[StoreRecord]:
        """
        Read value and metadata of a key

        Args:
            key: The key to read
            key_type: Type previously reported by `get_type`

        Returns:
            StoreRecord if the key still exists, None otherwise
        """
        pass

    @abstractmethod
    async def create_key(self, key: str, key_type: KeyType, value: StoreValue) -> None:
        """
        Write a new key

        Raises:
            KeyExistsError: The key exists (or appeared while writing)
        """
        pass

    @abstractmethod
    async def replace_value(self, key: str, key_type: KeyType, value: StoreValue) -> None:
        """
        Replace the value of an existing key, keeping its type and TTL

        Raises:
            KeyNotFoundError: The key does not exist
            TypeConflictError: The key is no longer of `key_type`
        """
        pass

    @abstractmethod
    async def expire(self, key: str, seconds: int) -> bool:
        """
        Set a relative expiration

        Args:
            key: The key
            seconds: Time to live; zero expires the key immediately

        Returns:
            True if the key existed
        """
        pass

    @abstractmethod
    async def delete_key(self, key: str) -> bool:
        """
        Delete a key

        Returns:
            True if deleted, False if key didn't exist
        """
        pass

    @abstractmethod
    async def run_command(self, *args: str) -> Any:
        """
        Execute an arbitrary command and return the raw reply

        Raises:
            StoreCommandError: The store answered with an error reply
        """
        pass

    @abstractmethod
    async def info(self) -> str:
        """Server INFO text"""
        pass

    @abstractmethod
    async def database_count(self) -> int:
        """Number of databases the server is configured with"""
        pass


# (server, database) -> repository
RepositoryFactory = Callable[[str, int], KeyStoreRepository]
