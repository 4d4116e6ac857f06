"""
Key Listing Service Module

Lists the keys of a server/database and filters the listed keys locally.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable

from redisweb.domain.keys import KeyDescriptor
from redisweb.repositories.key_store_repo import RepositoryFactory

logger = logging.getLogger(__name__)


def filter_keys(descriptors: Iterable[KeyDescriptor], substring: str) -> list[KeyDescriptor]:
    """
    Keep the keys whose name contains `substring`, ignoring case

    Pure: works on the given descriptors only and keeps their order.
    Surrounding whitespace of `substring` is ignored; an empty filter keeps everything.
    """
    needle = (substring or "").strip().casefold()
    return [d for d in descriptors if needle in d.key.casefold()]


@dataclass(frozen=True)
class KeySnapshot:
    """
    The most recently listed keys

    Each refresh produces a new snapshot with a higher version; filtering
    and local edits derive new values instead of mutating this one.
    """

    version: int = 0
    pattern: str = "*"
    keys: tuple[KeyDescriptor, ...] = field(default_factory=tuple)

    def filter(self, substring: str) -> list[KeyDescriptor]:
        return filter_keys(self.keys, substring)

    def names(self) -> list[str]:
        return [d.key for d in self.keys]

    def without(self, key: str) -> "KeySnapshot":
        """Snapshot with `key` removed (after a delete)"""
        return replace(
            self,
            version=self.version + 1,
            keys=tuple(d for d in self.keys if d.key != key),
        )

    def with_key(self, descriptor: KeyDescriptor) -> "KeySnapshot":
        """Snapshot with `descriptor` appended unless already listed (after a create)"""
        if descriptor.key in self.names():
            return self
        return replace(self, version=self.version + 1, keys=self.keys + (descriptor,))


class ListingService:
    """
    Key Listing Service

    Pattern matching is done by the store; this service only normalizes the
    pattern and hands back the store's sequence as-is.
    """

    def __init__(self, repo_factory: RepositoryFactory, max_keys: int = 1000):
        """
        Initialize Service

        Args:
            repo_factory: Builds the repository for a (server, database)
            max_keys: Upper bound on listed keys
        """
        self.repo_factory = repo_factory
        self.max_keys = max_keys

    async def list(self, server: str, database: int, pattern: str = "") -> list[KeyDescriptor]:
        """
        List keys matching a pattern

        Args:
            server: Server name
            database: Database index
            pattern: Glob-style pattern, empty means every key

        Returns:
            list[KeyDescriptor]: Keys in store order
        """
        pattern = pattern.strip() or "*"
        repo = self.repo_factory(server, database)
        keys = await repo.list_keys(pattern, self.max_keys)
        logger.debug(
            "Listed %d keys on %s/%d matching %r", len(keys), server, database, pattern
        )
        return keys
