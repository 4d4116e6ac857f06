"""
Key Management Service Module

Owns the validate-before-commit sequencing of key mutations: display text
is decoded and TTL expressions parsed before the store is touched, and a
value is only written once it decodes cleanly for the key's type.
"""

import logging
from typing import Literal, Optional

from redisweb import codec
from redisweb.codec.quoting import is_utf8
from redisweb.common.errors import (
    AppError,
    KeyExistsError,
    KeyNotFoundError,
    PartialTTLFailureError,
    StoreCommandError,
    ValidationError,
)
from redisweb.common.ttl import TTLDirective, TTLKind, format_ttl, parse_ttl
from redisweb.domain.keys import (
    ContentChange,
    ContentView,
    Format,
    KeyCreate,
    KeyType,
    StoreValue,
)
from redisweb.repositories.key_store_repo import KeyStoreRepository, RepositoryFactory

logger = logging.getLogger(__name__)


class KeyService:
    """
    Key Management Service

    Handles reading, creating, updating and deleting keys.
    """

    def __init__(
        self,
        repo_factory: RepositoryFactory,
        negative_ttl_policy: Literal["delete", "persist"] = "delete",
    ):
        """
        Initialize Service

        Args:
            repo_factory: Builds the repository for a (server, database)
            negative_ttl_policy: "delete" expires a key created with a negative
                TTL right away, "persist" keeps it without expiry
        """
        self.repo_factory = repo_factory
        self.negative_ttl_policy = negative_ttl_policy

    @staticmethod
    def _ensure_not_empty(key_type: KeyType, value: StoreValue) -> None:
        # Redis removes a collection when its last element goes away
        if key_type.is_composite and not value:
            raise ValidationError(
                message=f"A {key_type.value} needs at least one element",
                code="empty_value",
            )

    @staticmethod
    def _key_type(key: str, type_name: str) -> KeyType:
        try:
            return KeyType(type_name)
        except ValueError:
            raise ValidationError(
                message=f"Key '{key}' has unsupported type {type_name}",
                code="unsupported_type",
                details={"key": key, "type": type_name},
            )

    async def create(self, data: KeyCreate) -> None:
        """
        Create Key

        Args:
            data: Creation data

        Raises:
            ValidationError: Empty key or empty collection
            DecodeError: Value does not decode for (type, format)
            TTLParseError: Malformed TTL
            KeyExistsError: Key already exists
            PartialTTLFailureError: Value written, TTL not applied
        """
        if not data.key:
            raise ValidationError(message="Key must not be empty", code="empty_key")

        value = codec.decode(data.type, data.format, data.value)
        self._ensure_not_empty(data.type, value)
        ttl = parse_ttl(data.ttl, creating=True)

        repo = self.repo_factory(data.server, data.database)
        if await repo.exists(data.key):
            raise KeyExistsError(data.key)

        await repo.create_key(data.key, data.type, value)
        logger.info(
            "Created %s key %r on %s/%d", data.type.value, data.key, data.server, data.database
        )
        await self._apply_ttl(repo, data.key, ttl)

    async def _apply_ttl(self, repo: KeyStoreRepository, key: str, ttl: TTLDirective) -> None:
        """Apply a TTL to a key that was just written"""
        if ttl.kind is TTLKind.DURATION:
            seconds = ttl.seconds
        elif ttl.kind is TTLKind.EXPIRE_NOW and self.negative_ttl_policy == "delete":
            seconds = 0
        else:
            return

        try:
            applied = await repo.expire(key, seconds)
        except AppError as e:
            logger.error("Key %r written but TTL %ds failed: %s", key, seconds, e.message)
            raise PartialTTLFailureError(key, e.message) from e
        if not applied:
            logger.error("Key %r vanished before TTL %ds could be set", key, seconds)
            raise PartialTTLFailureError(key, "the key no longer exists")

    async def read(
        self,
        server: str,
        database: int,
        key: str,
        format: Optional[Format] = None,
    ) -> ContentView:
        """
        Read a key for display

        Args:
            server: Server name
            database: Database index
            key: The key
            format: Display format, detected from the value when omitted

        Returns:
            ContentView: `exists=False` with empty fields if the key is absent
        """
        repo = self.repo_factory(server, database)
        type_name = await repo.get_type(key)
        if type_name is None:
            return ContentView.missing()

        try:
            key_type = KeyType(type_name)
        except ValueError:
            return ContentView(
                key=key,
                type=type_name,
                exists=True,
                error=f"Unsupported type {type_name}",
            )

        try:
            record = await repo.read_key(key, key_type)
        except StoreCommandError as e:
            return ContentView(key=key, type=type_name, exists=True, error=e.message)
        if record is None:
            return ContentView.missing()

        format = Format(format) if format else codec.detect_format(key_type, record.value)
        content = codec.encode(key_type, format, record.value)
        if not is_utf8(content):
            # Only the Quoted format can show bytes that are not UTF-8
            format = Format.QUOTED
            content = codec.encode(key_type, format, record.value)
        return ContentView(
            key=key,
            type=key_type.value,
            content=content,
            ttl=format_ttl(record.ttl),
            size=record.size,
            encoding=record.encoding,
            format=format.value,
            exists=True,
        )

    async def update(self, data: ContentChange) -> None:
        """
        Update Key Content

        The key's current type decides how the content is decoded; TTL is kept.

        Raises:
            KeyNotFoundError: Key does not exist
            DecodeError: Content does not decode for (existing type, format)
            TypeConflictError: Key changed type while saving
        """
        repo = self.repo_factory(data.server, data.database)
        type_name = await repo.get_type(data.key)
        if type_name is None:
            raise KeyNotFoundError(data.key)
        key_type = self._key_type(data.key, type_name)

        try:
            value = codec.decode(key_type, data.format, data.changed_content)
        except AppError as e:
            logger.warning("Rejected update of %r: %s", data.key, e.message)
            raise
        self._ensure_not_empty(key_type, value)

        await repo.replace_value(data.key, key_type, value)
        logger.info(
            "Updated %s key %r on %s/%d", key_type.value, data.key, data.server, data.database
        )

    async def delete(self, server: str, database: int, key: str) -> bool:
        """
        Delete Key

        Deleting an absent key is not an error.

        Returns:
            bool: True if a key was removed
        """
        repo = self.repo_factory(server, database)
        deleted = await repo.delete_key(key)
        logger.info("Delete key %r on %s/%d: %s", key, server, database, deleted)
        return deleted
