"""
Test key management service
"""

from unittest.mock import AsyncMock

import pytest

from redisweb.codec.quoting import from_bytes
from redisweb.common.errors import (
    KeyExistsError,
    KeyNotFoundError,
    MalformedJSONError,
    PartialTTLFailureError,
    StoreCommandError,
    StoreUnavailableError,
    TTLParseError,
    TypeMismatchError,
    ValidationError,
)
from redisweb.domain.keys import ContentChange, ContentView, Format, KeyCreate, KeyType
from redisweb.services import KeyService


# ============ create ============


@pytest.mark.asyncio
async def test_create_string_with_ttl(key_service, memory_repo):
    """Test creating a string key that expires after a day"""
    await key_service.create(KeyCreate(key="greeting", ttl="1d", value="hello"))

    assert memory_repo.data["greeting"] == ("string", "hello")
    assert memory_repo.ttls["greeting"] == 86400


@pytest.mark.asyncio
async def test_create_hash_from_json(key_service, memory_repo):
    await key_service.create(
        KeyCreate(
            type=KeyType.HASH,
            key="user:1",
            format=Format.JSON,
            value='{"name": "alice", "age": 30}',
        )
    )

    assert memory_repo.value("user:1") == {"name": "alice", "age": "30"}
    assert "user:1" not in memory_repo.ttls


@pytest.mark.asyncio
async def test_create_existing_key_is_rejected(key_service, memory_repo):
    memory_repo.put("greeting", "string", "original")

    with pytest.raises(KeyExistsError):
        await key_service.create(KeyCreate(key="greeting", value="replacement"))

    assert memory_repo.value("greeting") == "original"
    assert "create_key" not in memory_repo.calls


@pytest.mark.asyncio
async def test_create_invalid_content_touches_nothing(key_service, memory_repo):
    """Decode failures are raised before any store call"""
    with pytest.raises(MalformedJSONError):
        await key_service.create(
            KeyCreate(type=KeyType.LIST, key="items", format=Format.JSON, value="[1, 2")
        )

    assert memory_repo.calls == []


@pytest.mark.asyncio
async def test_create_invalid_ttl_touches_nothing(key_service, memory_repo):
    with pytest.raises(TTLParseError):
        await key_service.create(KeyCreate(key="greeting", ttl="1x", value="hello"))

    assert memory_repo.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("ttl", ["9" * 30 + "d", "36501d", "1" * 5000])
async def test_create_unusable_ttl_touches_nothing(key_service, memory_repo, ttl):
    """A TTL Redis would refuse is rejected before the value is written"""
    with pytest.raises(TTLParseError):
        await key_service.create(KeyCreate(key="greeting", ttl=ttl, value="hello"))

    assert memory_repo.calls == []


@pytest.mark.asyncio
async def test_create_requires_key(key_service, memory_repo):
    with pytest.raises(ValidationError) as exc_info:
        await key_service.create(KeyCreate(key="", value="hello"))

    assert exc_info.value.code == "empty_key"
    assert memory_repo.calls == []


@pytest.mark.asyncio
async def test_create_empty_collection_rejected(key_service, memory_repo):
    with pytest.raises(ValidationError) as exc_info:
        await key_service.create(KeyCreate(type=KeyType.SET, key="tags", format=Format.JSON, value="[]"))

    assert exc_info.value.code == "empty_value"
    assert memory_repo.calls == []


@pytest.mark.asyncio
async def test_create_negative_ttl_deletes_by_default(key_service, memory_repo):
    await key_service.create(KeyCreate(key="short", ttl="-1s", value="gone"))

    assert "short" not in memory_repo.data
    assert "expire" in memory_repo.calls


@pytest.mark.asyncio
async def test_create_negative_ttl_persist_policy(repo_factory, memory_repo):
    service = KeyService(repo_factory, negative_ttl_policy="persist")

    await service.create(KeyCreate(key="kept", ttl="-1s", value="here"))

    assert memory_repo.value("kept") == "here"
    assert "kept" not in memory_repo.ttls
    assert "expire" not in memory_repo.calls


@pytest.mark.asyncio
async def test_create_zero_ttl_means_no_expiry(key_service, memory_repo):
    await key_service.create(KeyCreate(key="forever", ttl="0s", value="x"))

    assert "forever" not in memory_repo.ttls
    assert "expire" not in memory_repo.calls


@pytest.mark.asyncio
async def test_create_reports_partial_ttl_failure(key_service, memory_repo):
    """Value stays written when the TTL cannot be applied"""
    memory_repo.expire = AsyncMock(side_effect=StoreUnavailableError("timeout"))

    with pytest.raises(PartialTTLFailureError) as exc_info:
        await key_service.create(KeyCreate(key="session", ttl="10m", value="token"))

    assert exc_info.value.details["value_written"] is True
    assert memory_repo.value("session") == "token"


@pytest.mark.asyncio
async def test_create_reports_vanished_key(key_service, memory_repo):
    memory_repo.expire = AsyncMock(return_value=False)

    with pytest.raises(PartialTTLFailureError):
        await key_service.create(KeyCreate(key="session", ttl="10m", value="token"))


# ============ read ============


@pytest.mark.asyncio
async def test_read_missing_key(key_service):
    view = await key_service.read("default", 0, "absent")

    assert view == ContentView.missing()
    assert view.exists is False
    assert view.content == ""


@pytest.mark.asyncio
async def test_read_detects_format(key_service, memory_repo):
    memory_repo.put("config", "string", '{"debug": true}', ttl=3600)
    memory_repo.put("note", "string", "hello")
    memory_repo.put("user:1", "hash", {"name": "alice"})

    config = await key_service.read("default", 0, "config")
    note = await key_service.read("default", 0, "note")
    user = await key_service.read("default", 0, "user:1")

    assert config.format == "JSON"
    assert config.content == '{"debug": true}'
    assert config.ttl == "1h"
    assert note.format == "String"
    assert note.ttl == "no expiry"
    assert user.format == "JSON"
    assert user.content == '{\n  "name": "alice"\n}'
    assert user.size == 1
    assert user.exists is True


@pytest.mark.asyncio
async def test_read_with_requested_format(key_service, memory_repo):
    memory_repo.put("items", "list", ["a", "b c"])

    view = await key_service.read("default", 0, "items", Format.QUOTED)

    assert view.format == "Quoted"
    assert view.content == '"a"\n"b c"'


@pytest.mark.asyncio
async def test_read_binary_falls_back_to_quoted(key_service, memory_repo):
    """Bytes that are not UTF-8 cannot be shown as plain text"""
    memory_repo.put("blob", "string", from_bytes(b"\xff\x00"))

    view = await key_service.read("default", 0, "blob", Format.STRING)

    assert view.format == "Quoted"
    assert view.content == '"\\xff\\x00"'


@pytest.mark.asyncio
async def test_read_unsupported_type(key_service, memory_repo):
    memory_repo.put("events", "stream", [])

    view = await key_service.read("default", 0, "events")

    assert view.exists is True
    assert view.type == "stream"
    assert "Unsupported" in view.error
    assert "read_key" not in memory_repo.calls


@pytest.mark.asyncio
async def test_read_store_command_error_becomes_view_error(key_service, memory_repo):
    memory_repo.put("big", "string", "x")
    memory_repo.read_key = AsyncMock(side_effect=StoreCommandError("OOM"))

    view = await key_service.read("default", 0, "big")

    assert view.exists is True
    assert view.error == "OOM"


# ============ update ============


@pytest.mark.asyncio
async def test_update_keeps_type_and_ttl(key_service, memory_repo):
    memory_repo.put("user:1", "hash", {"name": "alice"}, ttl=600)

    await key_service.update(
        ContentChange(key="user:1", changed_content="name: bob\nrole: admin", format=Format.STRING)
    )

    assert memory_repo.data["user:1"] == ("hash", {"name": "bob", "role": "admin"})
    assert memory_repo.ttls["user:1"] == 600


@pytest.mark.asyncio
async def test_update_type_mismatch_leaves_value(key_service, memory_repo):
    memory_repo.put("user:1", "hash", {"name": "alice"})

    with pytest.raises(TypeMismatchError):
        await key_service.update(
            ContentChange(key="user:1", changed_content='["a", "b"]', format=Format.JSON)
        )

    assert memory_repo.value("user:1") == {"name": "alice"}
    assert "replace_value" not in memory_repo.calls


@pytest.mark.asyncio
async def test_update_missing_key(key_service):
    with pytest.raises(KeyNotFoundError):
        await key_service.update(ContentChange(key="absent", changed_content="x"))


@pytest.mark.asyncio
async def test_update_unsupported_type(key_service, memory_repo):
    memory_repo.put("events", "stream", [])

    with pytest.raises(ValidationError) as exc_info:
        await key_service.update(ContentChange(key="events", changed_content="x"))

    assert exc_info.value.code == "unsupported_type"


@pytest.mark.asyncio
async def test_update_to_empty_collection_rejected(key_service, memory_repo):
    memory_repo.put("items", "list", ["a"])

    with pytest.raises(ValidationError) as exc_info:
        await key_service.update(ContentChange(key="items", changed_content="", format=Format.STRING))

    assert exc_info.value.code == "empty_value"
    assert memory_repo.value("items") == ["a"]


# ============ delete ============


@pytest.mark.asyncio
async def test_delete_is_idempotent(key_service, memory_repo):
    memory_repo.put("temp", "string", "x")

    assert await key_service.delete("default", 0, "temp") is True
    assert await key_service.delete("default", 0, "temp") is False
    assert "temp" not in memory_repo.data
