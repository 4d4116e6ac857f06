"""
Key Domain Model

Defines key listing, content and mutation Data Transfer Objects (DTOs).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class KeyType(str, Enum):
    """Redis value types the explorer can display and edit"""

    STRING = "string"
    HASH = "hash"
    LIST = "list"
    SET = "set"
    ZSET = "zset"

    @property
    def is_composite(self) -> bool:
        return self is not KeyType.STRING


class Format(str, Enum):
    """Textual encodings for displaying and editing a value"""

    STRING = "String"
    JSON = "JSON"
    QUOTED = "Quoted"


# string -> str, hash -> dict, list/set -> list[str], zset -> list[(member, score)]
StoreValue = Union[str, dict[str, str], list[str], list[tuple[str, float]]]


class KeyDescriptor(BaseModel):
    """A listed key"""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Key")
    type: str = Field(..., description="Redis type as reported by TYPE")
    # Element count for collections, 1 for strings
    length: int = Field(1, description="Length")


@dataclass
class StoreRecord:
    """
    Raw state of one key as read from the store

    A plain dataclass: values may hold surrogate-escaped bytes, which
    pydantic refuses as `str`.
    """

    key: str
    type: KeyType
    value: StoreValue
    # Seconds, -1 when the key has no expiry
    ttl: int = -1
    size: int = 0
    encoding: str = ""


class ContentView(BaseModel):
    """Display payload for one key"""

    key: str = Field("", description="Key")
    type: str = Field("", description="Key Type")
    content: str = Field("", description="Value rendered in `format`")
    ttl: str = Field("", description="Remaining time to live")
    size: int = Field(0, description="String length or element count")
    encoding: str = Field("", description="Store internal encoding")
    format: str = Field("", description="Format of `content`")
    exists: bool = Field(False, description="Whether the key exists")
    error: str = Field("", description="Error message")

    @classmethod
    def missing(cls) -> "ContentView":
        return cls(exists=False)


class KeyTarget(BaseModel):
    """Server and database a request operates on"""

    server: str = Field("default", min_length=1, description="Server Name")
    database: int = Field(0, ge=0, description="Database Index")


class KeyCreate(KeyTarget):
    """Create Key Request Model"""

    type: KeyType = Field(KeyType.STRING, description="Key Type")
    key: str = Field(..., description="Key")
    # e.g. 10s, 5m, 1h, 1d, -1s; empty means no expiry
    ttl: str = Field("", description="Time To Live")
    format: Format = Field(Format.STRING, description="Format of `value`")
    value: str = Field("", description="Value Text")


class ContentChange(KeyTarget):
    """Update Key Content Request Model"""

    key: str = Field(..., min_length=1, description="Key")
    changed_content: str = Field("", description="Edited Value Text")
    format: Format = Field(Format.STRING, description="Format of `changed_content`")


class DeleteResult(BaseModel):
    """Delete Key Response Model"""

    key: str
    deleted: bool


class CommandRequest(KeyTarget):
    """Raw Command Request Model"""

    command: str = Field(..., description="Command line, e.g. HGETALL user:1")


class CommandResult(BaseModel):
    """Raw Command Response Model"""

    command: str
    result: str


class ServerSummary(BaseModel):
    """Configured Server Response Model"""

    name: str
    databases: Optional[int] = None
