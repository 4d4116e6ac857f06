"""
Domain Model Module Initialization
"""

from redisweb.domain.keys import (
    CommandRequest,
    CommandResult,
    ContentChange,
    ContentView,
    DeleteResult,
    Format,
    KeyCreate,
    KeyDescriptor,
    KeyTarget,
    KeyType,
    ServerSummary,
    StoreRecord,
    StoreValue,
)

__all__ = [
    "CommandRequest",
    "CommandResult",
    "ContentChange",
    "ContentView",
    "DeleteResult",
    "Format",
    "KeyCreate",
    "KeyDescriptor",
    "KeyTarget",
    "KeyType",
    "ServerSummary",
    "StoreRecord",
    "StoreValue",
]
