"""
Service Layer Module Initialization
"""

from redisweb.services.key_service import KeyService
from redisweb.services.listing import KeySnapshot, ListingService, filter_keys
from redisweb.services.server_service import ServerService
from redisweb.services.session import ExplorerSession, ViewState

__all__ = [
    "ExplorerSession",
    "KeyService",
    "KeySnapshot",
    "ListingService",
    "ServerService",
    "ViewState",
    "filter_keys",
]
