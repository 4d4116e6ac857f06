"""
API Module Initialization
"""

from redisweb.api.keys import router as keys_router
from redisweb.api.servers import router as servers_router

__all__ = [
    "keys_router",
    "servers_router",
]
