"""
Data Access Layer Module Initialization
"""

from redisweb.repositories.key_store_repo import KeyStoreRepository, RepositoryFactory

__all__ = [
    "KeyStoreRepository",
    "RepositoryFactory",
]
