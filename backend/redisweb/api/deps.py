"""
API Dependency Injection Module

Provides the dependencies required by the FastAPI routes.
"""

from typing import Annotated

from fastapi import Depends

from redisweb.config import get_settings
from redisweb.db.redis import get_raw_redis, get_redis
from redisweb.repositories.key_store_repo import RepositoryFactory
from redisweb.repositories.redis import RedisKeyStoreRepository
from redisweb.services import KeyService, ListingService, ServerService


# ============ Repository Dependencies ============

def redis_repository(server: str, database: int) -> RedisKeyStoreRepository:
    """Build the Redis repository for a server and database"""
    return RedisKeyStoreRepository(
        get_redis(server, database),
        get_raw_redis(server, database),
        scan_count=get_settings().SCAN_COUNT,
    )


def get_repository_factory() -> RepositoryFactory:
    """Get the repository factory (overridden in tests)"""
    return redis_repository


RepositoryFactoryDep = Annotated[RepositoryFactory, Depends(get_repository_factory)]


# ============ Service Dependencies ============

def get_listing_service(factory: RepositoryFactoryDep) -> ListingService:
    """Get key listing service"""
    return ListingService(factory, max_keys=get_settings().MAX_KEYS)


def get_key_service(factory: RepositoryFactoryDep) -> KeyService:
    """Get key management service"""
    return KeyService(factory, negative_ttl_policy=get_settings().NEGATIVE_TTL_POLICY)


def get_server_service(factory: RepositoryFactoryDep) -> ServerService:
    """Get server service"""
    return ServerService(factory, get_settings().get_servers())


# Dependency Type Aliases
ListingServiceDep = Annotated[ListingService, Depends(get_listing_service)]
KeyServiceDep = Annotated[KeyService, Depends(get_key_service)]
ServerServiceDep = Annotated[ServerService, Depends(get_server_service)]
