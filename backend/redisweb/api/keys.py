"""
Key Management API

Provides listing, content and CRUD endpoints for keys. Keys travel as query
parameters rather than path segments since they often contain slashes.
"""

from typing import Optional

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from redisweb.api.deps import KeyServiceDep, ListingServiceDep
from redisweb.common.errors import AppError
from redisweb.domain.keys import (
    ContentChange,
    ContentView,
    DeleteResult,
    Format,
    KeyCreate,
    KeyDescriptor,
)

router = APIRouter(
    prefix="/keys",
    tags=["Keys"],
)


@router.get("", response_model=list[KeyDescriptor])
async def list_keys(
    service: ListingServiceDep,
    server: str = Query("default", description="Server name"),
    database: int = Query(0, ge=0, description="Database index"),
    pattern: str = Query("", description="Glob-style match pattern"),
):
    """
    List keys

    Keys are returned in the order the store produced them.
    """
    try:
        return await service.list(server, database, pattern)
    except AppError as e:
        return JSONResponse(content=e.to_dict(), status_code=e.status_code)


@router.get("/content", response_model=ContentView)
async def show_content(
    service: KeyServiceDep,
    key: str = Query(..., description="Key"),
    server: str = Query("default", description="Server name"),
    database: int = Query(0, ge=0, description="Database index"),
    format: Optional[Format] = Query(None, description="Display format, detected when omitted"),
):
    """
    Get key content

    Returns `exists: false` for a missing key instead of an error.
    """
    try:
        return await service.read(server, database, key, format)
    except AppError as e:
        return JSONResponse(content=e.to_dict(), status_code=e.status_code)


@router.post("", response_model=ContentView, status_code=status.HTTP_201_CREATED)
async def create_key(
    data: KeyCreate,
    service: KeyServiceDep,
):
    """
    Create Key

    Responds with the key's content as stored.
    """
    try:
        await service.create(data)
        return await service.read(data.server, data.database, data.key, data.format)
    except AppError as e:
        return JSONResponse(content=e.to_dict(), status_code=e.status_code)


@router.put("/content", response_model=ContentView)
async def change_content(
    data: ContentChange,
    service: KeyServiceDep,
):
    """
    Update key content

    The key keeps its type and TTL. Responds with the key's content as stored.
    """
    try:
        await service.update(data)
        return await service.read(data.server, data.database, data.key, data.format)
    except AppError as e:
        return JSONResponse(content=e.to_dict(), status_code=e.status_code)


@router.delete("", response_model=DeleteResult)
async def delete_key(
    service: KeyServiceDep,
    key: str = Query(..., description="Key"),
    server: str = Query("default", description="Server name"),
    database: int = Query(0, ge=0, description="Database index"),
):
    """
    Delete Key

    Succeeds for absent keys too; `deleted` tells whether anything was removed.
    """
    try:
        deleted = await service.delete(server, database, key)
        return DeleteResult(key=key, deleted=deleted)
    except AppError as e:
        return JSONResponse(content=e.to_dict(), status_code=e.status_code)
