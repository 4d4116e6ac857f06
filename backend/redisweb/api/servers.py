"""
Server API

Provides server listing, INFO, database count and raw command endpoints.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, PlainTextResponse

from redisweb.api.deps import ServerServiceDep
from redisweb.common.errors import AppError
from redisweb.domain.keys import CommandRequest, CommandResult, ServerSummary

router = APIRouter(tags=["Servers"])


@router.get("/servers", response_model=list[ServerSummary])
async def list_servers(service: ServerServiceDep):
    """Configured servers"""
    return [ServerSummary(name=name) for name in service.list_servers()]


@router.get("/servers/{server}/databases", response_model=ServerSummary)
async def database_count(server: str, service: ServerServiceDep):
    """
    Number of databases

    Read from `CONFIG GET databases`.
    """
    try:
        return ServerSummary(name=server, databases=await service.database_count(server))
    except AppError as e:
        return JSONResponse(content=e.to_dict(), status_code=e.status_code)


@router.get("/servers/{server}/info", response_class=PlainTextResponse)
async def server_info(
    server: str,
    service: ServerServiceDep,
    database: int = Query(0, ge=0, description="Database index"),
):
    """Server INFO text"""
    try:
        return await service.info(server, database)
    except AppError as e:
        return JSONResponse(content=e.to_dict(), status_code=e.status_code)


@router.post("/command", response_model=CommandResult)
async def run_command(data: CommandRequest, service: ServerServiceDep):
    """
    Run a raw command

    Command errors reported by the store come back as `(error) ...` text.
    """
    try:
        return await service.run_command(data)
    except AppError as e:
        return JSONResponse(content=e.to_dict(), status_code=e.status_code)
