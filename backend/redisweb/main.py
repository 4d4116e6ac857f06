"""
Redis Web Explorer Application Entry Point

Builds the FastAPI application: routers under /api, CORS, error handlers
and the Redis client lifecycle.
"""

import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRouter

from redisweb.api import keys_router, servers_router
from redisweb.common.errors import AppError
from redisweb.config import get_settings
from redisweb.db.redis import close_redis
from redisweb.logging_config import setup_logging

VERSION = "0.1.0"

logger = logging.getLogger(__name__)

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application Lifecycle Management

    Redis clients are created on first use per (server, database) and all
    closed on shutdown.
    """
    servers = get_settings().get_servers()
    logger.info("Explorer starting with servers: %s", ", ".join(s.name for s in servers))
    yield
    await close_redis()
    logger.info("Explorer stopped")


settings = get_settings()

app = FastAPI(
    title=settings.APP_NAME,
    description="Browse, inspect and edit Redis keys",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Errors raised outside the routers' own handling; details only in DEBUG mode"""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(include_details=get_settings().DEBUG),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    """
    Anything else becomes a 500

    The traceback is always logged and only returned to the client in DEBUG mode.
    """
    trace = traceback.format_exc()
    logger.error("Unhandled error on %s %s: %s\n%s", request.method, request.url.path, exc, trace)

    error = {
        "message": "Internal server error",
        "type": "internal_error",
        "code": "internal_error",
    }
    if get_settings().DEBUG:
        error.update(message=str(exc), type=type(exc).__name__, traceback=trace.split("\n"))
    return JSONResponse(status_code=500, content={"error": error})


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe; does not touch Redis"""
    return {"status": "healthy"}


@app.get("/", tags=["Health"])
async def root():
    return {
        "name": settings.APP_NAME,
        "version": VERSION,
        "servers": [server.name for server in settings.get_servers()],
    }


api_router = APIRouter(prefix="/api")
api_router.include_router(servers_router)
api_router.include_router(keys_router)
app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "redisweb.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
