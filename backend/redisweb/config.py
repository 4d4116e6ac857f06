"""
Configuration Management Module

Configures application parameters via environment variables or .env file.
Supports several named Redis servers, each with its own databases.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisServer(BaseModel):
    """A named Redis server the explorer may connect to"""

    # Display name, used as the `server` parameter of every request
    name: str = Field(..., min_length=1)
    # Connection URL without the database part, e.g. redis://:secret@host:6379
    url: str = Field(...)


class Settings(BaseSettings):
    """
    Application Configuration Class

    All configuration items can be overridden by environment variables, with names matching fields (uppercase).
    """

    # Application Config
    APP_NAME: str = "Redis Web Explorer"
    DEBUG: bool = False
    # Overrides the DEBUG-derived level of the application loggers, e.g. "WARNING"
    LOG_LEVEL: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR"]] = None

    # Redis Config
    # Fallback server used when REDIS_SERVERS is not set
    REDIS_URL: str = "redis://localhost:6379"
    # JSON list of {"name": ..., "url": ...}
    REDIS_SERVERS: Optional[list[RedisServer]] = None
    # Socket timeout (seconds) for every Redis call
    REDIS_SOCKET_TIMEOUT: float = 5.0

    # Key Listing Config
    # COUNT hint passed to each SCAN call
    SCAN_COUNT: int = 10
    # Stop scanning once this many keys have been collected
    MAX_KEYS: int = 1000

    # TTL Config
    # What a negative TTL on creation means for the store:
    # "delete" expires the key right after it is written,
    # "persist" treats it as "never expire" (redis-cli TTL convention)
    NEGATIVE_TTL_POLICY: Literal["delete", "persist"] = "delete"

    # CORS Config
    # Comma-separated list of allowed origins for CORS
    # Example: "http://localhost:3000,https://example.com"
    ALLOWED_ORIGINS: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    def get_allowed_origins(self) -> list[str]:
        """CORS origins; local dev servers are allowed when DEBUG is on and none are set"""
        origins = [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]
        if not origins and self.DEBUG:
            return ["http://localhost:3000", "http://127.0.0.1:3000"]
        return origins

    def get_servers(self) -> list[RedisServer]:
        """Configured servers, falling back to a single "default" server at REDIS_URL"""
        if self.REDIS_SERVERS:
            return list(self.REDIS_SERVERS)
        return [RedisServer(name="default", url=self.REDIS_URL)]


@lru_cache()
def get_settings() -> Settings:
    """
    Get application configuration (Singleton)

    Uses lru_cache to ensure configuration is loaded only once.

    Returns:
        Settings: Application configuration instance
    """
    return Settings()
