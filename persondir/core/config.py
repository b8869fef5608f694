"""
Configuration helpers for the person directory.

Settings are read once from environment variables so that routers, services
and storage backends do not fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    storage_backend: str
    database_url: str
    redis_url: str
    storage_grpc_target: str
    storage_grpc_listen: str
    grpc_timeout_seconds: int
    http_host: str
    http_port: int
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        storage_backend=(os.getenv("STORAGE_BACKEND") or "memory").strip().lower(),
        database_url=os.getenv("DATABASE_URL", ""),
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        storage_grpc_target=os.getenv("STORAGE_GRPC_TARGET", "localhost:50051"),
        storage_grpc_listen=os.getenv("STORAGE_GRPC_LISTEN", "[::]:50051"),
        grpc_timeout_seconds=_int(os.getenv("GRPC_TIMEOUT_SECONDS", "5"), 5),
        http_host=os.getenv("HTTP_HOST", "0.0.0.0"),
        http_port=_int(os.getenv("HTTP_PORT", "8081"), 8081),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
