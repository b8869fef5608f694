"""
Persistence adapters.

Each module implements PersonRepository for one store (memory, Redis, SQL or
the remote gRPC storage server). Services depend on the interface and the
concrete backend is picked once at startup by build_repository().
"""
from __future__ import annotations

from persondir.core.config import Settings
from persondir.repositories.base import PersonRepository

BACKENDS = ("memory", "redis", "sql", "grpc")


def build_repository(settings: Settings, backend: str | None = None) -> PersonRepository:
    """Instantiate the backend named by `backend` or STORAGE_BACKEND."""
    name = (backend or settings.storage_backend or "memory").strip().lower()
    if name == "memory":
        from persondir.repositories.memory_repository import InMemoryPersonRepository

        return InMemoryPersonRepository()
    if name == "redis":
        from persondir.repositories.redis_repository import RedisPersonRepository

        return RedisPersonRepository(redis_url=settings.redis_url)
    if name == "sql":
        from persondir.db.session import get_engine
        from persondir.repositories.sql_repository import SQLPersonRepository

        return SQLPersonRepository(get_engine(settings.database_url))
    if name == "grpc":
        from persondir.repositories.grpc_repository import GrpcPersonRepository

        return GrpcPersonRepository(settings.storage_grpc_target, timeout=settings.grpc_timeout_seconds)
    raise ValueError(f"unknown storage backend {name!r}; expected one of {', '.join(BACKENDS)}")


__all__ = ["BACKENDS", "PersonRepository", "build_repository"]
