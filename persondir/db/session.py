"""Engine/session helpers for the SQL backend."""
from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from persondir.core.config import get_settings

Base = declarative_base()


@lru_cache
def get_engine(url: str | None = None) -> Engine:
    """Engine for `url`, or for DATABASE_URL when no url is given."""
    url = (url or get_settings().database_url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL must be configured to use the SQL backend.")
    connect_args = {}
    if url.startswith("sqlite"):
        # the gRPC server and TestClient call in from worker threads
        connect_args["check_same_thread"] = False
    return create_engine(url, future=True, pool_pre_ping=True, connect_args=connect_args)


def make_sessionmaker(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)


@contextmanager
def get_session(factory: sessionmaker | None = None) -> Iterator[Session]:
    session: Session = (factory or make_sessionmaker(get_engine()))()
    try:
        yield session
    finally:
        session.close()
