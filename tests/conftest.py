from __future__ import annotations

import sys
from pathlib import Path

import fakeredis
import pytest

# Make the persondir package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from persondir.core import config as core_config  # noqa: E402
from persondir.db import create_tables  # noqa: E402
from persondir.db import session as db_session  # noqa: E402
from persondir.repositories.grpc_repository import GrpcPersonRepository  # noqa: E402
from persondir.repositories.memory_repository import InMemoryPersonRepository  # noqa: E402
from persondir.repositories.redis_repository import RedisPersonRepository  # noqa: E402
from persondir.repositories.sql_repository import SQLPersonRepository  # noqa: E402
from persondir.rpc.server import create_server  # noqa: E402


@pytest.fixture()
def temp_db(tmp_path, monkeypatch):
    """Temporary SQLite database with settings/engine caches reset around it."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()

    engine = db_session.get_engine()
    create_tables.drop_all(engine)
    create_tables.create_all(engine)

    yield engine

    create_tables.drop_all(engine)
    engine.dispose()
    db_session.get_engine.cache_clear()
    core_config.get_settings.cache_clear()


@pytest.fixture()
def redis_client():
    client = fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield client
    client.close()


@pytest.fixture()
def memory_repository():
    return InMemoryPersonRepository()


@pytest.fixture()
def redis_repository(redis_client):
    return RedisPersonRepository(redis_client=redis_client)


@pytest.fixture()
def sql_repository(temp_db):
    return SQLPersonRepository(temp_db)


@pytest.fixture()
def grpc_backing_repository():
    return InMemoryPersonRepository()


@pytest.fixture()
def grpc_repository(grpc_backing_repository):
    """Client repository talking to an in-process storage server on an ephemeral port."""
    server, port = create_server(grpc_backing_repository, "127.0.0.1:0", max_workers=4)
    server.start()
    client = GrpcPersonRepository(f"127.0.0.1:{port}", timeout=5)
    yield client
    client.close()
    server.stop(None)


@pytest.fixture(params=["memory", "redis", "sql", "grpc"])
def repository(request):
    return request.getfixturevalue(f"{request.param}_repository")
