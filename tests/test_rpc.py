from __future__ import annotations

import uuid

import grpc
import pytest

from persondir.domain.persons import BackendFailureError, MalformedInputError, Person
from persondir.repositories.grpc_repository import GrpcPersonRepository
from persondir.repositories.memory_repository import InMemoryPersonRepository
from persondir.rpc import codec, method_path
from persondir.rpc.server import create_server


def test_codec_decodes_objects_only():
    assert codec.decode(codec.encode({"name": "Zoë"})) == {"name": "Zoë"}
    assert codec.decode(b"") == {}
    with pytest.raises(MalformedInputError):
        codec.decode(b"[1, 2]")
    with pytest.raises(MalformedInputError):
        codec.decode(b"\xff")


def test_client_writes_reach_the_server_backend(grpc_repository, grpc_backing_repository):
    person_id = grpc_repository.add_person(Person(name="Alice"))

    assert grpc_backing_repository.get_person(person_id).name == "Alice"


def test_invalid_arguments_map_to_malformed(grpc_repository):
    with pytest.raises(MalformedInputError):
        grpc_repository.add_person(Person(name=""))


def test_server_rejects_non_uuid_ids(grpc_repository):
    channel = grpc_repository._channel
    get = channel.unary_unary(
        method_path("GetPerson"),
        request_serializer=codec.encode,
        response_deserializer=codec.decode,
    )
    with pytest.raises(grpc.RpcError) as excinfo:
        get({"id": "7"}, timeout=5)
    assert excinfo.value.code() == grpc.StatusCode.INVALID_ARGUMENT


def test_backend_failures_map_to_internal():
    class BrokenRepository(InMemoryPersonRepository):
        def get_all_persons(self):
            raise BackendFailureError("disk full")

    server, port = create_server(BrokenRepository(), "127.0.0.1:0", max_workers=2)
    server.start()
    client = GrpcPersonRepository(f"127.0.0.1:{port}", timeout=5)
    try:
        with pytest.raises(BackendFailureError, match="disk full"):
            client.get_all_persons()
    finally:
        client.close()
        server.stop(None)


def test_unreachable_server_is_backend_failure():
    client = GrpcPersonRepository("127.0.0.1:1", timeout=0.5)
    try:
        with pytest.raises(BackendFailureError):
            client.get_person(uuid.uuid4())
    finally:
        client.close()


def test_non_text_name_is_invalid_argument(grpc_repository):
    add = grpc_repository._channel.unary_unary(
        method_path("AddPerson"),
        request_serializer=codec.encode,
        response_deserializer=codec.decode,
    )
    with pytest.raises(grpc.RpcError) as excinfo:
        add({"name": 5}, timeout=5)
    assert excinfo.value.code() == grpc.StatusCode.INVALID_ARGUMENT
