"""Storage servicer: exposes any PersonRepository over gRPC."""
from __future__ import annotations

import logging
from concurrent import futures
from typing import Any, Callable

import grpc

from persondir.domain.persons import (
    MalformedInputError,
    Person,
    PersonError,
    PersonNotFoundError,
    normalize_name,
    parse_person_id,
)
from persondir.repositories.base import PersonRepository
from persondir.rpc import METHODS, SERVICE_NAME, codec

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (PersonNotFoundError, grpc.StatusCode.NOT_FOUND),
    (MalformedInputError, grpc.StatusCode.INVALID_ARGUMENT),
)


class StorageServicer:
    """Maps storage RPCs one-to-one onto a repository."""

    def __init__(self, repository: PersonRepository) -> None:
        self.repository = repository

    def _call(self, context: grpc.ServicerContext, fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except PersonError as exc:
            status = grpc.StatusCode.INTERNAL
            for error_type, code in _STATUS_BY_ERROR:
                if isinstance(exc, error_type):
                    status = code
                    break
            if status is grpc.StatusCode.INTERNAL:
                logger.warning("storage rpc failed: %s", exc.message)
            context.abort(status, exc.message)

    def AddPerson(self, request: dict, context: grpc.ServicerContext) -> dict:
        def run():
            person_id = self.repository.add_person(Person(name=normalize_name(request.get("name"))))
            return {"id": str(person_id)}

        return self._call(context, run)

    def GetPerson(self, request: dict, context: grpc.ServicerContext) -> dict:
        def run():
            return self.repository.get_person(parse_person_id(request.get("id"))).to_dict()

        return self._call(context, run)

    def GetAllPersons(self, request: dict, context: grpc.ServicerContext) -> dict:
        def run():
            return {"persons": [p.to_dict() for p in self.repository.get_all_persons()]}

        return self._call(context, run)

    def UpdatePerson(self, request: dict, context: grpc.ServicerContext) -> dict:
        def run():
            person_id = parse_person_id(request.get("id"))
            self.repository.update_person(person_id, Person(id=person_id, name=normalize_name(request.get("name"))))
            return {}

        return self._call(context, run)

    def DeletePerson(self, request: dict, context: grpc.ServicerContext) -> dict:
        def run():
            self.repository.delete_person(parse_person_id(request.get("id")))
            return {}

        return self._call(context, run)


def build_handler(servicer: StorageServicer) -> grpc.GenericRpcHandler:
    handlers = {
        name: grpc.unary_unary_rpc_method_handler(
            getattr(servicer, name),
            request_deserializer=codec.decode,
            response_serializer=codec.encode,
        )
        for name in METHODS
    }
    return grpc.method_handlers_generic_handler(SERVICE_NAME, handlers)


def create_server(repository: PersonRepository, address: str, *, max_workers: int = 10) -> tuple[grpc.Server, int]:
    """Build (but do not start) a server; returns it with the bound port."""
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=max_workers))
    server.add_generic_rpc_handlers((build_handler(StorageServicer(repository)),))
    port = server.add_insecure_port(address)
    if not port:
        raise RuntimeError(f"could not bind storage server to {address}")
    return server, port


def serve(repository: PersonRepository, address: str) -> grpc.Server:
    server, port = create_server(repository, address)
    server.start()
    logger.info("storage server (%s backend) listening on port %s", repository.name, port)
    return server
