"""Remote backend: talks to the gRPC storage server in persondir.rpc."""
from __future__ import annotations

import logging
import uuid
from typing import Any

import grpc

from persondir.domain.persons import (
    BackendFailureError,
    MalformedInputError,
    Person,
    PersonNotFoundError,
    parse_person_id,
)
from persondir.repositories.base import PersonRepository
from persondir.rpc import METHODS, codec, method_path

logger = logging.getLogger(__name__)


class GrpcPersonRepository(PersonRepository):
    name = "grpc"

    def __init__(self, target: str | None = None, *, channel: grpc.Channel | None = None, timeout: float = 5.0):
        if channel is None:
            channel = grpc.insecure_channel(target or "localhost:50051")
        self._channel = channel
        self._timeout = timeout
        self._stubs = {
            method: channel.unary_unary(
                method_path(method),
                request_serializer=codec.encode,
                response_deserializer=codec.decode,
            )
            for method in METHODS
        }

    def _invoke(self, method: str, request: dict[str, Any], action: str) -> dict[str, Any]:
        try:
            return self._stubs[method](request, timeout=self._timeout)
        except grpc.RpcError as exc:
            code = exc.code() if isinstance(exc, grpc.Call) else None
            details = exc.details() if isinstance(exc, grpc.Call) else str(exc)
            if code == grpc.StatusCode.NOT_FOUND:
                raise PersonNotFoundError(details or "no such record") from exc
            if code == grpc.StatusCode.INVALID_ARGUMENT:
                raise MalformedInputError(details or "invalid argument") from exc
            logger.warning("storage rpc %s failed: %s %s", method, code, details)
            raise BackendFailureError(f"failed to {action}: {details}") from exc

    def _to_person(self, message: dict[str, Any]) -> Person:
        try:
            return Person(id=parse_person_id(message.get("id")), name=str(message.get("name") or ""))
        except MalformedInputError as exc:
            raise BackendFailureError(f"failed to convert rpc payload: {exc.message}") from exc

    def add_person(self, person: Person) -> uuid.UUID:
        resp = self._invoke("AddPerson", {"name": person.name}, "add person")
        try:
            return parse_person_id(resp.get("id"))
        except MalformedInputError as exc:
            raise BackendFailureError(f"failed to convert rpc payload: {exc.message}") from exc

    def get_person(self, person_id: uuid.UUID) -> Person:
        return self._to_person(self._invoke("GetPerson", {"id": str(person_id)}, "get person"))

    def get_all_persons(self) -> list[Person]:
        resp = self._invoke("GetAllPersons", {}, "fetch persons")
        return [self._to_person(item) for item in resp.get("persons") or []]

    def update_person(self, person_id: uuid.UUID, person: Person) -> None:
        self._invoke("UpdatePerson", {"id": str(person_id), "name": person.name}, "update person")

    def delete_person(self, person_id: uuid.UUID) -> None:
        self._invoke("DeletePerson", {"id": str(person_id)}, "delete person")

    def close(self) -> None:
        self._channel.close()
