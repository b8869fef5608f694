"""gRPC transport for the storage service.

This package hosts:
- the JSON message codec used instead of generated protobuf stubs;
- the storage servicer and server bootstrap.

The matching client lives in persondir.repositories.grpc_repository so the
person service can treat the remote store as just another backend.
"""

SERVICE_NAME = "persondir.Storage"

METHODS = ("AddPerson", "GetPerson", "GetAllPersons", "UpdatePerson", "DeletePerson")


def method_path(method: str) -> str:
    return f"/{SERVICE_NAME}/{method}"
