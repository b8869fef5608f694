from __future__ import annotations

import io
import uuid

import pytest

from persondir.domain.persons import (
    BackendFailureError,
    MalformedInputError,
    Person,
    PersonNotFoundError,
)
from persondir.repositories.memory_repository import InMemoryPersonRepository
from persondir.services.person_service import PersonService


@pytest.fixture()
def service(memory_repository):
    return PersonService(memory_repository)


def _csv(text: str) -> io.BytesIO:
    return io.BytesIO(text.encode("utf-8"))


def test_add_person_strips_and_rejects_empty_names(service):
    person_id = service.add_person("  Alice ")
    assert service.get_person(person_id).name == "Alice"

    with pytest.raises(MalformedInputError):
        service.add_person("   ")


def test_update_checks_existence_first(service, memory_repository):
    missing = uuid.uuid4()

    with pytest.raises(PersonNotFoundError, match="no such record"):
        service.update_person(missing, Person(name="Ghost"))
    assert memory_repository.get_all_persons() == []


def test_delete_checks_existence_first(service):
    with pytest.raises(PersonNotFoundError, match="no such record"):
        service.delete_person(uuid.uuid4())


def test_update_and_delete_flow(service):
    person_id = service.add_person("Alice")
    service.update_person(person_id, Person(name="Alicia"))
    assert service.get_person(person_id).name == "Alicia"

    service.delete_person(person_id)
    with pytest.raises(PersonNotFoundError):
        service.get_person(person_id)


def test_backend_errors_keep_their_kind_and_gain_context():
    class FailingRepository(InMemoryPersonRepository):
        def get_all_persons(self):
            raise BackendFailureError("connection refused")

    svc = PersonService(FailingRepository())
    with pytest.raises(BackendFailureError, match="failed to fetch persons: connection refused"):
        svc.get_all_persons()


# -------------------------- csv --------------------------
def test_process_csv_updates_existing_and_inserts_missing(service):
    alice = service.add_person("Alice")
    bob = service.add_person("Bob")
    unknown = uuid.uuid4()

    result = service.process_csv(
        _csv(f"id,name\n{alice},Alicia\n{unknown},Carol\n{bob},Robert\n")
    )

    assert (result.updated, result.created) == (2, 1)
    assert service.get_person(alice).name == "Alicia"
    assert service.get_person(bob).name == "Robert"
    names = sorted(p.name for p in service.get_all_persons())
    assert names == ["Alicia", "Carol", "Robert"]
    # inserted rows get a fresh id, not the one from the file
    with pytest.raises(PersonNotFoundError):
        service.get_person(unknown)


def test_process_csv_accepts_text_streams(service):
    result = service.process_csv(io.StringIO(f"id,name\n{uuid.uuid4()},Dana\n"))
    assert result.created == 1


def test_download_then_upload_creates_nothing(service):
    for name in ("Alice", "Bob", "Carol, Jr."):
        service.add_person(name)
    before = {p.id: p.name for p in service.get_all_persons()}

    payload = service.download_persons_csv()
    result = service.process_csv(io.BytesIO(payload))

    assert result.created == 0
    assert result.updated == 3
    assert {p.id: p.name for p in service.get_all_persons()} == before


def test_download_has_header_row(service):
    person_id = service.add_person("Alice")

    lines = service.download_persons_csv().decode("utf-8").splitlines()
    assert lines == ["id,name", f"{person_id},Alice"]


@pytest.mark.parametrize(
    "content",
    [
        "",
        "id,name\n",
        "id,name\n{id},Alice,extra\n",
        "id,name\n{id}\n",
        "id,name\n,Alice\n",
        "id,name\n{id},\n",
        "id,name\nnot-a-uuid,Alice\n",
        "id,name\n{id},Alice\n{id},Bob,x\n",
    ],
)
def test_malformed_csv_fails_and_leaves_storage_unchanged(service, content):
    existing = service.add_person("Existing")
    before = {p.id: p.name for p in service.get_all_persons()}

    with pytest.raises(MalformedInputError):
        service.process_csv(_csv(content.format(id=existing)))

    assert {p.id: p.name for p in service.get_all_persons()} == before


def test_non_utf8_csv_is_malformed(service):
    with pytest.raises(MalformedInputError):
        service.process_csv(io.BytesIO(b"id,name\n\xff\xfe,\xff\n"))


def test_process_csv_aborts_on_backend_failure():
    class FlakyRepository(InMemoryPersonRepository):
        def get_person(self, person_id):
            raise BackendFailureError("timeout")

    svc = PersonService(FlakyRepository())
    with pytest.raises(BackendFailureError, match="timeout"):
        svc.process_csv(_csv(f"id,name\n{uuid.uuid4()},Alice\n"))
    assert svc.repository.get_all_persons() == []


@pytest.mark.parametrize("name", [5, ["Alice"], {"name": "Alice"}])
def test_add_person_rejects_non_text_names(service, name):
    with pytest.raises(MalformedInputError, match="name must be text"):
        service.add_person(name)
