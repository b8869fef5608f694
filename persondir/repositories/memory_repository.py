"""In-process backend: a dict keyed by UUID guarded by an instance lock."""
from __future__ import annotations

import threading
import uuid
from persondir.domain.persons import Person, PersonNotFoundError
from persondir.repositories.base import PersonRepository


class InMemoryPersonRepository(PersonRepository):
    name = "memory"

    def __init__(self) -> None:
        self._persons: dict[uuid.UUID, str] = {}
        self._lock = threading.Lock()

    def add_person(self, person: Person) -> uuid.UUID:
        with self._lock:
            person_id = uuid.uuid4()
            while person_id in self._persons:
                person_id = uuid.uuid4()
            self._persons[person_id] = person.name
            return person_id

    def get_person(self, person_id: uuid.UUID) -> Person:
        with self._lock:
            if person_id not in self._persons:
                raise PersonNotFoundError(f"person {person_id} not found")
            return Person(id=person_id, name=self._persons[person_id])

    def get_all_persons(self) -> list[Person]:
        with self._lock:
            return [Person(id=pid, name=name) for pid, name in self._persons.items()]

    def update_person(self, person_id: uuid.UUID, person: Person) -> None:
        with self._lock:
            if person_id not in self._persons:
                raise PersonNotFoundError(f"person {person_id} not found")
            self._persons[person_id] = person.name

    def delete_person(self, person_id: uuid.UUID) -> None:
        with self._lock:
            if self._persons.pop(person_id, None) is None:
                raise PersonNotFoundError(f"person {person_id} not found")
