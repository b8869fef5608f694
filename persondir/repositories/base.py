"""Storage contract every person backend implements."""
from __future__ import annotations

import abc
import uuid

from persondir.domain.persons import Person


class PersonRepository(abc.ABC):
    """CRUD capability set over person records.

    Implementations assign identifiers themselves, raise PersonNotFoundError
    for unknown ids and wrap store failures in BackendFailureError.
    """

    name = "abstract"

    @abc.abstractmethod
    def add_person(self, person: Person) -> uuid.UUID:
        """Persist `person` under a fresh id and return that id."""

    @abc.abstractmethod
    def get_person(self, person_id: uuid.UUID) -> Person:
        ...

    @abc.abstractmethod
    def get_all_persons(self) -> list[Person]:
        """Return every stored person; order is not guaranteed."""

    @abc.abstractmethod
    def update_person(self, person_id: uuid.UUID, person: Person) -> None:
        """Replace the name of an existing record; never creates one."""

    @abc.abstractmethod
    def delete_person(self, person_id: uuid.UUID) -> None:
        ...

    def close(self) -> None:
        """Release connections held by the backend."""
