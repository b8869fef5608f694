"""Person use cases: CRUD with existence checks plus CSV import/export."""
from __future__ import annotations

import csv
import io
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import BinaryIO, Iterator, TextIO, Union

from persondir.domain.persons import (
    PERSON_FIELDS,
    MalformedInputError,
    Person,
    PersonError,
    PersonNotFoundError,
    normalize_name,
    parse_person_id,
)
from persondir.repositories.base import PersonRepository

logger = logging.getLogger(__name__)

CSVStream = Union[BinaryIO, TextIO]


@dataclass
class CSVImportResult:
    updated: int = 0
    created: int = 0


@contextmanager
def _wrap_errors(action: str) -> Iterator[None]:
    """Re-raise repository errors with the action that failed prepended."""
    try:
        yield
    except PersonNotFoundError as exc:
        raise PersonNotFoundError(f"no such record: {exc.message}") from exc
    except PersonError as exc:
        raise type(exc)(f"failed to {action}: {exc.message}") from exc


class PersonService:
    """Orchestrates a storage backend for the HTTP router and scripts."""

    def __init__(self, repository: PersonRepository) -> None:
        self.repository = repository

    def add_person(self, name: str) -> uuid.UUID:
        person = Person(name=normalize_name(name))
        with _wrap_errors("add person"):
            person_id = self.repository.add_person(person)
        logger.info("added person %s", person_id)
        return person_id

    def get_person(self, person_id: uuid.UUID) -> Person:
        with _wrap_errors("get person"):
            return self.repository.get_person(person_id)

    def get_all_persons(self) -> list[Person]:
        with _wrap_errors("fetch persons"):
            return self.repository.get_all_persons()

    def update_person(self, person_id: uuid.UUID, person: Person) -> None:
        name = normalize_name(person.name)
        self.get_person(person_id)
        with _wrap_errors("update person"):
            self.repository.update_person(person_id, Person(id=person_id, name=name))
        logger.info("updated person %s", person_id)

    def delete_person(self, person_id: uuid.UUID) -> None:
        self.get_person(person_id)
        with _wrap_errors("delete person"):
            self.repository.delete_person(person_id)
        logger.info("deleted person %s", person_id)

    # -------------------------- csv --------------------------
    def _read_csv_rows(self, stream: CSVStream) -> list[tuple[uuid.UUID, str]]:
        data = stream.read()
        if isinstance(data, bytes):
            try:
                data = data.decode("utf-8-sig")
            except UnicodeDecodeError as exc:
                raise MalformedInputError(f"malformed csv file: not UTF-8 ({exc})") from exc
        try:
            records = [row for row in csv.reader(io.StringIO(data, newline="")) if row]
        except csv.Error as exc:
            raise MalformedInputError(f"error reading csv file: {exc}") from exc
        if len(records) < 2:
            # nothing at all, or only the header
            raise MalformedInputError("malformed csv file: no records")

        rows: list[tuple[uuid.UUID, str]] = []
        for line, record in enumerate(records[1:], start=2):
            if len(record) != 2:
                raise MalformedInputError(
                    f"malformed csv file: row {line} has {len(record)} fields, expected 2"
                )
            raw_id, name = record[0].strip(), record[1].strip()
            if not raw_id or not name:
                raise MalformedInputError(f"malformed csv file: empty field in row {line}")
            try:
                person_id = parse_person_id(raw_id)
            except MalformedInputError as exc:
                raise MalformedInputError(f"row {line}: {exc.message}") from exc
            rows.append((person_id, name))
        return rows

    def process_csv(self, stream: CSVStream) -> CSVImportResult:
        """Reconcile an uploaded `id,name` CSV against storage.

        Rows whose id exists are updated in place, the others are inserted
        with a freshly assigned id. The file is validated entirely before the
        first write, so a malformed file leaves storage untouched.
        """
        rows = self._read_csv_rows(stream)
        result = CSVImportResult()
        for person_id, name in rows:
            try:
                with _wrap_errors("get person"):
                    self.repository.get_person(person_id)
            except PersonNotFoundError:
                with _wrap_errors("add person to db"):
                    self.repository.add_person(Person(name=name))
                result.created += 1
                continue
            with _wrap_errors("update person in db"):
                self.repository.update_person(person_id, Person(id=person_id, name=name))
            result.updated += 1
        logger.info("csv import: %d updated, %d created", result.updated, result.created)
        return result

    def download_persons_csv(self) -> bytes:
        persons = self.get_all_persons()
        buf = io.StringIO(newline="")
        writer = csv.writer(buf)
        writer.writerow(PERSON_FIELDS)
        for person in persons:
            writer.writerow([str(person.id), person.name])
        return buf.getvalue().encode("utf-8")
