"""Relational backend backed by SQLAlchemy."""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import delete, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from persondir.db.models import PersonRecord
from persondir.db.session import get_engine, get_session, make_sessionmaker
from persondir.domain.persons import BackendFailureError, Person, PersonNotFoundError
from persondir.repositories.base import PersonRepository

logger = logging.getLogger(__name__)


def _to_person(entity: PersonRecord) -> Person:
    try:
        return Person(id=uuid.UUID(entity.id), name=entity.name)
    except ValueError as exc:
        raise BackendFailureError(f"malformed id in row {entity.id!r}") from exc


class SQLPersonRepository(PersonRepository):
    """CRUD helpers wrapping the SQLAlchemy session."""

    name = "sql"

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()
        self._sessions = make_sessionmaker(self._engine)

    def add_person(self, person: Person) -> uuid.UUID:
        try:
            with get_session(self._sessions) as session:
                person_id = uuid.uuid4()
                while session.get(PersonRecord, str(person_id)) is not None:
                    person_id = uuid.uuid4()
                now = datetime.now(timezone.utc)
                session.add(PersonRecord(id=str(person_id), name=person.name, created_at=now, updated_at=now))
                session.commit()
                return person_id
        except SQLAlchemyError as exc:
            logger.warning("sql add_person failed: %s", exc)
            raise BackendFailureError(f"cannot add person to db: {exc}") from exc

    def get_person(self, person_id: uuid.UUID) -> Person:
        try:
            with get_session(self._sessions) as session:
                entity = session.get(PersonRecord, str(person_id))
        except SQLAlchemyError as exc:
            logger.warning("sql get_person failed: %s", exc)
            raise BackendFailureError(f"failed to find person: {exc}") from exc
        if entity is None:
            raise PersonNotFoundError(f"person {person_id} not found")
        return _to_person(entity)

    def get_all_persons(self) -> list[Person]:
        try:
            with get_session(self._sessions) as session:
                entities = session.execute(select(PersonRecord)).scalars().all()
        except SQLAlchemyError as exc:
            logger.warning("sql get_all_persons failed: %s", exc)
            raise BackendFailureError(f"failed to retrieve persons from db: {exc}") from exc
        return [_to_person(entity) for entity in entities]

    def update_person(self, person_id: uuid.UUID, person: Person) -> None:
        try:
            with get_session(self._sessions) as session:
                stmt = (
                    update(PersonRecord)
                    .where(PersonRecord.id == str(person_id))
                    .values(name=person.name, updated_at=datetime.now(timezone.utc))
                )
                result = session.execute(stmt)
                session.commit()
        except SQLAlchemyError as exc:
            logger.warning("sql update_person failed: %s", exc)
            raise BackendFailureError(f"failed to update record: {exc}") from exc
        if result.rowcount == 0:
            raise PersonNotFoundError(f"person {person_id} not found")

    def delete_person(self, person_id: uuid.UUID) -> None:
        try:
            with get_session(self._sessions) as session:
                result = session.execute(delete(PersonRecord).where(PersonRecord.id == str(person_id)))
                session.commit()
        except SQLAlchemyError as exc:
            logger.warning("sql delete_person failed: %s", exc)
            raise BackendFailureError(f"failed to delete person: {exc}") from exc
        if result.rowcount == 0:
            raise PersonNotFoundError(f"person {person_id} not found")

    def close(self) -> None:
        self._engine.dispose()
