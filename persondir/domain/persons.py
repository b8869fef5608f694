"""Person entity, identifier helpers and the error kinds shared by every layer."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, fields
from typing import Any, Mapping


class PersonError(Exception):
    """Base exception for the person directory."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PersonNotFoundError(PersonError):
    """Raised when no record matches the given id."""


class MalformedInputError(PersonError):
    """Raised for invalid CSV shape, invalid id encoding or empty names."""


class BackendFailureError(PersonError):
    """Raised when the underlying store fails (connectivity, serialization)."""


@dataclass
class Person:
    id: uuid.UUID | None = None
    name: str = ""

    def to_dict(self) -> dict:
        return {"id": str(self.id) if self.id else "", "name": self.name}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], person_id: uuid.UUID | None = None) -> "Person":
        """Build a Person from a decoded JSON document; `person_id` wins over the payload id."""
        if not isinstance(data, Mapping):
            raise MalformedInputError("person payload must be an object")
        name = data.get("name")
        if not isinstance(name, str):
            raise MalformedInputError("person payload is missing a name")
        if person_id is None:
            raw_id = data.get("id")
            person_id = parse_person_id(raw_id) if raw_id else None
        return cls(id=person_id, name=name)


PERSON_FIELDS = tuple(f.name for f in fields(Person))


def parse_person_id(value: Any) -> uuid.UUID:
    """Parse the canonical identifier (UUID) from its text form."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError, AttributeError) as exc:
        raise MalformedInputError(f"malformed id {value!r}, should be a UUID") from exc


def normalize_name(value: Any) -> str:
    """Return the stripped name or raise MalformedInputError when empty or not text."""
    if value is not None and not isinstance(value, str):
        raise MalformedInputError(f"name must be text, got {type(value).__name__}")
    name = (value or "").strip()
    if not name:
        raise MalformedInputError("name must not be empty")
    return name
