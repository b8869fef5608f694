"""Key-value backend on Redis.

Key schema:
    person:{uuid} - JSON document {"id": ..., "name": ...}
"""
from __future__ import annotations

import json
import logging
import ssl
import uuid

import redis

from persondir.domain.persons import (
    BackendFailureError,
    MalformedInputError,
    Person,
    PersonNotFoundError,
)
from persondir.repositories.base import PersonRepository

logger = logging.getLogger(__name__)

KEY_PREFIX = "person:"


def person_key(person_id: uuid.UUID) -> str:
    return f"{KEY_PREFIX}{person_id}"


def get_redis_client(url: str) -> redis.Redis:
    """Build a client from a URL, accepting rediss:// without cert checks."""
    ssl_params = {}
    if url.startswith("rediss://"):
        ssl_params = {"ssl_cert_reqs": ssl.CERT_NONE}
    return redis.from_url(url, decode_responses=True, **ssl_params)


class RedisPersonRepository(PersonRepository):
    name = "redis"

    def __init__(self, redis_client: redis.Redis | None = None, redis_url: str | None = None):
        if redis_client is None:
            redis_client = get_redis_client(redis_url or "redis://localhost:6379/0")
        self._redis = redis_client

    def _encode(self, person_id: uuid.UUID, person: Person) -> str:
        try:
            return json.dumps({"id": str(person_id), "name": person.name}, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise BackendFailureError(f"cannot serialize person: {exc}") from exc

    def _decode(self, raw: str, person_id: uuid.UUID) -> Person:
        try:
            return Person.from_dict(json.loads(raw), person_id=person_id)
        except (ValueError, MalformedInputError) as exc:
            raise BackendFailureError(f"cannot decode person {person_id}: {exc}") from exc

    def add_person(self, person: Person) -> uuid.UUID:
        try:
            while True:
                person_id = uuid.uuid4()
                if self._redis.set(person_key(person_id), self._encode(person_id, person), nx=True):
                    return person_id
                logger.warning("id collision on %s, drawing a new one", person_id)
        except redis.RedisError as exc:
            logger.warning("redis add_person failed: %s", exc)
            raise BackendFailureError(f"cannot add person to db: {exc}") from exc

    def get_person(self, person_id: uuid.UUID) -> Person:
        try:
            raw = self._redis.get(person_key(person_id))
        except redis.RedisError as exc:
            logger.warning("redis get_person failed: %s", exc)
            raise BackendFailureError(f"failed to find person: {exc}") from exc
        if raw is None:
            raise PersonNotFoundError(f"person {person_id} not found")
        return self._decode(raw, person_id)

    def get_all_persons(self) -> list[Person]:
        persons: list[Person] = []
        try:
            for key in self._redis.scan_iter(match=f"{KEY_PREFIX}*"):
                raw = self._redis.get(key)
                if raw is None:
                    # deleted between SCAN and GET
                    continue
                suffix = key[len(KEY_PREFIX):]
                try:
                    person_id = uuid.UUID(suffix)
                except ValueError as exc:
                    raise BackendFailureError(f"malformed id or prefix in key {key!r}") from exc
                persons.append(self._decode(raw, person_id))
        except redis.RedisError as exc:
            logger.warning("redis get_all_persons failed: %s", exc)
            raise BackendFailureError(f"failed to retrieve persons from db: {exc}") from exc
        return persons

    def update_person(self, person_id: uuid.UUID, person: Person) -> None:
        try:
            updated = self._redis.set(person_key(person_id), self._encode(person_id, person), xx=True)
        except redis.RedisError as exc:
            logger.warning("redis update_person failed: %s", exc)
            raise BackendFailureError(f"failed to update record: {exc}") from exc
        if not updated:
            raise PersonNotFoundError(f"person {person_id} not found")

    def delete_person(self, person_id: uuid.UUID) -> None:
        try:
            removed = self._redis.delete(person_key(person_id))
        except redis.RedisError as exc:
            logger.warning("redis delete_person failed: %s", exc)
            raise BackendFailureError(f"failed to delete person: {exc}") from exc
        if not removed:
            raise PersonNotFoundError(f"person {person_id} not found")

    def close(self) -> None:
        self._redis.close()
