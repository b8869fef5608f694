"""JSON wire codec for storage RPC messages."""
from __future__ import annotations

import json
from typing import Any

from persondir.domain.persons import MalformedInputError


def encode(message: dict[str, Any]) -> bytes:
    return json.dumps(message, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def decode(payload: bytes) -> dict[str, Any]:
    if not payload:
        return {}
    try:
        message = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise MalformedInputError(f"undecodable rpc message: {exc}") from exc
    if not isinstance(message, dict):
        raise MalformedInputError("rpc message must be a JSON object")
    return message
