"""Shared helpers and the codec protocol for node configurations.

A codec turns the raw configuration object stored on a node into a typed
record and back. Decoding never fails: anything that is not a JSON object
is read as ``{}`` and every field falls back to a default. Codecs come in
two flavours:

* full codecs write only their canonical keys and drop everything else;
* partial codecs start from the raw object they decoded (kept on the
  record as ``raw``), overwrite their own keys and remove the legacy
  aliases they understand, so unrelated keys survive.
"""

from __future__ import annotations

import copy
import json
import math
from typing import Any, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, Field

RecordT = TypeVar("RecordT")


@runtime_checkable
class ConfigCodec(Protocol[RecordT]):
    """Bidirectional mapping between a raw configuration and a record."""

    full: bool

    def decode(self, raw: object) -> RecordT: ...

    def encode(self, record: RecordT) -> dict[str, object]: ...


class PartialRecord(BaseModel):
    """Base for records whose codec preserves unknown keys."""

    raw: dict[str, Any] = Field(default_factory=dict)


def as_object(raw: object) -> dict[str, Any]:
    """Read ``raw`` as a JSON object; JSON text is parsed, anything else is ``{}``."""
    if isinstance(raw, str):
        if not raw.strip():
            return {}
        try:
            raw = json.loads(raw)
        except (ValueError, RecursionError):
            return {}
    if isinstance(raw, dict):
        return raw
    return {}


def first_present(obj: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First value under ``keys`` that is not ``None``."""
    for key in keys:
        value = obj.get(key)
        if value is not None:
            return value
    return default


def first_str(obj: dict[str, Any], *keys: str, default: str = "") -> str:
    for key in keys:
        value = obj.get(key)
        if isinstance(value, str):
            return value
    return default


def first_nonblank(obj: dict[str, Any], *keys: str, default: str = "") -> str:
    """First string under ``keys`` that is not blank, trimmed."""
    for key in keys:
        value = trimmed(obj.get(key))
        if value:
            return value
    return default


def first_bool(obj: dict[str, Any], *keys: str, default: bool) -> bool:
    for key in keys:
        value = obj.get(key)
        if isinstance(value, bool):
            return value
    return default


def first_list(obj: dict[str, Any], *keys: str) -> list[Any] | None:
    for key in keys:
        value = obj.get(key)
        if isinstance(value, list):
            return value
    return None


def first_mapping(obj: dict[str, Any], *keys: str) -> dict[str, Any] | None:
    for key in keys:
        value = obj.get(key)
        if isinstance(value, dict):
            return value
    return None


def trimmed(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def is_number(value: object) -> bool:
    """True for JSON numbers; booleans are not numbers here."""
    return isinstance(value, int | float) and not isinstance(value, bool)


def is_finite_number(value: object) -> bool:
    return is_number(value) and math.isfinite(value)  # type: ignore[arg-type]


def display_string(value: object) -> str:
    """Render a JSON scalar the way it reads in the editor."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def spread(raw: dict[str, Any], drop: tuple[str, ...] = ()) -> dict[str, Any]:
    """Deep copy of ``raw`` without the ``drop`` keys."""
    payload = copy.deepcopy(raw)
    for key in drop:
        payload.pop(key, None)
    return payload


class PassthroughCodec:
    """Codec for node types without a dedicated settings shape."""

    full = False

    def decode(self, raw: object) -> dict[str, Any]:
        return copy.deepcopy(as_object(raw))

    def encode(self, record: dict[str, Any]) -> dict[str, object]:
        return copy.deepcopy(record)
