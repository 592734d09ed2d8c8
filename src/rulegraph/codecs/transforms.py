"""Codecs for key-manipulation and split transform nodes."""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, Field

from .base import (
    PartialRecord,
    as_object,
    display_string,
    first_mapping,
    first_nonblank,
    first_present,
    spread,
    trimmed,
)

MessagePart = Literal["DATA", "METADATA"]
DEFAULT_ARRAY_PATH = ".data"


def normalize_message_part(value: object) -> MessagePart:
    """``True`` and ``"metadata"`` (any case) mean METADATA, anything else DATA."""
    if isinstance(value, bool):
        return "METADATA" if value else "DATA"
    return "METADATA" if trimmed(value).upper() == "METADATA" else "DATA"


class RenameEntry(BaseModel):
    source: str = ""
    target: str = ""


class RenameKeysConfig(PartialRecord):
    entries: list[RenameEntry] = Field(default_factory=list)
    rename_in: MessagePart = "DATA"


class RenameKeysCodec:
    full = False
    superseded = ("rename_keys_mapping", "mapping", "rename_in", "fromMetadata", "from_metadata")

    def decode(self, raw: object) -> RenameKeysConfig:
        obj = as_object(raw)
        mapping = first_mapping(obj, "renameKeysMapping", "rename_keys_mapping", "mapping") or {}
        rename_in = first_present(
            obj, "renameIn", "rename_in", "fromMetadata", "from_metadata", default="DATA"
        )
        return RenameKeysConfig(
            raw=obj,
            entries=[
                RenameEntry(source=source.strip(), target=trimmed(target))
                for source, target in mapping.items()
            ],
            rename_in=normalize_message_part(rename_in),
        )

    def encode(self, record: RenameKeysConfig) -> dict[str, object]:
        mapping: dict[str, str] = {}
        for entry in record.entries:
            source, target = entry.source.strip(), entry.target.strip()
            if source and target:
                mapping[source] = target
        payload = spread(record.raw)
        payload["renameIn"] = record.rename_in
        payload["renameKeysMapping"] = mapping
        for key in self.superseded:
            payload.pop(key, None)
        return payload


class DeleteKeysConfig(PartialRecord):
    delete_from: MessagePart = "DATA"
    keys: list[str] = Field(default_factory=list)


def keys_from_text(text: str) -> list[str]:
    """One key per line; surrounding blanks and empty lines are dropped."""
    return [line.strip() for line in re.split(r"\r?\n", text) if line.strip()]


class DeleteKeysCodec:
    full = False
    superseded = ("delete_from", "dataToFetch", "data_to_fetch")

    def decode(self, raw: object) -> DeleteKeysConfig:
        obj = as_object(raw)
        delete_from = first_present(
            obj, "deleteFrom", "delete_from", "dataToFetch", "data_to_fetch", default="DATA"
        )
        keys = obj.get("keys")
        keys = keys if isinstance(keys, list) else []
        return DeleteKeysConfig(
            raw=obj,
            delete_from=normalize_message_part(delete_from),
            keys=[display_string(entry) for entry in keys],
        )

    def encode(self, record: DeleteKeysConfig) -> dict[str, object]:
        payload = spread(record.raw)
        payload["deleteFrom"] = record.delete_from
        payload["keys"] = list(record.keys)
        for key in self.superseded:
            payload.pop(key, None)
        return payload


class SplitArrayConfig(PartialRecord):
    array_path: str = DEFAULT_ARRAY_PATH


class SplitArrayCodec:
    full = False
    superseded = ("array_path", "path", "jq", "script", "expression", "filter")

    def decode(self, raw: object) -> SplitArrayConfig:
        obj = as_object(raw)
        return SplitArrayConfig(
            raw=obj,
            array_path=first_nonblank(obj, "arrayPath", *self.superseded, default=DEFAULT_ARRAY_PATH),
        )

    def encode(self, record: SplitArrayConfig) -> dict[str, object]:
        payload = spread(record.raw, drop=self.superseded)
        payload["arrayPath"] = record.array_path
        return payload
