"""Codecs for filter and switch nodes."""

from __future__ import annotations

from pydantic import BaseModel, Field

from .base import as_object, display_string, first_list, first_present, first_str

HEADERS_PREFIX = "headers."


class CheckMessageConfig(BaseModel):
    message_keys: list[str] = Field(default_factory=list)
    header_keys: list[str] = Field(default_factory=list)
    check_all_keys: bool = True


def normalize_key_list(value: object) -> list[str]:
    """Accept a list or a comma-separated string of keys."""
    if not value:
        return []
    if isinstance(value, list):
        return [display_string(entry).strip() for entry in value]
    if isinstance(value, str):
        return [entry.strip() for entry in value.split(",")]
    return []


def qualify_header_key(key: str) -> str:
    key = key.strip()
    if not key or key.startswith(HEADERS_PREFIX) or "." in key:
        return key
    return f"{HEADERS_PREFIX}{key}"


class CheckMessageCodec:
    """Header keys live under ``metadata`` on the wire as ``headers.<key>``."""

    full = True

    def decode(self, raw: object) -> CheckMessageConfig:
        obj = as_object(raw)
        message_keys = normalize_key_list(
            first_present(obj, "messageNames", "message_names", "dataKeys", "data_keys")
        )
        metadata_keys = normalize_key_list(
            first_present(obj, "metadataNames", "metadata_names", "metadataKeys", "metadata_keys")
        )
        header_keys = [key.removeprefix(HEADERS_PREFIX) for key in metadata_keys]
        check_all = first_present(obj, "checkAllKeys", "check_all_keys")
        return CheckMessageConfig(
            message_keys=message_keys,
            header_keys=header_keys,
            check_all_keys=True if check_all is None else bool(check_all),
        )

    def encode(self, record: CheckMessageConfig) -> dict[str, object]:
        return {
            "messageNames": list(record.message_keys),
            "metadataNames": [qualify_header_key(key) for key in record.header_keys],
            "checkAllKeys": record.check_all_keys,
        }


class MessageTypeFilterConfig(BaseModel):
    message_types: list[str] = Field(default_factory=list)


class MessageTypeFilterCodec:
    full = True

    def decode(self, raw: object) -> MessageTypeFilterConfig:
        obj = as_object(raw)
        entries = first_list(obj, "messageTypes", "message_types", "types") or []
        return MessageTypeFilterConfig(
            message_types=[entry if isinstance(entry, str) else "" for entry in entries]
        )

    def encode(self, record: MessageTypeFilterConfig) -> dict[str, object]:
        return {"messageTypes": list(record.message_types)}


class MessageTypeMapping(BaseModel):
    type: str = ""
    relation: str = ""

    @property
    def route(self) -> str:
        """Relation this mapping routes to; the type doubles as relation when unset."""
        return (self.relation or self.type).strip()


class MessageTypeSwitchConfig(BaseModel):
    mappings: list[MessageTypeMapping] = Field(default_factory=list)


def _mapping_from_entry(entry: object) -> MessageTypeMapping:
    if isinstance(entry, str):
        return MessageTypeMapping(type=entry)
    if not isinstance(entry, dict):
        return MessageTypeMapping()
    return MessageTypeMapping(
        type=first_str(entry, "type", "messageType"),
        relation=first_str(entry, "relation", "relationType"),
    )


class MessageTypeSwitchCodec:
    full = True

    def decode(self, raw: object) -> MessageTypeSwitchConfig:
        obj = as_object(raw)
        entries = first_list(obj, "mappings", "messageTypeMappings")
        if entries is None:
            # bare message-type lists carry no relation
            bare = first_list(obj, "message_types", "messageTypes") or []
            entries = [{"type": entry, "relation": ""} for entry in bare]
        return MessageTypeSwitchConfig(mappings=[_mapping_from_entry(entry) for entry in entries])

    def encode(self, record: MessageTypeSwitchConfig) -> dict[str, object]:
        return {
            "mappings": [
                {"type": mapping.type, "relation": mapping.relation} for mapping in record.mappings
            ]
        }


class ScriptConfig(BaseModel):
    script: str = ""


class ScriptCodec:
    """Single-script configuration; ``aliases`` are read after ``script``."""

    full = True

    def __init__(self, *aliases: str) -> None:
        self.aliases = aliases

    def decode(self, raw: object) -> ScriptConfig:
        return ScriptConfig(script=first_str(as_object(raw), "script", *self.aliases))

    def encode(self, record: ScriptConfig) -> dict[str, object]:
        return {"script": record.script}
