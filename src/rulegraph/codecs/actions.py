"""Codec for the log action node."""

from __future__ import annotations

from .base import PartialRecord, as_object, first_str, spread


class LogConfig(PartialRecord):
    label: str = ""
    message_template: str = ""


class LogCodec:
    full = False
    superseded = ("message_template", "message", "text")

    def decode(self, raw: object) -> LogConfig:
        obj = as_object(raw)
        template = ""
        for key in ("messageTemplate", *self.superseded):
            value = obj.get(key)
            if isinstance(value, str) and value:
                template = value
                break
        return LogConfig(raw=obj, label=first_str(obj, "label"), message_template=template)

    def encode(self, record: LogConfig) -> dict[str, object]:
        payload = spread(record.raw, drop=self.superseded)
        # blank values are omitted rather than written as ""
        if record.label.strip():
            payload["label"] = record.label
        else:
            payload.pop("label", None)
        if record.message_template.strip():
            payload["messageTemplate"] = record.message_template
        else:
            payload.pop("messageTemplate", None)
        return payload
