"""Codecs for the telemetry storage nodes."""

from __future__ import annotations

import math
import re
from typing import Any

from pydantic import BaseModel, Field

from .base import (
    PartialRecord,
    as_object,
    display_string,
    first_bool,
    first_list,
    first_mapping,
    first_present,
    first_str,
    is_finite_number,
    spread,
    trimmed,
)

TIMESERIES_VALUE_TYPES = ("number", "string", "bool", "json")
OUTPUT_TIME_SERIES = "TIME_SERIES"
OUTPUT_ATTRIBUTES = "ATTRIBUTES"
DEFAULT_ATTRIBUTE_SCOPE = "CLIENT_SCOPE"
DEFAULT_PROCESSING_TYPE = "ON_EVERY_MESSAGE"


class TimeseriesValue(BaseModel):
    key: str = ""
    value_path: str = ""
    value_type: str = "number"


class TimeseriesConfig(BaseModel):
    device_id_path: str = "device_id"
    use_server_ts: bool = True
    ts_path: str = ""
    values: list[TimeseriesValue] = Field(default_factory=list)


class TimeseriesCodec:
    full = True

    def decode(self, raw: object) -> TimeseriesConfig:
        obj = as_object(raw)
        entries = first_list(obj, "values", "valueMappings", "value_mappings") or []
        values = []
        for entry in entries:
            item = entry if isinstance(entry, dict) else {}
            values.append(
                TimeseriesValue(
                    key=first_str(item, "key"),
                    value_path=first_str(item, "valuePath", "value_path", "value"),
                    value_type=first_str(item, "valueType", "value_type", "type", default="number"),
                )
            )
        return TimeseriesConfig(
            device_id_path=first_str(obj, "deviceIdPath", "device_id_path", default="device_id"),
            use_server_ts=first_bool(obj, "useServerTs", "use_server_ts", default=True),
            ts_path=first_str(obj, "tsPath", "ts_path"),
            values=values,
        )

    def encode(self, record: TimeseriesConfig) -> dict[str, object]:
        # server time and an explicit timestamp path are mutually exclusive
        return {
            "deviceIdPath": record.device_id_path,
            "useServerTs": record.use_server_ts,
            "tsPath": "" if record.use_server_ts else record.ts_path,
            "values": [
                {"key": value.key, "valuePath": value.value_path, "valueType": value.value_type}
                for value in record.values
            ],
        }


class AttributeEntry(BaseModel):
    key: str = ""
    path: str = ""


class AttributesConfig(PartialRecord):
    processing_settings: dict[str, Any] = Field(
        default_factory=lambda: {"type": DEFAULT_PROCESSING_TYPE}
    )
    scope: str = DEFAULT_ATTRIBUTE_SCOPE
    notify_device: bool = False
    send_attributes_updated_notification: bool = False
    update_attributes_only_on_value_change: bool = True
    attributes: list[AttributeEntry] = Field(default_factory=list)


class AttributesCodec:
    full = False
    superseded = (
        "processing_settings",
        "notify_device",
        "send_attributes_updated_notification",
        "update_attributes_only_on_value_change",
        "attributeMappings",
        "attribute_mappings",
        "fields",
    )

    def decode(self, raw: object) -> AttributesConfig:
        obj = as_object(raw)
        settings = dict(first_mapping(obj, "processingSettings", "processing_settings") or {})
        settings_type = settings.get("type")
        settings["type"] = settings_type if isinstance(settings_type, str) else DEFAULT_PROCESSING_TYPE

        entries = first_list(obj, "attributes", "attributeMappings", "attribute_mappings", "fields")
        attributes = []
        for entry in entries or []:
            item = entry if isinstance(entry, dict) else {}
            attributes.append(
                AttributeEntry(
                    key=first_str(item, "key", "name", "type"),
                    path=first_str(item, "path", "valuePath", "value_path", "value"),
                )
            )
        return AttributesConfig(
            raw=obj,
            processing_settings=settings,
            scope=first_str(obj, "scope", default=DEFAULT_ATTRIBUTE_SCOPE),
            notify_device=first_bool(obj, "notifyDevice", "notify_device", default=False),
            send_attributes_updated_notification=first_bool(
                obj,
                "sendAttributesUpdatedNotification",
                "send_attributes_updated_notification",
                default=False,
            ),
            update_attributes_only_on_value_change=first_bool(
                obj,
                "updateAttributesOnlyOnValueChange",
                "update_attributes_only_on_value_change",
                default=True,
            ),
            attributes=attributes,
        )

    def encode(self, record: AttributesConfig) -> dict[str, object]:
        payload = spread(record.raw)
        payload.update(
            {
                "processingSettings": dict(record.processing_settings),
                "scope": record.scope,
                "notifyDevice": record.notify_device,
                "sendAttributesUpdatedNotification": record.send_attributes_updated_notification,
                "updateAttributesOnlyOnValueChange": record.update_attributes_only_on_value_change,
                "attributes": [{"key": item.key, "path": item.path} for item in record.attributes],
            }
        )
        for key in self.superseded:
            payload.pop(key, None)
        return payload


class CalculatedField(BaseModel):
    name: str = ""
    type: str = "SCRIPT"
    expression: str = ""
    output_name: str = ""
    output_type: str = OUTPUT_TIME_SERIES
    output_scope: str = ""
    decimals: str = ""


class CalculatedFieldsConfig(PartialRecord):
    version: int | float = 1
    fields: list[CalculatedField] = Field(default_factory=list)


_DECIMAL_TEXT = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_INTEGER_TEXT = re.compile(r"[+-]?\d+", re.ASCII)


def _coerce_decimals(text: str) -> int | float | str:
    # plain ASCII decimal notation only; "1_000" and other digit scripts stay text
    if _INTEGER_TEXT.fullmatch(text):
        return int(text)
    if not _DECIMAL_TEXT.fullmatch(text):
        return text
    number = float(text)
    return number if math.isfinite(number) else text


class CalculatedFieldsCodec:
    full = False

    def decode(self, raw: object) -> CalculatedFieldsConfig:
        obj = as_object(raw)
        version = obj.get("version")
        fields = []
        for entry in first_list(obj, "fields", "calculatedFields") or []:
            item = entry if isinstance(entry, dict) else {}
            configuration = item.get("configuration")
            configuration = configuration if isinstance(configuration, dict) else {}
            output = configuration.get("output")
            output = output if isinstance(output, dict) else {}
            output_type = trimmed(output.get("type")) or OUTPUT_TIME_SERIES
            default_scope = DEFAULT_ATTRIBUTE_SCOPE if output_type == OUTPUT_ATTRIBUTES else ""
            fields.append(
                CalculatedField(
                    name=trimmed(item.get("name")),
                    type=trimmed(item.get("type")) or "SCRIPT",
                    expression=trimmed(configuration.get("expression")),
                    output_name=trimmed(output.get("name")),
                    output_type=output_type,
                    output_scope=trimmed(output.get("scope")) or default_scope,
                    decimals=display_string(
                        first_present(output, "decimalsByDefault", "decimals_by_default")
                    ),
                )
            )
        return CalculatedFieldsConfig(
            raw=obj,
            version=version if is_finite_number(version) else 1,
            fields=fields,
        )

    def encode(self, record: CalculatedFieldsConfig) -> dict[str, object]:
        encoded_fields = []
        for field in record.fields:
            output_type = field.output_type.strip() or OUTPUT_TIME_SERIES
            output: dict[str, object] = {"name": field.output_name, "type": output_type}
            if output_type == OUTPUT_ATTRIBUTES:
                output["scope"] = field.output_scope.strip() or DEFAULT_ATTRIBUTE_SCOPE
            decimals = field.decimals.strip()
            if decimals:
                output["decimalsByDefault"] = _coerce_decimals(decimals)
            encoded_fields.append(
                {
                    "name": field.name,
                    "type": "SCRIPT",
                    "configurationVersion": 1,
                    "configuration": {
                        "expression": field.expression,
                        "arguments": {},
                        "output": output,
                    },
                }
            )
        payload = spread(record.raw, drop=("calculatedFields",))
        payload["version"] = record.version
        payload["fields"] = encoded_fields
        return payload
