from __future__ import annotations

import pytest

from rulegraph.codecs import (
    AttributesCodec,
    CalculatedFieldsCodec,
    CheckMessageCodec,
    CheckMessageConfig,
    DeleteKeysCodec,
    LogCodec,
    MessageTypeFilterCodec,
    MessageTypeFilterConfig,
    MessageTypeMapping,
    MessageTypeSwitchCodec,
    MessageTypeSwitchConfig,
    PassthroughCodec,
    RenameKeysCodec,
    ScriptCodec,
    ScriptConfig,
    SplitArrayCodec,
    TimeseriesCodec,
    keys_from_text,
)
from rulegraph.codecs.base import PartialRecord
from rulegraph.codecs.telemetry import CalculatedField, CalculatedFieldsConfig, TimeseriesConfig, TimeseriesValue


def test_decode_is_total_for_garbage_input() -> None:
    for raw in (None, 42, "not json", "[1, 2]", ["x"], ""):
        assert TimeseriesCodec().decode(raw) == TimeseriesConfig()
        assert MessageTypeSwitchCodec().decode(raw).mappings == []
        assert SplitArrayCodec().decode(raw).array_path == ".data"


def test_json_text_configuration_is_parsed() -> None:
    assert ScriptCodec().decode('{"script": ".a"}').script == ".a"


def test_timeseries_legacy_aliases() -> None:
    record = TimeseriesCodec().decode(
        {
            "device_id_path": "meta.id",
            "use_server_ts": False,
            "ts_path": "ts",
            "value_mappings": [{"key": "t", "value_path": "temp", "type": "string"}],
        }
    )
    assert record.device_id_path == "meta.id"
    assert record.use_server_ts is False
    assert record.ts_path == "ts"
    assert record.values == [TimeseriesValue(key="t", value_path="temp", value_type="string")]


def test_timeseries_server_ts_clears_ts_path() -> None:
    record = TimeseriesConfig(use_server_ts=True, ts_path="x")
    assert TimeseriesCodec().encode(record)["tsPath"] == ""


def test_timeseries_full_codec_round_trip_drops_unknown_keys() -> None:
    codec = TimeseriesCodec()
    record = TimeseriesConfig(
        device_id_path="id",
        use_server_ts=False,
        ts_path="ts",
        values=[TimeseriesValue(key="k", value_path="p", value_type="json")],
    )
    encoded = codec.encode(record)
    assert codec.decode(encoded) == record
    assert "legacy" not in codec.encode(codec.decode({**encoded, "legacy": 1}))


def test_attributes_partial_codec_keeps_unknown_keys_and_drops_aliases() -> None:
    codec = AttributesCodec()
    record = codec.decode(
        {
            "processing_settings": {"type": "DEDUPLICATE", "intervalSec": 60},
            "notify_device": True,
            "fields": [{"name": "fw", "value": "firmware"}],
            "custom": "kept",
        }
    )
    assert record.processing_settings == {"type": "DEDUPLICATE", "intervalSec": 60}
    assert record.notify_device is True
    assert [(item.key, item.path) for item in record.attributes] == [("fw", "firmware")]

    encoded = codec.encode(record)
    assert encoded["custom"] == "kept"
    assert encoded["processingSettings"] == {"type": "DEDUPLICATE", "intervalSec": 60}
    assert encoded["notifyDevice"] is True
    assert encoded["attributes"] == [{"key": "fw", "path": "firmware"}]
    for alias in ("processing_settings", "notify_device", "fields"):
        assert alias not in encoded


def test_attributes_defaults() -> None:
    record = AttributesCodec().decode({"processingSettings": {}})
    assert record.processing_settings == {"type": "ON_EVERY_MESSAGE"}
    assert record.scope == "CLIENT_SCOPE"
    assert record.update_attributes_only_on_value_change is True


def test_check_message_header_prefix_is_stripped_and_restored() -> None:
    codec = CheckMessageCodec()
    assert codec.decode({"metadataNames": ["headers.a", "b"]}).header_keys == ["a", "b"]
    encoded = codec.encode(CheckMessageConfig(header_keys=["a", "b.c"]))
    assert encoded["metadataNames"] == ["headers.a", "b.c"]


def test_check_message_aliases_and_comma_lists() -> None:
    record = CheckMessageCodec().decode(
        {"data_keys": "temp, humidity", "metadata_keys": ["headers.token"], "check_all_keys": False}
    )
    assert record.message_keys == ["temp", "humidity"]
    assert record.header_keys == ["token"]
    assert record.check_all_keys is False


def test_check_message_round_trip() -> None:
    codec = CheckMessageCodec()
    record = CheckMessageConfig(message_keys=["t"], header_keys=["x"], check_all_keys=False)
    assert codec.decode(codec.encode(record)) == record


def test_message_type_filter_aliases() -> None:
    codec = MessageTypeFilterCodec()
    assert codec.decode({"types": ["A", 3]}).message_types == ["A", ""]
    assert codec.decode({"message_types": ["B"], "types": ["A"]}).message_types == ["B"]
    assert codec.encode(codec.decode({"types": ["A"]})) == {"messageTypes": ["A"]}


def test_message_type_switch_mapping_aliases_and_bare_lists() -> None:
    codec = MessageTypeSwitchCodec()
    record = codec.decode({"messageTypeMappings": [{"messageType": "ping", "relationType": "p"}]})
    assert [(item.type, item.relation) for item in record.mappings] == [("ping", "p")]

    bare = codec.decode({"messageTypes": ["a", "b"]})
    assert [(item.type, item.relation) for item in bare.mappings] == [("a", ""), ("b", "")]
    assert codec.encode(bare) == {"mappings": [{"type": "a", "relation": ""}, {"type": "b", "relation": ""}]}


def test_script_codec_aliases_follow_node_type() -> None:
    assert ScriptCodec("expression", "js").decode({"js": "true"}).script == "true"
    assert ScriptCodec("expression", "jq").decode({"expression": ".a", "jq": ".b"}).script == ".a"
    assert ScriptCodec("expression", "jq").encode(ScriptCodec().decode({"script": ".x", "jq": ".y"})) == {
        "script": ".x"
    }


def test_log_codec_template_aliases_and_blank_omission() -> None:
    codec = LogCodec()
    record = codec.decode({"message": "", "text": "hello", "extra": 1})
    assert record.message_template == "hello"

    encoded = codec.encode(record)
    assert encoded == {"extra": 1, "messageTemplate": "hello"}

    record.message_template = "  "
    record.label = "Audit"
    assert codec.encode(record) == {"extra": 1, "label": "Audit"}


def test_rename_keys_aliases_and_encoding() -> None:
    codec = RenameKeysCodec()
    record = codec.decode({"mapping": {" temp ": "t", "hum": " "}, "fromMetadata": True, "other": 1})
    assert record.rename_in == "METADATA"
    assert [(entry.source, entry.target) for entry in record.entries] == [("temp", "t"), ("hum", "")]

    encoded = codec.encode(record)
    assert encoded == {"other": 1, "renameIn": "METADATA", "renameKeysMapping": {"temp": "t"}}


def test_rename_keys_string_rename_in() -> None:
    assert RenameKeysCodec().decode({"rename_in": "metadata"}).rename_in == "METADATA"
    assert RenameKeysCodec().decode({"renameIn": "anything"}).rename_in == "DATA"


def test_delete_keys_aliases_and_superseded_keys() -> None:
    codec = DeleteKeysCodec()
    record = codec.decode({"dataToFetch": "metadata", "keys": ["a", 1, True], "note": "x"})
    assert record.delete_from == "METADATA"
    assert record.keys == ["a", "1", "true"]
    encoded = codec.encode(record)
    assert encoded == {"note": "x", "deleteFrom": "METADATA", "keys": ["a", "1", "true"]}


def test_keys_from_text() -> None:
    assert keys_from_text(" a \r\n\nb\n   \nc") == ["a", "b", "c"]


def test_split_array_first_nonblank_alias() -> None:
    codec = SplitArrayCodec()
    record = codec.decode({"arrayPath": "  ", "path": "", "jq": " .items ", "filter": ".x", "keep": True})
    assert record.array_path == ".items"
    assert codec.encode(record) == {"keep": True, "arrayPath": ".items"}


def test_calculated_fields_decode_and_encode() -> None:
    codec = CalculatedFieldsCodec()
    record = codec.decode(
        {
            "version": "2",
            "calculatedFields": [
                {
                    "name": " avg ",
                    "configuration": {
                        "expression": " (.a + .b) / 2 ",
                        "output": {"name": "avg", "type": "ATTRIBUTES", "decimals_by_default": 2},
                    },
                }
            ],
            "debug": True,
        }
    )
    assert record.version == 1
    field = record.fields[0]
    assert field.name == "avg"
    assert field.type == "SCRIPT"
    assert field.expression == "(.a + .b) / 2"
    assert field.output_scope == "CLIENT_SCOPE"
    assert field.decimals == "2"

    encoded = codec.encode(record)
    assert encoded["debug"] is True
    assert "calculatedFields" not in encoded
    assert encoded["fields"] == [
        {
            "name": "avg",
            "type": "SCRIPT",
            "configurationVersion": 1,
            "configuration": {
                "expression": "(.a + .b) / 2",
                "arguments": {},
                "output": {
                    "name": "avg",
                    "type": "ATTRIBUTES",
                    "scope": "CLIENT_SCOPE",
                    "decimalsByDefault": 2,
                },
            },
        }
    ]


def test_calculated_fields_time_series_output_has_no_scope() -> None:
    codec = CalculatedFieldsCodec()
    record = codec.decode({"fields": [{"configuration": {"output": {"decimalsByDefault": "1.5"}}}]})
    output = codec.encode(record)["fields"][0]["configuration"]["output"]  # type: ignore[index]
    assert output == {"name": "", "type": "TIME_SERIES", "decimalsByDefault": 1.5}


def test_passthrough_codec_copies() -> None:
    raw = {"a": {"b": 1}}
    decoded = PassthroughCodec().decode(raw)
    decoded["a"]["b"] = 2
    assert raw == {"a": {"b": 1}}


def test_decode_treats_deeply_nested_text_as_empty() -> None:
    nested = "[" * 100_000 + "]" * 100_000
    assert TimeseriesCodec().decode(nested) == TimeseriesConfig()
    assert SplitArrayCodec().decode(nested).array_path == ".data"


@pytest.mark.parametrize(
    ("codec", "record"),
    [
        (
            TimeseriesCodec(),
            TimeseriesConfig(
                device_id_path="device",
                use_server_ts=False,
                ts_path="ts",
                values=[TimeseriesValue(key="t", value_path="temp", value_type="number")],
            ),
        ),
        (
            CheckMessageCodec(),
            CheckMessageConfig(message_keys=["temp"], header_keys=["token"], check_all_keys=True),
        ),
        (MessageTypeFilterCodec(), MessageTypeFilterConfig(message_types=["POST_TELEMETRY_REQUEST", "ping"])),
        (
            MessageTypeSwitchCodec(),
            MessageTypeSwitchConfig(
                mappings=[
                    MessageTypeMapping(type="POST_TELEMETRY_REQUEST", relation="Telemetry"),
                    MessageTypeMapping(type="ping", relation=""),
                ]
            ),
        ),
        (ScriptCodec("expression", "jq"), ScriptConfig(script=".temperature > 20")),
        (ScriptCodec("expression", "js"), ScriptConfig(script="return msg.temperature > 20;")),
    ],
)
def test_full_codecs_round_trip(codec: object, record: object) -> None:
    assert codec.full is True  # type: ignore[attr-defined]
    assert not isinstance(record, PartialRecord)
    assert codec.decode(codec.encode(record)) == record  # type: ignore[attr-defined]


@pytest.mark.parametrize(
    ("decimals", "expected"),
    [("2", 2), ("-1", -1), ("0.5", 0.5), ("1e2", 100.0), ("1_000", "1_000"), ("٣", "٣"), ("1e999", "1e999")],
)
def test_calculated_fields_decimals_coerce_plain_numbers_only(decimals: str, expected: object) -> None:
    record = CalculatedFieldsConfig(fields=[CalculatedField(output_name="avg", decimals=decimals)])
    output = CalculatedFieldsCodec().encode(record)["fields"][0]["configuration"]["output"]  # type: ignore[index]
    assert output["decimalsByDefault"] == expected
    assert type(output["decimalsByDefault"]) is type(expected)
