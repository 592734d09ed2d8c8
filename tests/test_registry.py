from __future__ import annotations

from rulegraph.codecs import PassthroughCodec, ScriptConfig
from rulegraph.models import ExpectedResult
from rulegraph.registry import SECTIONS, NodeTypeRegistry, NodeTypeSpec
from rulegraph.relations import StaticRelations


def test_builtin_catalog_size_and_sections(registry: NodeTypeRegistry) -> None:
    assert len(registry) == 46
    assert {spec.section for spec in registry} <= set(SECTIONS)
    assert registry.section_of("Filter.JsFilterNode") == "filter"


def test_ingest_palette_is_restricted(registry: NodeTypeRegistry) -> None:
    ingest = {spec.node_type for spec in registry.templates(ingest=True)}
    assert len(ingest) == 12
    assert "Transform.SplitArrayToMsgNode" in ingest
    assert "Telemetry.MsgTimeseriesNode" not in ingest
    assert len(registry.templates()) == 46


def test_unknown_type_falls_back_to_passthrough(registry: NodeTypeRegistry) -> None:
    spec = registry.get("Vendor.CustomNode")
    assert spec.label == "Vendor.CustomNode"
    assert isinstance(spec.codec, PassthroughCodec)
    assert registry.default_configuration("Vendor.CustomNode") == {}
    assert registry.check("Vendor.CustomNode", {"anything": 1}) == []
    assert "Vendor.CustomNode" not in registry


def test_default_configuration_is_a_copy(registry: NodeTypeRegistry) -> None:
    config = registry.default_configuration("Rest.RestApiCallNode")
    config["headers"]["X-Test"] = "1"
    assert "X-Test" not in registry.default_configuration("Rest.RestApiCallNode")["headers"]


def test_register_replaces_existing_spec(registry: NodeTypeRegistry) -> None:
    registry.register(NodeTypeSpec("Action.LogNode", "Audit Log", "action"))
    assert registry.get("Action.LogNode").label == "Audit Log"
    assert len(registry) == 46


def test_custom_registry_by_registration() -> None:
    custom = NodeTypeRegistry(
        [NodeTypeSpec("Vendor.Blink", "Blink", relations=StaticRelations(["Success"]))]
    )
    assert [spec.node_type for spec in custom] == ["Vendor.Blink"]


def test_normalize_decodes_then_encodes(registry: NodeTypeRegistry) -> None:
    assert registry.normalize("Filter.JsFilterNode", {"js": "true", "junk": 1}) == {"script": "true"}
    assert registry.decode("Transform.TransformMsgNode", {"jq": ".a"}) == ScriptConfig(script=".a")


def test_expression_fields(registry: NodeTypeRegistry) -> None:
    [(key, text, field)] = registry.expressions("Filter.JsFilterNode", {"script": ".x > 1"})
    assert (key, text, field.expected) == ("script", ".x > 1", ExpectedResult.BOOLEAN)

    [(key, text, field)] = registry.expressions("Transform.SplitArrayToMsgNode", {})
    assert (key, text) == ("arrayPath", ".data")
    assert field.expected == ExpectedResult.ARRAY
    assert field.required_message == "jq path is required."
    assert field.payload_sample and field.fast

    found = registry.expressions(
        "Telemetry.CalculatedFieldsNode",
        {"fields": [{"configuration": {"expression": ".a"}}, {"configuration": {"expression": ".b"}}]},
    )
    assert [(key, text) for key, text, _ in found] == [
        ("fields.0.expression", ".a"),
        ("fields.1.expression", ".b"),
    ]
    assert all(field.expected is None for _, _, field in found)
    assert registry.expressions("Action.LogNode", {}) == []


def test_builtin_defaults_pass_their_own_checks(registry: NodeTypeRegistry) -> None:
    for spec in registry:
        if spec.node_type in ("Flow.RuleChainInputNode", "Transform.DeleteKeysNode"):
            continue
        assert registry.check(spec.node_type, spec.default_configuration) == [], spec.node_type
