"""Edge-case tests for malformed input, independent validators and resilience."""

from __future__ import annotations

import asyncio

import pytest

from rulegraph.core import EditorConfig, RuleChainEditor, ValidationRequest, ValidationResult
from rulegraph.core.editor import INVALID_JSON
from rulegraph.exceptions import RulegraphLoadError
from rulegraph.models import ValidationStatus
from rulegraph.relations import RelationResolver
from rulegraph.sample import SampleMessage
from rulegraph.serializers import graph_from_metadata, rule_chain_from_json

DEEPLY_NESTED = "[" * 100_000 + "]" * 100_000


class _HangingOnSlowValidator:
    def __init__(self) -> None:
        self.never = asyncio.Event()

    async def validate(self, request: ValidationRequest) -> ValidationResult:
        if request.expression == ".slow":
            await self.never.wait()
        return ValidationResult(valid=True)


@pytest.mark.asyncio
async def test_hung_validation_does_not_block_other_fields() -> None:
    editor = RuleChainEditor(
        config=EditorConfig(debounce_seconds=0), validator=_HangingOnSlowValidator()
    )
    slow = editor.add_node("Transform.TransformMsgNode")
    fast = editor.add_node("Filter.JsFilterNode")
    editor.graph.update_configuration(slow.id, {"script": ".slow"})

    editor.submit_validation(slow.id)
    states = await editor.validate_node(fast.id)
    await asyncio.sleep(0)

    assert states[f"{fast.id}:script"].status == ValidationStatus.VALID
    assert editor.validation_state(slow.id, "script").status == ValidationStatus.VALIDATING

    editor.connect(fast.id, slow.id)
    assert len(editor.graph.edges) == 1
    await editor.aclose()


def test_malformed_sibling_configuration_still_resolves_relations() -> None:
    graph = graph_from_metadata(
        {
            "nodes": [
                {"type": "Filter.MsgTypeSwitchNode", "configuration": "{broken"},
                {"type": "Filter.MsgTypeSwitchNode", "configuration": {"mappings": "nope"}},
            ]
        }
    )
    resolver = RelationResolver()
    assert resolver.available(graph, "0") == ["Other", "Missing"]
    assert resolver.available(graph, "1") == ["Other", "Missing"]


def test_non_object_node_entries_get_placeholder_names() -> None:
    graph = graph_from_metadata({"nodes": ["junk", None], "firstNodeIndex": "1"})
    assert [node.label for node in graph.nodes.values()] == ["Node 1", "Node 2"]
    assert graph.root_node is graph.nodes["1"]


def test_sample_message_degrades_to_empty_objects() -> None:
    sample = SampleMessage.from_text("{oops", "[1, 2]", "")
    context = sample.evaluation_context()
    assert context["msg"] == {}
    assert context["headers"] == [1, 2]
    assert sample.payload_sample() == {}
    assert sample.body_suggestions() == []


def test_scalar_sample_body_falls_back_to_context() -> None:
    sample = SampleMessage.from_text("7")
    assert sample.payload_sample() == sample.evaluation_context()


def test_editor_applies_settings_to_unknown_types() -> None:
    editor = RuleChainEditor()
    node = editor.add_node("Vendor.CustomNode")
    assert editor.apply_node_updates(node.id, '{"anything": [1]}').applied
    assert editor.node_settings(node.id) == {"anything": [1]}
    assert editor.relation_options(node.id)[0].label == "Success"


def test_deeply_nested_text_is_treated_as_malformed() -> None:
    sample = SampleMessage.from_text(DEEPLY_NESTED, DEEPLY_NESTED)
    assert sample.evaluation_context()["msg"] == {}
    assert sample.body_suggestions() == []

    editor = RuleChainEditor()
    node = editor.add_node("Action.LogNode")
    result = editor.apply_node_updates(node.id, DEEPLY_NESTED)
    assert result.applied is False
    assert result.errors == [INVALID_JSON]

    with pytest.raises(RulegraphLoadError, match="Failed to parse rule chain JSON"):
        rule_chain_from_json(DEEPLY_NESTED)
