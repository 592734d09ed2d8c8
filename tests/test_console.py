from __future__ import annotations

from rulegraph.models import RuleGraph
from rulegraph.registry import NodeTypeRegistry
from rulegraph.renderers import render_rule_chain


def _build_chain(registry: NodeTypeRegistry) -> RuleGraph:
    graph = RuleGraph(name="demo")
    switch = graph.add_node("Filter.MsgTypeSwitchNode", registry=registry)
    log = graph.add_node("Action.LogNode", registry=registry)
    graph.add_node("Transform.DeleteKeysNode", registry=registry)
    graph.connect(switch.id, log.id, "Other")
    graph.connect(log.id, switch.id, "Success")
    graph.add_forward(log.id, 42)
    return graph


def test_render_minimal_contains_structure(registry: NodeTypeRegistry) -> None:
    output = render_rule_chain(_build_chain(registry), verbosity="minimal", registry=registry)
    assert "Rule chain: demo (3 nodes, 2 connections, 1 forwards)" in output
    assert "[Filter.MsgTypeSwitchNode] Message Type Switch (root)" in output
    assert "Other -> [Action.LogNode] Log" in output
    assert "Forward => Rule chain 42" in output
    assert "issue:" not in output


def test_render_marks_cycles_instead_of_recursing(registry: NodeTypeRegistry) -> None:
    output = render_rule_chain(_build_chain(registry), registry=registry)
    assert "Success -> [Filter.MsgTypeSwitchNode] Message Type Switch (see above)" in output
    assert output.count("Message Type Switch") == 2


def test_render_standard_lists_unreachable_nodes_with_issues(registry: NodeTypeRegistry) -> None:
    output = render_rule_chain(_build_chain(registry), verbosity="standard", registry=registry)
    assert "Unreachable" in output
    assert "[Transform.DeleteKeysNode] Delete Keys" in output
    assert "issue: At least one key is required." in output
    assert "configuration:" not in output


def test_render_full_includes_configuration_and_chain_names(registry: NodeTypeRegistry) -> None:
    output = render_rule_chain(
        _build_chain(registry), verbosity="full", registry=registry, chain_names={42: "Billing"}
    )
    assert 'configuration: {"version": 0}' in output
    assert "Forward => Billing (42)" in output


def test_render_empty_chain_has_only_header() -> None:
    output = render_rule_chain(RuleGraph(name="empty"))
    assert "Rule chain: empty (0 nodes, 0 connections, 0 forwards)" in output
    assert "Unreachable" not in output
