"""Normalize subcommand: re-encode every node configuration through its codec."""

from __future__ import annotations

from pathlib import Path

from ..registry import default_registry
from ..serializers import rule_chain_to_json, save_rule_chain_json
from .inspect_cmd import load_or_report


def run_normalize(chain_file: Path, *, output_path: Path | None) -> int:
    graph = load_or_report(chain_file)
    if graph is None:
        return 1
    registry = default_registry()
    for node in graph.selectable_nodes():
        graph.update_configuration(node.id, registry.normalize(node.node_type, node.configuration))

    if output_path is not None:
        save_rule_chain_json(graph, output_path)
    else:
        print(rule_chain_to_json(graph))
    return 0
