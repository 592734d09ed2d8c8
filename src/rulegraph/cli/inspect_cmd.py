"""Inspect subcommand implementation."""

from __future__ import annotations

import json
import sys
from collections import Counter
from pathlib import Path
from typing import Literal

from ..exceptions import RulegraphLoadError
from ..models import RuleGraph
from ..registry import NodeTypeRegistry, default_registry
from ..renderers import render_rule_chain
from ..serializers import load_rule_chain_json

VerbosityArg = Literal["minimal", "standard", "full"]


def load_or_report(path: Path) -> RuleGraph | None:
    """Load a rule chain, printing the reason to stderr when it cannot be read."""
    try:
        return load_rule_chain_json(path)
    except FileNotFoundError:
        print(f"Error: file not found: {path}", file=sys.stderr)
    except RulegraphLoadError as exc:
        print(f"Error: {exc}", file=sys.stderr)
    except OSError as exc:
        print(f"Error reading file: {exc}", file=sys.stderr)
    return None


def run_inspect(
    chain_file: Path,
    verbosity: VerbosityArg,
    *,
    as_json: bool,
    output_path: Path | None,
) -> int:
    if output_path is not None and not as_json:
        raise ValueError("--output is only supported when --json is provided")

    graph = load_or_report(chain_file)
    if graph is None:
        return 1
    registry = default_registry()
    summary = _build_summary(graph, registry)

    if as_json:
        payload = json.dumps(summary, ensure_ascii=True, sort_keys=True)
        if output_path is not None:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(payload + "\n", encoding="utf-8")
        else:
            print(payload)
        return 0

    root = graph.root_node
    print(f"Name: {graph.name or '<unnamed>'}")
    print(f"Root: {root.display_label if root is not None else '<none>'}")
    print(f"Nodes: {len(graph.nodes)}")
    print(f"Connections: {len(graph.edges)}")
    print(f"Forwards: {len(graph.forwards)}")
    print("Node type counts:")
    for node_type, count in sorted(Counter(node.node_type for node in graph.nodes.values()).items()):
        print(f"  - {node_type}: {count}")
    print()
    print(render_rule_chain(graph, verbosity=verbosity, registry=registry))
    return 0


def _build_summary(graph: RuleGraph, registry: NodeTypeRegistry) -> dict[str, object]:
    type_counts = Counter(node.node_type for node in graph.nodes.values())
    root = graph.root_node
    issues = {
        node.id: found
        for node in graph.nodes.values()
        if (found := registry.check(node.node_type, node.configuration))
    }
    return {
        "chain_id": graph.chain_id,
        "name": graph.name,
        "root": root.id if root is not None else None,
        "node_count": len(graph.nodes),
        "edge_count": len(graph.edges),
        "forward_count": len(graph.forwards),
        "node_type_counts": dict(sorted(type_counts.items(), key=lambda item: item[0])),
        "issues": issues,
    }
