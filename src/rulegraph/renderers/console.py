"""Rich-based rule chain console rendering."""

from __future__ import annotations

import json
from collections.abc import Mapping
from io import StringIO
from typing import Literal

from rich.console import Console
from rich.tree import Tree

from ..models import Node, RuleGraph
from ..registry import NodeTypeRegistry, default_registry

Verbosity = Literal["minimal", "standard", "full"]
_MAX_VALUE_LEN = 200


def render_rule_chain(
    graph: RuleGraph,
    *,
    verbosity: Verbosity = "standard",
    registry: NodeTypeRegistry | None = None,
    chain_names: Mapping[int | str, str] | None = None,
) -> str:
    """Render ``graph`` as a tree walked from the root node along its relations.

    A node reached a second time is shown once more as a reference instead of
    being expanded again, so cycles terminate. Nodes the walk never reaches
    are listed under an ``Unreachable`` branch.
    """
    registry = registry or default_registry()
    tree = Tree(_chain_label(graph))
    visited: set[str] = set()

    root = graph.root_node
    if root is not None:
        _add_node_branch(tree, root, f"{_node_line(root)} (root)", graph, registry, chain_names, verbosity, visited)

    remaining = [node for node in graph.selectable_nodes() if node.id not in visited]
    if remaining:
        unreachable = tree.add("Unreachable")
        for node in remaining:
            if node.id in visited:
                continue
            _add_node_branch(unreachable, node, _node_line(node), graph, registry, chain_names, verbosity, visited)

    console = Console(record=True, width=120, markup=False, file=StringIO())
    console.print(tree)
    return console.export_text()


def _chain_label(graph: RuleGraph) -> str:
    name = graph.name or (str(graph.chain_id) if graph.chain_id is not None else "<unnamed>")
    return (
        f"Rule chain: {name} ({len(graph.nodes)} nodes, {len(graph.edges)} connections, "
        f"{len(graph.forwards)} forwards)"
    )


def _node_line(node: Node) -> str:
    return f"[{node.node_type or 'unknown'}] {node.display_label}"


def _add_node_branch(
    parent_tree: Tree,
    node: Node,
    line: str,
    graph: RuleGraph,
    registry: NodeTypeRegistry,
    chain_names: Mapping[int | str, str] | None,
    verbosity: Verbosity,
    visited: set[str],
) -> None:
    visited.add(node.id)
    branch = parent_tree.add(line)

    if verbosity in ("standard", "full"):
        for issue in registry.check(node.node_type, node.configuration):
            branch.add(f"issue: {issue}")
    if verbosity == "full" and node.configuration:
        branch.add(f"configuration: {_format_data(node.configuration)}")

    for edge in graph.outgoing_edges(node.id):
        target = graph.nodes[edge.target_id]
        target_line = f"{edge.relation} -> {_node_line(target)}"
        if target.id in visited:
            branch.add(f"{target_line} (see above)")
            continue
        _add_node_branch(branch, target, target_line, graph, registry, chain_names, verbosity, visited)

    for forward in graph.outgoing_forwards(node.id):
        label = graph.node_label(forward.external_node_id, chain_names)
        branch.add(f"{forward.relation} => {label}")


def _format_data(data: dict[str, object]) -> str:
    """Format dict for display, truncating large values."""
    try:
        s = json.dumps(data, ensure_ascii=False)
    except (TypeError, ValueError):
        s = str(data)
    if len(s) <= _MAX_VALUE_LEN:
        return s
    return s[:_MAX_VALUE_LEN] + "... [truncated]"
