"""Read and write the persisted rule-chain metadata object."""

from __future__ import annotations

import copy
import json
import warnings
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..codecs.base import as_object, first_present, is_finite_number, is_number
from ..exceptions import RulegraphLoadError
from ..models import DEFAULT_EDGE_RELATION, DEFAULT_FORWARD_RELATION, ChainForward, Edge, Node, RuleGraph
from ..models.edge import normalize_chain_id

FORWARDS_KEY = "ruleChainConnections"
FORWARDS_KEY_SNAKE = "rule_chain_connections"
FIRST_NODE_KEY = "firstNodeIndex"
FIRST_NODE_KEY_SNAKE = "first_node_index"

_GRAPH_KEYS = {"nodes", "connections", FORWARDS_KEY, FORWARDS_KEY_SNAKE, FIRST_NODE_KEY, FIRST_NODE_KEY_SNAKE}
_NODE_KEYS = {
    "name",
    "type",
    "configuration",
    "configurationVersion",
    "configuration_version",
    "additionalInfo",
    "additional_info",
}
_FORWARD_KEYS = {
    "fromIndex",
    "from_index",
    "targetRuleChainId",
    "target_rule_chain_id",
    "type",
    "additionalInfo",
    "additional_info",
}


def _index(value: object) -> int | None:
    if is_finite_number(value) and float(value) == int(value):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _additional_info(raw: dict[str, Any]) -> dict[str, object]:
    info = raw.get("additionalInfo") or raw.get("additional_info") or {}
    return dict(info) if isinstance(info, dict) else {}


def _read_node(raw: object, index: int, first_node_index: int | None) -> Node:
    entry = raw if isinstance(raw, dict) else {}
    name = entry.get("name")
    version = first_present(entry, "configurationVersion", "configuration_version")
    return Node(
        id=str(index),
        sequence_number=index,
        label=str(name) if name else f"Node {index + 1}",
        node_type=str(entry.get("type") or ""),
        configuration=dict(as_object(entry.get("configuration"))),
        configuration_version=version if is_number(version) and isinstance(version, int) else None,
        additional_info=_additional_info(entry),
        extra={key: value for key, value in entry.items() if key not in _NODE_KEYS},
        is_root=first_node_index == index,
    )


def _read_edges(connections: list[Any], node_count: int) -> list[Edge]:
    edges = []
    for position, raw in enumerate(connections):
        if not isinstance(raw, dict):
            continue
        from_raw = first_present(raw, "fromIndex", "from_index")
        to_raw = first_present(raw, "toIndex", "to_index")
        if from_raw is None or to_raw is None:
            continue
        source, target = _index(from_raw), _index(to_raw)
        if source is None or target is None or not (0 <= source < node_count and 0 <= target < node_count):
            warnings.warn(
                f"rulegraph: connection {position} ({from_raw} -> {to_raw}) references a missing node "
                "and has been dropped.",
                stacklevel=3,
            )
            continue
        edges.append(
            Edge(
                source_id=str(source),
                target_id=str(target),
                relation=str(raw.get("type") or DEFAULT_EDGE_RELATION),
            )
        )
    return edges


def _read_forwards(connections: list[Any], node_count: int) -> list[ChainForward]:
    forwards: list[ChainForward] = []
    for position, raw in enumerate(connections):
        if not isinstance(raw, dict):
            continue
        from_raw = first_present(raw, "fromIndex", "from_index")
        target_raw = first_present(raw, "targetRuleChainId", "target_rule_chain_id")
        if from_raw is None or target_raw is None:
            continue
        source = _index(from_raw)
        try:
            target_chain_id = normalize_chain_id(target_raw if isinstance(target_raw, int | str) else str(target_raw))
        except ValueError:
            target_chain_id = None
        if source is None or not 0 <= source < node_count or target_chain_id is None:
            warnings.warn(
                f"rulegraph: rule chain connection {position} ({from_raw} -> {target_raw}) is invalid "
                "and has been dropped.",
                stacklevel=3,
            )
            continue
        forwards.append(
            ChainForward(
                index=len(forwards),
                source_id=str(source),
                target_chain_id=target_chain_id,
                relation=str(raw.get("type") or DEFAULT_FORWARD_RELATION),
                additional_info=_additional_info(raw),
                extra={key: value for key, value in raw.items() if key not in _FORWARD_KEYS},
                snake_case="from_index" in raw or "target_rule_chain_id" in raw,
            )
        )
    return forwards


def graph_from_metadata(metadata: dict[str, Any], *, chain_id: int | str | None = None, name: str = "") -> RuleGraph:
    """Build a ``RuleGraph`` from a rule-chain metadata object.

    Node ids are the string form of their index in ``nodes``. Connections
    that point at missing nodes are dropped with a warning.
    """
    if not isinstance(metadata, dict):
        raise RulegraphLoadError("Rule chain metadata must be a JSON object")
    # the graph owns everything it reads
    metadata = copy.deepcopy(metadata)
    raw_nodes = metadata.get("nodes") if isinstance(metadata.get("nodes"), list) else []
    raw_connections = metadata.get("connections") if isinstance(metadata.get("connections"), list) else []
    raw_forwards = metadata.get(FORWARDS_KEY) or metadata.get(FORWARDS_KEY_SNAKE)
    if not isinstance(raw_forwards, list):
        raw_forwards = []

    first_node_index = _index(first_present(metadata, FIRST_NODE_KEY, FIRST_NODE_KEY_SNAKE))
    snake_forwards = FORWARDS_KEY_SNAKE in metadata and FORWARDS_KEY not in metadata
    snake_first = FIRST_NODE_KEY_SNAKE in metadata and FIRST_NODE_KEY not in metadata

    nodes = [_read_node(raw, index, first_node_index) for index, raw in enumerate(raw_nodes)]
    try:
        return RuleGraph(
            chain_id=chain_id,
            name=name,
            nodes={node.id: node for node in nodes},
            edges=_read_edges(raw_connections, len(nodes)),
            forwards=_read_forwards(raw_forwards, len(nodes)),
            metadata={key: value for key, value in metadata.items() if key not in _GRAPH_KEYS},
            forwards_key=FORWARDS_KEY_SNAKE if snake_forwards else FORWARDS_KEY,
            first_node_key=FIRST_NODE_KEY_SNAKE if snake_first else FIRST_NODE_KEY,
        )
    except ValidationError as exc:
        raise RulegraphLoadError(f"Invalid rule chain metadata: {exc}") from exc


def _write_forward(forward: ChainForward, index_of: dict[str, int]) -> dict[str, object]:
    if forward.snake_case:
        entry: dict[str, object] = {
            **forward.extra,
            "from_index": index_of[forward.source_id],
            "target_rule_chain_id": forward.target_chain_id,
            "type": forward.relation,
        }
        info_key = "additional_info"
    else:
        entry = {
            **forward.extra,
            "fromIndex": index_of[forward.source_id],
            "targetRuleChainId": forward.target_chain_id,
            "type": forward.relation,
        }
        info_key = "additionalInfo"
    if forward.additional_info:
        entry[info_key] = forward.additional_info
    return entry


def graph_to_metadata(graph: RuleGraph) -> dict[str, object]:
    """Inverse of ``graph_from_metadata``; nodes are re-indexed by creation order."""
    ordered = sorted(graph.selectable_nodes(), key=lambda node: node.sequence_number)
    index_of = {node.id: index for index, node in enumerate(ordered)}

    nodes = []
    for index, node in enumerate(ordered):
        entry: dict[str, object] = {
            **node.extra,
            "name": node.label or f"Node {index + 1}",
            "type": node.node_type,
            "configuration": node.configuration,
        }
        if node.configuration_version is not None:
            entry["configurationVersion"] = node.configuration_version
        entry["additionalInfo"] = node.additional_info
        nodes.append(entry)

    connections = [
        {
            "fromIndex": index_of[edge.source_id],
            "toIndex": index_of[edge.target_id],
            "type": edge.relation or DEFAULT_EDGE_RELATION,
        }
        for edge in graph.edges
    ]
    root = graph.root_node
    first_node_index = index_of[root.id] if root is not None else 0

    return copy.deepcopy(
        {
            **graph.metadata,
            "nodes": nodes,
            "connections": connections,
            graph.forwards_key: [_write_forward(forward, index_of) for forward in graph.forwards],
            graph.first_node_key: first_node_index,
        }
    )


def rule_chain_to_json(graph: RuleGraph, *, indent: int | None = 2) -> str:
    return json.dumps(graph_to_metadata(graph), indent=indent, ensure_ascii=False)


def rule_chain_from_json(payload: str) -> RuleGraph:
    """Parse rule-chain metadata JSON text.

    Raises ``RulegraphLoadError`` on unparseable text or a non-object document.
    """
    try:
        metadata = json.loads(payload)
    except (ValueError, RecursionError) as exc:
        raise RulegraphLoadError(f"Failed to parse rule chain JSON: {exc}") from exc
    return graph_from_metadata(metadata)


def save_rule_chain_json(graph: RuleGraph, path: str | Path, *, indent: int | None = 2) -> Path:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(rule_chain_to_json(graph, indent=indent), encoding="utf-8")
    return output_path


def load_rule_chain_json(path: str | Path) -> RuleGraph:
    """Load a rule chain from a JSON file.

    Raises ``RulegraphLoadError`` on invalid content,
    or ``FileNotFoundError`` / ``OSError`` if the file is inaccessible.
    """
    payload = Path(path).read_text(encoding="utf-8")
    return rule_chain_from_json(payload)
