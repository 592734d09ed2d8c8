"""RuleGraph model: nodes, relation edges and chain forwards of one rule chain."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

from ..exceptions import (
    DuplicateRelationError,
    ForwardEditError,
    ReadOnlyNodeError,
    UnknownEdgeError,
    UnknownNodeError,
)
from .edge import (
    DEFAULT_EDGE_RELATION,
    DEFAULT_FORWARD_RELATION,
    ChainForward,
    Edge,
    normalize_chain_id,
)
from .node import EXTERNAL_NODE_PREFIX, EXTERNAL_NODE_TYPE, Node

if TYPE_CHECKING:
    from ..registry import NodeTypeRegistry


class RuleGraph(BaseModel):
    """Aggregate root of a rule chain.

    Nodes keep their creation order. Relation labels are unique per source
    node across its edges and chain forwards together. External nodes are
    never stored; they are derived from the forwards on demand.
    """

    model_config = ConfigDict(strict=True, extra="ignore")

    chain_id: int | str | None = None
    name: str = ""
    nodes: dict[str, Node] = Field(default_factory=dict)
    edges: list[Edge] = Field(default_factory=list)
    forwards: list[ChainForward] = Field(default_factory=list)
    # top-level wire keys this model does not own
    metadata: dict[str, object] = Field(default_factory=dict)
    forwards_key: str = "ruleChainConnections"
    first_node_key: str = "firstNodeIndex"

    _sequence_counter: int = PrivateAttr(default=0)
    # live forward under edit and the one draft issued for it
    _forward_edit: ChainForward | None = PrivateAttr(default=None)
    _forward_draft: ChainForward | None = PrivateAttr(default=None)

    @model_validator(mode="after")
    def validate_references(self) -> RuleGraph:
        for edge in self.edges:
            if edge.source_id not in self.nodes:
                raise ValueError(f"Edge source_id not found in nodes: {edge.source_id}")
            if edge.target_id not in self.nodes:
                raise ValueError(f"Edge target_id not found in nodes: {edge.target_id}")
        for forward in self.forwards:
            if forward.source_id not in self.nodes:
                raise ValueError(f"Forward source_id not found in nodes: {forward.source_id}")
        roots = [node.id for node in self.nodes.values() if node.is_root]
        if len(roots) > 1:
            raise ValueError(f"Only one root node is allowed, found {len(roots)}")
        return self

    def model_post_init(self, __context: object) -> None:
        if self.nodes:
            self._sequence_counter = max(node.sequence_number for node in self.nodes.values()) + 1

    @property
    def root_node(self) -> Node | None:
        for node in self.nodes.values():
            if node.is_root:
                return node
        return None

    @property
    def forward_edit_index(self) -> int | None:
        return self._forward_edit.index if self._forward_edit is not None else None

    def next_sequence_number(self) -> int:
        value = self._sequence_counter
        self._sequence_counter += 1
        return value

    def get_node(self, node_id: str) -> Node:
        node = self.nodes.get(node_id)
        if node is not None:
            return node
        for external in self.external_nodes():
            if external.id == node_id:
                return external
        raise UnknownNodeError(f"Unknown node id: {node_id}")

    def get_edge(self, edge_id: str) -> Edge:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        raise UnknownEdgeError(f"Unknown edge id: {edge_id}")

    def get_forward(self, index: int) -> ChainForward:
        for forward in self.forwards:
            if forward.index == index:
                return forward
        raise ForwardEditError(f"No rule chain connection at index {index}")

    def outgoing_edges(self, node_id: str) -> list[Edge]:
        return [edge for edge in self.edges if edge.source_id == node_id]

    def incoming_edges(self, node_id: str) -> list[Edge]:
        return [edge for edge in self.edges if edge.target_id == node_id]

    def outgoing_forwards(self, node_id: str) -> list[ChainForward]:
        return [forward for forward in self.forwards if forward.source_id == node_id]

    def selectable_nodes(self) -> list[Node]:
        """Nodes a user may select or edit; external placeholders are excluded."""
        return [node for node in self.nodes.values() if not node.is_external]

    def external_nodes(self, chain_names: Mapping[int | str, str] | None = None) -> list[Node]:
        """Read-only placeholders, one per distinct forward target chain."""
        seen: dict[str, Node] = {}
        for forward in self.forwards:
            node_id = f"{EXTERNAL_NODE_PREFIX}{forward.target_chain_id}"
            if node_id in seen:
                continue
            name = chain_names.get(forward.target_chain_id) if chain_names else None
            label = (
                f"{name} ({forward.target_chain_id})"
                if name
                else f"Rule chain {forward.target_chain_id}"
            )
            seen[node_id] = Node(
                id=node_id,
                sequence_number=-1,
                label=label,
                node_type=EXTERNAL_NODE_TYPE,
                is_external=True,
            )
        return list(seen.values())

    def node_label(self, node_id: str, chain_names: Mapping[int | str, str] | None = None) -> str:
        node = self.nodes.get(node_id)
        if node is not None:
            return node.display_label
        for external in self.external_nodes(chain_names):
            if external.id == node_id:
                return external.label
        return f"Node {node_id}"

    def used_relations(
        self,
        source_id: str,
        *,
        exclude_edge_id: str | None = None,
        exclude_forward_index: int | None = None,
    ) -> set[str]:
        """Relation labels already taken by edges and forwards leaving ``source_id``."""
        used = {
            edge.relation
            for edge in self.edges
            if edge.source_id == source_id and edge.id != exclude_edge_id
        }
        used.update(
            forward.relation
            for forward in self.forwards
            if forward.source_id == source_id and forward.index != exclude_forward_index
        )
        return used

    def _require_node(self, node_id: str) -> Node:
        node = self.nodes.get(node_id)
        if node is not None:
            return node
        if node_id.startswith(EXTERNAL_NODE_PREFIX) and any(
            external.id == node_id for external in self.external_nodes()
        ):
            raise ReadOnlyNodeError(f"Node {node_id} references another rule chain and is read-only")
        raise UnknownNodeError(f"Unknown node id: {node_id}")

    def insert_node(self, node: Node) -> Node:
        """Store a pre-built node; a root flag moves to it from any previous holder."""
        if node.is_external:
            raise ReadOnlyNodeError(f"External node {node.id} cannot be stored")
        if node.is_root:
            for other in self.nodes.values():
                other.is_root = False
        self.nodes[node.id] = node
        self._sequence_counter = max(self._sequence_counter, node.sequence_number + 1)
        return node

    def add_node(
        self,
        node_type: str,
        *,
        label: str | None = None,
        configuration: dict[str, object] | None = None,
        registry: NodeTypeRegistry | None = None,
    ) -> Node:
        """Create a node of ``node_type`` with the type's default label and configuration.

        The first node ever added to a chain becomes its root.
        """
        if registry is None:
            from ..registry import default_registry

            registry = default_registry()
        spec = registry.get(node_type)
        sequence_number = self.next_sequence_number()
        node = Node(
            sequence_number=sequence_number,
            label=label if label is not None else spec.label,
            node_type=node_type,
            configuration=(
                copy.deepcopy(configuration)
                if configuration is not None
                else registry.default_configuration(node_type)
            ),
            configuration_version=spec.configuration_version,
            is_root=sequence_number == 0 and not self.nodes,
        )
        self.nodes[node.id] = node
        return node

    def set_root(self, node_id: str) -> None:
        """Make ``node_id`` the entry node. Unknown ids are ignored."""
        target = self.nodes.get(node_id)
        if target is None:
            return
        for node in self.nodes.values():
            node.is_root = node.id == node_id

    def rename_node(self, node_id: str, label: str) -> Node:
        node = self._require_node(node_id)
        node.label = label
        return node

    def change_node_type(
        self,
        node_id: str,
        node_type: str,
        *,
        registry: NodeTypeRegistry | None = None,
    ) -> Node:
        """Retype a node. Its configuration is reset to the new type's defaults."""
        if registry is None:
            from ..registry import default_registry

            registry = default_registry()
        node = self._require_node(node_id)
        spec = registry.get(node_type)
        node.node_type = node_type
        node.configuration = registry.default_configuration(node_type)
        node.configuration_version = spec.configuration_version
        if not node.label.strip():
            node.label = spec.label
        return node

    def update_configuration(self, node_id: str, configuration: dict[str, object]) -> Node:
        node = self._require_node(node_id)
        node.configuration = copy.deepcopy(configuration)
        return node

    def delete_node(self, node_id: str) -> None:
        """Remove a node with every edge and forward that touches it."""
        self._require_node(node_id)
        del self.nodes[node_id]
        self.edges = [
            edge for edge in self.edges if edge.source_id != node_id and edge.target_id != node_id
        ]
        kept = [forward for forward in self.forwards if forward.source_id != node_id]
        if len(kept) != len(self.forwards):
            self._set_forwards(kept)

    def _check_relation(
        self,
        source_id: str,
        relation: str,
        *,
        exclude_edge_id: str | None = None,
        exclude_forward_index: int | None = None,
    ) -> None:
        used = self.used_relations(
            source_id,
            exclude_edge_id=exclude_edge_id,
            exclude_forward_index=exclude_forward_index,
        )
        if relation in used:
            raise DuplicateRelationError(source_id, relation)

    def connect(self, source_id: str, target_id: str, relation: str = DEFAULT_EDGE_RELATION) -> Edge:
        """Add an edge. Raises ``DuplicateRelationError`` if the source already uses ``relation``."""
        self._require_node(source_id)
        self._require_node(target_id)
        relation = relation.strip() or DEFAULT_EDGE_RELATION
        self._check_relation(source_id, relation)
        edge = Edge(source_id=source_id, target_id=target_id, relation=relation)
        self.edges.append(edge)
        return edge

    def relabel_edge(self, edge_id: str, relation: str) -> Edge:
        edge = self.get_edge(edge_id)
        relation = relation.strip() or DEFAULT_EDGE_RELATION
        self._check_relation(edge.source_id, relation, exclude_edge_id=edge.id)
        edge.relation = relation
        return edge

    def delete_edge(self, edge_id: str) -> None:
        edge = self.get_edge(edge_id)
        self.edges.remove(edge)

    def _set_forwards(self, forwards: list[ChainForward]) -> None:
        """Replace the forward list and renumber it. An edit session ends if its forward is gone."""
        for position, forward in enumerate(forwards):
            forward.index = position
        self.forwards = forwards
        if self._forward_edit is not None and not any(
            forward is self._forward_edit for forward in forwards
        ):
            self._end_forward_edit()

    def add_forward(
        self,
        source_id: str,
        target_chain_id: int | str,
        relation: str = DEFAULT_FORWARD_RELATION,
        *,
        additional_info: dict[str, object] | None = None,
    ) -> ChainForward:
        self._require_node(source_id)
        relation = relation.strip() or DEFAULT_FORWARD_RELATION
        self._check_relation(source_id, relation)
        forward = ChainForward(
            index=len(self.forwards),
            source_id=source_id,
            target_chain_id=normalize_chain_id(target_chain_id),
            relation=relation,
            additional_info=copy.deepcopy(additional_info or {}),
            snake_case=self.forwards_key == "rule_chain_connections",
        )
        self.forwards.append(forward)
        return forward

    def delete_forward(self, index: int) -> None:
        forward = self.get_forward(index)
        self._set_forwards([item for item in self.forwards if item is not forward])

    def begin_forward_edit(self, index: int) -> ChainForward:
        """Start editing one forward; returns a detached draft to mutate.

        Only the draft returned by the latest call can be committed. The draft's
        index is informational; commit follows the forward through renumbering.
        """
        forward = self.get_forward(index)
        draft = forward.model_copy(deep=True)
        self._forward_edit = forward
        self._forward_draft = draft
        return draft

    def commit_forward_edit(self, draft: ChainForward) -> ChainForward:
        """Write a draft back. Nothing changes until this succeeds."""
        target = self._forward_edit
        if target is None:
            raise ForwardEditError("No rule chain connection is being edited")
        if draft is not self._forward_draft:
            raise ForwardEditError(
                f"Draft does not belong to the edit session at index {target.index}"
            )
        self._require_node(draft.source_id)
        relation = draft.relation.strip() or DEFAULT_FORWARD_RELATION
        self._check_relation(draft.source_id, relation, exclude_forward_index=target.index)
        committed = draft.model_copy(
            deep=True,
            update={
                "index": target.index,
                "relation": relation,
                "target_chain_id": normalize_chain_id(draft.target_chain_id),
            },
        )
        position = next(
            position for position, forward in enumerate(self.forwards) if forward is target
        )
        self.forwards[position] = committed
        self._end_forward_edit()
        return committed

    def cancel_forward_edit(self) -> None:
        self._end_forward_edit()

    def _end_forward_edit(self) -> None:
        self._forward_edit = None
        self._forward_draft = None
