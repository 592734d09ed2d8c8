"""Relation vocabularies and the resolver that offers them per source node."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from .codecs.filters import MessageTypeSwitchCodec
from .models.edge import DEFAULT_EDGE_RELATION

if TYPE_CHECKING:
    from .models import Node, RuleGraph
    from .registry import NodeTypeRegistry

DEFAULT_RELATIONS: tuple[str, ...] = (
    "Success",
    "Failure",
    "True",
    "False",
    "Post telemetry",
    "Post attributes",
    "RPC Request from Device",
    "RPC Request to Device",
    "Missing",
    "Other",
    "Forward",
)

RELATION_DESCRIPTIONS: dict[str, str] = {
    "Success": "Routes the message when the node completes successfully.",
    "Failure": "Routes the message when the node fails or throws an error.",
    "True": "Routes when a filter expression returns true.",
    "False": "Routes when a filter expression returns false.",
    "Missing": "Routes when message_type is missing.",
    "Post telemetry": "Routes after timeseries are written to storage.",
    "Post attributes": "Routes after attributes are written to storage.",
    "RPC Request from Device": "Routes incoming device RPC requests.",
    "RPC Request to Device": "Routes outgoing RPC requests to a device.",
    "Other": "Fallback route for unmatched relations.",
    "Forward": "Forwards the message to the next rule chain.",
}

FALLBACK_DESCRIPTION = "Routes using the selected relation."


class RelationCatalog(BaseModel):
    """Known relation labels, in display order, with their descriptions."""

    model_config = ConfigDict(frozen=True)

    labels: tuple[str, ...] = DEFAULT_RELATIONS
    descriptions: dict[str, str] = Field(default_factory=lambda: dict(RELATION_DESCRIPTIONS))

    def __contains__(self, label: object) -> bool:
        return label in self.labels

    def describe(self, label: str, *, custom: bool = False) -> str:
        if custom:
            label = label.strip()
            return f"Custom relation: {label}" if label else "Custom relation label."
        return self.descriptions.get(label, FALLBACK_DESCRIPTION)


@runtime_checkable
class RelationStrategy(Protocol):
    """Computes the relation labels a node of some type may emit."""

    def options(self, configuration: dict[str, object], catalog: RelationCatalog) -> list[str]: ...


class StaticRelations:
    """Fixed vocabulary: the whole catalog, or an override filtered by it."""

    def __init__(self, labels: Sequence[str] | None = None) -> None:
        self.labels = tuple(labels) if labels is not None else None

    def options(self, configuration: dict[str, object], catalog: RelationCatalog) -> list[str]:
        if self.labels is None:
            return list(catalog.labels)
        return [label for label in self.labels if label in catalog]


class MessageTypeSwitchRelations:
    """Relations derived from the switch's own message-type mappings."""

    built_in: tuple[str, ...] = ("Other", "Missing")

    def __init__(self, codec: MessageTypeSwitchCodec | None = None) -> None:
        self.codec = codec or MessageTypeSwitchCodec()

    def options(self, configuration: dict[str, object], catalog: RelationCatalog) -> list[str]:
        labels = list(self.built_in)
        for mapping in self.codec.decode(configuration).mappings:
            route = mapping.route
            if route and route not in labels:
                labels.append(route)
        return labels


class RelationOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    used: bool = False
    description: str = FALLBACK_DESCRIPTION


class RelationResolver:
    """Offers relation labels for a source node and flags those already taken."""

    def __init__(
        self,
        registry: NodeTypeRegistry | None = None,
        catalog: RelationCatalog | None = None,
    ) -> None:
        if registry is None:
            from .registry import default_registry

            registry = default_registry()
        self.registry = registry
        self.catalog = catalog or RelationCatalog()

    def options_for(self, node: Node) -> list[str]:
        if node.is_external:
            return []
        spec = self.registry.get(node.node_type)
        return spec.relations.options(node.configuration, self.catalog)

    def resolve(
        self,
        graph: RuleGraph,
        source_id: str,
        *,
        editing_edge_id: str | None = None,
        editing_forward_index: int | None = None,
    ) -> list[RelationOption]:
        """Relation options for ``source_id``.

        An option is ``used`` when another edge or forward of the same source
        already carries it. The edge or forward being edited does not count.
        """
        node = graph.get_node(source_id)
        used = graph.used_relations(
            source_id,
            exclude_edge_id=editing_edge_id,
            exclude_forward_index=editing_forward_index,
        )
        return [
            RelationOption(label=label, used=label in used, description=self.catalog.describe(label))
            for label in self.options_for(node)
        ]

    def available(
        self,
        graph: RuleGraph,
        source_id: str,
        *,
        editing_edge_id: str | None = None,
        editing_forward_index: int | None = None,
    ) -> list[str]:
        options = self.resolve(
            graph,
            source_id,
            editing_edge_id=editing_edge_id,
            editing_forward_index=editing_forward_index,
        )
        return [option.label for option in options if not option.used]

    def default_relation(self, graph: RuleGraph, source_id: str) -> str:
        """First free relation for a new connection from ``source_id``."""
        options = self.resolve(graph, source_id)
        for option in options:
            if not option.used:
                return option.label
        if options:
            return options[0].label
        return DEFAULT_EDGE_RELATION
