"""Public exception types for rulegraph."""

from __future__ import annotations


class RulegraphError(Exception):
    """Base class for all rulegraph exceptions."""


class RulegraphLoadError(RulegraphError):
    """Raised when a rule chain file cannot be loaded or parsed."""


class UnknownNodeError(RulegraphError, ValueError):
    """Raised when an operation references a node id that is not in the graph."""


class UnknownEdgeError(RulegraphError, ValueError):
    """Raised when an operation references an edge id that is not in the graph."""


class ReadOnlyNodeError(RulegraphError):
    """Raised when an external (other chain) node is edited."""


class DuplicateRelationError(RulegraphError, ValueError):
    """Raised when a source node already routes through the requested relation."""

    def __init__(self, source_id: str, relation: str) -> None:
        super().__init__(f"Relation {relation!r} is already used by node {source_id}")
        self.source_id = source_id
        self.relation = relation


class ForwardEditError(RulegraphError):
    """Raised when a chain forward edit session is used out of order."""
