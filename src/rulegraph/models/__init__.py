"""Data models for rule chains."""

from .edge import (
    DEFAULT_EDGE_RELATION,
    DEFAULT_FORWARD_RELATION,
    ChainForward,
    Edge,
    normalize_chain_id,
)
from .node import EXTERNAL_NODE_PREFIX, Node
from .rule_graph import RuleGraph
from .validation import ExpectedResult, ValidationState, ValidationStatus

__all__ = [
    "DEFAULT_EDGE_RELATION",
    "DEFAULT_FORWARD_RELATION",
    "EXTERNAL_NODE_PREFIX",
    "ChainForward",
    "Edge",
    "ExpectedResult",
    "Node",
    "RuleGraph",
    "ValidationState",
    "ValidationStatus",
    "normalize_chain_id",
]
