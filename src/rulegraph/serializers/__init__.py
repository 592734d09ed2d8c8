"""Serialization helpers."""

from .json import (
    graph_from_metadata,
    graph_to_metadata,
    load_rule_chain_json,
    rule_chain_from_json,
    rule_chain_to_json,
    save_rule_chain_json,
)

__all__ = [
    "graph_from_metadata",
    "graph_to_metadata",
    "load_rule_chain_json",
    "rule_chain_from_json",
    "rule_chain_to_json",
    "save_rule_chain_json",
]
