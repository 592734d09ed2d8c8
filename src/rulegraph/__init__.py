"""rulegraph: editing model for IoT message-processing rule chains.

DI API (construct your own editor):
    from rulegraph import RuleChainEditor, EditorConfig, load_rule_chain_json
    editor = RuleChainEditor(load_rule_chain_json("chain.json"), config=EditorConfig())
    editor.connect(source_id, target_id)

Node configurations are read and written through per-type codecs held by a
``NodeTypeRegistry``; ``default_registry()`` carries the built-in catalog.
"""

from __future__ import annotations

from .core import (
    EditorConfig,
    ExpressionValidator,
    HttpJqValidator,
    JqValidator,
    NodeUpdateResult,
    NullHook,
    RuleChainEditor,
    ValidationHook,
)
from .exceptions import (
    DuplicateRelationError,
    ForwardEditError,
    ReadOnlyNodeError,
    RulegraphError,
    RulegraphLoadError,
    UnknownEdgeError,
    UnknownNodeError,
)
from .models import ChainForward, Edge, ExpectedResult, Node, RuleGraph, ValidationState, ValidationStatus
from .paths import PathSuggestion, filter_suggestions, suggest_paths
from .registry import NodeTypeRegistry, NodeTypeSpec, default_registry
from .relations import RelationCatalog, RelationOption, RelationResolver
from .sample import SampleMessage
from .serializers import load_rule_chain_json, rule_chain_from_json, rule_chain_to_json, save_rule_chain_json

__all__ = [
    "ChainForward",
    "DuplicateRelationError",
    "Edge",
    "EditorConfig",
    "ExpectedResult",
    "ExpressionValidator",
    "ForwardEditError",
    "HttpJqValidator",
    "JqValidator",
    "Node",
    "NodeTypeRegistry",
    "NodeTypeSpec",
    "NodeUpdateResult",
    "NullHook",
    "PathSuggestion",
    "ReadOnlyNodeError",
    "RelationCatalog",
    "RelationOption",
    "RelationResolver",
    "RuleChainEditor",
    "RuleGraph",
    "RulegraphError",
    "RulegraphLoadError",
    "SampleMessage",
    "UnknownEdgeError",
    "UnknownNodeError",
    "ValidationHook",
    "ValidationState",
    "ValidationStatus",
    "default_registry",
    "filter_suggestions",
    "load_rule_chain_json",
    "rule_chain_from_json",
    "rule_chain_to_json",
    "save_rule_chain_json",
    "suggest_paths",
]
