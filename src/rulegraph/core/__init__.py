"""Editing runtime: configuration, validation and the editor facade."""

from .editor import NodeUpdateResult, RuleChainEditor
from .editor_config import EditorConfig
from .hooks import NullHook, ValidationHook
from .jq_client import HttpJqValidator, JqValidator, ValidationRequest, ValidationResult
from .validator import ExpressionValidator

__all__ = [
    "EditorConfig",
    "ExpressionValidator",
    "HttpJqValidator",
    "JqValidator",
    "NodeUpdateResult",
    "NullHook",
    "RuleChainEditor",
    "ValidationHook",
    "ValidationRequest",
    "ValidationResult",
]
