"""Node model for a rule chain."""

from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

EXTERNAL_NODE_PREFIX = "chain-"
EXTERNAL_NODE_TYPE = "external"


class Node(BaseModel):
    """Single processing node in a rule chain."""

    model_config = ConfigDict(strict=True, extra="ignore")

    id: str = Field(default_factory=lambda: uuid4().hex)
    sequence_number: int
    label: str
    node_type: str
    configuration: dict[str, object] = Field(default_factory=dict)
    configuration_version: int | None = None
    additional_info: dict[str, object] = Field(default_factory=dict)
    # wire keys this model does not own, written back unchanged
    extra: dict[str, object] = Field(default_factory=dict)
    is_external: bool = False
    is_root: bool = False

    @property
    def display_label(self) -> str:
        return self.label or f"Node {self.id}"
