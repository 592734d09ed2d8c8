"""Edge and chain-forward models."""

from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_EDGE_RELATION = "Success"
DEFAULT_FORWARD_RELATION = "Forward"


def normalize_chain_id(value: int | str) -> int | str:
    """Normalize a forward target chain id.

    Integers pass through; strings are trimmed and turned into ``int`` when
    they hold a whole number. A blank id raises ``ValueError``.
    """
    if isinstance(value, bool):
        raise ValueError("Target rule chain id must be a number or a string")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        raise ValueError("Target rule chain id is required")
    try:
        return int(text)
    except ValueError:
        return text


class Edge(BaseModel):
    """Labeled connection between two nodes of the same chain."""

    model_config = ConfigDict(strict=True, extra="ignore")

    id: str = Field(default_factory=lambda: uuid4().hex)
    source_id: str
    target_id: str
    relation: str = DEFAULT_EDGE_RELATION


class ChainForward(BaseModel):
    """Connection from a node to another rule chain."""

    model_config = ConfigDict(strict=True, extra="ignore")

    index: int
    source_id: str
    target_chain_id: int | str
    relation: str = DEFAULT_FORWARD_RELATION
    additional_info: dict[str, object] = Field(default_factory=dict)
    extra: dict[str, object] = Field(default_factory=dict)
    snake_case: bool = False

    @property
    def external_node_id(self) -> str:
        return f"chain-{self.target_chain_id}"
