from __future__ import annotations

import pytest

from rulegraph.registry import NodeTypeRegistry, default_registry


@pytest.fixture
def registry() -> NodeTypeRegistry:
    return default_registry()
