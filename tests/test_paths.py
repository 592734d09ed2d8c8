from __future__ import annotations

import json

from rulegraph.paths import PathSuggestion, filter_suggestions, suggest_paths, suggest_paths_from_value


def _values(suggestions: list[PathSuggestion]) -> list[str]:
    return [item.value for item in suggestions]


def test_nested_object_and_array_paths_in_discovery_order() -> None:
    paths = _values(suggest_paths('{"a":{"b":[1,2,3]}}'))
    assert paths == ["a", "a.b", "a.b.0", "a.b.1", "a.b.2"]


def test_only_first_four_array_elements_are_visited() -> None:
    paths = _values(suggest_paths(json.dumps({"items": [{"v": i} for i in range(6)]})))
    assert "items.3" in paths
    assert "items.3.v" in paths
    assert "items.4" not in paths
    assert "items.5.v" not in paths


def test_walk_stops_below_depth_limit() -> None:
    sample: dict[str, object] = {"leaf": 1}
    for level in range(8, 0, -1):
        sample = {f"l{level}": sample}
    paths = _values(suggest_paths(json.dumps(sample)))

    assert "l1.l2.l3.l4.l5.l6" in paths
    assert "l1.l2.l3.l4.l5.l6.l7" not in paths


def test_total_suggestions_are_capped() -> None:
    sample = {f"key{i}": {"nested": i} for i in range(100)}
    paths = suggest_paths(json.dumps(sample))
    assert len(paths) == 80
    assert paths[0].value == "key0"


def test_invalid_or_blank_text_yields_nothing() -> None:
    assert suggest_paths("{not json") == []
    assert suggest_paths("   ") == []
    assert suggest_paths("42") == []


def test_top_level_array_uses_bare_indices() -> None:
    assert _values(suggest_paths_from_value([{"x": 1}])) == ["0", "0.x"]


def test_custom_limits_are_honoured() -> None:
    paths = suggest_paths_from_value({"a": {"b": {"c": 1}}}, max_depth=0)
    assert _values(paths) == ["a"]


def test_filter_is_case_insensitive_and_limited() -> None:
    suggestions = suggest_paths(json.dumps({f"Temp{i}": i for i in range(12)} | {"humidity": 1}))
    filtered = filter_suggestions(suggestions, "temp")
    assert len(filtered) == 8
    assert all("temp" in item.value.lower() for item in filtered)
    assert _values(filter_suggestions(suggestions, "HUMID")) == ["humidity"]
    assert len(filter_suggestions(suggestions, "", limit=3)) == 3


def test_deeply_nested_text_yields_nothing() -> None:
    assert suggest_paths("[" * 100_000 + "]" * 100_000) == []
