"""Dot-path autocomplete suggestions derived from a JSON sample."""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict

MAX_PATH_DEPTH = 5
MAX_PATH_SUGGESTIONS = 80
MAX_ARRAY_SAMPLE = 4
MAX_VISIBLE_SUGGESTIONS = 8


class PathSuggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: str


def suggest_paths(
    sample_text: str,
    *,
    max_depth: int = MAX_PATH_DEPTH,
    max_suggestions: int = MAX_PATH_SUGGESTIONS,
    max_array_sample: int = MAX_ARRAY_SAMPLE,
) -> list[PathSuggestion]:
    """Return the dotted paths found in ``sample_text``.

    Unparseable or blank text yields no suggestions. The walk is depth-first,
    visits at most ``max_array_sample`` elements of every array and stops once
    ``max_suggestions`` distinct paths were collected. Paths keep the order in
    which they were first discovered.
    """
    if not sample_text.strip():
        return []
    try:
        parsed = json.loads(sample_text)
    except (ValueError, RecursionError):
        return []
    return suggest_paths_from_value(
        parsed,
        max_depth=max_depth,
        max_suggestions=max_suggestions,
        max_array_sample=max_array_sample,
    )


def suggest_paths_from_value(
    value: object,
    *,
    max_depth: int = MAX_PATH_DEPTH,
    max_suggestions: int = MAX_PATH_SUGGESTIONS,
    max_array_sample: int = MAX_ARRAY_SAMPLE,
) -> list[PathSuggestion]:
    # dict keeps insertion order and doubles as the dedup set
    results: dict[str, None] = {}

    def add_path(path: str) -> None:
        if not path or len(results) >= max_suggestions:
            return
        results[path] = None

    def walk(node: object, path: str, depth: int) -> None:
        if depth > max_depth or len(results) >= max_suggestions:
            return
        if isinstance(node, list):
            if path:
                add_path(path)
            for index, item in enumerate(node[:max_array_sample]):
                next_path = f"{path}.{index}" if path else str(index)
                add_path(next_path)
                walk(item, next_path, depth + 1)
            return
        if isinstance(node, dict):
            if path:
                add_path(path)
            for key, child in node.items():
                next_path = f"{path}.{key}" if path else str(key)
                add_path(next_path)
                walk(child, next_path, depth + 1)

    walk(value, "", 0)
    return [PathSuggestion(label=path, value=path) for path in results]


def filter_suggestions(
    suggestions: list[PathSuggestion],
    query: str,
    *,
    limit: int = MAX_VISIBLE_SUGGESTIONS,
) -> list[PathSuggestion]:
    """Case-insensitive substring filter used by autocomplete inputs."""
    needle = query.strip().lower()
    if needle:
        suggestions = [item for item in suggestions if needle in item.value.lower()]
    return suggestions[:limit]
