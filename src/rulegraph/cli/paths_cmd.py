"""Paths subcommand: autocomplete suggestions for a sample message."""

from __future__ import annotations

import sys
from pathlib import Path

from ..paths import filter_suggestions, suggest_paths


def run_paths(sample_file: Path, *, query: str, limit: int) -> int:
    try:
        text = sample_file.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {sample_file}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error reading file: {exc}", file=sys.stderr)
        return 1

    for suggestion in filter_suggestions(suggest_paths(text), query, limit=limit):
        print(suggestion.value)
    return 0
