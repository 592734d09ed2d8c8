"""Command line interface for rulegraph."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import cast

from ..paths import MAX_VISIBLE_SUGGESTIONS
from .inspect_cmd import VerbosityArg, run_inspect
from .normalize_cmd import run_normalize
from .paths_cmd import run_paths


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rulegraph")
    subparsers = parser.add_subparsers(dest="command", required=True)

    inspect_parser = subparsers.add_parser("inspect", help="Inspect a rule chain JSON file")
    inspect_parser.add_argument("chain_file", type=Path, help="Path to rule chain metadata JSON")
    inspect_parser.add_argument(
        "--verbosity",
        choices=["minimal", "standard", "full"],
        default="standard",
        help="Console render verbosity",
    )
    inspect_parser.add_argument(
        "--json",
        action="store_true",
        help="Emit machine-readable summary JSON instead of text output",
    )
    inspect_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Optional output file path for --json summary",
    )

    normalize_parser = subparsers.add_parser(
        "normalize", help="Rewrite node configurations in their canonical shape"
    )
    normalize_parser.add_argument("chain_file", type=Path, help="Path to rule chain metadata JSON")
    normalize_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the result here instead of stdout",
    )

    paths_parser = subparsers.add_parser("paths", help="List dot paths found in a sample message")
    paths_parser.add_argument("sample_file", type=Path, help="Path to a JSON sample message")
    paths_parser.add_argument("--query", default="", help="Only show paths containing this text")
    paths_parser.add_argument(
        "--limit",
        type=int,
        default=MAX_VISIBLE_SUGGESTIONS,
        help="Maximum number of paths to print",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "inspect":
        return run_inspect(
            args.chain_file,
            cast(VerbosityArg, args.verbosity),
            as_json=args.json,
            output_path=args.output,
        )
    if args.command == "normalize":
        return run_normalize(args.chain_file, output_path=args.output)
    if args.command == "paths":
        return run_paths(args.sample_file, query=args.query, limit=args.limit)

    parser.error("Unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
