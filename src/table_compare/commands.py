"""CLI entry point comparing a results table JSON file with a reference.

Example::

    compare_tables results/binomial_table.json tests/ref/binomial_table.json

The first file holds the computed table (a list of row objects or row
lists); the second holds the reference (a flat or nested list of cells).
Exit status is 0 when the tables match, 1 when they differ and 2 when an
input cannot be read.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Optional, Sequence

from table_compare.annotated import RaggedTableError
from table_compare.comparator import compare_tables
from utils.cli import add_verbose_argument, configure_cli_logger

LOGGER = logging.getLogger(__name__)


def _load_json(path: Path) -> Any:
    """Return the parsed JSON content of ``path`` or exit with status 2."""

    try:
        text = path.expanduser().read_text(encoding="utf-8")
    except OSError as err:
        LOGGER.error("Failed to read %s: %s", path, err)
        raise SystemExit(2) from err
    try:
        return json.loads(text)
    except json.JSONDecodeError as err:
        LOGGER.error("Failed to parse %s as JSON: %s", path, err)
        raise SystemExit(2) from err


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``compare_tables``."""

    parser = argparse.ArgumentParser(
        prog="compare_tables",
        description="Compare a computed results table with a stored reference.",
    )
    parser.add_argument("test", type=Path, help="JSON file with the new table.")
    parser.add_argument("ref", type=Path, help="JSON file with the reference table.")
    parser.add_argument(
        "--label",
        default=None,
        help="Prefix for the failure report (default: 'New table').",
    )
    add_verbose_argument(parser)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the comparison and return the process exit status."""

    args = build_parser().parse_args(argv)
    configure_cli_logger("table_compare", verbose=args.verbose)

    test = _load_json(args.test)
    ref = _load_json(args.ref)
    if not isinstance(test, list) or not isinstance(ref, list):
        LOGGER.error("Both inputs must contain a JSON list.")
        return 2

    try:
        result = compare_tables(test, ref, args.label)
    except RaggedTableError as err:
        LOGGER.error("%s: %s", args.test, err)
        return 2

    if result.ok:
        print("OK")
        return 0
    print(result.message)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
