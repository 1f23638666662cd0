"""Command-line shell for running Cypher against a Metrix database.

Usage:
    metrix path/to/graph.mx -q "MATCH (n) RETURN n LIMIT 10"
    echo "MATCH (n)-[r]->(m) RETURN n,r,m" | metrix path/to/graph.mx --existing --json
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Iterable, List, Optional, Sequence, TextIO

from . import _native
from .commands import close_database, connect_existing, open_database, run_query
from .models import QueryResult, format_cell_value
from .state import AppState

LOG_LEVEL_ENV = "METRIX_LOG"


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.log_level)
    if args.lib:
        os.environ[_native.LIB_PATH_ENV] = args.lib

    state = AppState()
    opener = connect_existing if args.existing else open_database
    opened = opener(args.database, state)
    if not opened.is_ok():
        print(f"error: {opened.error()}", file=sys.stderr)
        return 1

    queries: Iterable[str] = args.query if args.query else _read_queries(sys.stdin)
    status = 0
    try:
        for query in queries:
            outcome = run_query(query, state)
            if not outcome.is_ok():
                print(f"error: {outcome.error()}", file=sys.stderr)
                status = 1
                continue
            result: QueryResult = outcome["value"]
            if args.json:
                print(result.to_json())
            else:
                _print_table(result, sys.stdout)
    finally:
        close_database(state)
    return status


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="metrix", description="Run Cypher queries against a Metrix database")
    parser.add_argument("database", help="Path to the database file")
    parser.add_argument(
        "--existing",
        action="store_true",
        help="Fail instead of creating the database when it does not exist",
    )
    parser.add_argument(
        "-q",
        "--query",
        action="append",
        default=[],
        help="Query to run (repeatable); reads one query per stdin line when omitted",
    )
    parser.add_argument("--json", action="store_true", help="Print each result as JSON")
    parser.add_argument("--lib", default=None, help="Path to the Metrix shared library")
    parser.add_argument(
        "--log-level",
        default=os.environ.get(LOG_LEVEL_ENV, "WARNING"),
        help="Logging level (default: $METRIX_LOG or WARNING)",
    )
    return parser.parse_args(argv)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _read_queries(stream: TextIO) -> Iterable[str]:
    for line in stream:
        query = line.strip()
        if query:
            yield query


def _print_table(result: QueryResult, out: TextIO) -> None:
    columns = result.columns()
    rows = result.rows()
    if not rows:
        print("No rows returned.", file=out)
    else:
        cells: List[List[str]] = [[format_cell_value(value) for value in row] for row in rows]
        widths = [len(name) for name in columns]
        for row in cells:
            for idx, text in enumerate(row):
                widths[idx] = max(widths[idx], len(text))
        print(" | ".join(name.ljust(widths[idx]) for idx, name in enumerate(columns)), file=out)
        print("-+-".join("-" * width for width in widths), file=out)
        for row in cells:
            print(" | ".join(text.ljust(widths[idx]) for idx, text in enumerate(row)), file=out)
    print(
        f"({len(rows)} rows, {len(result.nodes())} nodes, {len(result.edges())} edges, "
        f"{result.duration_ms()} ms)",
        file=out,
    )


if __name__ == "__main__":
    raise SystemExit(main())
