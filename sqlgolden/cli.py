from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .canonicalize import canonicalize_sql
from .comparison import compare_queries_debug, explain_where_clause, normalize_for_comparison
from .config import load_settings
from .golden import GoldenStatus, compare_against_reference, parse_reference
from .golden_file import read_reference

EXIT_OK = 0
EXIT_MISMATCH = 1
EXIT_MISSING = 2


def _read_queries(path: Path) -> List[str]:
    return parse_reference(path.read_text(encoding="utf-8"))


def _cmd_canonicalize(args: argparse.Namespace) -> int:
    print(canonicalize_sql(args.sql, dialect=args.dialect))
    return EXIT_OK


def _cmd_key(args: argparse.Namespace) -> int:
    print(normalize_for_comparison(args.sql))
    return EXIT_OK


def _cmd_compare(args: argparse.Namespace) -> int:
    equal, key_a, key_b = compare_queries_debug(args.sql_a, args.sql_b)
    print(f"A: {key_a}")
    print(f"B: {key_b}")
    print(f"equal={'true' if equal else 'false'}")
    return EXIT_OK if equal else EXIT_MISMATCH


def _cmd_debug_where(args: argparse.Namespace) -> int:
    for line in explain_where_clause(args.sql):
        print(line)
    return EXIT_OK


def _cmd_check(args: argparse.Namespace) -> int:
    golden = Path(args.golden_file)
    try:
        queries = _read_queries(Path(args.queries_file))
    except OSError as exc:
        print(f"[error] Could not read queries '{args.queries_file}': {exc}", file=sys.stderr)
        return EXIT_MISSING

    canonical = [c for c in (canonicalize_sql(q, dialect=args.dialect) for q in queries) if c]
    result = compare_against_reference(
        canonical,
        read_reference(golden),
        order_sensitive=not args.unordered,
        reference_name=str(golden),
    )
    stream = sys.stdout if result.passed else sys.stderr
    print(result.diagnostics, file=stream)
    if result.status is GoldenStatus.MISSING_REFERENCE:
        return EXIT_MISSING
    return EXIT_OK if result.passed else EXIT_MISMATCH


def _build_parser(default_dialect: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sqlgolden", description="Canonicalize and compare recorded SQL")
    parser.add_argument(
        "--dialect",
        default=default_dialect,
        help=f"sqlglot dialect used for canonicalization (default: {default_dialect})",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("canonicalize", help="Print the canonical form of a statement")
    p.add_argument("sql")
    p.set_defaults(func=_cmd_canonicalize)

    p = sub.add_parser("key", help="Print the comparison key of a statement")
    p.add_argument("sql")
    p.set_defaults(func=_cmd_key)

    p = sub.add_parser("compare", help="Check whether two statements are equivalent")
    p.add_argument("sql_a")
    p.add_argument("sql_b")
    p.set_defaults(func=_cmd_compare)

    p = sub.add_parser("debug-where", help="Show how the main WHERE clause is split")
    p.add_argument("sql")
    p.set_defaults(func=_cmd_debug_where)

    p = sub.add_parser("check", help="Compare a file of statements against a golden file")
    p.add_argument("golden_file")
    p.add_argument("queries_file", help="Semicolon-delimited statements (';\\n' separated)")
    p.add_argument("--unordered", action="store_true", help="Ignore statement order")
    p.set_defaults(func=_cmd_check)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        settings = load_settings()
    except (OSError, ValueError) as exc:
        print(f"[error] Failed to load settings: {exc}", file=sys.stderr)
        return EXIT_MISSING

    parser = _build_parser(settings.dialect)
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    raise SystemExit(main())
