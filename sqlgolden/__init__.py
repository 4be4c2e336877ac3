from __future__ import annotations
from .canonicalize import basic_normalize, canonicalize_sql
from .comparison import compare_queries, compare_queries_debug, normalize_for_comparison
from .golden import GoldenResult, GoldenStatus, compare_against_reference, serialize_queries
from .ledger import QueryLedger
from .recorder import QueryRecorder
from .values import build_full_sql, format_value

__version__ = "0.1.0"

__all__ = [
    "GoldenResult",
    "GoldenStatus",
    "QueryLedger",
    "QueryRecorder",
    "basic_normalize",
    "build_full_sql",
    "canonicalize_sql",
    "compare_against_reference",
    "compare_queries",
    "compare_queries_debug",
    "format_value",
    "normalize_for_comparison",
    "serialize_queries",
]
