from __future__ import annotations
import functools
import logging, re
from typing import Optional, Type

import sqlglot
import sqlparse
from sqlglot import exp
from sqlglot.dialects.dialect import Dialect
from sqlglot.generator import Generator

logger = logging.getLogger(__name__)

DEFAULT_DIALECT = "mysql"

_WS = re.compile(r"\s+")


def basic_normalize(query: str) -> str:
    """Collapse whitespace and tighten the padding ORMs put inside parentheses."""

    s = _WS.sub(" ", query.strip())
    return s.replace("( ", "(").replace(" )", ")")


def strip_comments(query: str) -> str:
    # sqlparse tokenizes first, so comment markers inside literals survive.
    try:
        return sqlparse.format(query, strip_comments=True)
    except Exception:
        stripped = re.sub(r"/\*.*?\*/", " ", query, flags=re.DOTALL)
        return re.sub(r"--.*?(?=\n|$)", " ", stripped)


def _compact_comparison(op: str):
    def _sql(self, expression: exp.Expression) -> str:
        return f"{self.sql(expression, 'this')}{op}{self.sql(expression, 'expression')}"

    return _sql


@functools.lru_cache(maxsize=None)
def _generator_class(dialect: str) -> Type[Generator]:
    """Dialect generator that prints comparison operators without surrounding spaces."""

    base = Dialect.get_or_raise(dialect).generator_class

    class CompactComparisonGenerator(base):
        eq_sql = _compact_comparison("=")
        neq_sql = _compact_comparison("<>")
        gt_sql = _compact_comparison(">")
        gte_sql = _compact_comparison(">=")
        lt_sql = _compact_comparison("<")
        lte_sql = _compact_comparison("<=")

    return CompactComparisonGenerator


def try_structured_canonicalize(query: str, dialect: str = DEFAULT_DIALECT) -> Optional[str]:
    """Parse *query* and reprint it with uppercase keywords and quoted identifiers.

    Comparison operators are printed tight (`` `id`='5' ``). Returns ``None``
    when the statement cannot be parsed or regenerated.
    """

    try:
        statements = [stmt for stmt in sqlglot.parse(query, read=dialect) if stmt is not None]
        if not statements:
            return None
        dialect_obj = Dialect.get_or_raise(dialect)
        generator_cls = _generator_class(dialect)
        return "; ".join(
            generator_cls(dialect=dialect_obj, identify=True).generate(stmt, copy=True) for stmt in statements
        )
    except Exception as exc:
        logger.debug("structured parse failed, using basic normalization: %s", exc)
        return None


def canonicalize_sql(query: str, dialect: str = DEFAULT_DIALECT) -> str:
    if not query or not query.strip():
        return ""
    stripped = strip_comments(query)
    if not stripped.strip():
        return ""
    structured = try_structured_canonicalize(stripped, dialect=dialect)
    if structured is None:
        return basic_normalize(stripped)
    return structured


__all__ = [
    "DEFAULT_DIALECT",
    "basic_normalize",
    "canonicalize_sql",
    "strip_comments",
    "try_structured_canonicalize",
]
