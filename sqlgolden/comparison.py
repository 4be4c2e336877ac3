from __future__ import annotations

"""Comparison keys: SQL text reduced to a form that ignores cosmetic differences.

Two statements are treated as equivalent when their keys are equal. The key is
produced by a fixed sequence of lexical passes:

1. whitespace collapse (the same basic normalization the canonicalizer falls back to)
2. backtick removal
3. charset introducer removal (``_UTF8MB4abc`` -> ``abc``)
4. ``LIMIT a,b`` / ``OFFSET 0`` canonicalization
5. JOIN clause sorting
6. main WHERE clause flattening, de-duplication and sorting
7. parenthesis removal

Removing parentheses can expose ``AND``s that were nested in a subquery, so the
sequence is re-applied until the text stops changing. That keeps the key
idempotent.

Keyword matching is case-sensitive and expects the uppercase keywords that the
canonicalizer emits. Nothing here understands string literals; a literal that
contains `` AND `` or `` JOIN `` can be split in the wrong place.

Once the parentheses are gone, a later round sees a subquery's ANDed
conditions as part of the main WHERE. So
``x IN (SELECT id FROM u WHERE b=1 AND a=2) AND c=3`` and
``x IN (SELECT id FROM u WHERE b=1) AND a=2 AND c=3`` share a key. The strict
text verdict still tells them apart; only the diagnostic report calls them
equivalent.
"""

import functools
import re
from typing import Callable, List, Sequence, Tuple

from .canonicalize import basic_normalize

__all__ = [
    "clean_condition",
    "compare_queries",
    "compare_queries_debug",
    "explain_where_clause",
    "flatten_nested_parentheses",
    "join_type_and_table",
    "normalize_for_comparison",
    "normalize_join_order",
    "normalize_limit_clause",
    "normalize_main_where_clause",
    "remove_duplicate_conditions",
    "split_where_conditions",
    "strip_charset_prefixes",
]

_MAX_ROUNDS = 8

_CHARSET_PREFIX = re.compile(
    r"(?<![0-9A-Za-z_])_(UTF8MB4|UTF8MB3|UTF16LE|UTF16|UTF32|UTF8|LATIN1|BINARY|ASCII|UCS2)([0-9A-Za-z]*)",
    re.IGNORECASE,
)

_JOIN_KEYWORD = re.compile(r" (?:(LEFT|RIGHT)(?: OUTER)? |(INNER|CROSS) )?JOIN ")
_JOIN_HEAD = re.compile(r"(?:(LEFT|RIGHT)(?: OUTER)? |(?:INNER|CROSS) )?JOIN (.*)", re.DOTALL)

_FROM_END = (" WHERE ", " GROUP BY ", " HAVING ", " ORDER BY ", " LIMIT ")
_WHERE_END = (" GROUP BY ", " HAVING ", " ORDER BY ", " LIMIT ")

_AND = " AND "


def _padded(func: Callable[[str], str]) -> Callable[[str], str]:
    """Run a pass with a leading space so a keyword at the very start still matches."""

    @functools.wraps(func)
    def wrapper(query: str) -> str:
        return func(" " + query)[1:]

    return wrapper


def _find_top_level(text: str, keywords: Sequence[str], start: int = 0) -> int:
    """Index of the first keyword at parenthesis depth zero (relative to *start*), or -1."""

    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif depth == 0 and any(text.startswith(kw, i) for kw in keywords):
            return i
    return -1


def _rfind_top_level(text: str, keyword: str) -> int:
    depth = 0
    found = -1
    for i, ch in enumerate(text):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif depth == 0 and text.startswith(keyword, i):
            found = i
    return found


def strip_charset_prefixes(query: str) -> str:
    """Drop MySQL charset introducers such as ``_UTF8MB4``.

    The bare form emitted by parsers that print the introducer glued to its
    payload (``_UTF8MB4abc``) keeps only the payload. The quoted form
    (``_utf8mb4'abc'``) keeps only the literal.
    """

    def _replace(match: re.Match) -> str:
        charset, payload = match.group(1), match.group(2)
        if payload:
            return payload if charset.isupper() else match.group(0)
        if match.string.startswith("'", match.end()):
            return ""
        return match.group(0)

    return _CHARSET_PREFIX.sub(_replace, query)


@_padded
def normalize_limit_clause(query: str) -> str:
    """Rewrite ``LIMIT offset,count`` as ``LIMIT count OFFSET offset`` and drop ``OFFSET 0``."""

    limit_idx = _rfind_top_level(query, " LIMIT ")
    if limit_idx == -1:
        return query

    after = query[limit_idx + len(" LIMIT "):]
    end = after.find(";")
    if end == -1:
        end = len(after)
    clause = after[:end].strip()
    remaining = after[end:]

    if "," in clause:
        parts = clause.split(",")
        if len(parts) == 2:
            offset, count = parts[0].strip(), parts[1].strip()
            clause = count if offset == "0" else f"{count} OFFSET {offset}"
    elif " OFFSET " in clause:
        parts = clause.split(" OFFSET ")
        if len(parts) == 2 and parts[1].strip() == "0":
            clause = parts[0].strip()

    return query[:limit_idx] + " LIMIT " + clause + remaining


def join_type_and_table(clause: str) -> Tuple[str, str]:
    """Classify a JOIN clause as ``(LEFT|RIGHT|INNER, table)``."""

    match = _JOIN_HEAD.match(clause)
    if not match:
        return "", ""
    join_type = match.group(1) or "INNER"
    table = match.group(2)
    for sep in (" ON ", " USING "):
        table = table.split(sep, 1)[0]
    table = table.split(" AS ", 1)[0]
    return join_type, table.strip()


def _join_sort_key(clause: str) -> Tuple[str, str, str]:
    join_type, table = join_type_and_table(clause)
    return join_type, table, clause.replace("(", "").replace(")", "")


def _join_starts(section: str) -> List[int]:
    starts: List[int] = []
    depth = 0
    i = 0
    while i < len(section):
        ch = section[i]
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == " " and depth == 0:
            match = _JOIN_KEYWORD.match(section, i)
            if match:
                starts.append(i)
                i = match.end()
                continue
        i += 1
    return starts


@_padded
def normalize_join_order(query: str) -> str:
    """Sort the JOIN clauses of the main FROM by join type, then table name.

    The leading table stays first. Everything else in the statement is left
    where it was.
    """

    from_idx = _find_top_level(query, (" FROM ",))
    if from_idx == -1:
        return query
    start = from_idx + len(" FROM ")

    end = _find_top_level(query, _FROM_END, start)
    if end == -1:
        end = len(query)
        trimmed = query.rstrip()
        if trimmed.endswith(";"):
            end = len(trimmed) - 1

    section = query[start:end]
    starts = _join_starts(section)
    if not starts:
        return query

    head = section[: starts[0]].strip()
    clauses = []
    for pos, clause_start in enumerate(starts):
        clause_end = starts[pos + 1] if pos + 1 < len(starts) else len(section)
        clauses.append(section[clause_start:clause_end].strip())
    clauses.sort(key=_join_sort_key)

    return query[:start] + " ".join([head, *clauses]) + query[end:]


def flatten_nested_parentheses(text: str) -> str:
    """Remove parenthesis layers that wrap the whole of *text*.

    ``((a AND b))`` becomes ``a AND b``; ``(a) AND (b)`` is left alone because
    its first parenthesis closes before the end.
    """

    s = text.strip()
    while len(s) >= 2 and s[0] == "(" and s[-1] == ")":
        depth = 0
        wrapper = True
        for ch in s[:-1]:
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    wrapper = False
                    break
        if not wrapper:
            break
        s = s[1:-1].strip()
    return s


def clean_condition(cond: str) -> str:
    """Trim stray leading ``)`` and trailing ``(`` left by a misplaced split."""

    cond = cond.strip()
    while cond and (cond[0] == ")" or cond[-1] == "("):
        if cond[0] == ")":
            cond = cond[1:].strip()
        if cond and cond[-1] == "(":
            cond = cond[:-1].strip()
    return cond


def split_where_conditions(clause: str) -> List[str]:
    """Split *clause* on `` AND `` separators that sit outside any parentheses."""

    conditions: List[str] = []
    current: List[str] = []
    depth = 0

    def _flush() -> None:
        cond = clean_condition("".join(current))
        if cond:
            conditions.append(cond)
        current.clear()

    i = 0
    while i < len(clause):
        ch = clause[i]
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif depth == 0 and clause.startswith(_AND, i):
            _flush()
            i += len(_AND)
            continue
        current.append(ch)
        i += 1
    _flush()
    return conditions


def _flatten_conditions(cond: str) -> List[str]:
    parts = split_where_conditions(flatten_nested_parentheses(cond))
    if len(parts) > 1:
        flat: List[str] = []
        for part in parts:
            flat.extend(_flatten_conditions(part))
        return flat
    return parts


def remove_duplicate_conditions(conditions: Sequence[str]) -> List[str]:
    seen = set()
    result: List[str] = []
    for cond in conditions:
        cond = cond.strip()
        if cond and cond not in seen:
            seen.add(cond)
            result.append(cond)
    return result


def _main_where_bounds(query: str) -> Tuple[int, int]:
    """Return ``(index of " WHERE ", end of its body)`` for the main WHERE, or ``(-1, -1)``."""

    search_start = _rfind_top_level(query, " ON ")
    if search_start == -1:
        search_start = max(_find_top_level(query, (" FROM ",)), 0)

    where_idx = _find_top_level(query, (" WHERE ",), search_start)
    if where_idx == -1:
        return -1, -1
    body_start = where_idx + len(" WHERE ")
    body_end = _find_top_level(query, _WHERE_END, body_start)
    if body_end == -1:
        body_end = len(query)
    return where_idx, body_end


@_padded
def normalize_main_where_clause(query: str) -> str:
    """Flatten, de-duplicate and sort the ANDed conditions of the main WHERE.

    Only the WHERE that follows the last JOIN ``ON`` (or the FROM when there
    are no joins) is touched, so a subquery's WHERE keeps its own shape. Must
    run while parentheses are still present.
    """

    where_idx, body_end = _main_where_bounds(query)
    if where_idx == -1:
        return query

    before = query[:where_idx]
    clause = query[where_idx + len(" WHERE "):body_end]
    after = query[body_end:]

    trimmed = clause.rstrip()
    if trimmed.endswith(";"):
        clause = trimmed[:-1].strip()
        if not after.startswith(";"):
            after = ";" + after

    conditions: List[str] = []
    for cond in split_where_conditions(flatten_nested_parentheses(clause)):
        conditions.extend(_flatten_conditions(cond))
    conditions = sorted(remove_duplicate_conditions(conditions))

    return before + " WHERE " + _AND.join(conditions) + after


def _normalize_once(query: str) -> str:
    s = basic_normalize(query)
    s = s.replace("`", "")
    s = strip_charset_prefixes(s)
    s = normalize_limit_clause(s)
    s = normalize_join_order(s)
    s = normalize_main_where_clause(s)
    return s.replace("(", "").replace(")", "")


def normalize_for_comparison(query: str) -> str:
    """Return the comparison key for *query*. Never raises."""

    current = _normalize_once(query)
    for _ in range(_MAX_ROUNDS):
        following = _normalize_once(current)
        if following == current:
            break
        current = following
    return current


def compare_queries(query_a: str, query_b: str) -> bool:
    return normalize_for_comparison(query_a) == normalize_for_comparison(query_b)


def compare_queries_debug(query_a: str, query_b: str) -> Tuple[bool, str, str]:
    key_a = normalize_for_comparison(query_a)
    key_b = normalize_for_comparison(query_b)
    return key_a == key_b, key_a, key_b


def explain_where_clause(query: str) -> List[str]:
    """Describe, line by line, how the main WHERE of *query* gets split."""

    lines = [f"Original: {query}"]
    s = " " + basic_normalize(query).replace("`", "")
    where_idx, body_end = _main_where_bounds(s)
    if where_idx == -1:
        lines.append("No WHERE clause found")
        return lines

    clause = s[where_idx + len(" WHERE "):body_end].rstrip()
    if clause.endswith(";"):
        clause = clause[:-1].strip()
    lines.append(f"WHERE clause: {clause}")

    flattened = flatten_nested_parentheses(clause)
    if flattened != clause:
        lines.append(f"After removing wrapping parentheses: {flattened}")
    else:
        lines.append("No wrapping parentheses to remove")

    conditions = split_where_conditions(flattened)
    lines.append(f"Split conditions ({len(conditions)}):")
    for idx, cond in enumerate(conditions):
        lines.append(f"  [{idx}]: {cond}")

    flat: List[str] = []
    for cond in conditions:
        flat.extend(_flatten_conditions(cond))
    final = sorted(remove_duplicate_conditions(flat))
    lines.append(f"Sorted conditions ({len(final)}):")
    for idx, cond in enumerate(final):
        lines.append(f"  [{idx}]: {cond}")
    return lines
