"""Compare recorded statements with a golden reference.

The golden text is the ledger joined with ``;\\n`` plus one trailing ``;``.
The pass/fail verdict is strict text equality. Comparison keys are computed on
top of that purely to explain a failure: they tell a formatting-only drift
apart from a real change in the generated SQL.
"""

from __future__ import annotations

import difflib
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from .comparison import normalize_for_comparison

logger = logging.getLogger(__name__)

SEPARATOR = ";\n"

MISSING_MARKER = "<missing>"


class GoldenStatus(str, Enum):
    PASS = "PASS"
    MISMATCH = "MISMATCH"
    MISSING_REFERENCE = "MISSING_REFERENCE"


@dataclass(frozen=True)
class ComparisonRow:
    """Comparison keys at one position of the expected and actual lists."""

    index: int
    expected: Optional[str]
    actual: Optional[str]

    @property
    def matches(self) -> bool:
        return self.expected is not None and self.expected == self.actual


@dataclass(frozen=True)
class GoldenResult:
    status: GoldenStatus
    actual: str
    diagnostics: str = ""
    equivalent: bool = False
    rows: List[ComparisonRow] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.status is GoldenStatus.PASS


def serialize_queries(entries: Sequence[str]) -> str:
    """Join *entries* into the on-disk golden format."""

    content = SEPARATOR.join(entries)
    if entries and content:
        content += ";"
    return content


def parse_reference(reference: str) -> List[str]:
    """Split a golden blob back into statements, dropping blank fragments."""

    body = reference[:-1] if reference.endswith(";") else reference
    return [stmt for stmt in body.split(SEPARATOR) if stmt.strip()]


def missing_reference_message(reference_name: str) -> str:
    return (
        f"Golden file '{reference_name}' does not exist.\n\n"
        "To create the golden file:\n"
        "1. Re-run the tests in update mode (pytest --sql-golden-update, or SQLGOLDEN_UPDATE=1)\n"
        "   OR\n"
        "2. Create the file by hand with the expected SQL statements\n"
        "   OR\n"
        "3. Call QueryRecorder.save_to_file() to write it from the recorded queries"
    )


def _comparison_rows(expected: Sequence[str], actual: Sequence[str]) -> List[ComparisonRow]:
    size = max(len(expected), len(actual))
    return [
        ComparisonRow(
            index=idx + 1,
            expected=expected[idx] if idx < len(expected) else None,
            actual=actual[idx] if idx < len(actual) else None,
        )
        for idx in range(size)
    ]


def format_report(rows: Sequence[ComparisonRow], *, order_sensitive: bool = True) -> str:
    """Render per-position MATCH / DIFF lines and an overall verdict."""

    header = "=== NORMALIZED COMPARISON ===" if order_sensitive else "=== NORMALIZED COMPARISON (SORTED) ==="
    lines = [header]
    for row in rows:
        if row.matches:
            lines.append(f"  [{row.index}] MATCH: {row.expected}")
            continue
        lines.append(f"  [{row.index}] DIFF:")
        lines.append(f"       Expected: {row.expected if row.expected is not None else MISSING_MARKER}")
        lines.append(f"       Actual:   {row.actual if row.actual is not None else MISSING_MARKER}")

    lines.append("")
    if all(row.matches for row in rows):
        lines.append("  All normalized queries match: the difference is only in formatting.")
    else:
        lines.append("  Normalized queries have actual differences.")
    return "\n".join(lines)


def compare_against_reference(
    entries: Sequence[str],
    reference: Optional[str],
    *,
    order_sensitive: bool = True,
    reference_name: str = "<golden>",
) -> GoldenResult:
    """Check recorded *entries* against the golden *reference* text.

    ``reference=None`` means the golden file does not exist, which is reported
    as :attr:`GoldenStatus.MISSING_REFERENCE` rather than a mismatch. When
    *order_sensitive* is false both sides are sorted before comparing.
    """

    recorded = list(entries) if order_sensitive else sorted(entries)
    actual_text = serialize_queries(recorded)

    if reference is None:
        logger.warning("golden reference %s is missing", reference_name)
        return GoldenResult(
            status=GoldenStatus.MISSING_REFERENCE,
            actual=actual_text,
            diagnostics=missing_reference_message(reference_name),
        )

    actual_keys = [normalize_for_comparison(q) for q in recorded]
    expected_keys = [normalize_for_comparison(q) for q in parse_reference(reference)]
    if not order_sensitive:
        actual_keys.sort()
        expected_keys.sort()

    rows = _comparison_rows(expected_keys, actual_keys)
    equivalent = actual_keys == expected_keys
    report = format_report(rows, order_sensitive=order_sensitive)

    if actual_text == reference:
        return GoldenResult(
            status=GoldenStatus.PASS,
            actual=actual_text,
            diagnostics=report,
            equivalent=equivalent,
            rows=rows,
        )

    diff = "\n".join(
        difflib.unified_diff(
            reference.splitlines(),
            actual_text.splitlines(),
            fromfile=f"{reference_name} (expected)",
            tofile="recorded (actual)",
            lineterm="",
        )
    )
    return GoldenResult(
        status=GoldenStatus.MISMATCH,
        actual=actual_text,
        diagnostics=f"{report}\n\n{diff}" if diff else report,
        equivalent=equivalent,
        rows=rows,
    )


__all__ = [
    "ComparisonRow",
    "GoldenResult",
    "GoldenStatus",
    "MISSING_MARKER",
    "SEPARATOR",
    "compare_against_reference",
    "format_report",
    "missing_reference_message",
    "parse_reference",
    "serialize_queries",
]
