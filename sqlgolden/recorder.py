from __future__ import annotations

"""Per-session recorder tying capture, canonicalization and golden checks together."""

from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from .canonicalize import DEFAULT_DIALECT, canonicalize_sql
from .comparison import compare_queries_debug
from .golden import GoldenResult, GoldenStatus, compare_against_reference, serialize_queries
from .golden_file import read_reference, write_reference
from .ledger import QueryLedger
from .values import build_full_sql

__all__ = ["QueryRecorder"]


class QueryRecorder:
    """Records the SQL issued during one unit of work.

    Each recorder owns its own :class:`QueryLedger`; isolating sessions (one
    per test, one per connection) is done by creating separate recorders.
    Capture hooks are handed the recorder they should feed, see
    :func:`sqlgolden.hooks.attach`.
    """

    def __init__(
        self,
        golden_file: Optional[str | Path] = None,
        *,
        dialect: str = DEFAULT_DIALECT,
    ) -> None:
        self.golden_file = Path(golden_file) if golden_file is not None else None
        self.dialect = dialect
        self.ledger = QueryLedger()

    def record_capture(self, template: str, values: Sequence[Any] = (), placeholder: str = "?") -> None:
        """Entry point for capture hooks: bind *values*, canonicalize, append."""

        if not template:
            return
        self.add_query(build_full_sql(template, values, placeholder=placeholder))

    def add_query(self, sql: str) -> None:
        if not sql or not self.ledger.enabled:
            return
        self.ledger.add_query(canonicalize_sql(sql, dialect=self.dialect))

    def enable(self) -> None:
        self.ledger.enable()

    def disable(self) -> None:
        self.ledger.disable()

    def clear(self) -> None:
        self.ledger.clear()

    def snapshot(self) -> List[str]:
        return self.ledger.snapshot()

    get_queries = snapshot

    def serialize(self, *, sort: bool = False) -> str:
        entries = self.snapshot()
        return serialize_queries(sorted(entries) if sort else entries)

    def compare_keys(self, sql_a: str, sql_b: str) -> bool:
        return self.compare_keys_debug(sql_a, sql_b)[0]

    def compare_keys_debug(self, sql_a: str, sql_b: str) -> Tuple[bool, str, str]:
        return compare_queries_debug(sql_a, sql_b)

    def assert_against_reference(
        self,
        reference: Optional[str],
        *,
        order_sensitive: bool = True,
        reference_name: str = "<golden>",
    ) -> GoldenResult:
        return compare_against_reference(
            self.snapshot(),
            reference,
            order_sensitive=order_sensitive,
            reference_name=reference_name,
        )

    def _resolve_path(self, path: Optional[str | Path]) -> Path:
        target = path if path is not None else self.golden_file
        if target is None:
            raise ValueError("No golden file configured for this recorder.")
        return Path(target)

    def save_to_file(self, path: Optional[str | Path] = None, *, sort: bool = False) -> Path:
        return write_reference(self._resolve_path(path), self.serialize(sort=sort))

    def assert_golden(
        self,
        path: Optional[str | Path] = None,
        *,
        update: bool = False,
        order_sensitive: bool = True,
    ) -> GoldenResult:
        """Compare with the golden file on disk, or rewrite it when *update* is set."""

        target = self._resolve_path(path)
        if update:
            content = self.serialize(sort=not order_sensitive)
            write_reference(target, content)
            return GoldenResult(
                status=GoldenStatus.PASS,
                actual=content,
                diagnostics=f"Updated golden file {target}",
                equivalent=True,
            )
        return self.assert_against_reference(
            read_reference(target),
            order_sensitive=order_sensitive,
            reference_name=str(target),
        )
