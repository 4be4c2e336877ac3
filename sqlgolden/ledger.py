from __future__ import annotations

"""Thread-safe, append-only store of canonical SQL statements."""

import threading
from typing import List

__all__ = ["QueryLedger"]


class QueryLedger:
    """Ordered record of canonical queries with an on/off recording gate.

    Every operation takes the same lock, so one ledger can be shared by any
    number of recording threads. Entries are never edited once appended;
    :meth:`clear` is the only way to drop them.
    """

    def __init__(self, enabled: bool = True) -> None:
        self._lock = threading.Lock()
        self._entries: List[str] = []
        self._enabled = enabled

    def add_query(self, canonical: str) -> bool:
        """Append *canonical*; returns False when recording is off or the text is empty."""

        with self._lock:
            if not self._enabled or not canonical:
                return False
            self._entries.append(canonical)
            return True

    def enable(self) -> None:
        with self._lock:
            self._enabled = True

    def disable(self) -> None:
        with self._lock:
            self._enabled = False

    @property
    def enabled(self) -> bool:
        with self._lock:
            return self._enabled

    def clear(self) -> None:
        with self._lock:
            self._entries = []

    def snapshot(self) -> List[str]:
        """Return a copy of the entries; mutating it leaves the ledger untouched."""

        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
