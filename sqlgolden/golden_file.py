"""Reading and writing golden files on disk.

Golden files live under a single directory (``testdata`` unless configured
otherwise) and hold the serialized ledger exactly as compared, UTF-8 encoded.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_GOLDEN_DIR = "testdata"

GOLDEN_SUFFIX = ".golden.sql"


def golden_path(name: str | Path, golden_dir: str | Path = DEFAULT_GOLDEN_DIR) -> Path:
    """Resolve *name* to a golden file path.

    A bare file name is placed under *golden_dir*; anything that already
    carries a directory component is used as given.
    """

    p = Path(name)
    if p.is_absolute() or p.parent != Path("."):
        return p
    return Path(golden_dir) / p


def read_reference(path: str | Path) -> Optional[str]:
    p = Path(path)
    if not p.exists():
        return None
    return p.read_text(encoding="utf-8")


def write_reference(path: str | Path, content: str) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    # newline="" keeps the ";\n" separators byte-exact on every platform.
    with p.open("w", encoding="utf-8", newline="") as f:
        f.write(content)
    logger.info("wrote golden file %s", p)
    return p


__all__ = [
    "DEFAULT_GOLDEN_DIR",
    "GOLDEN_SUFFIX",
    "golden_path",
    "read_reference",
    "write_reference",
]
