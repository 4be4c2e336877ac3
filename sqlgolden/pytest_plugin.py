"""pytest integration.

Enable it from a ``conftest.py``::

    pytest_plugins = ["sqlgolden.pytest_plugin"]

then use the ``sql_golden`` fixture to get recorders bound to golden files and
assert them. Run with ``--sql-golden-update`` to (re)write the golden files.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

import pytest

from .config import GoldenSettings, load_settings
from .golden import GoldenResult
from .golden_file import GOLDEN_SUFFIX, golden_path
from .recorder import QueryRecorder

__all__ = ["SQLGoldenFixture", "pytest_addoption", "sql_golden"]


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("sqlgolden", "SQL golden files")
    group.addoption(
        "--sql-golden-update",
        action="store_true",
        default=False,
        help="Rewrite golden SQL files from the recorded queries instead of comparing",
    )
    parser.addini("sql_golden_dir", "Directory holding golden SQL files", default="")


def _default_name(nodeid: str) -> str:
    """Golden file name for a test node, unique across modules.

    ``tests/test_users.py::TestList::test_all[a b]`` becomes
    ``tests.test_users.TestList.test_all_a_b.golden.sql``.
    """

    parts = re.split(r"::|/", nodeid.replace(".py::", "::"))
    cleaned = (re.sub(r"[^0-9A-Za-z_.-]+", "_", part).strip("_") for part in parts)
    return ".".join(part for part in cleaned if part) + GOLDEN_SUFFIX


class SQLGoldenFixture:
    def __init__(self, settings: GoldenSettings, default_name: str) -> None:
        self.settings = settings
        self.default_name = default_name

    def recorder(self, name: Optional[str] = None) -> QueryRecorder:
        path = golden_path(name or self.default_name, self.settings.golden_dir)
        return QueryRecorder(path, dialect=self.settings.dialect)

    def assert_golden(
        self,
        recorder: QueryRecorder,
        *,
        order_sensitive: Optional[bool] = None,
    ) -> GoldenResult:
        if order_sensitive is None:
            order_sensitive = self.settings.order_sensitive
        result = recorder.assert_golden(update=self.settings.update, order_sensitive=order_sensitive)
        if result.diagnostics:
            print(result.diagnostics)
        if not result.passed:
            pytest.fail(result.diagnostics, pytrace=False)
        return result


@pytest.fixture
def sql_golden(request: pytest.FixtureRequest) -> SQLGoldenFixture:
    settings = load_settings()
    overrides = {}
    ini_dir = request.config.getini("sql_golden_dir")
    if ini_dir and "SQLGOLDEN_DIR" not in os.environ:
        overrides["golden_dir"] = str(Path(request.config.rootpath) / ini_dir)
    if request.config.getoption("--sql-golden-update"):
        overrides["update"] = True
    if overrides:
        settings = settings.model_copy(update=overrides)
    return SQLGoldenFixture(settings, _default_name(request.node.nodeid))
