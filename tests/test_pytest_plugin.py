import pytest

from sqlgolden.pytest_plugin import SQLGoldenFixture, _default_name


@pytest.mark.parametrize(
    "nodeid, expected",
    [
        ("test_users.py::test_list", "test_users.test_list.golden.sql"),
        ("tests/test_users.py::test_list", "tests.test_users.test_list.golden.sql"),
        ("tests/test_x.py::TestQ::test_x[a b]", "tests.test_x.TestQ.test_x_a_b.golden.sql"),
    ],
)
def test_default_name_is_sanitized(nodeid, expected):
    assert _default_name(nodeid) == expected


def test_default_name_differs_between_modules():
    assert _default_name("tests/test_a.py::test_list") != _default_name("tests/test_b.py::test_list")


def test_fixture_uses_test_name(sql_golden):
    assert isinstance(sql_golden, SQLGoldenFixture)
    assert sql_golden.default_name.endswith("test_pytest_plugin.test_fixture_uses_test_name.golden.sql")


def _in_dir(fixture, tmp_path, **extra):
    fixture.settings = fixture.settings.model_copy(update={"golden_dir": str(tmp_path), "update": False, **extra})
    return fixture


def test_assert_golden_passes(sql_golden, tmp_path):
    golden = _in_dir(sql_golden, tmp_path)
    rec = golden.recorder()
    rec.add_query("select * from users where id = 1")
    (tmp_path / golden.default_name).write_text("SELECT * FROM `users` WHERE `id`=1;", encoding="utf-8")
    assert golden.assert_golden(rec).passed


def test_assert_golden_fails_on_mismatch(sql_golden, tmp_path):
    golden = _in_dir(sql_golden, tmp_path)
    rec = golden.recorder("named.golden.sql")
    rec.add_query("SELECT 2")
    (tmp_path / "named.golden.sql").write_text("SELECT 1;", encoding="utf-8")
    with pytest.raises(pytest.fail.Exception):
        golden.assert_golden(rec)


def test_assert_golden_fails_when_missing(sql_golden, tmp_path):
    golden = _in_dir(sql_golden, tmp_path)
    rec = golden.recorder()
    rec.add_query("SELECT 1")
    with pytest.raises(pytest.fail.Exception, match="does not exist"):
        golden.assert_golden(rec)


def test_update_mode_writes_golden(sql_golden, tmp_path):
    golden = _in_dir(sql_golden, tmp_path, update=True)
    rec = golden.recorder()
    rec.add_query("SELECT 2")
    rec.add_query("SELECT 1")
    golden.assert_golden(rec, order_sensitive=False)
    assert (tmp_path / golden.default_name).read_text(encoding="utf-8") == "SELECT 1;\nSELECT 2;"


def test_same_test_name_in_two_modules_gets_separate_goldens(pytester):
    pytester.makeconftest('pytest_plugins = ["sqlgolden.pytest_plugin"]')
    pytester.makeini("[pytest]\nsql_golden_dir = golden\n")
    body = (
        "def test_list(sql_golden):\n"
        "    rec = sql_golden.recorder()\n"
        "    rec.add_query({sql!r})\n"
        "    sql_golden.assert_golden(rec)\n"
    )
    pytester.makepyfile(test_a=body.format(sql="SELECT 1"), test_b=body.format(sql="SELECT 2"))

    pytester.runpytest("--sql-golden-update").assert_outcomes(passed=2)
    golden_dir = pytester.path / "golden"
    assert (golden_dir / "test_a.test_list.golden.sql").read_text(encoding="utf-8") == "SELECT 1;"
    assert (golden_dir / "test_b.test_list.golden.sql").read_text(encoding="utf-8") == "SELECT 2;"

    pytester.runpytest().assert_outcomes(passed=2)
