import pytest

from sqlgolden.canonicalize import canonicalize_sql
from sqlgolden.cli import EXIT_MISMATCH, EXIT_MISSING, EXIT_OK, main
from sqlgolden.golden import serialize_queries


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for var in ("SQLGOLDEN_DIR", "SQLGOLDEN_DIALECT", "SQLGOLDEN_UPDATE"):
        monkeypatch.delenv(var, raising=False)


def test_canonicalize_command(capsys):
    assert main(["canonicalize", "select * from users where id = ?"]) == EXIT_OK
    assert capsys.readouterr().out.strip() == "SELECT * FROM `users` WHERE `id`=?"


def test_key_command(capsys):
    assert main(["key", "WHERE (`id`=1) AND (`name`='x')"]) == EXIT_OK
    assert capsys.readouterr().out.strip() == "WHERE id=1 AND name='x'"


def test_compare_command(capsys):
    code = main(["compare", "WHERE (`id`=1) AND (`name`='x')", "WHERE `name`='x' AND `id`=1"])
    out = capsys.readouterr().out
    assert code == EXIT_OK
    assert "equal=true" in out
    assert "A: WHERE id=1 AND name='x'" in out

    assert main(["compare", "SELECT 1", "SELECT 2"]) == EXIT_MISMATCH
    assert "equal=false" in capsys.readouterr().out


def test_debug_where_command(capsys):
    assert main(["debug-where", "SELECT * FROM t WHERE b=2 AND a=1"]) == EXIT_OK
    assert "Split conditions (2):" in capsys.readouterr().out


def _write_queries(tmp_path, *queries):
    path = tmp_path / "queries.sql"
    path.write_text(";\n".join(queries) + ";", encoding="utf-8")
    return path


def test_check_passes_against_matching_golden(tmp_path):
    queries = ["select * from users where id = 1", "select 2"]
    qfile = _write_queries(tmp_path, *queries)
    golden = tmp_path / "q.golden.sql"
    golden.write_text(serialize_queries([canonicalize_sql(q) for q in queries]), encoding="utf-8")
    assert main(["check", str(golden), str(qfile)]) == EXIT_OK


def test_check_unordered(tmp_path):
    qfile = _write_queries(tmp_path, "select 2", "select 1")
    golden = tmp_path / "q.golden.sql"
    golden.write_text("SELECT 1;\nSELECT 2;", encoding="utf-8")
    assert main(["check", str(golden), str(qfile)]) == EXIT_MISMATCH
    assert main(["check", "--unordered", str(golden), str(qfile)]) == EXIT_OK


def test_check_mismatch_prints_report(tmp_path, capsys):
    qfile = _write_queries(tmp_path, "select 3")
    golden = tmp_path / "q.golden.sql"
    golden.write_text("SELECT 1;", encoding="utf-8")
    assert main(["check", str(golden), str(qfile)]) == EXIT_MISMATCH
    assert "[1] DIFF:" in capsys.readouterr().err


def test_check_missing_golden(tmp_path, capsys):
    qfile = _write_queries(tmp_path, "select 1")
    assert main(["check", str(tmp_path / "absent.golden.sql"), str(qfile)]) == EXIT_MISSING
    assert "does not exist" in capsys.readouterr().err


def test_check_missing_queries_file(tmp_path):
    assert main(["check", str(tmp_path / "g.sql"), str(tmp_path / "none.sql")]) == EXIT_MISSING


def test_bad_settings_file(tmp_path, capsys):
    (tmp_path / "sqlgolden.yaml").write_text("bogus: 1\n", encoding="utf-8")
    assert main(["key", "SELECT 1"]) == EXIT_MISSING
    assert "Failed to load settings" in capsys.readouterr().err


def test_requires_subcommand():
    with pytest.raises(SystemExit):
        main([])
