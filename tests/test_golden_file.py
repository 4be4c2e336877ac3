from pathlib import Path

from sqlgolden.golden_file import golden_path, read_reference, write_reference


def test_golden_path_places_bare_names_under_dir(tmp_path):
    assert golden_path("users.golden.sql", tmp_path) == tmp_path / "users.golden.sql"
    assert golden_path("users.golden.sql") == Path("testdata") / "users.golden.sql"


def test_golden_path_keeps_paths_with_directories(tmp_path):
    explicit = tmp_path / "nested" / "a.golden.sql"
    assert golden_path(explicit, "elsewhere") == explicit
    assert golden_path("sub/a.golden.sql", "elsewhere") == Path("sub/a.golden.sql")


def test_read_missing_reference_returns_none(tmp_path):
    assert read_reference(tmp_path / "nope.golden.sql") is None


def test_write_creates_parents_and_keeps_bytes(tmp_path):
    target = tmp_path / "deep" / "dir" / "q.golden.sql"
    content = "SELECT 'é';\nSELECT 2;"
    written = write_reference(target, content)
    assert written == target
    assert target.read_bytes() == content.encode("utf-8")
    assert read_reference(target) == content
