import pytest

import sqlgolden.canonicalize as canonicalize
from sqlgolden.canonicalize import basic_normalize, canonicalize_sql, try_structured_canonicalize
from sqlgolden.values import build_full_sql


def test_structured_canonical_form_quotes_identifiers():
    out = canonicalize_sql("select * from users where id = '5'")
    assert out == "SELECT * FROM `users` WHERE `id`='5'"


@pytest.mark.parametrize(
    "sql",
    [
        "select * from users where id = ?",
        "SELECT * FROM users /* comment */ WHERE id = ?",
        "SELECT  *   FROM\n\tusers\t\tWHERE    id = ?",
        "SELECT * FROM users -- trailing note\nWHERE id = ?",
    ],
)
def test_formatting_variants_share_one_canonical_form(sql):
    assert canonicalize_sql(sql) == "SELECT * FROM `users` WHERE `id`=?"


def test_bound_string_value_canonical_form():
    sql = build_full_sql("select * from users where id = ?", ["5"])
    assert canonicalize_sql(sql) == "SELECT * FROM `users` WHERE `id`='5'"


@pytest.mark.parametrize("op", ["=", "<>", ">", ">=", "<", "<="])
def test_comparison_operators_print_without_spaces(op):
    assert canonicalize_sql(f"select * from t where a {op} 1") == f"SELECT * FROM `t` WHERE `a`{op}1"


def test_other_binary_operators_keep_spacing():
    out = canonicalize_sql("select * from t where a like 'x%' and b + 1 = 2")
    assert out == "SELECT * FROM `t` WHERE `a` LIKE 'x%' AND `b` + 1=2"


def test_join_query_keeps_table_and_alias_quoted():
    out = canonicalize_sql("SELECT u.name, p.title FROM users u JOIN posts p ON u.id = p.user_id WHERE u.age > ?")
    assert out.startswith("SELECT `u`.`name`, `p`.`title` FROM `users`")
    assert "JOIN `posts`" in out
    assert "`u`.`age`>?" in out
    assert "ON `u`.`id`=`p`.`user_id`" in out


def test_multiple_statements_joined_with_semicolon():
    assert canonicalize_sql("select 1; select 2") == "SELECT 1; SELECT 2"


@pytest.mark.parametrize("sql", ["", "   \n\t   ", "/* only a comment */", "-- nothing here\n"])
def test_empty_and_comment_only_input(sql):
    assert canonicalize_sql(sql) == ""


def test_unparseable_sql_falls_back_to_basic_normalization():
    out = canonicalize_sql("SELECT *  FROM users\n WHERE ( id = 1")
    assert out == "SELECT * FROM users WHERE (id = 1"


def test_fallback_when_structured_pass_gives_up(monkeypatch):
    monkeypatch.setattr(canonicalize, "try_structured_canonicalize", lambda query, dialect="mysql": None)
    out = canonicalize.canonicalize_sql("select * from users where id = '5'")
    assert out == "select * from users where id = '5'"


def test_try_structured_returns_none_on_parse_error():
    assert try_structured_canonicalize("SELECT (1") is None


def test_basic_normalize():
    assert basic_normalize("SELECT  *   FROM\n\tusers\t\tWHERE    id = ?") == "SELECT * FROM users WHERE id = ?"
    assert basic_normalize("SELECT * FROM users WHERE ( id > ? ) AND ( name = ? )") == (
        "SELECT * FROM users WHERE (id > ?) AND (name = ?)"
    )
    assert basic_normalize("   \n\t   ") == ""
