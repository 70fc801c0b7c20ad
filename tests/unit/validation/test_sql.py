"""Unit tests for the read-only SQL policy."""

import pytest

from queryproxy.core.exceptions import (
    DangerousKeywordError,
    EmptyQueryError,
    ErrorCodes,
    MultiStatementError,
    NotASelectError,
    SQLValidationError,
)
from queryproxy.validation.sql import check_sql, strip_explain_prefix, validate_sql


class TestValidateSql:

    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT 1",
            "  select id from users;  ",
            "WITH recent AS (SELECT * FROM orders) SELECT * FROM recent",
            "EXPLAIN SELECT * FROM users",
            "EXPLAIN ANALYZE SELECT * FROM users",
            "ANALYZE users",
            "SELECT created_at, updated_at, deleted_flag FROM audit",
            "SELECT execution_time FROM stats",
        ],
    )
    def test_accepts_read_only_statements(self, sql):
        validate_sql(sql)

    @pytest.mark.parametrize("sql", ["", "   ", "\n\t", None])
    def test_rejects_empty(self, sql):
        with pytest.raises(EmptyQueryError):
            validate_sql(sql)

    @pytest.mark.parametrize(
        "sql",
        ["DELETE FROM users", "SHOW TABLES", "(SELECT 1)", "update users set a = 1"],
    )
    def test_rejects_non_select(self, sql):
        with pytest.raises(NotASelectError):
            validate_sql(sql)

    @pytest.mark.parametrize(
        "sql, keyword",
        [
            ("SELECT * FROM users; DROP TABLE users", "DROP"),
            ("SELECT SLEEP(10)", "SLEEP"),
            ("select benchmark(1000000, md5('a'))", "BENCHMARK"),
            ("SELECT * FROM t INTO   OUTFILE '/tmp/x'", "INTO OUTFILE"),
            ("SELECT load_file('/etc/passwd')", "LOAD_FILE"),
            ("WITH x AS (DELETE FROM t RETURNING *) SELECT * FROM x", "DELETE"),
        ],
    )
    def test_rejects_dangerous_keywords(self, sql, keyword):
        with pytest.raises(DangerousKeywordError) as exc_info:
            validate_sql(sql)

        assert exc_info.value.keyword == keyword
        assert exc_info.value.message == f"Dangerous keyword detected: {keyword}"

    def test_explain_prefix_does_not_bypass_blocklist(self):
        with pytest.raises(DangerousKeywordError):
            validate_sql("EXPLAIN ANALYZE DELETE FROM users")

    def test_explain_prefix_does_not_bypass_single_statement_rule(self):
        with pytest.raises(MultiStatementError):
            validate_sql("EXPLAIN SELECT 1; SELECT 2")

    def test_rejects_multiple_statements(self):
        with pytest.raises(MultiStatementError):
            validate_sql("SELECT 1; SELECT 2")

    def test_trailing_semicolons_are_one_statement(self):
        validate_sql("SELECT 1;;  ;")


def test_check_sql():
    assert check_sql("SELECT 1").valid

    result = check_sql("DROP TABLE users")
    assert not result.valid
    assert result.code == ErrorCodes.NOT_A_SELECT
    assert result.error == "Only SELECT queries are allowed"


@pytest.mark.parametrize(
    "sql",
    [
        "SELECT 1",
        "WITH t AS (SELECT 1) SELECT * FROM t;",
        "EXPLAIN ANALYZE SELECT * FROM users",
        "",
        "UPDATE users SET name = 'x'",
        "SELECT * FROM users; DROP TABLE users",
        "SELECT SLEEP(5)",
        "SELECT * FROM t INTO  OUTFILE '/tmp/x'",
    ],
)
def test_verdict_is_stable_across_calls(sql):
    first = check_sql(sql)
    second = check_sql(sql)

    assert first == second

    for _ in range(2):
        if first.valid:
            validate_sql(sql)
        else:
            with pytest.raises(SQLValidationError) as exc_info:
                validate_sql(sql)
            assert exc_info.value.code == first.code


@pytest.mark.parametrize(
    "sql, expected",
    [
        ("SELECT 1", "SELECT 1"),
        ("EXPLAIN SELECT 1", "SELECT 1"),
        ("explain analyze select 1", "select 1"),
        ("EXPLAIN (FORMAT JSON, ANALYZE) SELECT 1", "SELECT 1"),
        ("EXPLAIN PLAN FOR SELECT 1", "SELECT 1"),
        ("EXPLAIN ANALYZE VERBOSE SELECT 1", "SELECT 1"),
        ("  ANALYZE SELECT 1  ", "SELECT 1"),
    ],
)
def test_strip_explain_prefix(sql, expected):
    assert strip_explain_prefix(sql) == expected
