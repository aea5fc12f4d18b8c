from __future__ import annotations

from decimal import Decimal

import pytest

from logictest.harness import ExecutionError, Harness, SqliteHarness
from logictest.harness.abstract import column_tag, format_value
from logictest.harness.postgres import _pg_tag


@pytest.mark.parametrize(
    ("value", "tag", "expected"),
    [
        (None, "I", "NULL"),
        (None, "T", "NULL"),
        (42, "I", "42"),
        (True, "I", "1"),
        (False, "I", "0"),
        (2.5, "I", "2"),
        (1.5, "R", "1.500"),
        (Decimal("2.25"), "R", "2.250"),
        (7, "R", "7.000"),
        ("abc", "T", "abc"),
        ("", "T", "(empty)"),
        ("tab\there", "T", "tab@here"),
        ("line\nbreak\x7f", "T", "line@break@"),
        (b"\x0a\xff", "T", "0AFF"),
        (b"", "T", "(empty)"),
        (12, "T", "12"),
    ],
)
def test_format_value(value, tag, expected) -> None:
    assert format_value(value, tag) == expected


@pytest.mark.parametrize(
    ("values", "expected"),
    [
        ([], "?"),
        ([None, None], "?"),
        ([None, 1], "I"),
        ([1, None, True], "I"),
        ([1, 2.0], "R"),
        ([Decimal("1.5")], "R"),
        ([1.0, "x"], "T"),
        ([b"\x00"], "T"),
    ],
)
def test_column_tag(values, expected) -> None:
    assert column_tag(values) == expected


@pytest.mark.parametrize(
    ("oid", "expected"),
    [(16, "I"), (20, "I"), (23, "I"), (701, "R"), (1700, "R"), (25, "T"), (1043, "T")],
)
def test_postgres_type_tags(oid: int, expected: str) -> None:
    assert _pg_tag(oid) == expected


class TestSqliteHarness:
    @pytest.fixture
    def harness(self):
        harness = SqliteHarness()
        harness.init()
        yield harness
        harness.close()

    def test_satisfies_protocol(self, harness) -> None:
        assert isinstance(harness, Harness)
        assert harness.engine_str() == "sqlite"

    def test_query_returns_schema_and_flattened_values(self, harness) -> None:
        harness.execute_statement("CREATE TABLE t1(a INTEGER, b TEXT, c REAL)")
        harness.execute_statement("INSERT INTO t1 VALUES(1, 'x', 0.5), (2, NULL, 1.25)")

        schema, values = harness.execute_query("SELECT a, b, c FROM t1 ORDER BY a")

        assert schema == "ITR"
        assert values == ["1", "x", "0.500", "2", "NULL", "1.250"]

    def test_empty_result_reports_untyped_columns(self, harness) -> None:
        harness.execute_statement("CREATE TABLE t1(a TEXT, b REAL)")
        assert harness.execute_query("SELECT a, b FROM t1") == ("??", [])

    def test_all_null_column_is_untyped(self, harness) -> None:
        harness.execute_statement("CREATE TABLE t1(a TEXT, b INTEGER)")
        harness.execute_statement("INSERT INTO t1 VALUES(NULL, 1)")
        assert harness.execute_query("SELECT a, b FROM t1") == ("?I", ["NULL", "1"])

    def test_errors_are_wrapped(self, harness) -> None:
        with pytest.raises(ExecutionError, match="no such table"):
            harness.execute_statement("INSERT INTO missing VALUES(1)")
        with pytest.raises(ExecutionError):
            harness.execute_query("SELECT * FROM missing")

    def test_init_resets_database(self, harness) -> None:
        harness.execute_statement("CREATE TABLE t1(a INTEGER)")
        harness.init()
        harness.execute_statement("CREATE TABLE t1(a INTEGER)")

    def test_requires_init(self) -> None:
        with pytest.raises(RuntimeError, match="init"):
            SqliteHarness().execute_statement("SELECT 1")

    def test_close_is_idempotent(self, harness) -> None:
        harness.close()
        harness.close()
