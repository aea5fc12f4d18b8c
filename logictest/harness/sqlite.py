"""
SQLite harness: an in-memory database per test file.

Column types come from the values themselves, since sqlite3 cursors carry no
type information. Columns with no rows or only NULLs are reported as
UNKNOWN_TAG and take the type the record declares.
"""

from __future__ import annotations

import sqlite3
from typing import Optional

from logictest.harness.abstract import (
    AbstractHarness,
    ExecutionError,
    QueryResult,
    column_tag,
    format_value,
)
from logictest.utils.logging import get_logger

log = get_logger(__name__)


class SqliteHarness(AbstractHarness):
    """
    Runs records against a fresh in-memory sqlite3 connection.
    """

    name: str = "sqlite"
    description: str = "In-memory SQLite (standard library sqlite3)."

    def __init__(self) -> None:
        self._conn: Optional[sqlite3.Connection] = None

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("SqliteHarness.init() must be called before executing records")
        return self._conn

    def init(self) -> None:
        self.close()
        # autocommit; test scripts issue their own transaction statements
        self._conn = sqlite3.connect(":memory:", isolation_level=None)
        log.debug("Opened in-memory sqlite database", extra={"sqlite_version": sqlite3.sqlite_version})

    def execute_statement(self, statement: str) -> None:
        try:
            self._connection().execute(statement)
        except sqlite3.Error as exc:
            raise ExecutionError(str(exc)) from exc

    def execute_query(self, query: str) -> QueryResult:
        try:
            cur = self._connection().execute(query)
            rows = cur.fetchall()
        except sqlite3.Error as exc:
            raise ExecutionError(str(exc)) from exc

        num_cols = len(cur.description or ())
        schema = "".join(column_tag([row[i] for row in rows]) for i in range(num_cols))
        values = [format_value(value, schema[i]) for row in rows for i, value in enumerate(row)]
        return schema, values

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None


__all__ = ["SqliteHarness"]
