"""
PostgreSQL harness backed by a single psycopg connection.

`init()` drops and recreates the `public` schema so each test file starts from
an empty database. Column tags are derived from the result column type OIDs,
which keeps schemas correct for empty result sets too.
"""

from __future__ import annotations

from typing import Optional

import psycopg
from psycopg import Connection

from logictest.config import get_settings
from logictest.harness.abstract import AbstractHarness, ExecutionError, QueryResult, format_value
from logictest.infrastructure.db_factory import apply_statement_timeout, get_sync_connection
from logictest.utils.logging import get_logger

log = get_logger(__name__)

# pg_type OIDs
_INTEGER_OIDS = frozenset({16, 20, 21, 23, 26})  # bool, int8, int2, int4, oid
_REAL_OIDS = frozenset({700, 701, 1700})  # float4, float8, numeric


def _pg_tag(type_code: int) -> str:
    if type_code in _INTEGER_OIDS:
        return "I"
    if type_code in _REAL_OIDS:
        return "R"
    return "T"


class PostgresHarness(AbstractHarness):
    """
    Runs records on a dedicated autocommit connection.
    """

    name: str = "postgresql"
    description: str = "PostgreSQL via psycopg (public schema reset per file)."

    def __init__(
        self, dsn_override: Optional[str] = None, statement_timeout_ms: Optional[int] = None
    ) -> None:
        settings = get_settings()
        self._dsn_override = dsn_override
        self.statement_timeout_ms = (
            statement_timeout_ms
            if statement_timeout_ms is not None
            else settings.db_statement_timeout_ms
        )
        self._conn: Optional[Connection] = None

    def _connection(self) -> Connection:
        if self._conn is None:
            raise RuntimeError("PostgresHarness.init() must be called before executing records")
        return self._conn

    def init(self) -> None:
        self.close()
        conn = get_sync_connection(self._dsn_override)
        conn.autocommit = True
        with conn.cursor() as cur:
            cur.execute("DROP SCHEMA IF EXISTS public CASCADE")
            cur.execute("CREATE SCHEMA public")
            apply_statement_timeout(cur, self.statement_timeout_ms)
        self._conn = conn
        log.debug("Reset public schema", extra={"timeout_ms": self.statement_timeout_ms})

    def execute_statement(self, statement: str) -> None:
        try:
            with self._connection().cursor() as cur:
                cur.execute(statement)
        except psycopg.Error as exc:
            raise ExecutionError(str(exc)) from exc

    def execute_query(self, query: str) -> QueryResult:
        try:
            with self._connection().cursor() as cur:
                cur.execute(query)
                if cur.description is None:
                    raise ExecutionError("query returned no result set")
                schema = "".join(_pg_tag(col.type_code) for col in cur.description)
                rows = cur.fetchall()
        except psycopg.Error as exc:
            raise ExecutionError(str(exc)) from exc

        values = [format_value(value, schema[i]) for row in rows for i, value in enumerate(row)]
        return schema, values

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None


__all__ = ["PostgresHarness"]
