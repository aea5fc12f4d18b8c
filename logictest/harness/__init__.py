"""
Harness package for logictest.

Re-exports the abstract interfaces and the concrete harness classes so
downstream code can import from `logictest.harness` directly.
"""

from logictest.harness.abstract import (
    AbstractHarness,
    ExecutionError,
    Harness,
    QueryResult,
    format_value,
)
from logictest.harness.postgres import PostgresHarness
from logictest.harness.sqlite import SqliteHarness

__all__ = [
    # Abstracts
    "AbstractHarness",
    "ExecutionError",
    "Harness",
    "QueryResult",
    "format_value",
    # Concrete harnesses
    "PostgresHarness",
    "SqliteHarness",
]
