"""
Abstract harness interfaces for logictest.

A harness is the engine under test: it receives statement and query text and
reports either an error or, for queries, a column-type string plus the
result values flattened row by row and rendered as strings. Concrete harnesses
(e.g. sqlite, postgresql) implement the Harness protocol, usually through the
AbstractHarness ABC.
"""

from __future__ import annotations

import abc
from decimal import Decimal
from typing import Any, List, Protocol, Sequence, Tuple, runtime_checkable

QueryResult = Tuple[str, List[str]]

# Tag for a column whose type the engine cannot tell from its values (no rows,
# or only NULLs). The verifier takes the declared tag in its place.
UNKNOWN_TAG = "?"


class ExecutionError(Exception):
    """The engine rejected a statement or query."""


@runtime_checkable
class Harness(Protocol):
    """
    Common interface all harnesses must implement.

    Attributes
    ----------
    name : str
        Registry key used on the command line.
    description : str
        A human-friendly summary of the backend.
    """

    name: str
    description: str

    def engine_str(self) -> str:
        """Engine identifier matched against skipif/onlyif conditions."""
        ...

    def init(self) -> None:
        """Reset the engine to a clean state before a test file runs."""
        ...

    def execute_statement(self, statement: str) -> None:
        """
        Execute a statement with no results to validate.

        Raises
        ------
        ExecutionError
            If the engine rejects the statement.
        """
        ...

    def execute_query(self, query: str) -> QueryResult:
        """
        Execute a query and return its schema string and flattened values.

        Raises
        ------
        ExecutionError
            If the engine rejects the query.
        """
        ...

    def close(self) -> None:
        ...


class AbstractHarness(abc.ABC):
    """
    Optional ABC helper for class-based implementations.

    Subclasses set `name` and `description` and implement the abstract methods.
    """

    name: str
    description: str

    def engine_str(self) -> str:
        return self.name

    @abc.abstractmethod
    def init(self) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def execute_statement(self, statement: str) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def execute_query(self, query: str) -> QueryResult:  # pragma: no cover - interface only
        raise NotImplementedError

    def close(self) -> None:
        """Release engine resources. Safe to call more than once."""


def column_tag(values: Sequence[Any]) -> str:
    """
    Type tag for a column given its values: "T" if any value is text, "R" if
    any is a float or decimal, "I" for integers and UNKNOWN_TAG when every
    value is NULL (or there are none).
    """
    tag = UNKNOWN_TAG
    for value in values:
        if value is None:
            continue
        if isinstance(value, (bool, int)):
            tag = "I" if tag == UNKNOWN_TAG else tag
            continue
        if isinstance(value, (float, Decimal)):
            tag = "R"
        else:
            return "T"
    return tag


def format_value(value: Any, tag: str) -> str:
    """Render one result value the way sqllogictest expects it."""
    if value is None:
        return "NULL"
    if tag == "I":
        if isinstance(value, bool):
            return "1" if value else "0"
        return "%d" % value
    if tag == "R":
        return "%.3f" % value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "".join("%02X" % b for b in bytes(value)) or "(empty)"
    text = str(value)
    if text == "":
        return "(empty)"
    # control characters are masked
    return "".join("@" if c < " " or "\u007f" <= c <= "\u009f" else c for c in text)


__all__ = [
    "AbstractHarness",
    "ExecutionError",
    "Harness",
    "QueryResult",
    "UNKNOWN_TAG",
    "column_tag",
    "format_value",
]
