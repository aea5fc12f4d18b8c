"""
Domain models for logictest.

A test script is a sequence of Records, each one a statement to execute, a
query whose results are verified, or a halt marker. Records are built once by
the parser and are immutable afterwards.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Tuple

from pydantic import BaseModel, Field

from logictest.conditions import should_execute_for_engine

HASH_RESULT_RE = re.compile(r"(\d+) values hashing to ([0-9a-f]+)")


class RecordType(Enum):
    # Executed with no results to validate, such as CREATE or INSERT
    STATEMENT = "statement"
    # Executed and its results validated
    QUERY = "query"
    # Terminates execution of the current test script
    HALT = "halt"


class SortMode(str, Enum):
    NO_SORT = "nosort"
    ROW_SORT = "rowsort"
    VALUE_SORT = "valuesort"


class Condition(BaseModel):
    """
    A directive to execute a record or not depending on the engine under test.
    """

    is_only: bool = Field(False, description="Record runs only on `engine`.")
    is_skip: bool = Field(False, description="Record is skipped on `engine`.")
    engine: str = Field(..., description="Engine identifier to match.")

    model_config = {"frozen": True}


class Record(BaseModel):
    """
    A single parsed unit of a test script.
    """

    record_type: RecordType = Field(..., description="Statement, query or halt.")
    expect_error: bool = Field(False, description="Statement must fail to pass.")
    conditions: Tuple[Condition, ...] = Field(default=(), description="skipif/onlyif rules.")
    schema_tags: str = Field("", description="Result column types, e.g. 'ITTR'.")
    sort_mode: SortMode = Field(SortMode.NO_SORT, description="Result normalization.")
    query: str = Field("", description="Statement or query text, newlines removed.")
    line_num: int = Field(0, description="First line of the SQL text.")
    directive_line: int = Field(0, description="Line of the statement/query/halt directive.")
    result: Tuple[str, ...] = Field(default=(), description="Expected values or a hash summary.")
    label: str = Field("", description="Optional query label, metadata only.")
    hash_threshold: int = Field(..., ge=0, description="Value count above which results are hashed.")

    model_config = {"frozen": True}

    def is_hash_result(self) -> bool:
        """Whether the expected block is a hash summary rather than literal values."""
        return len(self.result) == 1 and HASH_RESULT_RE.fullmatch(self.result[0].strip()) is not None

    def hash_result(self) -> str:
        """The expected md5 hex digest of a hash-mode record."""
        match = HASH_RESULT_RE.fullmatch(self.result[0].strip())
        if match is None:
            raise ValueError("record has no hash result")
        return match.group(2)

    def num_results(self) -> int:
        """
        Number of expected values (not rows). For hash-mode records this is the
        count announced by the summary line.
        """
        if self.record_type is not RecordType.QUERY:
            raise ValueError("Only query records have results")
        if self.is_hash_result():
            match = HASH_RESULT_RE.fullmatch(self.result[0].strip())
            return int(match.group(1))
        return len(self.result)

    def num_cols(self) -> int:
        if self.record_type is not RecordType.QUERY:
            raise ValueError("Only query records have results")
        return len(self.schema_tags)

    def sort_string(self) -> str:
        return self.sort_mode.value

    def should_execute_for_engine(self, engine: str) -> bool:
        return should_execute_for_engine(self.conditions, engine)

    def describe(self, truncate: bool = False) -> str:
        """Query text for log lines, optionally shortened to 50 characters."""
        text = self.query
        if truncate and len(text) > 50:
            return text[:47] + "..."
        return text


__all__ = ["Condition", "Record", "RecordType", "SortMode", "HASH_RESULT_RE"]
