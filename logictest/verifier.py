"""
Result verification for query records.

Observed results arrive from a harness as a column-type string (e.g. "IIT")
and a flat list of rendered values. `verify` checks them against a record's
expected block in four steps: value count, schema, sort per the record's sort
mode, then either a positional comparison or an md5 comparison when the
expected block is a "<N> values hashing to <hex>" summary.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence

from logictest.domain.models import Record, SortMode
from logictest.harness.abstract import UNKNOWN_TAG


class Outcome(Enum):
    PASS = "pass"
    SCHEMA_MISMATCH = "schema_mismatch"
    COUNT_MISMATCH = "count_mismatch"
    VALUE_MISMATCH = "value_mismatch"
    HASH_MISMATCH = "hash_mismatch"


@dataclass(frozen=True)
class Verification:
    """Result of verifying one query record."""

    outcome: Outcome
    message: str = ""
    values: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.outcome is Outcome.PASS


def sort_results(record: Record, values: Sequence[str]) -> List[str]:
    """
    Return a copy of `values` ordered by the record's sort mode.

    rowsort compares whole rows (width = schema length) column by column as
    strings; valuesort sorts every value on its own, ignoring row boundaries.
    """
    values = list(values)
    if record.sort_mode is SortMode.NO_SORT:
        return values
    if record.sort_mode is SortMode.VALUE_SORT:
        return sorted(values)

    num_cols = record.num_cols()
    if num_cols == 0 or len(values) % num_cols:
        raise ValueError(
            f"Cannot arrange {len(values)} values into rows of {num_cols} columns"
        )
    rows = [values[i : i + num_cols] for i in range(0, len(values), num_cols)]
    rows.sort()
    return [value for row in rows for value in row]


def hash_results(values: Sequence[str]) -> str:
    """md5 over every value followed by a newline, as lowercase hex."""
    h = hashlib.md5()
    for value in values:
        h.update(value.encode("utf-8"))
        h.update(b"\n")
    return h.hexdigest()


def resolve_schema(record: Record, observed_schema: str) -> str:
    """
    Fill columns the engine could not type (UNKNOWN_TAG) with the record's
    declared tag at the same position, or "I" past the end of the declaration.
    """
    declared = record.schema_tags
    return "".join(
        (declared[i] if i < len(declared) else "I") if tag == UNKNOWN_TAG else tag
        for i, tag in enumerate(observed_schema)
    )


def _is_legacy_empty_schema(expected: str, observed: str) -> bool:
    # Test files written against an old MySQL declare empty result sets as all
    # integer columns, even where the columns are floats.
    return (
        len(expected) == len(observed)
        and set(expected) == {"I"}
        and bool(observed)
        and set(observed) <= {"I", "R"}
    )


def schemas_match(record: Record, observed_schema: str) -> bool:
    """Whether `observed_schema` satisfies the record's declared schema."""
    observed_schema = resolve_schema(record, observed_schema)
    if observed_schema == record.schema_tags:
        return True
    return record.num_results() == 0 and _is_legacy_empty_schema(
        record.schema_tags, observed_schema
    )


def verify(record: Record, observed_schema: str, observed_values: Sequence[str]) -> Verification:
    """
    Compare a query's observed schema and values with the record's expectations.

    Only the first problem found is reported.
    """
    expected_count = record.num_results()
    if len(observed_values) != expected_count:
        return Verification(
            Outcome.COUNT_MISMATCH,
            f"Incorrect number of results. Expected {expected_count}, got {len(observed_values)}",
        )

    observed_schema = resolve_schema(record, observed_schema)

    if not schemas_match(record, observed_schema):
        return Verification(
            Outcome.SCHEMA_MISMATCH,
            f"Schemas differ. Expected {record.schema_tags}, got {observed_schema}",
        )

    values = sort_results(record, observed_values)

    if record.is_hash_result():
        computed = hash_results(values)
        if computed != record.hash_result():
            return Verification(
                Outcome.HASH_MISMATCH,
                f"Hash of results differ. Expected {record.hash_result()}, got {computed}",
                values,
            )
        return Verification(Outcome.PASS, values=values)

    for i, (expected, actual) in enumerate(zip(record.result, values)):
        if expected != actual:
            return Verification(
                Outcome.VALUE_MISMATCH,
                f"Incorrect result at position {i}. Expected {expected}, got {actual}",
                values,
            )
    return Verification(Outcome.PASS, values=values)


__all__ = [
    "Outcome",
    "Verification",
    "hash_results",
    "resolve_schema",
    "schemas_match",
    "sort_results",
    "verify",
]
