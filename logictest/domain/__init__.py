"""
Domain package for logictest.

Exports the core domain models shared by the parser, verifier and runner.
Keep this package focused on data definitions and validation concerns.
"""

from logictest.domain.models import Condition, Record, RecordType, SortMode

__all__ = [
    "Condition",
    "Record",
    "RecordType",
    "SortMode",
]
