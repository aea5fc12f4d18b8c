"""
Parser package for logictest.

Turns sqllogictest scripts into immutable Records. A mirror of all test
cases can be found at https://github.com/gregrahn/sqllogictest.
"""

from logictest.parser.line_source import LineScanner
from logictest.parser.parser import (
    DEFAULT_HASH_THRESHOLD,
    SEPARATOR,
    EndOfInput,
    ParseError,
    RecordParser,
    parse_lines,
    parse_test_file,
)

__all__ = [
    "DEFAULT_HASH_THRESHOLD",
    "SEPARATOR",
    "EndOfInput",
    "LineScanner",
    "ParseError",
    "RecordParser",
    "parse_lines",
    "parse_test_file",
]
