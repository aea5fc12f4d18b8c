"""
Parser for sqllogictest scripts.

The format is described at https://www.sqlite.org/sqllogictest/doc/trunk/about.wiki.
An example query record:

    query III nosort
    SELECT a,
    c-d,
    d
    FROM t1
    WHERE c>d
    ORDER BY 1,2,3
    ----
    131
    1
    133

Each call to `RecordParser.parse_record` consumes lines up to the end of one
record. `hash-threshold` directives produce no record (the call returns None)
but update the threshold carried by every record parsed after them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from logictest.domain.models import Condition, Record, RecordType, SortMode
from logictest.parser.line_source import LineScanner
from logictest.utils.logging import get_logger

log = get_logger(__name__)

SEPARATOR = "----"
HALT = "halt"
HASH_THRESHOLD = "hash-threshold"
SKIPIF = "skipif"
ONLYIF = "onlyif"
STATEMENT = "statement"
QUERY = "query"
DEFAULT_HASH_THRESHOLD = 8


class ParseError(ValueError):
    """A malformed test script. Fatal for the whole file."""

    def __init__(self, line_num: int, message: str, token: Optional[str] = None) -> None:
        self.line_num = line_num
        self.token = token
        super().__init__(f"{message} on line {line_num}")


class EndOfInput(Exception):
    """No records remain in the script."""


class _State(Enum):
    START = "start"
    STATEMENT = "statement"
    QUERY = "query"
    RESULTS = "results"
    # pseudo-states returned by directive handlers
    EMIT = "emit"
    CONSUMED = "consumed"


def strip_comment(line: str) -> str:
    """Truncate `line` at its first `#`."""
    return line.split("#", 1)[0]


def is_blank(line: str) -> bool:
    return not line.strip()


def is_comment_line(line: str) -> bool:
    return line.lstrip().startswith("#")


@dataclass
class _RecordBuilder:
    hash_threshold: int
    record_type: Optional[RecordType] = None
    expect_error: bool = False
    conditions: List[Condition] = field(default_factory=list)
    schema_tags: str = ""
    sort_mode: SortMode = SortMode.NO_SORT
    label: str = ""
    directive_line: int = 0
    line_num: int = 0
    body: List[str] = field(default_factory=list)
    result: List[str] = field(default_factory=list)

    def build(self) -> Record:
        return Record(
            record_type=self.record_type,
            expect_error=self.expect_error,
            conditions=tuple(self.conditions),
            schema_tags=self.schema_tags,
            sort_mode=self.sort_mode,
            query="".join(self.body),
            line_num=self.line_num,
            directive_line=self.directive_line,
            result=tuple(self.result),
            label=self.label,
            hash_threshold=self.hash_threshold,
        )


_Handler = Callable[[_RecordBuilder, List[str], int], _State]


class RecordParser:
    """
    Stateful record reader over a LineScanner.

    The running hash threshold is the only state kept between records.
    """

    def __init__(self, scanner: LineScanner) -> None:
        self._scanner = scanner
        self.hash_threshold = DEFAULT_HASH_THRESHOLD
        self._directives: Dict[str, _Handler] = {
            HALT: self._on_halt,
            SKIPIF: self._on_condition,
            ONLYIF: self._on_condition,
            HASH_THRESHOLD: self._on_hash_threshold,
            STATEMENT: self._on_statement,
            QUERY: self._on_query,
        }

    def __iter__(self) -> Iterator[Record]:
        while True:
            try:
                record = self.parse_record()
            except EndOfInput:
                return
            if record is not None:
                yield record

    def parse_record(self) -> Optional[Record]:
        """
        Parse the next record.

        Returns None after consuming a directive that yields no record and
        raises EndOfInput when the script has no more records.
        """
        scanner = self._scanner
        builder = _RecordBuilder(hash_threshold=self.hash_threshold)
        state = _State.START

        while scanner.scan():
            line = scanner.text()
            if is_comment_line(line):
                continue

            blank = is_blank(line)
            text = strip_comment(line)

            if state is _State.START:
                if blank:
                    continue
                fields = text.split()
                handler = self._directives.get(fields[0])
                if handler is None:
                    raise ParseError(
                        scanner.line_num, f"Unhandled statement {fields[0]}", token=fields[0]
                    )
                state = handler(builder, fields, scanner.line_num)
                if state is _State.EMIT:
                    return builder.build()
                if state is _State.CONSUMED:
                    return None

            elif state is _State.STATEMENT:
                if blank:
                    return self._finish(builder, state)
                if not builder.line_num:
                    builder.line_num = scanner.line_num
                builder.body.append(text)

            elif state is _State.QUERY:
                if blank:
                    return self._finish(builder, state)
                if text.strip() == SEPARATOR:
                    if not builder.body:
                        raise ParseError(scanner.line_num, "Query has no SQL text before separator")
                    state = _State.RESULTS
                    continue
                if not builder.line_num:
                    builder.line_num = scanner.line_num
                builder.body.append(text)

            elif state is _State.RESULTS:
                if blank:
                    return builder.build()
                builder.result.append(text)

        if state is _State.START:
            if builder.conditions:
                log.debug(
                    "Dropping conditions with no record at end of input",
                    extra={"line": scanner.line_num},
                )
            raise EndOfInput
        return self._finish(builder, state)

    def _finish(self, builder: _RecordBuilder, state: _State) -> Record:
        if state in (_State.STATEMENT, _State.QUERY) and not builder.body:
            raise ParseError(
                builder.directive_line, f"{builder.record_type.value.capitalize()} has no SQL text"
            )
        return builder.build()

    def _on_halt(self, builder: _RecordBuilder, fields: List[str], line_num: int) -> _State:
        builder.record_type = RecordType.HALT
        builder.line_num = line_num
        builder.directive_line = line_num
        return _State.EMIT

    def _on_condition(self, builder: _RecordBuilder, fields: List[str], line_num: int) -> _State:
        if len(fields) < 2:
            raise ParseError(line_num, f"{fields[0]} requires an engine name", token=fields[0])
        builder.conditions.append(
            Condition(is_only=fields[0] == ONLYIF, is_skip=fields[0] == SKIPIF, engine=fields[1])
        )
        return _State.START

    def _on_hash_threshold(
        self, builder: _RecordBuilder, fields: List[str], line_num: int
    ) -> _State:
        if len(fields) < 2:
            raise ParseError(line_num, "hash-threshold requires a value", token=fields[0])
        try:
            threshold = int(fields[1])
        except ValueError:
            raise ParseError(
                line_num, f"Invalid hash-threshold {fields[1]}", token=fields[1]
            ) from None
        if threshold < 0:
            raise ParseError(line_num, f"Invalid hash-threshold {fields[1]}", token=fields[1])
        self.hash_threshold = threshold
        return _State.CONSUMED

    def _on_statement(self, builder: _RecordBuilder, fields: List[str], line_num: int) -> _State:
        token = fields[1] if len(fields) > 1 else ""
        if token not in ("ok", "error"):
            raise ParseError(line_num, f"unexpected token {token!r}", token=token)
        builder.record_type = RecordType.STATEMENT
        builder.expect_error = token == "error"
        builder.directive_line = line_num
        return _State.STATEMENT

    def _on_query(self, builder: _RecordBuilder, fields: List[str], line_num: int) -> _State:
        if len(fields) < 2:
            raise ParseError(line_num, "query requires a result schema", token=fields[0])
        builder.record_type = RecordType.QUERY
        builder.schema_tags = fields[1]
        if len(fields) > 2:
            try:
                builder.sort_mode = SortMode(fields[2])
            except ValueError:
                raise ParseError(
                    line_num, f"Unrecognized sort mode {fields[2]}", token=fields[2]
                ) from None
        if len(fields) > 3:
            builder.label = fields[3]
        builder.directive_line = line_num
        return _State.QUERY


def parse_lines(lines: Iterable[str]) -> List[Record]:
    """Parse every record from an iterable of lines."""
    return list(RecordParser(LineScanner(lines)))


def parse_test_file(path: Path | str) -> List[Record]:
    """
    Parse a sqllogictest file and return the records it contains.

    Raises
    ------
    ParseError
        If any directive in the file is malformed.
    """
    with LineScanner.from_path(path) as scanner:
        return list(RecordParser(scanner))


__all__ = [
    "DEFAULT_HASH_THRESHOLD",
    "EndOfInput",
    "ParseError",
    "RecordParser",
    "SEPARATOR",
    "is_blank",
    "is_comment_line",
    "parse_lines",
    "parse_test_file",
    "strip_comment",
]
