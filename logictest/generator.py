"""
Regenerate test files from the results an engine actually produces.

Each file is executed record by record and written to `<file>.generated`. Lines
are copied verbatim, except that every eligible query that ran has its
directive rewritten with the observed schema and its result block replaced by
the observed values (sorted per the record's sort mode), or by a
"<N> values hashing to <md5>" line once N exceeds the record's hash threshold.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from logictest.domain.models import Record, RecordType
from logictest.harness.abstract import Harness
from logictest.parser.line_source import LineScanner
from logictest.parser.parser import SEPARATOR, is_blank, parse_test_file, strip_comment
from logictest.runner import RecordOutcome, collect_test_files, display_path, execute_record
from logictest.utils.logging import get_logger
from logictest.verifier import hash_results, sort_results

log = get_logger(__name__)

GENERATED_SUFFIX = ".generated"


def _query_header(record: Record, schema: str) -> str:
    label = f" {record.label}" if record.label else ""
    return f"query {schema} {record.sort_string()}{label}"


def _result_lines(record: Record, outcome: RecordOutcome) -> List[str]:
    observed = record.model_copy(update={"schema_tags": outcome.schema})
    values = sort_results(observed, outcome.values)
    if len(values) > record.hash_threshold:
        return [f"{len(values)} values hashing to {hash_results(values)}"]
    return values


def _is_separator(line: str) -> bool:
    return strip_comment(line).strip() == SEPARATOR


def generate_test_file(harness: Harness, path: Path | str) -> Path:
    """
    Run `path` against `harness` and write the regenerated copy next to it.

    Returns
    -------
    Path
        The `.generated` file written.
    """
    path = Path(path)
    records = parse_test_file(path)
    # same line splitting as the parser, so directive_line indexes match
    with LineScanner.from_path(path) as scanner:
        lines = list(scanner)
    harness.init()

    engine = harness.engine_str()
    out: List[str] = []
    cursor = 0  # index of the first source line not yet copied

    for record in records:
        if record.record_type is RecordType.HALT:
            if record.should_execute_for_engine(engine):
                break
            continue

        outcome = execute_record(harness, record, path)
        if record.record_type is not RecordType.QUERY or outcome.schema is None:
            continue

        try:
            results = _result_lines(record, outcome)
        except ValueError as exc:
            log.warning(
                f"{display_path(path)}:{record.line_num}: keeping original results: {exc}",
                extra={"file": str(path), "line": record.line_num},
            )
            continue

        directive = record.directive_line - 1
        out.extend(lines[cursor:directive])
        out.append(_query_header(record, outcome.schema))

        i = directive + 1
        while i < len(lines) and not is_blank(lines[i]) and not _is_separator(lines[i]):
            out.append(lines[i])
            i += 1
        if i < len(lines) and _is_separator(lines[i]):
            i += 1
            while i < len(lines) and not is_blank(lines[i]):
                i += 1

        out.append(SEPARATOR)
        out.extend(results)
        cursor = i

    out.extend(lines[cursor:])

    target = path.with_name(path.name + GENERATED_SUFFIX)
    target.write_text("\n".join(out) + "\n", encoding="utf-8")
    log.info(f"Generated {display_path(target)}", extra={"file": str(target)})
    return target


def generate_test_files(harness: Harness, paths: Iterable[Path | str]) -> List[Path]:
    """Regenerate every test file found under `paths`."""
    try:
        return [generate_test_file(harness, path) for path in collect_test_files(paths)]
    finally:
        harness.close()


__all__ = ["GENERATED_SUFFIX", "generate_test_file", "generate_test_files"]
