"""
Runner for sqllogictest files: executes records against a harness, verifies
results and persists a per-file summary.

Usage (example from CLI):
    from logictest.runner import RunConfig, run_test_files

    results = run_test_files(RunConfig(paths=["test/select1.test"], harness_name="sqlite"))
    print(results)

Every statement and query record logs exactly one line, `ok`, `not ok: <reason>`
or `skipped`, prefixed with the file, the record's canonical line and its SQL.
Outputs are saved to `results/` by default:
- `results/latest.json` (last run)
- `results/run-<timestamp>.json` (timestamped archive)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, TypedDict

from logictest.config import get_settings
from logictest.domain.models import Record, RecordType
from logictest.harness.abstract import ExecutionError, Harness
from logictest.harness.postgres import PostgresHarness
from logictest.harness.sqlite import SqliteHarness
from logictest.parser.parser import ParseError, parse_test_file
from logictest.utils.logging import get_logger
from logictest.utils.profiler import profile_block
from logictest.verifier import resolve_schema, verify

log = get_logger(__name__)


class Status(Enum):
    OK = "ok"
    NOT_OK = "not ok"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class RecordOutcome:
    """
    Outcome of one statement or query record.

    `schema` and `values` hold what the engine returned for a query that ran;
    `schema` stays None when the record was skipped or the query failed.
    """

    status: Status
    record: Record
    reason: str = ""
    schema: Optional[str] = None
    values: List[str] = field(default_factory=list)


class FileResult(TypedDict, total=False):
    """Per-file tally persisted to JSON and rendered by the reporter."""

    path: str
    records: int
    passed: int
    failed: int
    skipped: int
    halted: bool
    duration_seconds: float
    error: Optional[str]


@dataclass
class RunConfig:
    """
    Parameters for `run_test_files`.

    paths : test files, or directories searched recursively for `*.test`.
    harness_name : registry key; defaults to settings.harness.
    results_dir : where JSON summaries go; defaults to settings.results_dir.
    persist : whether to write the summaries at all.
    """

    paths: Sequence[Path | str]
    harness_name: Optional[str] = None
    results_dir: Optional[Path | str] = None
    persist: bool = True


def _harness_factories() -> Dict[str, Callable[[], Harness]]:
    """Registry of available harnesses."""
    return {
        "sqlite": lambda: SqliteHarness(),
        "postgresql": lambda: PostgresHarness(),
    }


def available_harnesses() -> List[str]:
    """List available harness names."""
    return sorted(_harness_factories().keys())


def resolve_harness(name: str) -> Harness:
    factories = _harness_factories()
    if name not in factories:
        raise ValueError(f"Unknown harness '{name}'. Available: {', '.join(factories)}")
    return factories[name]()


def collect_test_files(paths: Iterable[Path | str]) -> List[Path]:
    """
    Return the test files at `paths`. Files are taken as given; directories are
    walked for files named `*.test`.
    """
    test_files: List[Path] = []
    for arg in paths:
        path = Path(arg)
        if not path.exists():
            raise FileNotFoundError(f"No such test file or directory: {arg}")
        if path.is_dir():
            test_files.extend(p for p in sorted(path.rglob("*.test")) if p.is_file())
        else:
            test_files.append(path)
    return test_files


def display_path(path: Path | str) -> str:
    """
    Shorten a test file path for log lines: at most the last four elements,
    stopping below a `test` directory (the root of the sqllogictest corpus).
    """
    p = Path(path)
    elements: List[str] = []
    for part in reversed(p.parts):
        if len(elements) >= 4 or part == "test" or part == p.anchor:
            break
        elements.insert(0, part)
    return "/".join(elements)


def _log_outcome(outcome: RecordOutcome, test_file: Path | str) -> None:
    record = outcome.record
    query = record.describe(truncate=get_settings().truncate_queries)
    prefix = f"{display_path(test_file)}:{record.line_num}: {query}"
    extra = {
        "file": str(test_file),
        "line": record.line_num,
        "status": outcome.status.value,
    }
    if outcome.status is Status.NOT_OK:
        # keep entries on one line
        reason = outcome.reason.replace("\n", " ")
        log.error(f"{prefix} not ok: {reason}", extra=extra)
    else:
        log.info(f"{prefix} {outcome.status.value}", extra=extra)


def _execute(harness: Harness, record: Record) -> RecordOutcome:
    if record.record_type is RecordType.STATEMENT:
        try:
            harness.execute_statement(record.query)
        except ExecutionError as exc:
            if record.expect_error:
                return RecordOutcome(Status.OK, record)
            return RecordOutcome(Status.NOT_OK, record, f"Unexpected error {exc}")
        if record.expect_error:
            return RecordOutcome(Status.NOT_OK, record, "Expected error but didn't get one")
        return RecordOutcome(Status.OK, record)

    if record.record_type is RecordType.QUERY:
        try:
            schema, values = harness.execute_query(record.query)
        except ExecutionError as exc:
            return RecordOutcome(Status.NOT_OK, record, f"Unexpected error {exc}")
        verification = verify(record, schema, values)
        status = Status.OK if verification.passed else Status.NOT_OK
        return RecordOutcome(
            status, record, verification.message, resolve_schema(record, schema), list(values)
        )

    raise ValueError(f"Unrecognized record type {record.record_type}")


def execute_record(
    harness: Harness, record: Record, test_file: Path | str = ""
) -> Optional[RecordOutcome]:
    """
    Execute a single statement or query record and log its outcome.

    Halt records produce no outcome (None); the caller decides whether to stop.
    Any fault raised while executing or verifying the record is reported as a
    failure of this record only.
    """
    if record.record_type is RecordType.HALT:
        return None

    try:
        if record.should_execute_for_engine(harness.engine_str()):
            outcome = _execute(harness, record)
        else:
            outcome = RecordOutcome(Status.SKIPPED, record)
    except Exception as exc:  # noqa: BLE001 - one broken record must not abort the file
        log.debug("Record raised", exc_info=True, extra={"line": record.line_num})
        outcome = RecordOutcome(Status.NOT_OK, record, f"Caught exception: {exc}")

    _log_outcome(outcome, test_file)
    return outcome


def run_test_file(harness: Harness, path: Path | str) -> FileResult:
    """
    Parse and run one test file.

    A parse error abandons the file before any record runs. Records execute in
    file order until the end of the file or an eligible halt.
    """
    path = Path(path)
    result = FileResult(
        path=str(path), records=0, passed=0, failed=0, skipped=0, halted=False, error=None
    )

    with profile_block(path.name) as stats:
        try:
            records = parse_test_file(path)
            harness.init()
            engine = harness.engine_str()
        except ParseError as exc:
            log.error(f"[PARSE ERROR] {display_path(path)}: {exc}", extra={"file": str(path)})
            records = []
            result["error"] = str(exc)
        except UnicodeDecodeError as exc:
            log.error(f"[PARSE ERROR] {display_path(path)}: {exc}", extra={"file": str(path)})
            records = []
            result["error"] = f"Test file is not valid UTF-8: {exc}"
        except Exception as exc:  # noqa: BLE001 - a file that cannot start is recorded, run continues
            log.exception(f"[INIT FAILED] {display_path(path)}", extra={"file": str(path)})
            records = []
            result["error"] = f"Harness init failed: {exc}"

        for record in records:
            if record.record_type is RecordType.HALT:
                if record.should_execute_for_engine(engine):
                    log.info(
                        f"{display_path(path)}:{record.line_num}: halt",
                        extra={"file": str(path), "line": record.line_num},
                    )
                    result["halted"] = True
                    break
                continue

            outcome = execute_record(harness, record, path)
            result["records"] += 1
            if outcome.status is Status.OK:
                result["passed"] += 1
            elif outcome.status is Status.NOT_OK:
                result["failed"] += 1
            else:
                result["skipped"] += 1

    result["duration_seconds"] = round(stats.duration_seconds, 3)
    return result


def _persist_results(payload: dict, results_dir: Path) -> None:
    results_dir.mkdir(parents=True, exist_ok=True)
    latest_path = results_dir / "latest.json"
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    archive_path = results_dir / f"run-{timestamp}.json"

    with latest_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)
    with archive_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)

    log.info("Results persisted", extra={"latest": str(latest_path), "archive": str(archive_path)})


def run_test_files(config: RunConfig) -> List[FileResult]:
    """
    Run every test file found under `config.paths` against one harness.

    Returns
    -------
    List[FileResult]
        One tally per file, in the order the files were run.
    """
    settings = get_settings()
    harness_name = config.harness_name or settings.harness
    harness = resolve_harness(harness_name)
    test_files = collect_test_files(config.paths)

    log.info(
        f"[RUN START] {len(test_files)} file(s) on {harness_name}",
        extra={"harness": harness_name, "files": len(test_files)},
    )

    results: List[FileResult] = []
    try:
        for path in test_files:
            results.append(run_test_file(harness, path))
    finally:
        harness.close()

    payload = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "harness": harness_name,
        "files": results,
    }
    if config.persist:
        _persist_results(payload, Path(config.results_dir or settings.results_dir))

    log.info(
        f"[RUN COMPLETE] {sum(r['passed'] for r in results)} passed, "
        f"{sum(r['failed'] for r in results)} failed, "
        f"{sum(r['skipped'] for r in results)} skipped",
        extra={"harness": harness_name, "files": len(results)},
    )
    return results


__all__ = [
    "FileResult",
    "RecordOutcome",
    "RunConfig",
    "Status",
    "available_harnesses",
    "collect_test_files",
    "display_path",
    "execute_record",
    "resolve_harness",
    "run_test_file",
    "run_test_files",
]
