"""
logictest - a sqllogictest parser and runner.

This package reads sqllogictest scripts and verifies database engines against
them:

- Parsing scripts into immutable records (statements, queries, halts)
- Deciding which records apply to an engine (skipif / onlyif)
- Executing records through pluggable harnesses (sqlite, postgresql)
- Verifying results literally or by md5 hash, after rowsort / valuesort
- Regenerating expected results from an engine's observed output
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from logictest.config import Settings, get_settings
from logictest.domain.models import Condition, Record, RecordType, SortMode
from logictest.generator import generate_test_file, generate_test_files
from logictest.harness.abstract import AbstractHarness, ExecutionError, Harness
from logictest.parser.parser import ParseError, RecordParser, parse_test_file
from logictest.runner import (
    RunConfig,
    available_harnesses,
    execute_record,
    run_test_file,
    run_test_files,
)
from logictest.utils.logging import configure_logging, get_logger
from logictest.verifier import Outcome, Verification, verify

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Records
    "Condition",
    "Record",
    "RecordType",
    "SortMode",
    # Parsing
    "ParseError",
    "RecordParser",
    "parse_test_file",
    # Harness abstractions
    "AbstractHarness",
    "ExecutionError",
    "Harness",
    # Running
    "RunConfig",
    "available_harnesses",
    "execute_record",
    "run_test_file",
    "run_test_files",
    # Verification
    "Outcome",
    "Verification",
    "verify",
    # Regeneration
    "generate_test_file",
    "generate_test_files",
    # Logging
    "configure_logging",
    "get_logger",
]
