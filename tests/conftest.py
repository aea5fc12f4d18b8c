"""
Pytest configuration for logictest.

Provides fixtures for:
- Test script files (bundled testdata and ad-hoc scripts under tmp_path)
- A scripted in-process harness for run loop tests
- Database connection settings for PostgreSQL integration tests
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from textwrap import dedent
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import psycopg
import pytest

from logictest.config import Settings, get_settings
from logictest.harness.abstract import ExecutionError


class FakeHarness:
    """
    Harness with canned answers.

    `queries` maps query text to (schema, values); unknown queries and
    statements listed in `failing` raise ExecutionError; anything listed in
    `faults` raises RuntimeError, standing in for a crashing backend.
    """

    name = "fake"
    description = "Scripted in-memory harness for tests."

    def __init__(
        self,
        engine: str = "fake",
        queries: Optional[Dict[str, Tuple[str, List[str]]]] = None,
        failing: Iterable[str] = (),
        faults: Iterable[str] = (),
    ) -> None:
        self.engine = engine
        self.queries = dict(queries or {})
        self.failing = set(failing)
        self.faults = set(faults)
        self.executed: List[str] = []
        self.init_calls = 0
        self.closed = False

    def engine_str(self) -> str:
        return self.engine

    def init(self) -> None:
        self.init_calls += 1

    def execute_statement(self, statement: str) -> None:
        self.executed.append(statement)
        if statement in self.faults:
            raise RuntimeError(f"backend crashed on {statement}")
        if statement in self.failing:
            raise ExecutionError(f"rejected {statement}")

    def execute_query(self, query: str) -> Tuple[str, List[str]]:
        self.executed.append(query)
        if query in self.faults:
            raise RuntimeError(f"backend crashed on {query}")
        if query not in self.queries:
            raise ExecutionError(f"no such query {query}")
        schema, values = self.queries[query]
        return schema, list(values)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_harness() -> type[FakeHarness]:
    """The FakeHarness class, for tests to build with their own answers."""
    return FakeHarness


@pytest.fixture(scope="session")
def testdata_dir() -> Path:
    return Path(__file__).parent / "testdata"


@pytest.fixture
def write_script(tmp_path: Path) -> Callable[..., Path]:
    """
    Write a dedented test script under tmp_path and return its path.
    """

    def _write(text: str, name: str = "script.test") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(text).lstrip("\n"), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def restore_root_logging():
    """Undo configure_logging() calls made by a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    quiet = {name: logging.getLogger(name).level for name in ("psycopg", "tenacity")}
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, old in quiet.items():
        logging.getLogger(name).setLevel(old)


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Drop cached settings so monkeypatched env vars take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "sqllogictest"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except Exception:
        return False
