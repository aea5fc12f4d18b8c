from __future__ import annotations

import io
import json
import logging

import pytest

from logictest.utils.logging import JsonFormatter, _json_formatter, configure_logging, get_logger

EXPECTED_LINE = 14


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.line = EXPECTED_LINE
    record.status = "not ok"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["line"] == EXPECTED_LINE
    assert payload["status"] == "not ok"
    assert "lineno" not in payload
    assert payload["timestamp"].endswith("+00:00")


def test_json_formatter_keeps_attribute_named_extra_as_is() -> None:
    record = _record()
    record.extra = {"file": "select1.test"}

    payload = json.loads(_json_formatter(record))

    assert payload["extra"] == {"file": "select1.test"}
    assert "file" not in payload


def test_json_formatter_serializes_unknown_types() -> None:
    record = _record()
    record.path = logging  # any non-JSON object

    payload = json.loads(JsonFormatter().format(record))

    assert payload["path"] == str(logging)


def test_get_logger_namespaces_bare_names() -> None:
    assert get_logger("harness").name == "logictest.harness"
    assert get_logger("logictest.runner").name == "logictest.runner"
    assert get_logger().name == "root"


@pytest.mark.usefixtures("restore_root_logging")
def test_configure_logging_writes_json_lines_to_stream() -> None:
    stream = io.StringIO()
    configure_logging(level="INFO", json_logs=True, stream=stream)

    get_logger("runner").info("select1.test:3: SELECT 1 ok", extra={"status": "ok"})
    get_logger("runner").debug("hidden")

    (line,) = stream.getvalue().splitlines()
    payload = json.loads(line)
    assert payload["logger"] == "logictest.runner"
    assert payload["status"] == "ok"
    assert logging.getLogger("psycopg").level == logging.WARNING


@pytest.mark.usefixtures("restore_root_logging")
def test_configure_logging_without_force_keeps_existing_handlers() -> None:
    first, second = io.StringIO(), io.StringIO()
    configure_logging(stream=first)
    configure_logging(stream=second, force=False)

    get_logger("runner").info("kept")

    assert "kept" in first.getvalue()
    assert second.getvalue() == ""
