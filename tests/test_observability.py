from __future__ import annotations

import json
import logging
import sys
from typing import Any

import pytest

from taskmanager.observability import (
    ConsoleLogFormatter,
    JsonLogFormatter,
    Metrics,
    get_json_logger,
    get_request_context,
    use_request_context,
)


def _parse_json_lines(output: str) -> list[dict[str, Any]]:
    return [json.loads(line) for line in output.strip().splitlines() if line.strip()]


def _record(msg: str, **extra: Any) -> logging.LogRecord:
    record = logging.LogRecord("taskmanager.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_logger_redacts_and_formats(capsys: Any, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_FORMAT", "json")
    logger = get_json_logger("obs-test-json")
    logger.setLevel(logging.INFO)
    logger.info(
        "hello",
        extra={
            "event": "task_created",
            "task_id": 3,
            "attributes": {"Authorization": "Bearer x", "token": "XYZ", "safe": "ok"},
        },
    )

    lines = _parse_json_lines(capsys.readouterr().out)
    assert len(lines) == 1
    rec = lines[0]
    assert rec["msg"] == "hello"
    assert rec["level"] == "info"
    assert rec["service"] == "taskmanager"
    assert rec["event"] == "task_created"
    assert rec["task_id"] == 3
    assert rec["attributes"]["safe"] == "ok"
    assert rec["attributes"]["Authorization"] == "[REDACTED]"
    assert rec["attributes"]["token"] == "[REDACTED]"


def test_json_formatter_merges_request_context() -> None:
    formatter = JsonLogFormatter()
    with use_request_context("req-1", "GET", "/tasks"):
        inside = json.loads(formatter.format(_record("in request")))
    outside = json.loads(formatter.format(_record("after")))

    assert inside["request_id"] == "req-1"
    assert inside["method"] == "GET"
    assert inside["path"] == "/tasks"
    assert "request_id" not in outside
    assert get_request_context() is None


def test_json_formatter_includes_error_fields() -> None:
    formatter = JsonLogFormatter()
    try:
        raise RuntimeError("kaput")
    except RuntimeError:
        record = _record("failed")
        record.exc_info = sys.exc_info()

    payload = json.loads(formatter.format(record))
    assert payload["err_type"] == "RuntimeError"
    assert payload["err"] == "kaput"
    assert "Traceback" in payload["stack"]


def test_console_formatter_summarizes_requests() -> None:
    formatter = ConsoleLogFormatter()
    line = formatter.format(
        _record(
            "request handled",
            event="http_request",
            request_id="abcdef0123456789",
            method="GET",
            path="/tasks",
            status=200,
        )
    )
    assert "http_request" in line
    assert "req=abcdef01" in line
    assert "GET /tasks 200" in line
    assert line.endswith("- request handled")


def test_module_level_overrides(capsys: Any, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_FORMAT", "json")
    monkeypatch.setenv("LOG_LEVEL", "info")
    monkeypatch.setenv("LOG_MODULE_LEVELS", "obs-quiet=error")
    logger = get_json_logger("obs-quiet.child")
    logger.warning("hidden")
    logger.error("shown")

    lines = _parse_json_lines(capsys.readouterr().out)
    assert [line["msg"] for line in lines] == ["shown"]


def test_metrics_counters_increment_and_snapshot() -> None:
    metrics = Metrics()
    metrics.increment("http_requests", {"method": "GET", "status": "200"}, 2)
    metrics.increment("http_requests", {"status": "200", "method": "GET"})

    assert metrics.value("http_requests", {"method": "GET", "status": "200"}) == 3
    assert metrics.value("http_requests", {"method": "POST", "status": "201"}) == 0
    snap = metrics.snapshot()
    entry = next(e for e in snap if e["name"] == "http_requests")
    assert entry["labels"] == {"method": "GET", "status": "200"}
    assert entry["value"] == 3
