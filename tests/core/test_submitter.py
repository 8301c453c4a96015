from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from rollbar_client.config import ConfigurationError
from rollbar_client.environment import Environment
from rollbar_client.logging import JsonlEventLogger
from rollbar_client.submitter import Reporter
from rollbar_client.types import ACCEPTED_LOG_LEVELS, ReportingMethod, ReportValidationError


def _sent(beacon) -> list[dict[str, Any]]:
    return [json.loads(body) for _, body in beacon.calls]


@pytest.mark.parametrize("missing", ["access_token", "environment"])
def test_construction_requires_keys(missing: str, environment: Environment) -> None:
    options = {"access_token": "abc123", "environment": "test"}
    del options[missing]
    with pytest.raises(ConfigurationError, match=f'"{missing}" is required'):
        Reporter(options, environment=environment)


@pytest.mark.parametrize("level", ACCEPTED_LOG_LEVELS)
def test_every_level_delivers_once(level: str, environment: Environment, options: dict, beacon) -> None:
    reporter = Reporter(options, environment=environment)

    assert reporter.report(level, "test message") is ReportingMethod.BEACON
    assert len(beacon.calls) == 1


def test_invalid_level_raises_without_side_effects(
    environment: Environment, options: dict, beacon, request_fn, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.DEBUG, logger="rollbar_client")
    reporter = Reporter(options, environment=environment)

    with pytest.raises(ReportValidationError, match="critical, debug, error, info, warning"):
        reporter.report("magic", "test message")

    assert beacon.calls == []
    assert request_fn.calls == []
    assert len(reporter.error_history) == 0
    assert caplog.records == []


def test_bad_argument_types_raise(environment: Environment, options: dict) -> None:
    reporter = Reporter(options, environment=environment)
    with pytest.raises(TypeError):
        reporter.report("error", "t", "not an exception")  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        reporter.report("error", "t", ValueError("x"), {}, {"type": "TEST"})  # type: ignore[arg-type]


def test_duplicates_deliver_once(
    environment: Environment, options: dict, beacon, request_fn, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="rollbar_client")
    reporter = Reporter(options, environment=environment)
    duplicate_count = 6

    results = [
        reporter.report("error", "test message", ValueError("test error"), {"a": 1}, [{"type": "X"}])
        for _ in range(duplicate_count + 1)
    ]

    assert results[0] is ReportingMethod.BEACON
    assert results[1:] == [None] * duplicate_count
    assert len(beacon.calls) == 1
    assert request_fn.calls == []
    skips = [r for r in caplog.records if "Skipping duplicate error" in r.getMessage()]
    assert len(skips) == duplicate_count


def test_state_with_mixed_key_types_is_delivered(environment: Environment, options: dict, beacon) -> None:
    reporter = Reporter(options, environment=environment)

    assert reporter.report("error", "t", None, {1: "a", "b": 2}) is ReportingMethod.BEACON
    assert reporter.report("error", "t", None, {1: "a", "b": 2}) is None
    assert len(beacon.calls) == 1


def test_duplicate_is_not_echoed(environment: Environment, options: dict, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="rollbar_client")
    reporter = Reporter(options, environment=environment)

    reporter.report("warning", "same")
    reporter.report("warning", "same")

    echoes = [r for r in caplog.records if r.getMessage().startswith("[ROLLBAR WARNING]")]
    assert len(echoes) == 1


def test_not_verbose_is_silent(environment: Environment, options: dict, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="rollbar_client")
    reporter = Reporter({**options, "is_verbose": False}, environment=environment)

    for level in ACCEPTED_LOG_LEVELS:
        reporter.report(level, "test message", ValueError("test error"))

    assert caplog.records == []


def test_scenario_minimal_config(environment: Environment, beacon) -> None:
    reporter = Reporter({"access_token": "abc123", "environment": "test"}, environment=environment)

    reporter.report("error", "test message")

    data = _sent(beacon)[0]["data"]
    assert data["body"] == {"message": {"body": "test message"}}
    assert data["fingerprint"] == "test message"
    assert data["title"] == "test message"
    assert data["context"] == environment.location


def test_scenario_type_error(environment: Environment, options: dict, beacon) -> None:
    reporter = Reporter(options, environment=environment)

    reporter.report("error", "msg", TypeError("boom"))

    exception = _sent(beacon)[0]["data"]["body"]["trace"]["exception"]
    assert exception["class"] == "TypeError"
    assert exception["message"] == "boom"


def test_veto_stops_delivery(
    environment: Environment, options: dict, beacon, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="rollbar_client")
    seen: list[tuple[dict, Any]] = []

    def should_ignore(payload: dict, config: Any) -> bool:
        seen.append((payload, config))
        return payload["data"]["level"] == "debug"

    reporter = Reporter({**options, "should_ignore_occurrence": should_ignore}, environment=environment)

    assert reporter.report("debug", "noise") is None
    assert reporter.report("error", "signal") is ReportingMethod.BEACON

    assert len(beacon.calls) == 1
    assert seen[0][1] is reporter.configuration
    assert any("Ignoring occurrence" in r.getMessage() for r in caplog.records)


def test_transform_edits_data_before_send(environment: Environment, options: dict, beacon) -> None:
    def transform(data: dict, config: Any) -> None:
        data["person"] = {"id": "redacted"}
        data["custom"]["release"] = config.environment

    reporter = Reporter({**options, "transform": transform}, environment=environment)
    reporter.report("error", "t")

    data = _sent(beacon)[0]["data"]
    assert data["person"] == {"id": "redacted"}
    assert data["custom"]["release"] == "test"


def test_fallback_marks_payload_and_warns_once(
    environment: Environment, options: dict, beacon, request_fn, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.WARNING, logger="rollbar_client")
    beacon.result = False
    reporter = Reporter({**options, "is_verbose": False}, environment=environment)

    assert reporter.report("error", "t") is ReportingMethod.FETCH

    assert len(request_fn.calls) == 1
    assert json.loads(request_fn.calls[0][1])["data"]["custom"]["reportingMethod"] == "fetch"
    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 1


def test_event_logger_records_outcomes(environment: Environment, options: dict, beacon, tmp_path: Path) -> None:
    beacon.result = False
    journal = JsonlEventLogger(path=tmp_path / "events.jsonl")
    reporter = Reporter(
        {**options, "is_verbose": False, "should_ignore_occurrence": lambda p, c: p["data"]["title"] == "veto"},
        environment=environment,
        event_logger=journal,
    )

    reporter.report("error", "first")
    reporter.report("error", "first")
    reporter.report("error", "veto")

    events = [json.loads(line)["event"] for line in journal.path.read_text(encoding="utf-8").splitlines()]
    assert events == ["transport_fallback", "occurrence_sent", "occurrence_skipped", "occurrence_ignored"]
