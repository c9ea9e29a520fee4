"""
dash-record - unit tests for structured logging

File: tests/unit/observability/test_record_logging.py

Purpose
- Validate that record declarations and rejected writes emit structured events
  through the package logger, in both key-value and JSON renderings.

What this test file should cover
- Event names and fields for declarations, propagation, and rejections.
- Level filtering and handler install/remove lifecycle.

Non-functional requirements
- Every test removes the handler it installs.
"""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Iterator

import pytest

from dash_record import Property, Record
from dash_record.errors import (
    ConstraintViolationError,
    InvalidConstraintDeclarationError,
    UnknownPropertyError,
)
from dash_record.observability import (
    LoggingConfig,
    get_active_logging_handle,
    get_logger,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)


@pytest.fixture(autouse=True)
def _remove_installed_handler() -> Iterator[None]:
    shutdown_logging()
    yield
    shutdown_logging()


def _json_events(stream: io.StringIO) -> list[dict[str, object]]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


def test_declaration_events_render_as_key_values() -> None:
    stream = io.StringIO()
    setup_logging("DEBUG", stream=stream)

    class Audited(Record):
        amount = Property(default=0)

    output = stream.getvalue()
    assert "level='debug'" in output
    assert "event='property_declared'" in output
    assert "record_type='Audited'" in output
    assert "property='amount'" in output
    assert "logger='dash_record.record'" in output


def test_json_events_for_declaration_and_rejected_write() -> None:
    stream = io.StringIO()
    setup_logging("DEBUG", fmt="json", stream=stream)

    class Audited(Record):
        pass

    Audited.declare_property("amount", constraints={"type": int})
    with pytest.raises(ConstraintViolationError):
        Audited(amount="x")

    events = _json_events(stream)
    declared = [event for event in events if event["event"] == "property_declared"]
    rejected = [event for event in events if event["event"] == "record_write_rejected"]

    assert declared[0]["property"] == "amount"
    assert declared[0]["constrained"] is True
    assert declared[0]["has_default"] is False
    assert rejected[0]["reason"] == "constraint"
    assert rejected[0]["constraint_key"] == "type"
    assert rejected[0]["logger"] == "dash_record.record"


def test_propagation_and_resolution_events() -> None:
    stream = io.StringIO()
    setup_logging("DEBUG", fmt="json", stream=stream)

    class Parent(Record):
        pass

    class Child(Parent):
        pass

    Parent.declare_property("stamp", default=1)
    Child.register_constraint_builder("positive", lambda _: lambda value: value > 0)

    names = [event["event"] for event in _json_events(stream)]
    assert names.count("property_declared") == 2
    assert "property_propagated" in names
    assert "constraint_builder_registered" in names


def test_warning_level_filters_debug_events() -> None:
    stream = io.StringIO()
    setup_logging("WARNING", stream=stream)

    class Quiet(Record):
        value = Property()

    assert stream.getvalue() == ""

    with pytest.raises(InvalidConstraintDeclarationError):
        Quiet.declare_property("broken", constraints={"type": "Nope"})

    output = stream.getvalue()
    assert "event='constraint_declaration_rejected'" in output
    assert "constraint_key='type'" in output
    assert "level='warning'" in output


def test_unconfigured_package_logger_stays_silent(capsys: pytest.CaptureFixture[str]) -> None:
    class Silent(Record):
        pass

    with pytest.raises(InvalidConstraintDeclarationError):
        Silent.declare_property("broken", constraints={"type": "Nope"})

    captured = capsys.readouterr()
    assert "constraint_declaration_rejected" not in captured.err


def test_shutdown_restores_logger_state() -> None:
    logger = logging.getLogger("dash_record")
    before = (logger.level, logger.propagate)

    handle = setup_logging("DEBUG", stream=io.StringIO())
    assert get_active_logging_handle() is handle
    assert logger.propagate is False

    shutdown_logging()

    assert handle.is_shutdown
    assert get_active_logging_handle() is None
    assert (logger.level, logger.propagate) == before
    assert handle.handler not in logger.handlers


def test_setup_replaces_the_previous_handler() -> None:
    logger = logging.getLogger("dash_record")

    first = setup_logging("DEBUG", stream=io.StringIO())
    second = setup_structured_logging(LoggingConfig(level="INFO", stream=io.StringIO()))

    assert first.is_shutdown
    assert first.handler not in logger.handlers
    assert second.handler in logger.handlers
    assert logger.level == logging.INFO


@pytest.mark.parametrize(("level", "fmt"), [("LOUD", "kv"), ("INFO", "xml"), (True, "kv")])
def test_invalid_setup_arguments_keep_existing_handler(level: object, fmt: str) -> None:
    handle = setup_logging("DEBUG", stream=io.StringIO())

    with pytest.raises(ValueError):
        setup_logging(level, fmt=fmt)  # type: ignore[arg-type]

    assert get_active_logging_handle() is handle
    assert not handle.is_shutdown


def test_get_logger_binds_to_named_stdlib_logger() -> None:
    stream = io.StringIO()
    setup_logging("INFO", fmt="json", stream=stream)

    get_logger("dash_record.custom").info("custom_event", detail=1)

    (event,) = _json_events(stream)
    assert event == {
        "detail": 1,
        "event": "custom_event",
        "level": "info",
        "logger": "dash_record.custom",
    }


def test_unknown_name_rejections_name_the_operation() -> None:
    stream = io.StringIO()
    setup_logging("DEBUG", fmt="json", stream=stream)

    class Audited(Record):
        amount = Property()

    record = Audited()
    with pytest.raises(UnknownPropertyError):
        record.read("absent")
    with pytest.raises(UnknownPropertyError):
        record["absent"] = 1
    with pytest.raises(UnknownPropertyError):
        del record["absent"]

    events = _json_events(stream)
    rejected = [event for event in events if event["event"] == "record_access_rejected"]
    assert [event["operation"] for event in rejected] == ["read", "write", "delete"]
    assert all(event["reason"] == "unknown_property" for event in rejected)
    assert not [event for event in events if event["event"] == "record_write_rejected"]
