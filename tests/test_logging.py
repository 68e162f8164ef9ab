"""Tests for logging utilities and diagnostic events."""

import logging
from io import StringIO

import numpy as np
import pytest

from jointcast.logging import (
    DiagnosticEvent,
    EventRecorder,
    configure_logging,
    emit,
    get_logger,
    log_event,
    set_log_level,
)
from jointcast.timeseries import ARX


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    configure_logging(level=logging.WARNING)


def test_get_logger_returns_logger():
    """Test that get_logger returns a logger instance."""
    logger = get_logger("test_module")
    assert isinstance(logger, logging.Logger)
    assert logger.name.startswith("jointcast.")


def test_get_logger_keeps_package_names():
    assert get_logger("jointcast.timeseries.arx").name == "jointcast.timeseries.arx"
    assert get_logger().name == "jointcast"


def test_get_logger_caching():
    """Test that get_logger caches loggers."""
    logger1 = get_logger("test_module")
    logger2 = get_logger("test_module")
    assert logger1 is logger2


def test_get_logger_different_modules():
    """Test that different modules get different loggers."""
    logger1 = get_logger("module1")
    logger2 = get_logger("module2")
    assert logger1 is not logger2
    assert logger1.name != logger2.name


def test_set_log_level():
    """Test that set_log_level updates logger levels."""
    logger = get_logger("test_module")

    set_log_level(logging.INFO)
    assert logger.level == logging.INFO

    set_log_level(logging.WARNING)
    assert logger.level == logging.WARNING


def test_set_log_level_string():
    """Test that set_log_level accepts string levels."""
    logger = get_logger("test_module")

    set_log_level("DEBUG")
    assert logger.level == logging.DEBUG

    set_log_level("ERROR")
    assert logger.level == logging.ERROR


def test_configure_logging():
    """Test configure_logging function."""
    logger = get_logger("test_module")
    stream = StringIO()
    configure_logging(level=logging.DEBUG, stream=stream)

    logger.debug("Debug message")

    output = stream.getvalue()
    assert "Debug message" in output
    assert "jointcast.test_module" in output


def test_logger_does_not_propagate():
    """Test that loggers don't propagate to root logger."""
    logger = get_logger("test_module")
    assert logger.propagate is False


class TestEvents:
    def test_recorder_collects(self):
        recorder = EventRecorder()
        emit(recorder, DiagnosticEvent("a", "first"))
        emit(recorder, DiagnosticEvent("b", "second", data={"x": 1}))
        emit(recorder, DiagnosticEvent("a", "third"))
        assert recorder.kinds() == ["a", "b", "a"]
        assert [e.message for e in recorder.of_kind("a")] == ["first", "third"]
        assert recorder.of_kind("b")[0].data == {"x": 1}

    def test_default_listener_logs(self):
        get_logger("jointcast.events")
        stream = StringIO()
        configure_logging(level=logging.DEBUG, stream=stream)
        emit(None, DiagnosticEvent("regularization", "ridge added", level=logging.DEBUG))
        assert "regularization: ridge added" in stream.getvalue()

    def test_log_event_respects_level(self):
        get_logger("jointcast.events")
        stream = StringIO()
        configure_logging(level=logging.WARNING, stream=stream)
        log_event(DiagnosticEvent("regularization", "quiet", level=logging.DEBUG))
        log_event(DiagnosticEvent("stability_correction", "loud", level=logging.WARNING))
        output = stream.getvalue()
        assert "quiet" not in output
        assert "[WARNING] jointcast.events: stability_correction: loud" in output

    def test_events_are_frozen(self):
        event = DiagnosticEvent("a", "b")
        with pytest.raises(AttributeError):
            event.kind = "c"

    def test_model_fit_routes_to_listener(self):
        recorder = EventRecorder()
        ARX(order=2, listener=recorder).fit(np.arange(1.0, 11.0), np.zeros((10, 1)))
        assert "stability_correction" in recorder.kinds()
        event = recorder.of_kind("stability_correction")[0]
        assert event.level == logging.WARNING
