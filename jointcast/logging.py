"""Logging utilities for jointcast.

Provides cached module loggers and a small diagnostic-event layer. The
numerical core never writes to a stream itself: it emits
:class:`DiagnosticEvent` objects to a listener, and the default listener
forwards them to the ``jointcast.events`` logger.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

# Default logging level
_DEFAULT_LEVEL = logging.WARNING

_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

# Module-level logger cache
_loggers: dict[str, logging.Logger] = {}


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get or create a logger for the given module name.

    Loggers are cached to avoid duplicate handlers. The logger name should
    typically be `__name__` from the calling module.

    Args:
        name: Logger name (typically `__name__`). If None, returns the
            package logger.

    Returns:
        Configured logger instance.

    Example:
        >>> from jointcast.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Fitting ARX(2) on Hips_Xrotation")
    """
    if name is None:
        name = "jointcast"

    logger_name = name if name == "jointcast" or name.startswith("jointcast.") else f"jointcast.{name}"

    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)

    # Only configure if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def _coerce_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def set_log_level(level: int | str) -> None:
    """Set the logging level for all jointcast loggers.

    Args:
        level: Logging level (logging.DEBUG, logging.INFO, etc.) or string
            ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL').
    """
    global _DEFAULT_LEVEL
    level = _coerce_level(level)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    _DEFAULT_LEVEL = level


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[object] = None,
) -> None:
    """Configure logging for jointcast.

    Replaces the handlers of every cached logger. It should typically be
    called once at application startup.

    Args:
        level: Logging level (default: WARNING).
        format_string: Custom format string. If None, uses default.
        stream: Output stream (default: sys.stderr).
    """
    global _DEFAULT_LEVEL
    level = _coerce_level(level)
    if stream is None:
        stream = sys.stderr
    formatter = logging.Formatter(format_string or _FORMAT)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    _DEFAULT_LEVEL = level


@dataclass(frozen=True)
class DiagnosticEvent:
    """A discrete event raised by the numerical core.

    Attributes:
        kind: Machine-readable event name, e.g. ``"stability_correction"``.
        message: Human-readable description.
        level: Logging level the default listener uses.
        data: Structured payload (coefficient sums, column indices, ...).
    """

    kind: str
    message: str
    level: int = logging.DEBUG
    data: dict[str, Any] = field(default_factory=dict)


EventListener = Callable[[DiagnosticEvent], None]


def log_event(event: DiagnosticEvent) -> None:
    """Default listener: forward the event to the ``jointcast.events`` logger."""
    get_logger("jointcast.events").log(event.level, "%s: %s", event.kind, event.message)


def emit(listener: Optional[EventListener], event: DiagnosticEvent) -> None:
    """Deliver ``event`` to ``listener``, or to :func:`log_event` if None."""
    (listener or log_event)(event)


class EventRecorder:
    """Listener that keeps every event it receives.

    Example:
        >>> recorder = EventRecorder()
        >>> ARX(order=2, listener=recorder).fit(endog, exog)  # doctest: +SKIP
        >>> recorder.kinds()
        ['regularization', 'stability_correction']
    """

    def __init__(self) -> None:
        self.events: list[DiagnosticEvent] = []

    def __call__(self, event: DiagnosticEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [event.kind for event in self.events]

    def of_kind(self, kind: str) -> list[DiagnosticEvent]:
        return [event for event in self.events if event.kind == kind]
