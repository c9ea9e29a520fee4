"""Structured logging for dash-record: structlog events routed through stdlib logging."""

from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass
from typing import IO, Final

import structlog
from structlog.typing import Processor

from dash_record.constants import LOG_FORMATS, PACKAGE_LOGGER_NAME

_DEFAULT_LEVEL: Final[str] = "WARNING"

# Applied by every dash-record logger before the record reaches a stdlib handler.
_SHARED_PROCESSORS: Final[tuple[Processor, ...]] = (
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
)

_ACTIVE_HANDLE_LOCK = threading.Lock()
_ACTIVE_HANDLE: LoggingHandle | None = None

logging.getLogger(PACKAGE_LOGGER_NAME).addHandler(logging.NullHandler())


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Configuration for the package log handler."""

    level: int | str = _DEFAULT_LEVEL
    fmt: str = "kv"
    stream: IO[str] | None = None
    logger_name: str = PACKAGE_LOGGER_NAME


class LoggingHandle:
    """Runtime handle for an installed package log handler."""

    def __init__(
        self,
        *,
        logger: logging.Logger,
        handler: logging.Handler,
        previous_level: int,
        previous_propagate: bool,
    ) -> None:
        self.logger = logger
        self.handler = handler
        self._previous_level = previous_level
        self._previous_propagate = previous_propagate
        self._is_shutdown = False

    @property
    def is_shutdown(self) -> bool:
        return self._is_shutdown

    def shutdown(self) -> None:
        if self._is_shutdown:
            return
        self.handler.flush()
        self.logger.removeHandler(self.handler)
        self.handler.close()
        self.logger.setLevel(self._previous_level)
        self.logger.propagate = self._previous_propagate
        self._is_shutdown = True


def get_logger(name: str = PACKAGE_LOGGER_NAME) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to the stdlib logger ``name``.

    Events stay silent unless the host application (or ``setup_logging``) enables
    the ``dash_record`` logger hierarchy.
    """

    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=list(_SHARED_PROCESSORS),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def setup_logging(
    level: int | str = _DEFAULT_LEVEL,
    *,
    fmt: str = "kv",
    stream: IO[str] | None = None,
) -> LoggingHandle:
    """Install one handler on the package logger, replacing any previous one."""

    return setup_structured_logging(LoggingConfig(level=level, fmt=fmt, stream=stream))


def setup_structured_logging(config: LoggingConfig) -> LoggingHandle:
    level = _parse_log_level(config.level)
    renderer = _renderer_for(config.fmt)

    shutdown_logging()

    handler = logging.StreamHandler(config.stream if config.stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    logger = logging.getLogger(config.logger_name)
    handle = LoggingHandle(
        logger=logger,
        handler=handler,
        previous_level=logger.level,
        previous_propagate=logger.propagate,
    )
    logger.setLevel(level)
    logger.propagate = False
    logger.addHandler(handler)

    with _ACTIVE_HANDLE_LOCK:
        global _ACTIVE_HANDLE
        _ACTIVE_HANDLE = handle
    return handle


def shutdown_logging(handle: LoggingHandle | None = None) -> None:
    """Remove the installed handler and restore the logger's previous state."""

    global _ACTIVE_HANDLE
    with _ACTIVE_HANDLE_LOCK:
        resolved = handle if handle is not None else _ACTIVE_HANDLE
        if resolved is None:
            return
        if _ACTIVE_HANDLE is resolved:
            _ACTIVE_HANDLE = None
    resolved.shutdown()


def get_active_logging_handle() -> LoggingHandle | None:
    """Return the currently active handle, if one exists."""
    with _ACTIVE_HANDLE_LOCK:
        return _ACTIVE_HANDLE


def _renderer_for(fmt: str) -> Processor:
    if fmt == "json":
        return structlog.processors.JSONRenderer(sort_keys=True)
    if fmt == "kv":
        return structlog.processors.KeyValueRenderer(
            key_order=["level", "event", "logger"], sort_keys=True
        )
    raise ValueError(f"unsupported log format {fmt!r}; expected one of {list(LOG_FORMATS)}")


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, bool):
        raise ValueError("level must be int or str, got bool")
    if isinstance(value, int):
        return value

    if not isinstance(value, str):
        raise ValueError(f"level must be int or str, got {type(value).__name__}")

    normalized = value.strip().upper()
    parsed = logging.getLevelName(normalized)
    if isinstance(parsed, int):
        return parsed

    raise ValueError(f"unsupported logging level {value!r}")


__all__ = [
    "LoggingConfig",
    "LoggingHandle",
    "get_active_logging_handle",
    "get_logger",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
