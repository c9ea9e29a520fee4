"""Public observability primitives: structlog-backed loggers and handler setup."""

from dash_record.observability.logging import (
    LoggingConfig,
    LoggingHandle,
    get_active_logging_handle,
    get_logger,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "LoggingHandle",
    "get_active_logging_handle",
    "get_logger",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
