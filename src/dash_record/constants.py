"""Stable constants shared across dash-record modules."""

from __future__ import annotations

from typing import Final

# Logger and configuration names.
PACKAGE_LOGGER_NAME: Final[str] = "dash_record"
ENV_PREFIX: Final[str] = "DASH_RECORD_"
CONFIG_PATH_ENV: Final[str] = "DASH_RECORD_CONFIG"
DEFAULT_CONFIG_FILE: Final[str] = "dash_record.toml"
PYPROJECT_TOOL_TABLE: Final[tuple[str, ...]] = ("tool", "dash_record")

# Reserved keys inside a ``constraints`` mapping and declaration options.
TYPE_CONSTRAINT_KEY: Final[str] = "type"
CONSTRAINTS_OPTION_KEY: Final[str] = "constraints"
MESSAGE_OPTION_KEY: Final[str] = "message"

# Message templates for the error taxonomy.
UNKNOWN_PROPERTY_TEMPLATE: Final[str] = "The property '{name}' is not defined for {record_type}."
REQUIRED_PROPERTY_TEMPLATE: Final[str] = "The property '{name}' {message}"
DEFAULT_REQUIRED_MESSAGE_TEMPLATE: Final[str] = "is required for {record_type}."
CONSTRAINT_VIOLATION_TEMPLATE: Final[str] = (
    "The value '{value}:{value_type}' does not meet the constraints of the property "
    "'{name}' for {record_type}."
)
INVALID_CONSTRAINT_KEY_TEMPLATE: Final[str] = (
    "The constraint key '{key}' is invalid for '{name}' for {record_type}."
)

# How literal defaults are copied into new records.
DEFAULT_COPY_MODES: Final[tuple[str, ...]] = ("deep", "shallow", "none")
LOG_FORMATS: Final[tuple[str, ...]] = ("kv", "json")

__all__ = [
    "CONFIG_PATH_ENV",
    "CONSTRAINTS_OPTION_KEY",
    "CONSTRAINT_VIOLATION_TEMPLATE",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_COPY_MODES",
    "DEFAULT_REQUIRED_MESSAGE_TEMPLATE",
    "ENV_PREFIX",
    "INVALID_CONSTRAINT_KEY_TEMPLATE",
    "LOG_FORMATS",
    "MESSAGE_OPTION_KEY",
    "PACKAGE_LOGGER_NAME",
    "PYPROJECT_TOOL_TABLE",
    "REQUIRED_PROPERTY_TEMPLATE",
    "TYPE_CONSTRAINT_KEY",
    "UNKNOWN_PROPERTY_TEMPLATE",
]
