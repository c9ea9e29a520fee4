"""
dash-record config package public API.

File: src/dash_record/config/__init__.py

Purpose
- Export settings loading/validation entrypoints and the active-settings accessors.

Functional requirements
- Support loading from ``dash_record.toml`` or ``[tool.dash_record]`` plus
  ``DASH_RECORD_`` env overrides.
- Fail fast with clear load/validation errors.
"""

from dash_record.config.loader import configure, get_settings, load_settings, reset_settings
from dash_record.config.schema import (
    DEFAULT_SETTINGS,
    SETTING_TYPES,
    RecordSettings,
    validate_settings,
)
from dash_record.errors import ConfigLoadError

__all__ = [
    "ConfigLoadError",
    "DEFAULT_SETTINGS",
    "RecordSettings",
    "SETTING_TYPES",
    "configure",
    "get_settings",
    "load_settings",
    "reset_settings",
    "validate_settings",
]
