"""
dash-record - settings schema and validation.

File: src/dash_record/config/schema.py

Purpose
- Define authoritative settings defaults and strict validation rules.

What should be included in this file
- The frozen settings dataclass and its defaults.
- Validation of raw mappings (file payloads, env overrides) into settings.

Functional requirements
- Reject unknown keys and invalid types/values with the offending field named.

Non-functional requirements
- Keep rules deterministic and easy to audit.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields
from typing import Any, Final

from dash_record.constants import DEFAULT_COPY_MODES, LOG_FORMATS
from dash_record.errors import ConfigLoadError


@dataclass(frozen=True, slots=True)
class RecordSettings:
    """Process-wide knobs read at declaration and construction time."""

    log_level: str = "WARNING"
    log_format: str = "kv"
    deferred_cache: bool = True
    default_copy: str = "deep"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


DEFAULT_SETTINGS: Final[RecordSettings] = RecordSettings()
SETTING_TYPES: Final[dict[str, type]] = {
    item.name: (bool if item.name == "deferred_cache" else str) for item in fields(RecordSettings)
}


def validate_settings(
    payload: Mapping[str, object],
    *,
    base: RecordSettings = DEFAULT_SETTINGS,
) -> RecordSettings:
    """Validate ``payload`` and return ``base`` with the given fields applied."""

    if not isinstance(payload, Mapping):
        raise ConfigLoadError(f"settings: expected table, got {type(payload).__name__}")

    unknown = sorted(str(key) for key in payload if key not in SETTING_TYPES)
    if unknown:
        raise ConfigLoadError(
            f"settings: unknown keys {unknown}; allowed keys: {sorted(SETTING_TYPES)}"
        )

    merged = base.to_dict()
    for key, value in payload.items():
        expected = SETTING_TYPES[key]
        if not isinstance(value, expected):
            raise ConfigLoadError(
                f"{key}: expected {expected.__name__}, got {type(value).__name__}"
            )
        merged[key] = value

    merged["log_level"] = _validate_log_level(merged["log_level"])
    if merged["log_format"] not in LOG_FORMATS:
        raise ConfigLoadError(f"log_format: expected one of {list(LOG_FORMATS)}")
    if merged["default_copy"] not in DEFAULT_COPY_MODES:
        raise ConfigLoadError(f"default_copy: expected one of {list(DEFAULT_COPY_MODES)}")

    return RecordSettings(**merged)


def _validate_log_level(value: str) -> str:
    normalized = value.strip().upper()
    if not isinstance(logging.getLevelName(normalized), int):
        raise ConfigLoadError(f"log_level: unsupported logging level {value!r}")
    return normalized


__all__ = ["DEFAULT_SETTINGS", "SETTING_TYPES", "RecordSettings", "validate_settings"]
