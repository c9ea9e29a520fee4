"""
dash-record - settings loader.

File: src/dash_record/config/loader.py

Purpose
- Load effective settings from defaults, a TOML file, and environment variables,
  and hold the process-wide active settings.

What should be included in this file
- Precedence logic: env (DASH_RECORD_) > file > defaults.
- TOML loading via ``tomllib``, from ``[tool.dash_record]`` or a dedicated file.
- Deterministic environment variable mapping and coercion.

Functional requirements
- A missing implicit config file is not an error; a missing explicit one is.
- Activating settings also applies the logging setup.

Non-functional requirements
- Never load anything at import time.
"""

from __future__ import annotations

import os
import threading
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from dash_record.config.schema import (
    DEFAULT_SETTINGS,
    SETTING_TYPES,
    RecordSettings,
    validate_settings,
)
from dash_record.constants import (
    CONFIG_PATH_ENV,
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    PYPROJECT_TOOL_TABLE,
)
from dash_record.errors import ConfigLoadError
from dash_record.observability import setup_logging, shutdown_logging

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})

_ACTIVE_LOCK = threading.Lock()
_ACTIVE_SETTINGS: RecordSettings = DEFAULT_SETTINGS


def load_settings(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> RecordSettings:
    """Load effective settings with deterministic precedence: env > file > defaults."""

    env_map = dict(os.environ if environ is None else environ)
    explicit = config_path is not None or CONFIG_PATH_ENV in env_map
    if config_path is None:
        config_path = env_map.get(CONFIG_PATH_ENV, DEFAULT_CONFIG_FILE)
    resolved_path = Path(config_path)

    file_payload = _load_toml_file(resolved_path, required=explicit)
    settings = validate_settings(_select_table(file_payload, resolved_path))
    return validate_settings(_collect_env_overrides(env_map), base=settings)


def configure(
    settings: RecordSettings | None = None,
    *,
    apply_logging: bool = True,
) -> RecordSettings:
    """Make ``settings`` (default: freshly loaded) the active process-wide settings."""

    resolved = settings if settings is not None else load_settings()
    with _ACTIVE_LOCK:
        global _ACTIVE_SETTINGS
        _ACTIVE_SETTINGS = resolved
    if apply_logging:
        setup_logging(resolved.log_level, fmt=resolved.log_format)
    return resolved


def get_settings() -> RecordSettings:
    """Return the active settings (defaults until ``configure`` is called)."""
    with _ACTIVE_LOCK:
        return _ACTIVE_SETTINGS


def reset_settings() -> None:
    """Restore default settings and remove any handler installed by ``configure``."""

    with _ACTIVE_LOCK:
        global _ACTIVE_SETTINGS
        _ACTIVE_SETTINGS = DEFAULT_SETTINGS
    shutdown_logging()


def _load_toml_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}
    if not path.is_file():
        raise ConfigLoadError(f"config path is not a file: {path}")

    try:
        with path.open("rb") as handle:
            payload = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc
    return payload


def _select_table(payload: Mapping[str, Any], path: Path) -> Mapping[str, Any]:
    if path.name != "pyproject.toml" and PYPROJECT_TOOL_TABLE[0] not in payload:
        return payload

    table: object = payload
    for part in PYPROJECT_TOOL_TABLE:
        if not isinstance(table, Mapping):
            raise ConfigLoadError(f"{'.'.join(PYPROJECT_TOOL_TABLE)}: expected table")
        table = table.get(part, {})
    if not isinstance(table, Mapping):
        raise ConfigLoadError(f"{'.'.join(PYPROJECT_TOOL_TABLE)}: expected table")
    return table


def _collect_env_overrides(environ: Mapping[str, str]) -> dict[str, object]:
    overrides: dict[str, object] = {}
    for field_name in sorted(SETTING_TYPES):
        env_name = f"{ENV_PREFIX}{field_name.upper()}"
        raw = environ.get(env_name)
        if raw is None:
            continue
        if SETTING_TYPES[field_name] is bool:
            overrides[field_name] = _coerce_bool(raw, env_name)
        else:
            overrides[field_name] = raw.strip()
    return overrides


def _coerce_bool(raw: str, env_name: str) -> bool:
    normalized = raw.strip().lower()
    if normalized in _BOOLEAN_TRUE:
        return True
    if normalized in _BOOLEAN_FALSE:
        return False
    raise ConfigLoadError(f"{env_name}: expected boolean, got {raw!r}")


__all__ = [
    "configure",
    "get_settings",
    "load_settings",
    "reset_settings",
]
