"""
dash-record - error taxonomy.

File: src/dash_record/errors.py

Purpose
- Define the exceptions raised by property declaration, record reads and writes,
  and settings loading.

Functional requirements
- Every error carries the property name and the record type name it concerns,
  in addition to a stable human-readable message.
- Unknown-property errors are catchable both as ``KeyError`` (mapping access) and
  as ``AttributeError`` (attribute access).

Non-functional requirements
- Messages are deterministic so callers and tests can match on them.
"""

from __future__ import annotations

from collections.abc import Hashable

from dash_record.constants import (
    CONSTRAINT_VIOLATION_TEMPLATE,
    DEFAULT_REQUIRED_MESSAGE_TEMPLATE,
    INVALID_CONSTRAINT_KEY_TEMPLATE,
    REQUIRED_PROPERTY_TEMPLATE,
    UNKNOWN_PROPERTY_TEMPLATE,
)


class DashRecordError(Exception):
    """Base class for every error raised by dash-record."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class UnknownPropertyError(DashRecordError, KeyError, AttributeError):
    """Raised when a read or write targets a name not declared for the record type."""

    def __init__(self, property_name: Hashable, record_type: str) -> None:
        super().__init__(
            UNKNOWN_PROPERTY_TEMPLATE.format(name=property_name, record_type=record_type)
        )
        self.property_name = property_name
        self.record_type = record_type


class RequiredPropertyError(DashRecordError, ValueError):
    """Raised when a required property is, or would become, ``None``."""

    def __init__(
        self,
        property_name: Hashable,
        record_type: str,
        *,
        custom_message: str | None = None,
    ) -> None:
        detail = (
            custom_message
            if custom_message is not None
            else DEFAULT_REQUIRED_MESSAGE_TEMPLATE.format(record_type=record_type)
        )
        super().__init__(REQUIRED_PROPERTY_TEMPLATE.format(name=property_name, message=detail))
        self.property_name = property_name
        self.record_type = record_type
        self.custom_message = custom_message


class ConstraintViolationError(DashRecordError, ValueError):
    """Raised when a present, non-``None`` value fails its property's constraint."""

    def __init__(
        self,
        property_name: Hashable,
        value: object,
        record_type: str,
        *,
        constraint_key: str | None = None,
    ) -> None:
        super().__init__(
            CONSTRAINT_VIOLATION_TEMPLATE.format(
                value=value,
                value_type=type(value).__name__,
                name=property_name,
                record_type=record_type,
            )
        )
        self.property_name = property_name
        self.value = value
        self.record_type = record_type
        self.constraint_key = constraint_key


class InvalidConstraintDeclarationError(DashRecordError, ValueError):
    """Raised at declaration time for a constraint or option that cannot be resolved."""

    def __init__(self, property_name: Hashable, constraint_key: object, record_type: str) -> None:
        super().__init__(
            INVALID_CONSTRAINT_KEY_TEMPLATE.format(
                key=constraint_key,
                name=property_name,
                record_type=record_type,
            )
        )
        self.property_name = property_name
        self.constraint_key = constraint_key
        self.record_type = record_type


class ConfigLoadError(DashRecordError, ValueError):
    """Raised when settings cannot be loaded or overrides cannot be coerced."""


__all__ = [
    "ConfigLoadError",
    "ConstraintViolationError",
    "DashRecordError",
    "InvalidConstraintDeclarationError",
    "RequiredPropertyError",
    "UnknownPropertyError",
]
