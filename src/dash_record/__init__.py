"""
dash-record - schema-constrained record types.

File: src/dash_record/__init__.py

Purpose
- Package root. Re-exports the declaration, instance, constraint and error
  surfaces.

Functional requirements
- Must not load settings or install output handlers at import time.
"""

from dash_record.config import RecordSettings, configure, get_settings, load_settings
from dash_record.constraints import (
    BUILTIN_CONSTRAINTS,
    ConstraintRegistry,
    ConstraintType,
    constraint_args,
    constraint_namespace,
)
from dash_record.errors import (
    ConfigLoadError,
    ConstraintViolationError,
    DashRecordError,
    InvalidConstraintDeclarationError,
    RequiredPropertyError,
    UnknownPropertyError,
)
from dash_record.observability import setup_logging, shutdown_logging
from dash_record.properties import MISSING, Deferred, Property, PropertyDescriptor, deferred
from dash_record.record import Record

__version__ = "0.1.0"

__all__ = [
    "BUILTIN_CONSTRAINTS",
    "MISSING",
    "ConfigLoadError",
    "ConstraintRegistry",
    "ConstraintType",
    "ConstraintViolationError",
    "DashRecordError",
    "Deferred",
    "InvalidConstraintDeclarationError",
    "Property",
    "PropertyDescriptor",
    "Record",
    "RecordSettings",
    "RequiredPropertyError",
    "UnknownPropertyError",
    "__version__",
    "configure",
    "constraint_args",
    "constraint_namespace",
    "deferred",
    "get_settings",
    "load_settings",
    "setup_logging",
    "shutdown_logging",
]
