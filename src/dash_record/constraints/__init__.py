"""Constraint subsystem: base types, builder registry, built-in builders, ConstraintType."""

from dash_record.constraints.builtin_builders import BUILTIN_CONSTRAINTS, builtin_constraint
from dash_record.constraints.constraint_type import ConstraintType, SubCheck, resolve_constraints
from dash_record.constraints.registry import (
    BuilderArguments,
    BuilderRegistration,
    ConstraintBuilder,
    ConstraintPredicate,
    ConstraintRegistry,
    constraint_args,
)
from dash_record.constraints.types import BASE_TYPES, BaseType, resolve_base_type


def constraint_namespace(name: str) -> ConstraintRegistry:
    """Return a fresh namespace that still sees the built-in builders."""

    return BUILTIN_CONSTRAINTS.derive(name)


__all__ = [
    "BASE_TYPES",
    "BUILTIN_CONSTRAINTS",
    "BaseType",
    "BuilderArguments",
    "BuilderRegistration",
    "ConstraintBuilder",
    "ConstraintPredicate",
    "ConstraintRegistry",
    "ConstraintType",
    "SubCheck",
    "builtin_constraint",
    "constraint_args",
    "constraint_namespace",
    "resolve_base_type",
    "resolve_constraints",
]
