"""Built-in constraint builders, registered through the public registry surface."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from dash_record.constraints.registry import (
    ConstraintBuilder,
    ConstraintPredicate,
    ConstraintRegistry,
)
from dash_record.constraints.types import (
    COLLECTION,
    MAPPING,
    ORDERED,
    SIZED,
    TEXT,
    resolve_base_type,
)

BUILTIN_CONSTRAINTS = ConstraintRegistry(name="builtin")


def builtin_constraint(
    name: str,
    *,
    applies_to: Iterable[str] | None = None,
    registry: ConstraintRegistry | None = None,
) -> Callable[[ConstraintBuilder], ConstraintBuilder]:
    """Decorator that registers a builder factory under ``name``."""

    target = registry if registry is not None else BUILTIN_CONSTRAINTS

    def decorator(factory: ConstraintBuilder) -> ConstraintBuilder:
        target.register(name, factory, applies_to=applies_to, source="builtin")
        return factory

    return decorator


def _require_comparable(bound: object, label: str) -> None:
    if bound is None or isinstance(bound, bool):
        raise TypeError(f"{label}: expected an orderable bound, got {bound!r}")
    try:
        bound <= bound  # noqa: B015
    except TypeError as exc:
        raise TypeError(f"{label}: bound {bound!r} does not support ordering") from exc


def _require_size(size: object, label: str) -> int:
    if not isinstance(size, int) or isinstance(size, bool) or size < 0:
        raise ValueError(f"{label}: expected non-negative integer, got {size!r}")
    return size


@builtin_constraint("in")
def member_of(allowed: Iterable[Any]) -> ConstraintPredicate:
    """Value must be one of an enumerated collection."""

    if isinstance(allowed, (str, bytes)) or not isinstance(allowed, Iterable):
        raise TypeError("in: expected a collection of allowed values")
    choices = tuple(allowed)

    def predicate(value: object) -> bool:
        return value in choices

    return predicate


@builtin_constraint("length")
def exact_length(length: int) -> ConstraintPredicate:
    """Value must report exactly ``length`` via ``len()``."""

    expected = _require_size(length, "length")

    def predicate(value: object) -> bool:
        return hasattr(value, "__len__") and len(value) == expected  # type: ignore[arg-type]

    return predicate


@builtin_constraint("minimum", applies_to={ORDERED})
def minimum(bound: Any) -> ConstraintPredicate:
    _require_comparable(bound, "minimum")
    return lambda value: value >= bound


@builtin_constraint("maximum", applies_to={ORDERED})
def maximum(bound: Any) -> ConstraintPredicate:
    _require_comparable(bound, "maximum")
    return lambda value: value <= bound


@builtin_constraint("minimum_length", applies_to={SIZED})
def minimum_length(length: int) -> ConstraintPredicate:
    expected = _require_size(length, "minimum_length")
    return lambda value: len(value) >= expected


@builtin_constraint("maximum_length", applies_to={SIZED})
def maximum_length(length: int) -> ConstraintPredicate:
    expected = _require_size(length, "maximum_length")
    return lambda value: len(value) <= expected


@builtin_constraint("member_type", applies_to={COLLECTION})
def member_type(spec: object) -> ConstraintPredicate:
    """Every element of a collection must satisfy the given base type."""

    element_type = resolve_base_type(spec)

    def predicate(value: Iterable[object]) -> bool:
        if isinstance(value, (str, bytes, Mapping)):
            return False
        return all(element_type.accepts(item) for item in value)

    return predicate


@builtin_constraint("key_type", applies_to={MAPPING})
def key_type(spec: object) -> ConstraintPredicate:
    expected = resolve_base_type(spec)

    def predicate(value: Mapping[object, object]) -> bool:
        return isinstance(value, Mapping) and all(expected.accepts(key) for key in value)

    return predicate


@builtin_constraint("value_type", applies_to={MAPPING})
def value_type(spec: object) -> ConstraintPredicate:
    expected = resolve_base_type(spec)

    def predicate(value: Mapping[object, object]) -> bool:
        return isinstance(value, Mapping) and all(
            expected.accepts(item) for item in value.values()
        )

    return predicate


@builtin_constraint("format", applies_to={TEXT})
def text_format(pattern: str | re.Pattern[str]) -> ConstraintPredicate:
    """String must fully match a regular expression."""

    compiled = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)

    def predicate(value: object) -> bool:
        return isinstance(value, str) and compiled.fullmatch(value) is not None

    return predicate


__all__ = [
    "BUILTIN_CONSTRAINTS",
    "builtin_constraint",
    "exact_length",
    "key_type",
    "maximum",
    "maximum_length",
    "member_of",
    "member_type",
    "minimum",
    "minimum_length",
    "text_format",
    "value_type",
]
