"""
dash-record - property metadata.

File: src/dash_record/properties.py

Purpose
- Describe one declared property: default, required rule, constraint, and the
  caching behaviour of deferred values.

What should be included in this file
- ``Deferred``: the tagged stored value for lazily computed defaults/values.
- ``RequiredRule``: static flag, reference to another property (or predicate
  method), or computed predicate over the record.
- ``PropertyDescriptor``: immutable metadata stored in a schema registry.
- ``Property``: class-body declaration marker.

Functional requirements
- Required rules evaluate against a live record instance.
- Descriptors are immutable; re-declaration replaces them wholesale.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Final

from dash_record.constraints import ConstraintType

if TYPE_CHECKING:
    from dash_record.record import Record


class _Missing:
    """Sentinel for an omitted default (``None`` is a legal default)."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final[Any] = _Missing()


@dataclass(frozen=True, slots=True)
class Deferred:
    """A value computed on first read rather than when it is stored."""

    factory: Callable[[], Any]

    def __post_init__(self) -> None:
        if not callable(self.factory):
            raise TypeError(
                f"Deferred.factory: expected callable, got {type(self.factory).__name__}"
            )

    def resolve(self) -> Any:
        return self.factory()


def deferred(factory: Callable[[], Any]) -> Deferred:
    """Wrap a zero-argument callable as a deferred default or value."""

    return Deferred(factory)


class RequiredKind(StrEnum):
    FLAG = "flag"
    PROPERTY = "property"
    PREDICATE = "predicate"


@dataclass(frozen=True, slots=True)
class RequiredRule:
    """When a property must hold a non-``None`` value, plus its failure message."""

    kind: RequiredKind
    condition: Any = True
    message: str | None = None

    @classmethod
    def from_option(cls, option: object, message: str | None = None) -> RequiredRule | None:
        """Interpret a ``required=`` declaration option; falsy flags mean "no rule"."""

        if option is None or option is False:
            return None
        if option is True:
            return cls(kind=RequiredKind.FLAG, condition=True, message=message)
        if callable(option):
            return cls(kind=RequiredKind.PREDICATE, condition=option, message=message)
        if not isinstance(option, Hashable):
            raise TypeError(
                f"required: expected bool, name or callable, got {type(option).__name__}"
            )
        return cls(kind=RequiredKind.PROPERTY, condition=option, message=message)

    def applies(self, record: Record) -> bool:
        if self.kind is RequiredKind.FLAG:
            return bool(self.condition)
        if self.kind is RequiredKind.PREDICATE:
            return bool(self.condition(record))
        if record.has_property(self.condition):
            return bool(record.read(self.condition))
        # Not a property: a named predicate method on the record.
        predicate = getattr(record, self.condition)
        return bool(predicate() if callable(predicate) else predicate)


@dataclass(frozen=True, slots=True)
class PropertyDescriptor:
    """Declared metadata for one property on one record type."""

    name: Hashable
    default: Any = MISSING
    required: RequiredRule | None = None
    constraint: ConstraintType | None = None
    deferred_cache: bool = True

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    @property
    def is_required(self) -> bool:
        return self.required is not None

    @property
    def is_constrained(self) -> bool:
        return self.constraint is not None


@dataclass(frozen=True, slots=True)
class Property:
    """Class-body declaration marker; ``email = Property()`` declares ``"email"``.

    ``default`` is stored as given, so a plain function default reads back as
    the function itself. Wrap it with ``deferred(...)`` to compute it on read.
    """

    default: Any = MISSING
    required: Any = None
    message: str | None = None
    constraints: Mapping[str, Any] | None = field(default=None, hash=False)
    deferred_cache: bool | None = None

    def options(self) -> dict[str, Any]:
        declared: dict[str, Any] = {
            "required": self.required,
            "message": self.message,
            "constraints": self.constraints,
            "deferred_cache": self.deferred_cache,
        }
        if self.default is not MISSING:
            declared["default"] = self.default
        return declared


__all__ = [
    "MISSING",
    "Deferred",
    "Property",
    "PropertyDescriptor",
    "RequiredKind",
    "RequiredRule",
    "deferred",
]
