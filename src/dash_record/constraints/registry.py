"""
dash-record - constraint builder registry.

File: src/dash_record/constraints/registry.py

Purpose
- Map constraint-builder names to parameterized factories that produce a value
  predicate, so property declarations can reference builders by name.

What should be included in this file
- The registry itself, with namespaces chained from a type to its subtypes.
- Builder registration records (source, applicable base-type traits).
- Argument packing for builders that take zero or several parameters.

Functional requirements
- Built-in and caller-supplied builders register through the same method.
- Lookups walk the namespace chain live, so later registrations on a base
  namespace are visible from every derived namespace.
- Duplicate registration in the same namespace is rejected unless replacing.

Non-functional requirements
- Deterministic enumeration of registered names for diagnostics.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from dash_record.constraints.types import BaseType

ConstraintPredicate = Callable[[Any], bool]
ConstraintBuilder = Callable[..., ConstraintPredicate]
BuilderSource = Literal["builtin", "custom"]


@dataclass(frozen=True, slots=True)
class BuilderArguments:
    """Explicit positional/keyword parameters for one builder invocation."""

    args: tuple[Any, ...] = ()
    kwargs: Mapping[str, Any] = field(default_factory=dict)


def constraint_args(*args: Any, **kwargs: Any) -> BuilderArguments:
    """Pack several (or zero) builder parameters into one constraint value."""

    return BuilderArguments(args=args, kwargs=dict(kwargs))


@dataclass(frozen=True, slots=True)
class BuilderRegistration:
    """One named builder and the base types it may be combined with."""

    name: str
    factory: ConstraintBuilder
    source: BuilderSource
    namespace: str
    applies_to: frozenset[str] | None = None

    def supports(self, base_type: BaseType) -> bool:
        if self.applies_to is None:
            return True
        return bool(self.applies_to & base_type.traits)

    def build(self, parameter: object) -> ConstraintPredicate:
        if isinstance(parameter, BuilderArguments):
            predicate = self.factory(*parameter.args, **dict(parameter.kwargs))
        else:
            predicate = self.factory(parameter)
        if not callable(predicate):
            raise TypeError(f"builder {self.name!r} did not return a callable predicate")
        return predicate


class ConstraintRegistry:
    """Named constraint-builder table, optionally chained to a parent namespace."""

    __slots__ = ("_name", "_parent", "_registrations")

    def __init__(self, *, name: str = "root", parent: ConstraintRegistry | None = None) -> None:
        self._name = name
        self._parent = parent
        self._registrations: dict[str, BuilderRegistration] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def parent(self) -> ConstraintRegistry | None:
        return self._parent

    def register(
        self,
        name: str,
        factory: ConstraintBuilder,
        *,
        applies_to: Iterable[str] | None = None,
        source: BuilderSource = "custom",
        replace: bool = False,
    ) -> BuilderRegistration:
        if not isinstance(name, str) or not name:
            raise ValueError("name: expected non-empty string")
        if not callable(factory):
            raise TypeError("factory: must be callable")

        existing = self._registrations.get(name)
        if existing is not None and not replace:
            raise ValueError(
                f"name: {name!r} already registered by {existing.source} builder "
                f"in namespace {self._name!r}"
            )

        registration = BuilderRegistration(
            name=name,
            factory=factory,
            source=source,
            namespace=self._name,
            applies_to=frozenset(applies_to) if applies_to is not None else None,
        )
        self._registrations[name] = registration
        return registration

    def contains(self, name: object) -> bool:
        return self.lookup(name) is not None

    def lookup(self, name: object) -> BuilderRegistration | None:
        registry: ConstraintRegistry | None = self
        while registry is not None:
            if isinstance(name, str):
                found = registry._registrations.get(name)
                if found is not None:
                    return found
            registry = registry._parent
        return None

    def get(self, name: str) -> BuilderRegistration:
        registration = self.lookup(name)
        if registration is None:
            known = ", ".join(self.registered_names())
            raise KeyError(f"unknown constraint builder {name!r}; registered: [{known}]")
        return registration

    def registered_names(self) -> tuple[str, ...]:
        names: set[str] = set()
        registry: ConstraintRegistry | None = self
        while registry is not None:
            names.update(registry._registrations)
            registry = registry._parent
        return tuple(sorted(names))

    def own_names(self) -> tuple[str, ...]:
        return tuple(sorted(self._registrations))

    def derive(self, name: str) -> ConstraintRegistry:
        """Return a child namespace whose lookups fall back to this one."""

        return ConstraintRegistry(name=name, parent=self)

    def __repr__(self) -> str:
        return f"ConstraintRegistry(name={self._name!r}, own={list(self.own_names())!r})"


__all__ = [
    "BuilderArguments",
    "BuilderRegistration",
    "BuilderSource",
    "ConstraintBuilder",
    "ConstraintPredicate",
    "ConstraintRegistry",
    "constraint_args",
]
