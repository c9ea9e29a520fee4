"""
dash-record - per-type schema registry.

File: src/dash_record/schema.py

Purpose
- Hold the declared properties of one record type: names, descriptors, the
  defaulted subset, the required subset, and the constrained subset.

What should be included in this file
- Exact-name keys: names are distinct by type and value, so ``"x"``, ``b"x"``
  and a ``StrEnum`` member with value ``"x"`` never collide.
- Value-level copying for subtypes, and the parent-to-child edges replayed
  when a parent declares a property after subtyping.

Functional requirements
- Re-declaring a name overwrites its descriptor in place without duplicating it.
- A declaration without a default clears any previous default.

Non-functional requirements
- Deterministic enumeration (declaration order) for diagnostics.
"""

from __future__ import annotations

import weakref
from collections.abc import Hashable, Iterator
from typing import Any

from dash_record.constraints import ConstraintType
from dash_record.properties import PropertyDescriptor, RequiredRule

NameKey = tuple[type, Hashable]


def name_key(name: Hashable) -> NameKey:
    """Exact identity of a property name: its type together with its value."""

    return (type(name), name)


class SchemaRegistry:
    """Ordered property declarations of one record type."""

    __slots__ = ("_children", "_constraints", "_defaults", "_descriptors", "_owner", "_required")

    def __init__(self, owner: str) -> None:
        self._owner = owner
        self._descriptors: dict[NameKey, PropertyDescriptor] = {}
        self._defaults: dict[NameKey, Any] = {}
        self._required: dict[NameKey, RequiredRule] = {}
        self._constraints: dict[NameKey, ConstraintType] = {}
        self._children: list[weakref.ref[type]] = []

    @property
    def owner(self) -> str:
        return self._owner

    def register(self, descriptor: PropertyDescriptor) -> None:
        key = name_key(descriptor.name)
        self._descriptors[key] = descriptor

        if descriptor.has_default:
            self._defaults[key] = descriptor.default
        else:
            self._defaults.pop(key, None)

        if descriptor.required is not None:
            self._required[key] = descriptor.required
        else:
            self._required.pop(key, None)

        if descriptor.constraint is not None:
            self._constraints[key] = descriptor.constraint
        else:
            self._constraints.pop(key, None)

    def derive(self, owner: str) -> SchemaRegistry:
        """Copy this registry for a new subtype; the copy has no children."""

        derived = SchemaRegistry(owner)
        derived._descriptors = dict(self._descriptors)
        derived._defaults = dict(self._defaults)
        derived._required = dict(self._required)
        derived._constraints = dict(self._constraints)
        return derived

    def absorb(self, other: SchemaRegistry) -> None:
        """Add declarations from ``other`` for names not already present."""

        for key, descriptor in other._descriptors.items():
            if key not in self._descriptors:
                self.register(descriptor)

    def add_child(self, subtype: type) -> None:
        self._children.append(weakref.ref(subtype))

    def children(self) -> tuple[type, ...]:
        alive = [(ref, ref()) for ref in self._children]
        self._children = [ref for ref, child in alive if child is not None]
        return tuple(child for _, child in alive if child is not None)

    def has(self, name: Hashable) -> bool:
        try:
            return name_key(name) in self._descriptors
        except TypeError:
            return False

    def has_key(self, key: NameKey) -> bool:
        return key in self._descriptors

    def descriptor(self, name: Hashable) -> PropertyDescriptor | None:
        return self._descriptors.get(name_key(name))

    def descriptor_for_key(self, key: NameKey) -> PropertyDescriptor:
        return self._descriptors[key]

    def is_required(self, name: Hashable) -> bool:
        return self.has(name) and name_key(name) in self._required

    def is_constrained(self, name: Hashable) -> bool:
        return self.has(name) and name_key(name) in self._constraints

    def names(self) -> tuple[Hashable, ...]:
        return tuple(key[1] for key in self._descriptors)

    def keys(self) -> tuple[NameKey, ...]:
        return tuple(self._descriptors)

    def default_items(self) -> tuple[tuple[Hashable, Any], ...]:
        return tuple((key[1], value) for key, value in self._defaults.items())

    def iter_defaults(self) -> Iterator[tuple[NameKey, Any]]:
        yield from tuple(self._defaults.items())

    def iter_required(self) -> Iterator[tuple[NameKey, RequiredRule]]:
        yield from tuple(self._required.items())

    def __len__(self) -> int:
        return len(self._descriptors)

    def __repr__(self) -> str:
        return f"SchemaRegistry(owner={self._owner!r}, properties={list(self.names())!r})"


__all__ = ["NameKey", "SchemaRegistry", "name_key"]
