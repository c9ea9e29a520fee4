"""
dash-record - schema-constrained record.

File: src/dash_record/record.py

Purpose
- A key/value container whose legal keys are the properties declared on its
  type, with defaults, required rules and constraints enforced on every write.

What should be included in this file
- Type-definition surface: ``declare_property``, class-body ``Property``
  markers, constraint-builder registration, introspection.
- Inheritance: value-level schema copy at subtyping plus replay of later
  parent declarations to already-created subtypes.
- Instance surface: construct, read, write, merge, merge_in_place, replace,
  update, and the mutable-mapping protocol.

Functional requirements
- Defaults are materialized eagerly at construction (deferred ones stay deferred).
- A failing write leaves the stored value untouched.
- Declaration errors surface at definition time, never at first use.

Non-functional requirements
- Single-owner value object; no internal synchronization.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Hashable, Iterable, Iterator, Mapping, MutableMapping
from typing import Any, ClassVar, TypeVar

from dash_record.accessors import AttributeAccessMixin
from dash_record.config import get_settings
from dash_record.constants import MESSAGE_OPTION_KEY
from dash_record.constraints import (
    BUILTIN_CONSTRAINTS,
    BuilderRegistration,
    ConstraintBuilder,
    ConstraintRegistry,
    resolve_constraints,
)
from dash_record.errors import (
    ConstraintViolationError,
    InvalidConstraintDeclarationError,
    RequiredPropertyError,
    UnknownPropertyError,
)
from dash_record.observability import get_logger
from dash_record.properties import (
    MISSING,
    Deferred,
    Property,
    PropertyDescriptor,
    RequiredKind,
    RequiredRule,
)
from dash_record.schema import NameKey, SchemaRegistry, name_key

_logger = get_logger(__name__)

TRecord = TypeVar("TRecord", bound="Record")
MissingFactory = Callable[["Record", Hashable], Any]
Combiner = Callable[[Hashable, Any, Any], Any]
Attributes = Mapping[Hashable, Any] | Iterable[tuple[Hashable, Any]]


def _materialize(value: Any, mode: str) -> Any:
    """Copy a literal default per ``default_copy``; uncopyable values are shared."""

    if isinstance(value, Deferred) or mode == "none":
        return value
    copier = copy.deepcopy if mode == "deep" else copy.copy
    try:
        return copier(value)
    except (TypeError, copy.Error):
        return value


def _pairs(source: Attributes) -> list[tuple[Hashable, Any]]:
    if isinstance(source, Record):
        return source._raw_items()
    if isinstance(source, Mapping):
        return list(source.items())
    return [(name, value) for name, value in source]


class Record(AttributeAccessMixin, MutableMapping[Hashable, Any]):
    """Base type for schema-constrained records.

    Subclass and declare properties either in the class body::

        class Person(Record):
            name = Property(required=True)
            occupation = Property(default="Worker")

    or imperatively with ``Person.declare_property("email")``.
    """

    __slots__ = ("_missing", "_store")

    _schema: ClassVar[SchemaRegistry] = SchemaRegistry("Record")
    _constraint_registry: ClassVar[ConstraintRegistry] = BUILTIN_CONSTRAINTS.derive("Record")

    def __init_subclass__(
        cls,
        /,
        *,
        constraint_namespace: ConstraintRegistry | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init_subclass__(**kwargs)
        parents = [base for base in cls.__bases__ if issubclass(base, Record)]

        schema = parents[0]._schema.derive(cls.__name__)
        for parent in parents[1:]:
            schema.absorb(parent._schema)
        cls._schema = schema
        for parent in parents:
            parent._schema.add_child(cls)

        cls._constraint_registry = (
            constraint_namespace
            if constraint_namespace is not None
            else parents[0]._constraint_registry.derive(cls.__qualname__)
        )

        markers = [
            (attr, value) for attr, value in vars(cls).items() if isinstance(value, Property)
        ]
        for attr, marker in markers:
            delattr(cls, attr)
            cls._declare(attr, check_reference=False, **marker.options())
        # The class body is complete, so forward references between markers resolve.
        for attr, _ in markers:
            cls._check_required_reference(attr)

    # ------------------------------------------------------------------ #
    # Type-definition surface
    # ------------------------------------------------------------------ #

    @classmethod
    def declare_property(
        cls,
        name: Hashable,
        *,
        default: Any = MISSING,
        required: Any = None,
        message: str | None = None,
        constraints: Mapping[str, Any] | None = None,
        deferred_cache: bool | None = None,
    ) -> PropertyDescriptor:
        """Register or overwrite ``name`` on this type and every subtype created so far.

        Only ``deferred(...)`` defaults are computed lazily; any other value,
        callables included, is stored as given. A ``required`` name must refer
        to a declared property or an attribute of the type at this point.
        """

        return cls._declare(
            name,
            default=default,
            required=required,
            message=message,
            constraints=constraints,
            deferred_cache=deferred_cache,
            check_reference=True,
        )

    @classmethod
    def _declare(
        cls,
        name: Hashable,
        *,
        default: Any = MISSING,
        required: Any = None,
        message: str | None = None,
        constraints: Mapping[str, Any] | None = None,
        deferred_cache: bool | None = None,
        check_reference: bool,
    ) -> PropertyDescriptor:
        record_type = cls.__name__
        try:
            rule = RequiredRule.from_option(required, message)
        except TypeError as exc:
            raise InvalidConstraintDeclarationError(name, "required", record_type) from exc
        if rule is None and message is not None:
            raise InvalidConstraintDeclarationError(name, MESSAGE_OPTION_KEY, record_type)
        if check_reference and not cls._resolves_required_reference(name, rule):
            raise cls._reject_required_reference(name)

        constraint = (
            resolve_constraints(
                constraints,
                registry=cls._constraint_registry,
                property_name=name,
                record_type=record_type,
            )
            if constraints is not None
            else None
        )
        descriptor = PropertyDescriptor(
            name=name,
            default=default,
            required=rule,
            constraint=constraint,
            deferred_cache=(
                get_settings().deferred_cache if deferred_cache is None else bool(deferred_cache)
            ),
        )
        cls._schema.register(descriptor)
        _logger.debug(
            "property_declared",
            record_type=record_type,
            property=str(name),
            has_default=descriptor.has_default,
            required=descriptor.is_required,
            constrained=descriptor.is_constrained,
        )

        for child in cls._schema.children():
            _logger.debug(
                "property_propagated",
                record_type=record_type,
                subtype=child.__name__,
                property=str(name),
            )
            child._declare(
                name,
                default=default,
                required=required,
                message=message,
                constraints=constraints,
                deferred_cache=deferred_cache,
                check_reference=False,
            )
        return descriptor

    @classmethod
    def _resolves_required_reference(cls, name: Hashable, rule: RequiredRule | None) -> bool:
        if rule is None or rule.kind is not RequiredKind.PROPERTY:
            return True
        target = rule.condition
        if target == name and type(target) is type(name):
            return True
        if cls.has_property(target):
            return True
        return isinstance(target, str) and hasattr(cls, target)

    @classmethod
    def _check_required_reference(cls, name: Hashable) -> None:
        descriptor = cls._schema.descriptor(name)
        if descriptor is not None and not cls._resolves_required_reference(
            name, descriptor.required
        ):
            raise cls._reject_required_reference(name)

    @classmethod
    def _reject_required_reference(cls, name: Hashable) -> InvalidConstraintDeclarationError:
        _logger.warning(
            "constraint_declaration_rejected",
            record_type=cls.__name__,
            property=str(name),
            constraint_key="required",
        )
        return InvalidConstraintDeclarationError(name, "required", cls.__name__)

    @classmethod
    def register_constraint_builder(
        cls,
        name: str,
        factory: ConstraintBuilder,
        *,
        applies_to: Iterable[str] | None = None,
        replace: bool = False,
    ) -> BuilderRegistration:
        """Make ``name`` usable in ``constraints`` of this type and its subtypes."""

        registration = cls._constraint_registry.register(
            name, factory, applies_to=applies_to, source="custom", replace=replace
        )
        _logger.debug(
            "constraint_builder_registered",
            record_type=cls.__name__,
            namespace=cls._constraint_registry.name,
            builder=name,
        )
        return registration

    @classmethod
    def constraint_builder(
        cls,
        name: str,
        *,
        applies_to: Iterable[str] | None = None,
    ) -> Callable[[ConstraintBuilder], ConstraintBuilder]:
        """Decorator form of ``register_constraint_builder``."""

        def decorator(factory: ConstraintBuilder) -> ConstraintBuilder:
            cls.register_constraint_builder(name, factory, applies_to=applies_to)
            return factory

        return decorator

    @classmethod
    def constraint_namespace(cls) -> ConstraintRegistry:
        return cls._constraint_registry

    @classmethod
    def has_property(cls, name: Hashable) -> bool:
        return cls._schema.has(name)

    @classmethod
    def is_required(cls, name: Hashable) -> bool:
        return cls._schema.is_required(name)

    @classmethod
    def is_constrained(cls, name: Hashable) -> bool:
        return cls._schema.is_constrained(name)

    @classmethod
    def property_descriptor(cls, name: Hashable) -> PropertyDescriptor | None:
        if not cls._schema.has(name):
            return None
        return cls._schema.descriptor(name)

    @classmethod
    def declared_properties(cls) -> tuple[Hashable, ...]:
        return cls._schema.names()

    @classmethod
    def declared_defaults(cls) -> dict[Hashable, Any]:
        return dict(cls._schema.default_items())

    @classmethod
    def own_properties(cls) -> tuple[Hashable, ...]:
        """Names declared on this type that none of its record base types declare."""

        inherited: set[NameKey] = set()
        for base in cls.__bases__:
            if issubclass(base, Record):
                inherited.update(base._schema.keys())
        return tuple(key[1] for key in cls._schema.keys() if key not in inherited)

    # ------------------------------------------------------------------ #
    # Instance surface
    # ------------------------------------------------------------------ #

    def __init__(
        self,
        attributes: Attributes | None = None,
        /,
        *,
        missing: MissingFactory | None = None,
        **kwargs: Any,
    ) -> None:
        self._store: dict[NameKey, Any] = {}
        self._missing = missing

        mode = get_settings().default_copy
        for key, default in self._schema.iter_defaults():
            self._write_key(key, _materialize(default, mode), check_required=False)

        self._apply(attributes)
        self._apply(kwargs)
        self._assert_required_set()

    def read(self, name: Hashable, observer: Callable[[Any], object] | None = None) -> Any:
        key = self._key_for(name, "read")
        if key in self._store:
            value = self._store[key]
        elif self._missing is not None:
            value = self._missing(self, name)
        else:
            value = None

        if isinstance(value, Deferred):
            value = self._resolve_deferred(key, value)
        if observer is not None:
            observer(value)
        return value

    def write(self, name: Hashable, value: Any) -> None:
        self._write_key(self._key_for(name), value)

    def merge(self: TRecord, other: Attributes, combiner: Combiner | None = None) -> TRecord:
        """Return a duplicate with ``other`` written over it."""

        duplicate = self.copy()
        duplicate._merge_pairs(_pairs(other), combiner)
        return duplicate

    def merge_in_place(
        self: TRecord, other: Attributes, combiner: Combiner | None = None
    ) -> TRecord:
        self._merge_pairs(_pairs(other), combiner)
        return self

    def replace(self: TRecord, other: Attributes) -> TRecord:
        """Keep exactly the keys of ``other`` plus every defaulted property."""

        mode = get_settings().default_copy
        target: dict[NameKey, Any] = {
            key: _materialize(default, mode) for key, default in self._schema.iter_defaults()
        }
        for name, value in _pairs(other):
            target[self._key_for(name)] = value

        snapshot = dict(self._store)
        for key in [key for key in self._store if key not in target]:
            del self._store[key]
        try:
            for key, value in target.items():
                self._write_key(key, value)
        except (ConstraintViolationError, RequiredPropertyError):
            self._store = snapshot
            raise
        return self

    def update(self, attributes: Attributes | None = None, /, **kwargs: Any) -> None:
        """Write ``attributes``, restore nulled defaults, then re-check required properties."""

        self._apply(attributes)
        self._apply(kwargs)

        mode = get_settings().default_copy
        for key, default in self._schema.iter_defaults():
            if self.read(key[1]) is None:
                self._write_key(key, _materialize(default, mode))
        self._assert_required_set()

    def to_dict(self) -> dict[Hashable, Any]:
        return {name: self.read(name) for name in self}

    def copy(self: TRecord) -> TRecord:
        duplicate = type(self).__new__(type(self))
        object.__setattr__(duplicate, "_store", dict(self._store))
        object.__setattr__(duplicate, "_missing", self._missing)
        instance_dict = getattr(self, "__dict__", None)
        if instance_dict:
            duplicate.__dict__.update(instance_dict)
        return duplicate

    __copy__ = copy

    def __deepcopy__(self: TRecord, memo: dict[int, Any]) -> TRecord:
        duplicate = self.copy()
        memo[id(self)] = duplicate
        object.__setattr__(duplicate, "_store", copy.deepcopy(self._store, memo))
        return duplicate

    def __or__(self: TRecord, other: object) -> TRecord:
        if not isinstance(other, Mapping):
            return NotImplemented
        return self.merge(other)

    def __ior__(self: TRecord, other: Attributes) -> TRecord:
        return self.merge_in_place(other)

    def __getitem__(self, name: Hashable) -> Any:
        return self.read(name)

    def __setitem__(self, name: Hashable, value: Any) -> None:
        self.write(name, value)

    def __delitem__(self, name: Hashable) -> None:
        """Remove a stored value; removing a required property is rejected."""

        key = self._key_for(name, "delete")
        if key not in self._store:
            raise KeyError(name)
        self._validate(key, None)
        del self._store[key]

    def clear(self) -> None:
        for key in self._store:
            self._validate(key, None)
        self._store.clear()

    def __iter__(self) -> Iterator[Hashable]:
        return iter([key[1] for key in self._store])

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, name: object) -> bool:
        try:
            return name_key(name) in self._store  # type: ignore[arg-type]
        except TypeError:
            return False

    def __repr__(self) -> str:
        ordered = sorted(self._store.items(), key=lambda item: str(item[0][1]))
        rendered = ", ".join(f"{key[1]}={value!r}" for key, value in ordered)
        return f"{type(self).__name__}({rendered})"

    # ------------------------------------------------------------------ #
    # Unchecked storage primitives for layers wrapping the store
    # ------------------------------------------------------------------ #

    def _raw_get(self, name: Hashable, default: Any = None) -> Any:
        return self._store.get(name_key(name), default)

    def _raw_set(self, name: Hashable, value: Any) -> None:
        self._store[name_key(name)] = value

    def _raw_items(self) -> list[tuple[Hashable, Any]]:
        return [(key[1], value) for key, value in self._store.items()]

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    def _key_for(self, name: Hashable, operation: str = "write") -> NameKey:
        key = name_key(name)
        try:
            declared = self._schema.has_key(key)
        except TypeError:
            declared = False
        if not declared:
            _logger.debug(
                "record_access_rejected",
                record_type=type(self).__name__,
                property=str(name),
                operation=operation,
                reason="unknown_property",
            )
            raise UnknownPropertyError(name, type(self).__name__)
        return key

    def _apply(self, attributes: Attributes | None) -> None:
        if not attributes:
            return
        for name, value in _pairs(attributes):
            self.write(name, value)

    def _merge_pairs(self, pairs: list[tuple[Hashable, Any]], combiner: Combiner | None) -> None:
        # Every key must be declared before anything is written.
        keys = [self._key_for(name) for name, _ in pairs]
        for key, (name, value) in zip(keys, pairs, strict=True):
            if combiner is not None:
                value = combiner(name, self.read(name), value)
            self._write_key(key, value)

    def _write_key(self, key: NameKey, value: Any, *, check_required: bool = True) -> None:
        self._validate(key, value, check_required=check_required)
        self._store[key] = value

    def _validate(self, key: NameKey, value: Any, *, check_required: bool = True) -> None:
        descriptor = self._schema.descriptor_for_key(key)
        record_type = type(self).__name__

        if value is None:
            rule = descriptor.required
            if check_required and rule is not None and rule.applies(self):
                _logger.debug(
                    "record_write_rejected",
                    record_type=record_type,
                    property=str(descriptor.name),
                    reason="required",
                )
                raise RequiredPropertyError(
                    descriptor.name, record_type, custom_message=rule.message
                )
            return

        if isinstance(value, Deferred) or descriptor.constraint is None:
            return
        failed_key = descriptor.constraint.first_failure(value)
        if failed_key is not None:
            _logger.debug(
                "record_write_rejected",
                record_type=record_type,
                property=str(descriptor.name),
                reason="constraint",
                constraint_key=failed_key,
            )
            raise ConstraintViolationError(
                descriptor.name, value, record_type, constraint_key=failed_key
            )

    def _resolve_deferred(self, key: NameKey, pending: Deferred) -> Any:
        descriptor = self._schema.descriptor_for_key(key)
        value = pending.resolve()
        self._validate(key, value)
        if descriptor.deferred_cache:
            self._store[key] = value
        _logger.debug(
            "deferred_default_resolved",
            record_type=type(self).__name__,
            property=str(descriptor.name),
            cached=descriptor.deferred_cache,
        )
        return value

    def _assert_required_set(self) -> None:
        record_type = type(self).__name__
        for key, rule in self._schema.iter_required():
            if rule.applies(self) and self.read(key[1]) is None:
                raise RequiredPropertyError(key[1], record_type, custom_message=rule.message)


__all__ = ["Attributes", "Combiner", "MissingFactory", "Record"]
