"""Nominal base types accepted by the ``type`` key of a ``constraints`` declaration."""

from __future__ import annotations

import numbers
from collections.abc import Callable, Collection, Mapping, Sized
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Final

# Traits gate which constraint builders may be combined with a base type.
ORDERED: Final[str] = "ordered"
SIZED: Final[str] = "sized"
COLLECTION: Final[str] = "collection"
MAPPING: Final[str] = "mapping"
TEXT: Final[str] = "text"
ALL_TRAITS: Final[frozenset[str]] = frozenset({ORDERED, SIZED, COLLECTION, MAPPING, TEXT})

_BOOL_EXCLUDED: Final[frozenset[type]] = frozenset(
    {int, numbers.Number, numbers.Complex, numbers.Real, numbers.Rational, numbers.Integral}
)


@dataclass(frozen=True, slots=True)
class BaseType:
    """One nominal type check plus the traits constraint builders can rely on."""

    name: str
    check: Callable[[object], bool] = field(compare=False)
    traits: frozenset[str] = frozenset()

    def accepts(self, value: object) -> bool:
        return bool(self.check(value))

    def has_trait(self, trait: str) -> bool:
        return trait in self.traits


def _traits_for_class(cls: type) -> frozenset[str]:
    traits: set[str] = set()
    if issubclass(cls, (numbers.Real, Decimal, date, time, timedelta)) and not issubclass(
        cls, bool
    ):
        traits.add(ORDERED)
    if issubclass(cls, Sized):
        traits.add(SIZED)
    if issubclass(cls, (str, bytes, bytearray)):
        traits.add(TEXT)
    elif issubclass(cls, Mapping):
        traits.add(MAPPING)
    elif issubclass(cls, Collection):
        traits.add(COLLECTION)
    return frozenset(traits)


def base_type_for_class(cls: type) -> BaseType:
    """Build an ``isinstance`` base type; ``bool`` never satisfies integer/number classes."""

    if cls in _BOOL_EXCLUDED:

        def check(value: object) -> bool:
            return isinstance(value, cls) and not isinstance(value, bool)

    else:

        def check(value: object) -> bool:
            return isinstance(value, cls)

    return BaseType(name=cls.__name__, check=check, traits=_traits_for_class(cls))


def _is_plain_date(value: object) -> bool:
    return isinstance(value, date) and not isinstance(value, datetime)


ANY: Final[BaseType] = BaseType(name="Object", check=lambda value: True, traits=ALL_TRAITS)
BOOLEAN: Final[BaseType] = BaseType(name="Boolean", check=lambda value: isinstance(value, bool))
INTEGER: Final[BaseType] = BaseType(
    name="Integer",
    check=lambda value: isinstance(value, numbers.Integral) and not isinstance(value, bool),
    traits=frozenset({ORDERED}),
)
FLOAT: Final[BaseType] = BaseType(
    name="Float", check=lambda value: isinstance(value, float), traits=frozenset({ORDERED})
)
DECIMAL: Final[BaseType] = BaseType(
    name="Decimal", check=lambda value: isinstance(value, Decimal), traits=frozenset({ORDERED})
)
NUMERIC: Final[BaseType] = BaseType(
    name="Numeric",
    check=lambda value: (
        isinstance(value, (numbers.Real, Decimal)) and not isinstance(value, bool)
    ),
    traits=frozenset({ORDERED}),
)

# Canonical names first; aliases map onto the same instances below.
BASE_TYPES: Final[dict[str, BaseType]] = {
    "Object": ANY,
    "Boolean": BOOLEAN,
    "Integer": INTEGER,
    "Float": FLOAT,
    "Decimal": DECIMAL,
    "Numeric": NUMERIC,
    "String": base_type_for_class(str),
    "Bytes": base_type_for_class(bytes),
    "List": base_type_for_class(list),
    "Tuple": base_type_for_class(tuple),
    "Set": BaseType(
        name="Set",
        check=lambda value: isinstance(value, (set, frozenset)),
        traits=frozenset({SIZED, COLLECTION}),
    ),
    "Mapping": base_type_for_class(Mapping),
    "Date": BaseType(name="Date", check=_is_plain_date, traits=frozenset({ORDERED})),
    "DateTime": base_type_for_class(datetime),
    "Time": base_type_for_class(time),
}
BASE_TYPES["Any"] = ANY
BASE_TYPES["Array"] = BASE_TYPES["List"]
BASE_TYPES["Hash"] = BASE_TYPES["Mapping"]

_CLASS_ALIASES: Final[dict[type, BaseType]] = {
    object: ANY,
    bool: BOOLEAN,
    int: INTEGER,
    float: FLOAT,
    Decimal: DECIMAL,
}


def resolve_base_type(spec: object) -> BaseType:
    """Resolve a ``type`` value (``None``, a name, a class or a BaseType)."""

    if spec is None:
        return ANY
    if isinstance(spec, BaseType):
        return spec
    if isinstance(spec, str):
        resolved = BASE_TYPES.get(spec)
        if resolved is None:
            known = ", ".join(sorted(BASE_TYPES))
            raise ValueError(f"unknown base type {spec!r}; known: [{known}]")
        return resolved
    if isinstance(spec, type):
        return _CLASS_ALIASES.get(spec) or base_type_for_class(spec)
    raise TypeError(f"expected a type name or class, got {type(spec).__name__}")


__all__ = [
    "ALL_TRAITS",
    "ANY",
    "BASE_TYPES",
    "COLLECTION",
    "MAPPING",
    "ORDERED",
    "SIZED",
    "TEXT",
    "BaseType",
    "base_type_for_class",
    "resolve_base_type",
]
