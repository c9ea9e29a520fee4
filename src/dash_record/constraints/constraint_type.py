"""ConstraintType: a base type check plus named sub-checks, resolved from a ``constraints`` mapping."""

from __future__ import annotations

from collections.abc import Hashable, Mapping
from dataclasses import dataclass

from dash_record.constants import TYPE_CONSTRAINT_KEY
from dash_record.constraints.registry import ConstraintPredicate, ConstraintRegistry
from dash_record.constraints.types import ANY, BaseType, resolve_base_type
from dash_record.errors import InvalidConstraintDeclarationError
from dash_record.observability import get_logger

_logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SubCheck:
    """One named predicate; ``key`` is the constraint key it was declared under."""

    key: str
    predicate: ConstraintPredicate

    def passes(self, value: object) -> bool:
        try:
            return bool(self.predicate(value))
        except TypeError:
            # Incomparable or unsized values do not satisfy the check.
            return False


@dataclass(frozen=True, slots=True)
class ConstraintType:
    """Executable validity check: base type AND every sub-check, in declaration order."""

    base_type: BaseType = ANY
    checks: tuple[SubCheck, ...] = ()

    def valid(self, value: object) -> bool:
        return self.first_failure(value) is None

    def first_failure(self, value: object) -> str | None:
        """Return the key of the first failing check, or ``None`` when ``value`` is valid."""

        if not self.base_type.accepts(value):
            return TYPE_CONSTRAINT_KEY
        for check in self.checks:
            if not check.passes(value):
                return check.key
        return None

    @property
    def keys(self) -> tuple[str, ...]:
        return (TYPE_CONSTRAINT_KEY, *(check.key for check in self.checks))


def _reject(
    property_name: Hashable, key: object, record_type: str
) -> InvalidConstraintDeclarationError:
    _logger.warning(
        "constraint_declaration_rejected",
        record_type=record_type,
        property=str(property_name),
        constraint_key=str(key),
    )
    return InvalidConstraintDeclarationError(property_name, key, record_type)


def resolve_constraints(
    spec: Mapping[str, object],
    *,
    registry: ConstraintRegistry,
    property_name: Hashable,
    record_type: str,
) -> ConstraintType:
    """Build a ConstraintType from a declaration's ``constraints`` mapping.

    Each non-``type`` key resolves, in order, to: the value itself when it is a
    predicate; the registered builder of that name applied to the value;
    otherwise the declaration is rejected naming the key.
    """

    if not isinstance(spec, Mapping):
        raise _reject(property_name, "constraints", record_type)

    try:
        base_type = resolve_base_type(spec.get(TYPE_CONSTRAINT_KEY))
    except (TypeError, ValueError) as exc:
        raise _reject(property_name, TYPE_CONSTRAINT_KEY, record_type) from exc

    checks: list[SubCheck] = []
    for key, parameter in spec.items():
        if key == TYPE_CONSTRAINT_KEY:
            continue
        if callable(parameter) and not isinstance(parameter, type):
            checks.append(SubCheck(key=str(key), predicate=parameter))
            continue

        registration = registry.lookup(key)
        if registration is None or not registration.supports(base_type):
            raise _reject(property_name, key, record_type)
        try:
            predicate = registration.build(parameter)
        except (TypeError, ValueError) as exc:
            raise _reject(property_name, key, record_type) from exc
        checks.append(SubCheck(key=str(key), predicate=predicate))

    return ConstraintType(base_type=base_type, checks=tuple(checks))


__all__ = ["ConstraintType", "SubCheck", "resolve_constraints"]
