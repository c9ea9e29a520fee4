"""Attribute-style access (``record.email``) dispatched onto the generic read/write path."""

from __future__ import annotations

from typing import Any


def _defines_attribute(cls: type, name: str) -> bool:
    return any(name in vars(klass) for klass in cls.__mro__)


class AttributeAccessMixin:
    """Route unknown attribute reads/writes to ``read``/``write``.

    Attributes defined anywhere on the class hierarchy (methods, properties,
    user-written accessors) always win over property dispatch. Names starting
    with an underscore are never dispatched.
    """

    __slots__ = ()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        return self.read(name)  # type: ignore[attr-defined]

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or _defines_attribute(type(self), name):
            object.__setattr__(self, name, value)
            return
        self.write(name, value)  # type: ignore[attr-defined]

    def __delattr__(self, name: str) -> None:
        if name.startswith("_") or _defines_attribute(type(self), name):
            object.__delattr__(self, name)
            return
        del self[name]  # type: ignore[attr-defined]

    def __dir__(self) -> list[str]:
        declared = (
            name
            for name in type(self).declared_properties()  # type: ignore[attr-defined]
            if isinstance(name, str) and name.isidentifier()
        )
        return sorted(set(super().__dir__()) | set(declared))


__all__ = ["AttributeAccessMixin"]
