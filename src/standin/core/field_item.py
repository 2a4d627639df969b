"""Resolvers for one field item: the value at a single delta of a field."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from standin.core.dispatch import PROPERTY_GET, PROPERTY_SET, SELF, Resolver
from standin.domain.errors import ImmutableDoubleError


class FieldItemResolverBuilder:
    """Builds resolvers over one item value, a record or a bare scalar.

    Mutable items keep their own copy of the value so writes are visible on
    the next read of the same item double.
    """

    def __init__(self, value: Any, delta: int, field_name: str, *, mutable: bool = False) -> None:
        self.delta = delta
        self.field_name = field_name
        self.mutable = mutable
        self._value = dict(value) if mutable and isinstance(value, Mapping) else value

    @property
    def value(self) -> Any:
        return self._value

    def build(self) -> dict[str, Resolver]:
        return {
            PROPERTY_GET: self._property_get,
            "is_empty": self._is_empty,
            "get_value": self._get_value,
            "set_value": self._set_value,
            PROPERTY_SET: self._property_set,
        }

    # --- Reads ---

    def _property_get(self, context: Mapping[str, Any], name: str) -> Any:
        if isinstance(self._value, Mapping):
            return self._value.get(name)
        if name == "value":
            return self._value
        return None

    def _is_empty(self, context: Mapping[str, Any]) -> bool:
        value = self._value
        if value is None or value == "":
            return True
        return isinstance(value, (Mapping, list, tuple)) and not value

    def _get_value(self, context: Mapping[str, Any]) -> Any:
        if isinstance(self._value, Mapping):
            return self._value
        return {"value": self._value}

    # --- Writes ---

    def _set_value(self, context: Mapping[str, Any], values: Any, notify: bool = True) -> Any:
        self._guard_write()
        self._value = dict(values) if isinstance(values, Mapping) else values
        return SELF

    def _property_set(self, context: Mapping[str, Any], name: str, value: Any) -> None:
        self._guard_write()
        if isinstance(self._value, Mapping):
            self._value[name] = value
        elif name == "value":
            self._value = value
        else:
            self._value = {"value": self._value, name: value}

    def _guard_write(self) -> None:
        if not self.mutable:
            raise ImmutableDoubleError(self.field_name)
