"""Resolvers for the entity-level methods of a double.

INVARIANT: ``get(name)`` returns the identical field list double until the
field is written; a write drops exactly that field's cached double.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from standin.core.dispatch import PROPERTY_GET, PROPERTY_SET, SELF, Resolver
from standin.core.state import MutableStateContainer
from standin.domain.definitions import EntityDoubleDefinition
from standin.domain.errors import ImmutableDoubleError, UndefinedFieldError

FieldListFactory = Callable[[str, Any], Any]


def _resolve(value: Any, context: Mapping[str, Any]) -> Any:
    return value(context) if callable(value) else value


class EntityResolverBuilder:
    """Builds resolvers closing over one definition and its mutable state.

    *state* is required for mutable definitions and ignored otherwise.
    """

    def __init__(
        self,
        definition: EntityDoubleDefinition,
        state: MutableStateContainer | None = None,
    ) -> None:
        if definition.mutable and state is None:
            state = MutableStateContainer()
        self.definition = definition
        self.state = state if definition.mutable else None
        self._field_lists: dict[str, Any] = {}
        self._field_list_factory: FieldListFactory | None = None

    def set_field_list_factory(self, factory: FieldListFactory) -> None:
        """Install ``factory(field_name, raw_value) -> field list double``."""
        self._field_list_factory = factory

    def invalidate(self, field_name: str) -> None:
        self._field_lists.pop(field_name, None)

    def build(self) -> dict[str, Resolver]:
        definition = self.definition
        return {
            "id": lambda context: _resolve(definition.id, context),
            "uuid": lambda context: _resolve(definition.uuid, context),
            "label": lambda context: _resolve(definition.label, context),
            "bundle": lambda context: definition.bundle,
            "entity_type_id": lambda context: definition.entity_type,
            "has_field": self._has_field,
            "get": self._get,
            PROPERTY_GET: self._get,
            "set": self._set,
            PROPERTY_SET: self._set,
        }

    # --- Fields ---

    def _is_declared(self, field_name: str) -> bool:
        if self.definition.has_field(field_name):
            return True
        return self.state is not None and self.state.has_field_value(field_name)

    def _raw_value(self, field_name: str) -> Any:
        if self.state is not None and self.state.has_field_value(field_name):
            return self.state.get_field_value(field_name)
        field = self.definition.get_field(field_name)
        if field is None:
            raise UndefinedFieldError(field_name)
        return field.value

    def _has_field(self, context: Mapping[str, Any], field_name: str) -> bool:
        return self._is_declared(field_name)

    def _get(self, context: Mapping[str, Any], field_name: str) -> Any:
        cached = self._field_lists.get(field_name)
        if cached is not None:
            return cached

        raw = self._raw_value(field_name)
        if self._field_list_factory is None:
            msg = f"No field list factory installed for field {field_name!r}"
            raise RuntimeError(msg)
        field_list = self._field_list_factory(field_name, raw)
        self._field_lists[field_name] = field_list
        return field_list

    def _set(
        self, context: Mapping[str, Any], field_name: str, value: Any, notify: bool = True
    ) -> Any:
        if self.state is None:
            raise ImmutableDoubleError(field_name)
        if not self._is_declared(field_name):
            raise UndefinedFieldError(field_name)
        self.update_state(field_name, value)
        return SELF

    def update_state(self, field_name: str, value: Any) -> None:
        """Record *value* for *field_name* and drop its cached field list."""
        if self.state is None:
            raise ImmutableDoubleError(field_name)
        self.state.set_field_value(field_name, value)
        self.invalidate(field_name)
