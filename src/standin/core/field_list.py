"""Resolvers for a field item list: every value one field holds.

The raw value is resolved lazily. A callable is invoked with the context
at most once per field list double; the result and the item doubles built
from it are cached until ``set_value`` replaces the value.

Normalization to an ordered item list:

- ``None`` is an empty list;
- entity doubles and ``{"entity": double}`` forms become reference items;
- a list or tuple whose every element is a record or list is used as-is;
- any other value, including a list of scalars, is a single item.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from standin.core.dispatch import PROPERTY_GET, PROPERTY_SET, SELF, Resolver
from standin.domain import references
from standin.domain.errors import ImmutableDoubleError, UnsupportedPropertyError
from standin.domain.references import EntityCheck

ItemFactory = Callable[[int, Any], Any]
StateUpdater = Callable[[str, Any], None]

_UNRESOLVED = object()


def normalize_items(value: Any, is_entity: EntityCheck) -> list[Any]:
    """Turn a resolved field value into its ordered list of items."""
    if value is None:
        return []
    if references.contains_entity_references(value, is_entity):
        return references.normalize(value, is_entity)
    if isinstance(value, (list, tuple)):
        if not value:
            return []
        if all(isinstance(item, (Mapping, list, tuple)) for item in value):
            return list(value)
    return [value]


class FieldListResolverBuilder:
    """Builds resolvers for one field of one entity double.

    The item factory and the mutable-state updater are injected after
    construction, once the owning entity double exists.
    """

    def __init__(
        self,
        field_name: str,
        raw_value: Any,
        *,
        is_entity: EntityCheck,
        mutable: bool = False,
    ) -> None:
        self.field_name = field_name
        self.mutable = mutable
        self._raw_value = raw_value
        self._is_entity = is_entity
        self._resolved: Any = _UNRESOLVED
        self._items: list[Any] | None = None
        self._item_cache: dict[int, Any] = {}
        self._item_factory: ItemFactory | None = None
        self._state_updater: StateUpdater | None = None

    def set_item_factory(self, factory: ItemFactory) -> None:
        """Install ``factory(delta, item_value) -> item double``."""
        self._item_factory = factory

    def set_mutable_state_updater(self, updater: StateUpdater) -> None:
        """Install ``updater(field_name, value)`` called by ``set_value``."""
        self._state_updater = updater

    def build(self) -> dict[str, Resolver]:
        return {
            "first": self._first,
            "is_empty": self._is_empty,
            "get_value": self._get_value,
            "get": self._get,
            PROPERTY_GET: self._property_get,
            "set_value": self._set_value,
            PROPERTY_SET: self._property_set,
        }

    # --- Value resolution ---

    def resolve_value(self, context: Mapping[str, Any]) -> Any:
        if self._resolved is _UNRESOLVED:
            raw = self._raw_value
            if callable(raw):
                raw = raw(context)
            self._resolved = raw
        return self._resolved

    def items(self, context: Mapping[str, Any]) -> list[Any]:
        if self._items is None:
            self._items = normalize_items(self.resolve_value(context), self._is_entity)
        return self._items

    def _item(self, delta: int, value: Any) -> Any:
        cached = self._item_cache.get(delta)
        if cached is not None:
            return cached
        if self._item_factory is None:
            msg = f"No item factory installed for field {self.field_name!r}"
            raise RuntimeError(msg)
        item = self._item_factory(delta, value)
        self._item_cache[delta] = item
        return item

    # --- Reads ---

    def _first(self, context: Mapping[str, Any]) -> Any:
        return self._get(context, 0)

    def _is_empty(self, context: Mapping[str, Any]) -> bool:
        return not self.items(context)

    def _get_value(self, context: Mapping[str, Any]) -> list[Any]:
        return [
            item if isinstance(item, (Mapping, list, tuple)) else {"value": item}
            for item in self.items(context)
        ]

    def _get(self, context: Mapping[str, Any], delta: int) -> Any:
        items = self.items(context)
        if not isinstance(delta, int) or delta < 0 or delta >= len(items):
            return None
        return self._item(delta, items[delta])

    def _property_get(self, context: Mapping[str, Any], name: str) -> Any:
        first = self._first(context)
        if first is None:
            return None
        return getattr(first, name)

    # --- Writes ---

    def _set_value(self, context: Mapping[str, Any], values: Any, notify: bool = True) -> Any:
        if not self.mutable:
            raise ImmutableDoubleError(self.field_name)
        self._raw_value = values
        self._resolved = _UNRESOLVED
        self._items = None
        self._item_cache.clear()
        if self._state_updater is not None:
            self._state_updater(self.field_name, values)
        return SELF

    def _property_set(self, context: Mapping[str, Any], name: str, value: Any) -> None:
        if name != "value":
            msg = f"Setting property '{name}' on field item list is not supported."
            raise UnsupportedPropertyError(msg)
        self._set_value(context, value)
