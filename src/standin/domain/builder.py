"""Fluent builder for :class:`EntityDoubleDefinition`.

Usage::

    definition = (
        EntityDoubleDefinitionBuilder.create("node")
        .bundle("article")
        .id(42)
        .field("field_tags", [{"target_id": 1}, {"target_id": 2}])
        .build()
    )

``build()`` adds the ``fieldable`` capability automatically when fields
were given. The root ``entity`` capability is always added by the factory.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from standin.domain.capabilities import CapabilityRegistry
from standin.domain.catalog import default_registry
from standin.domain.definitions import (
    FIELDABLE_CAPABILITY,
    EntityDoubleDefinition,
    FieldDoubleDefinition,
)


class EntityDoubleDefinitionBuilder:
    """Accumulates definition settings; every setter returns the builder."""

    def __init__(self, entity_type: str) -> None:
        self._entity_type = entity_type
        self._bundle = ""
        self._id: Any = None
        self._uuid: Any = None
        self._label: Any = None
        self._fields: dict[str, FieldDoubleDefinition] = {}
        self._interfaces: list[str] = []
        self._method_overrides: dict[str, Any] = {}
        self._context: dict[str, Any] = {}
        self._mutable = False
        self._lenient = False

    @classmethod
    def create(cls, entity_type: str) -> EntityDoubleDefinitionBuilder:
        return cls(entity_type)

    @classmethod
    def from_definition(cls, definition: EntityDoubleDefinition) -> EntityDoubleDefinitionBuilder:
        """Start from an existing definition, e.g. to derive a variant."""
        builder = cls(definition.entity_type)
        builder._bundle = definition.bundle
        builder._id = definition.id
        builder._uuid = definition.uuid
        builder._label = definition.label
        builder._fields = dict(definition.fields)
        builder._interfaces = list(definition.interfaces)
        builder._method_overrides = dict(definition.method_overrides)
        builder._context = dict(definition.context)
        builder._mutable = definition.mutable
        builder._lenient = definition.lenient
        return builder

    @classmethod
    def from_interface(
        cls,
        entity_type: str,
        capability: str,
        registry: CapabilityRegistry | None = None,
    ) -> EntityDoubleDefinitionBuilder:
        """Start with *capability* and every ancestor it extends."""
        if registry is None:
            registry = default_registry()
        return cls(entity_type).interfaces(registry.closure([capability]))

    # --- Metadata ---

    def bundle(self, bundle: str) -> EntityDoubleDefinitionBuilder:
        self._bundle = bundle
        return self

    def id(self, value: Any) -> EntityDoubleDefinitionBuilder:
        self._id = value
        return self

    def uuid(self, value: Any) -> EntityDoubleDefinitionBuilder:
        self._uuid = value
        return self

    def label(self, value: Any) -> EntityDoubleDefinitionBuilder:
        self._label = value
        return self

    # --- Fields ---

    def field(self, field_name: str, value: Any) -> EntityDoubleDefinitionBuilder:
        self._fields[field_name] = FieldDoubleDefinition.of(value)
        return self

    def fields(self, fields: Mapping[str, Any]) -> EntityDoubleDefinitionBuilder:
        for field_name, value in fields.items():
            self.field(field_name, value)
        return self

    # --- Capabilities ---

    def interface(self, name: str) -> EntityDoubleDefinitionBuilder:
        if name not in self._interfaces:
            self._interfaces.append(name)
        return self

    def interfaces(self, names: Iterable[str]) -> EntityDoubleDefinitionBuilder:
        for name in names:
            self.interface(name)
        return self

    # --- Behavior ---

    def method_override(self, method: str, resolver: Any) -> EntityDoubleDefinitionBuilder:
        """Override *method* with a static value or ``callable(context, *args)``."""
        self._method_overrides[method] = resolver
        return self

    def method_overrides(self, overrides: Mapping[str, Any]) -> EntityDoubleDefinitionBuilder:
        for method, resolver in overrides.items():
            self.method_override(method, resolver)
        return self

    def context(self, key: str, value: Any) -> EntityDoubleDefinitionBuilder:
        self._context[key] = value
        return self

    def with_context(self, context: Mapping[str, Any]) -> EntityDoubleDefinitionBuilder:
        self._context.update(context)
        return self

    def mutable(self, mutable: bool = True) -> EntityDoubleDefinitionBuilder:
        self._mutable = mutable
        return self

    def lenient(self, lenient: bool = True) -> EntityDoubleDefinitionBuilder:
        """Make unconfigured and unsupported methods return ``None``."""
        self._lenient = lenient
        return self

    def build(self) -> EntityDoubleDefinition:
        interfaces = list(self._interfaces)
        if self._fields and FIELDABLE_CAPABILITY not in interfaces:
            interfaces.append(FIELDABLE_CAPABILITY)

        return EntityDoubleDefinition(
            entity_type=self._entity_type,
            bundle=self._bundle,
            id=self._id,
            uuid=self._uuid,
            label=self._label,
            fields=self._fields,
            interfaces=tuple(interfaces),
            method_overrides=self._method_overrides,
            context=self._context,
            mutable=self._mutable,
            lenient=self._lenient,
        )
