"""Immutable definitions describing an entity double and its field values.

A definition is created once by the caller (directly, from a plain mapping,
or through :class:`~standin.domain.builder.EntityDoubleDefinitionBuilder`)
and never mutated. Derivations such as :meth:`EntityDoubleDefinition.with_context`
return new instances.

INVARIANT: Non-empty ``fields`` requires the ``fieldable`` capability.
Violations raise :class:`DoubleConfigurationError` at construction.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from standin.domain.errors import DoubleConfigurationError

ROOT_CAPABILITY = "entity"
FIELDABLE_CAPABILITY = "fieldable"


class FieldDoubleDefinition(BaseModel):
    """One field's value: scalar, ordered list, or ``callable(context)``."""

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    value: Any = None

    @classmethod
    def of(cls, value: Any) -> FieldDoubleDefinition:
        """Wrap *value*, passing existing definitions through untouched."""
        if isinstance(value, FieldDoubleDefinition):
            return value
        return cls(value=value)

    def is_callable(self) -> bool:
        return callable(self.value)

    def is_multi_value(self) -> bool:
        return isinstance(self.value, (list, tuple)) and not self.is_callable()


class EntityDoubleDefinition(BaseModel):
    """Everything needed to construct one entity double.

    Attributes:
        entity_type: Entity type id, e.g. ``"node"``.
        bundle: Bundle name; defaults to *entity_type* when empty.
        id: Scalar or ``callable(context)`` resolved on every ``id()`` call.
        uuid: Scalar or ``callable(context)``.
        label: Scalar or ``callable(context)``.
        fields: Field definitions keyed by field name, in declaration order.
        interfaces: Requested capability names, de-duplicated in order.
        method_overrides: Scalar or ``callable(context, *args)`` per method.
        context: Shared context passed to every callable.
        mutable: Whether writes are accepted.
        lenient: Whether guardrail failures return ``None`` instead of raising.
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    entity_type: str
    bundle: str = ""
    id: Any = None
    uuid: Any = None
    label: Any = None
    fields: dict[str, FieldDoubleDefinition] = Field(default_factory=dict)
    interfaces: tuple[str, ...] = ()
    method_overrides: dict[str, Any] = Field(default_factory=dict)
    context: dict[str, Any] = Field(default_factory=dict)
    mutable: bool = False
    lenient: bool = False

    def __init__(self, **data: Any) -> None:
        entity_type = data.get("entity_type")
        if not isinstance(entity_type, str) or not entity_type:
            msg = "'entity_type' is required and must be a non-empty string."
            raise DoubleConfigurationError(msg)
        super().__init__(**data)
        if self.fields and FIELDABLE_CAPABILITY not in self.interfaces:
            msg = (
                "Fields can only be defined when the 'fieldable' capability is "
                "listed in interfaces. Add 'fieldable' to the 'interfaces' list."
            )
            raise DoubleConfigurationError(msg)

    @model_validator(mode="before")
    @classmethod
    def _default_bundle(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("bundle"):
            data = {**data, "bundle": data.get("entity_type", "")}
        return data

    @field_validator("fields", mode="before")
    @classmethod
    def _coerce_fields(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, Mapping):
            return {name: FieldDoubleDefinition.of(raw) for name, raw in value.items()}
        return value

    @field_validator("interfaces", mode="before")
    @classmethod
    def _dedupe_interfaces(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        elif isinstance(value, (set, frozenset)):
            value = sorted(value)
        return tuple(dict.fromkeys(value))

    @field_validator("method_overrides", "context", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    # --- Construction helpers ---

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> EntityDoubleDefinition:
        """Build a definition from a plain dict with snake_case keys.

        ``entity_type`` is required; every other key is optional. Raw field
        values are wrapped in :class:`FieldDoubleDefinition`.
        """
        known = set(cls.model_fields)
        unknown = sorted(set(data) - known)
        if unknown:
            msg = f"Unknown definition keys: {', '.join(unknown)}"
            raise DoubleConfigurationError(msg)
        return cls(**dict(data))

    # --- Queries ---

    def has_interface(self, name: str) -> bool:
        return name in self.interfaces

    def has_method_override(self, method: str) -> bool:
        return method in self.method_overrides

    def get_method_override(self, method: str) -> Any:
        return self.method_overrides.get(method)

    def has_field(self, field_name: str) -> bool:
        return field_name in self.fields

    def get_field(self, field_name: str) -> FieldDoubleDefinition | None:
        return self.fields.get(field_name)

    # --- Derivations ---

    def with_context(self, extra: Mapping[str, Any]) -> EntityDoubleDefinition:
        """Return a copy whose context has *extra* merged over the current one."""
        if not extra:
            return self
        return self.model_copy(update={"context": {**self.context, **extra}})

    def with_mutable(self, mutable: bool) -> EntityDoubleDefinition:
        if mutable == self.mutable:
            return self
        return self.model_copy(update={"mutable": mutable})
