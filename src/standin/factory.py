"""Entity double factory: definitions in, wired doubles out.

Usage::

    factory = EntityDoubleFactory.for_backend("proxy")
    node = factory.create(
        {
            "entity_type": "node",
            "bundle": "article",
            "id": 1,
            "fields": {"title": "Hello"},
            "interfaces": ["fieldable"],
        }
    )
    assert node.get("title").value == "Hello"

The factory owns no per-double state. Each double gets its own resolver
builders (and, when mutable, its own state container); field lists and
field items are built lazily through the same backend on first access.

Supported: scalar and callable values, multi-value fields with delta
access, entity references, extra capabilities, method overrides, shared
context, and mutable doubles. Storage, access control, translation, URL
generation and reference traversal raise instead; they need a real
runtime.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from standin.backends.base import DoubleBackend
from standin.config.settings import StandinSettings
from standin.core.dispatch import DoubleBlueprint, Resolver, ResolverChain
from standin.core.entity import EntityResolverBuilder
from standin.core.field_item import FieldItemResolverBuilder
from standin.core.field_list import FieldListResolverBuilder
from standin.core.guardrails import GuardrailEnforcer
from standin.core.state import MutableStateContainer
from standin.domain import references
from standin.domain.capabilities import CapabilityRegistry
from standin.domain.catalog import (
    FIELD_ITEM_CAPABILITY,
    FIELD_ITEM_LIST_CAPABILITY,
    default_registry,
)
from standin.domain.composition import ResolvedCapabilities, resolve_capabilities
from standin.domain.definitions import ROOT_CAPABILITY, EntityDoubleDefinition
from standin.domain.errors import DoubleConfigurationError
from standin.plugins.manager import BackendManager

logger = logging.getLogger(__name__)

DefinitionInput = EntityDoubleDefinition | Mapping[str, Any]


class EntityDoubleFactory:
    """Builds entity doubles on one backend against one capability registry."""

    def __init__(
        self,
        backend: DoubleBackend,
        registry: CapabilityRegistry | None = None,
    ) -> None:
        self.backend = backend
        self.registry = registry if registry is not None else default_registry()

    @classmethod
    def for_backend(
        cls,
        name: str | None = None,
        *,
        registry: CapabilityRegistry | None = None,
        manager: BackendManager | None = None,
        settings: StandinSettings | None = None,
    ) -> EntityDoubleFactory:
        """Create a factory for the backend registered under *name*.

        When *name* is omitted the backend comes from settings
        (``STANDIN_BACKEND``, default ``mock``).

        Raises:
            BackendNotFoundError: If no plugin registers the backend.
        """
        if name is None:
            name = (settings or StandinSettings()).backend
        if manager is None:
            manager = BackendManager()
            manager.discover_and_load()
        return cls(manager.get_backend(name), registry=registry)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create(self, definition: DefinitionInput, context: Mapping[str, Any] | None = None) -> Any:
        """Build an immutable entity double.

        *context* is merged over the definition's own context.
        """
        return self._build_entity(self._normalize(definition, context, mutable=False))

    def create_mutable(
        self, definition: DefinitionInput, context: Mapping[str, Any] | None = None
    ) -> Any:
        """Build an entity double that accepts field writes."""
        return self._build_entity(self._normalize(definition, context, mutable=True))

    def is_entity(self, obj: Any) -> bool:
        """Whether *obj* satisfies the root entity capability."""
        return isinstance(obj, self.registry.interface(ROOT_CAPABILITY))

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize(
        definition: DefinitionInput,
        context: Mapping[str, Any] | None,
        *,
        mutable: bool,
    ) -> EntityDoubleDefinition:
        if isinstance(definition, Mapping):
            definition = EntityDoubleDefinition.from_mapping(definition)
        elif not isinstance(definition, EntityDoubleDefinition):
            msg = (
                "definition must be an EntityDoubleDefinition or a mapping, "
                f"got {type(definition).__name__}"
            )
            raise DoubleConfigurationError(msg)
        return definition.with_context(context or {}).with_mutable(mutable)

    def _check_references(self, definition: EntityDoubleDefinition) -> None:
        """Validate static entity references so mismatches fail in create().

        Callable values resolve lazily and are checked on first access.
        """
        for field in definition.fields.values():
            value = field.value
            if callable(value) or not references.contains_entity_references(
                value, self.is_entity
            ):
                continue
            references.normalize(value, self.is_entity)

    def _build_entity(self, definition: EntityDoubleDefinition) -> Any:
        self._check_references(definition)
        capabilities = resolve_capabilities(
            definition.interfaces,
            self.registry,
            supports_intersection=self.backend.supports_intersection,
        )
        state = MutableStateContainer() if definition.mutable else None
        builder = EntityResolverBuilder(definition, state)
        label = f"{definition.entity_type}:{definition.bundle}"

        blueprint = self._blueprint(
            label,
            capabilities,
            builder.build(),
            context=definition.context,
            overrides=definition.method_overrides,
            lenient=definition.lenient,
        )
        double = self.backend.build(blueprint)
        builder.set_field_list_factory(
            lambda field_name, raw: self._build_field_list(
                definition, label, field_name, raw, builder
            )
        )
        logger.debug(
            "Created %s entity double %s with capabilities %s",
            "mutable" if definition.mutable else "immutable",
            label,
            list(capabilities.names),
        )
        return double

    def _build_field_list(
        self,
        definition: EntityDoubleDefinition,
        entity_label: str,
        field_name: str,
        raw_value: Any,
        entity_builder: EntityResolverBuilder,
    ) -> Any:
        builder = FieldListResolverBuilder(
            field_name,
            raw_value,
            is_entity=self.is_entity,
            mutable=definition.mutable,
        )
        label = f"{entity_label}.{field_name}"
        blueprint = self._blueprint(
            label,
            ResolvedCapabilities(names=(FIELD_ITEM_LIST_CAPABILITY,)),
            builder.build(),
            context=definition.context,
        )
        double = self.backend.build(blueprint)
        builder.set_item_factory(
            lambda delta, value: self._build_field_item(
                label, field_name, delta, value, definition.mutable, definition.context
            )
        )
        if definition.mutable:
            builder.set_mutable_state_updater(entity_builder.update_state)
        logger.debug("Created field list double %s", label)
        return double

    def _build_field_item(
        self,
        list_label: str,
        field_name: str,
        delta: int,
        value: Any,
        mutable: bool,
        context: Mapping[str, Any],
    ) -> Any:
        builder = FieldItemResolverBuilder(value, delta, field_name, mutable=mutable)
        label = f"{list_label}[{delta}]"
        blueprint = self._blueprint(
            label,
            ResolvedCapabilities(names=(FIELD_ITEM_CAPABILITY,)),
            builder.build(),
            context=context,
        )
        logger.debug("Created field item double %s", label)
        return self.backend.build(blueprint)

    def _blueprint(
        self,
        label: str,
        capabilities: ResolvedCapabilities,
        resolvers: Mapping[str, Resolver],
        *,
        context: Mapping[str, Any],
        overrides: Mapping[str, Any] | None = None,
        lenient: bool = False,
    ) -> DoubleBlueprint:
        registry = self.registry
        satisfies = set(registry.closure(capabilities.names))
        if capabilities.synthesized is not None:
            satisfies.add(capabilities.synthesized)
        chain = ResolverChain(
            resolvers,
            context=context,
            declared=registry.methods_for(capabilities.names),
            overrides=overrides,
            guardrails=GuardrailEnforcer(lenient=lenient),
        )
        return DoubleBlueprint(
            label=label,
            capabilities=capabilities,
            interfaces=tuple(registry.interface(name) for name in capabilities.names),
            primary=registry.interface(capabilities.primary),
            satisfies=frozenset(satisfies),
            chain=chain,
        )
