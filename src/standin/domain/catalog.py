"""Default entity capability catalog.

Mirrors the shape of a typical content-entity API: a root ``entity``
capability, field access under ``fieldable``, and a handful of optional
traits (changed time, ownership, publishing, translation) that concrete
entity types such as ``node`` compose. Field lists and field items are
capabilities too, so both backends build them through the same contract.

Other catalogs can be registered on any :class:`CapabilityRegistry`; the
core only relies on the names below marked as structural
(``entity``, ``fieldable``, ``field_item_list``, ``field_item``).
"""

from __future__ import annotations

from standin.domain.capabilities import CapabilityRegistry, CapabilitySpec, MethodSpec

FIELD_ITEM_LIST_CAPABILITY = "field_item_list"
FIELD_ITEM_CAPABILITY = "field_item"

ENTITY_CATALOG: tuple[CapabilitySpec, ...] = (
    CapabilitySpec(
        name="entity",
        methods=(
            "id",
            "uuid",
            "entity_type_id",
            "bundle",
            "label",
            "save",
            "delete",
            MethodSpec(name="access", params=("operation", "account"), defaults={"account": None}),
            MethodSpec(name="to_url", params=("rel",), defaults={"rel": "canonical"}),
        ),
        doc="Root capability every entity double exposes.",
    ),
    CapabilitySpec(
        name="fieldable",
        parents=("entity",),
        methods=(
            MethodSpec(name="has_field", params=("field_name",)),
            MethodSpec(name="get", params=("field_name",)),
            MethodSpec(
                name="set",
                params=("field_name", "value", "notify"),
                defaults={"notify": True},
            ),
        ),
    ),
    CapabilitySpec(
        name="translatable",
        parents=("entity",),
        methods=(
            MethodSpec(name="get_translation", params=("langcode",)),
            MethodSpec(name="has_translation", params=("langcode",)),
        ),
    ),
    CapabilitySpec(
        name="changed",
        parents=("entity",),
        methods=(
            "get_changed_time",
            MethodSpec(name="set_changed_time", params=("timestamp",)),
        ),
    ),
    CapabilitySpec(
        name="owner",
        parents=("entity",),
        methods=("get_owner", "get_owner_id"),
    ),
    CapabilitySpec(
        name="published",
        parents=("entity",),
        methods=(
            "is_published",
            MethodSpec(name="set_published", params=("published",), defaults={"published": True}),
        ),
    ),
    CapabilitySpec(
        name="content",
        parents=("fieldable", "translatable"),
        methods=("referenced_entities",),
    ),
    CapabilitySpec(
        name="config",
        parents=("entity",),
        methods=("status", "enable", "disable"),
    ),
    CapabilitySpec(
        name="node",
        parents=("content", "changed", "owner", "published"),
        methods=("get_title", "get_created_time", "is_promoted", "is_sticky"),
    ),
    CapabilitySpec(
        name=FIELD_ITEM_LIST_CAPABILITY,
        methods=(
            "first",
            "is_empty",
            "get_value",
            MethodSpec(name="get", params=("delta",)),
            MethodSpec(name="set_value", params=("values", "notify"), defaults={"notify": True}),
        ),
    ),
    CapabilitySpec(
        name=FIELD_ITEM_CAPABILITY,
        methods=(
            "get_value",
            MethodSpec(name="set_value", params=("values", "notify"), defaults={"notify": True}),
            "is_empty",
        ),
    ),
)

_default_registry: CapabilityRegistry | None = None


def load_entity_catalog(registry: CapabilityRegistry) -> CapabilityRegistry:
    """Register :data:`ENTITY_CATALOG` on *registry* and return it."""
    for spec in ENTITY_CATALOG:
        registry.register(spec)
    return registry


def default_registry() -> CapabilityRegistry:
    """Return the process-wide registry preloaded with the entity catalog."""
    global _default_registry
    if _default_registry is None:
        _default_registry = load_entity_catalog(CapabilityRegistry())
    return _default_registry
