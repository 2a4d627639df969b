"""Behavior of entity doubles built by EntityDoubleFactory, on every backend."""

from __future__ import annotations

from typing import Any

import pytest

from standin.domain.builder import EntityDoubleDefinitionBuilder
from standin.domain.capabilities import CapabilityRegistry
from standin.domain.definitions import EntityDoubleDefinition
from standin.domain.errors import (
    DoubleConfigurationError,
    ImmutableDoubleError,
    MissingResolverError,
    UndefinedFieldError,
    UnsupportedOperationError,
    UnsupportedPropertyError,
)
from standin.factory import EntityDoubleFactory
from tests.conftest import article

# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


class TestMetadata:
    def test_scalars(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article())
        assert node.id() == 1
        assert node.uuid() == "9b0c5e52-4f7e-4c3a-9d55-0f7e4a1b2c3d"
        assert node.label() == "Hello"
        assert node.bundle() == "article"
        assert node.entity_type_id() == "node"

    def test_bundle_defaults_to_entity_type(self, factory: EntityDoubleFactory) -> None:
        user = factory.create({"entity_type": "user"})
        assert user.bundle() == "user"
        assert user.id() is None

    def test_callable_metadata_uses_merged_context(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(
            article(id=lambda context: context["nid"], context={"nid": 1}),
            {"nid": 7},
        )
        assert node.id() == 7

    def test_accepts_definition_objects(self, factory: EntityDoubleFactory) -> None:
        definition = EntityDoubleDefinitionBuilder.create("node").id(3).build()
        assert factory.create(definition).id() == 3

    def test_rejects_other_inputs(self, factory: EntityDoubleFactory) -> None:
        with pytest.raises(DoubleConfigurationError, match="definition must be"):
            factory.create(["node"])  # type: ignore[arg-type]

    def test_rejects_invalid_mapping(self, factory: EntityDoubleFactory) -> None:
        with pytest.raises(DoubleConfigurationError):
            factory.create({"entity_type": "node", "fields": {"title": "x"}})


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------


class TestCapabilities:
    def test_isinstance_for_every_requested_capability(
        self, factory: EntityDoubleFactory, registry: CapabilityRegistry
    ) -> None:
        node = factory.create(article(interfaces=["fieldable", "owner", "published"]))
        for name in ("entity", "fieldable", "owner", "published"):
            assert isinstance(node, registry.interface(name))
        assert not isinstance(node, registry.interface("translatable"))

    def test_ancestors_satisfied(
        self, factory: EntityDoubleFactory, registry: CapabilityRegistry
    ) -> None:
        node = factory.create({"entity_type": "node", "interfaces": ["node"]})
        for name in registry.closure(["node"]):
            assert isinstance(node, registry.interface(name))

    def test_is_entity(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article())
        assert factory.is_entity(node)
        assert not factory.is_entity(node.get("title"))
        assert not factory.is_entity({"id": 1})

    def test_unknown_capability(self, factory: EntityDoubleFactory) -> None:
        with pytest.raises(DoubleConfigurationError, match="Unknown capability 'widget'"):
            factory.create({"entity_type": "node", "interfaces": ["widget"]})


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------


class TestFields:
    def test_scalar_field(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article())
        title = node.get("title")
        assert title.value == "Hello"
        assert title.first().value == "Hello"
        assert title.get_value() == [{"value": "Hello"}]
        assert title.is_empty() is False

    def test_field_list_identity(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article())
        assert node.get("title") is node.get("title")

    def test_property_access(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article())
        assert node.title is node.get("title")
        assert node.title.value == "Hello"

    def test_has_field(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article())
        assert node.has_field("title") is True
        assert node.has_field("body") is False

    def test_undefined_field(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article())
        with pytest.raises(UndefinedFieldError, match="field 'body' is not defined"):
            node.get("body")
        assert not hasattr(node, "body")

    def test_multi_value_field(self, factory: EntityDoubleFactory) -> None:
        tags = [{"target_id": 1}, {"target_id": 2}, {"target_id": 3}]
        node = factory.create(article(fields={"field_tags": tags}))
        field = node.get("field_tags")
        for delta, record in enumerate(tags):
            assert field.get(delta).target_id == record["target_id"]
        assert field.get(len(tags)) is None
        assert field.get(-1) is None
        assert field.target_id == 1
        assert field.get(1) is field.get(1)
        assert field.get_value() == tags

    def test_empty_field(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article(fields={"body": None}))
        body = node.get("body")
        assert body.is_empty() is True
        assert body.first() is None
        assert body.value is None

    def test_empty_list_item(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article(fields={"matrix": [[], [1, 2]]}))
        matrix = node.get("matrix")
        assert matrix.get(0).is_empty() is True
        assert matrix.get(1).is_empty() is False

    def test_item_methods(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article(fields={"body": {"value": "Text", "format": "html"}}))
        item = node.get("body").first()
        assert item.value == "Text"
        assert item.format == "html"
        assert item.missing is None
        assert item.get_value() == {"value": "Text", "format": "html"}
        assert item.is_empty() is False

    def test_callable_field_invoked_once(self, factory: EntityDoubleFactory) -> None:
        calls: list[dict[str, Any]] = []

        def title(context: dict[str, Any]) -> str:
            calls.append(context)
            return f"Hello {context['name']}"

        node = factory.create(article(fields={"title": title}), {"name": "Ada"})
        assert node.get("title").value == "Hello Ada"
        assert node.get("title").value == "Hello Ada"
        assert node.title.first().value == "Hello Ada"
        assert len(calls) == 1
        assert calls[0]["name"] == "Ada"

    def test_article_example(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(
            {
                "entity_type": "node",
                "bundle": "article",
                "fields": {"title": "Hello"},
                "interfaces": ["fieldable"],
            }
        )
        assert node.get("title").value == "Hello"
        assert node.get("title") is node.get("title")


# ---------------------------------------------------------------------------
# Entity references
# ---------------------------------------------------------------------------


class TestReferences:
    def test_single_entity(self, factory: EntityDoubleFactory) -> None:
        author = factory.create({"entity_type": "user", "id": 42})
        node = factory.create(article(fields={"uid": author}))
        assert node.get("uid").target_id == 42
        assert node.get("uid").entity is author
        assert node.uid.first().entity.id() == 42

    def test_list_of_entities(self, factory: EntityDoubleFactory) -> None:
        tags = [factory.create({"entity_type": "taxonomy_term", "id": i}) for i in (3, 4)]
        node = factory.create(article(fields={"field_tags": [tags[0], {"entity": tags[1]}]}))
        field = node.get("field_tags")
        assert field.get(0).target_id == 3
        assert field.get(1).entity is tags[1]
        assert field.get(2) is None

    def test_mismatched_target_id_fails_at_create(self, factory: EntityDoubleFactory) -> None:
        author = factory.create({"entity_type": "user", "id": 42})
        with pytest.raises(DoubleConfigurationError, match="target_id mismatch"):
            factory.create(article(fields={"uid": {"entity": author, "target_id": 1}}))

    def test_mismatch_in_list_fails_at_create(self, factory: EntityDoubleFactory) -> None:
        tag = factory.create({"entity_type": "taxonomy_term", "id": 3})
        with pytest.raises(DoubleConfigurationError, match="target_id mismatch"):
            factory.create_mutable(
                article(fields={"field_tags": [{"entity": tag, "target_id": 4}]})
            )

    def test_callable_reference_checked_on_access(self, factory: EntityDoubleFactory) -> None:
        author = factory.create({"entity_type": "user", "id": 42})
        node = factory.create(
            article(fields={"uid": lambda context: {"entity": author, "target_id": 1}})
        )
        with pytest.raises(DoubleConfigurationError, match="target_id mismatch"):
            node.get("uid").first()


# ---------------------------------------------------------------------------
# Overrides and guardrails
# ---------------------------------------------------------------------------


class TestOverrides:
    def test_override_beats_core_resolver(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article(method_overrides={"label": "Overridden"}))
        assert node.label() == "Overridden"

    def test_callable_override_gets_context_and_args(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(
            article(
                interfaces=["fieldable", "translatable"],
                method_overrides={
                    "has_translation": lambda context, langcode: langcode in context["langs"]
                },
                context={"langs": ["en", "de"]},
            )
        )
        assert node.has_translation("de") is True
        assert node.has_translation("fr") is False

    def test_override_of_guarded_method(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article(method_overrides={"save": 1}))
        assert node.save() == 1

    def test_override_only_method(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article(method_overrides={"get_cache_tags": ["node:1"]}))
        assert node.get_cache_tags() == ["node:1"]


class TestGuardrails:
    @pytest.mark.parametrize("method", ["save", "delete", "to_url"])
    def test_unsupported(self, factory: EntityDoubleFactory, method: str) -> None:
        node = factory.create(article())
        with pytest.raises(UnsupportedOperationError, match=f"method '{method}' is not supported"):
            getattr(node, method)()

    def test_unsupported_with_arguments(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article())
        with pytest.raises(UnsupportedOperationError):
            node.access("view")

    def test_missing_resolver(self, factory: EntityDoubleFactory) -> None:
        node = factory.create({"entity_type": "node", "interfaces": ["node"]})
        with pytest.raises(MissingResolverError) as excinfo:
            node.get_title()
        assert str(excinfo.value) == (
            "method 'get_title' requires an entry in methodOverrides (declaring interface: 'node')"
        )

    def test_lenient_returns_none(self, factory: EntityDoubleFactory) -> None:
        node = factory.create({"entity_type": "node", "interfaces": ["node"], "lenient": True})
        assert node.save() is None
        assert node.get_title() is None
        assert node.get_translation("de") is None
        assert node.id() is None


# ---------------------------------------------------------------------------
# Mutability
# ---------------------------------------------------------------------------


class TestImmutable:
    def test_set_raises_with_field_name(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article())
        with pytest.raises(ImmutableDoubleError, match="cannot modify field 'title'"):
            node.set("title", "New")
        assert node.get("title").value == "Hello"

    def test_property_set_raises(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article())
        with pytest.raises(ImmutableDoubleError):
            node.title = "New"

    def test_field_list_writes_raise(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article())
        with pytest.raises(ImmutableDoubleError):
            node.get("title").set_value("New")
        with pytest.raises(ImmutableDoubleError):
            node.get("title").value = "New"
        assert node.get("title").value == "Hello"

    def test_item_writes_raise(self, factory: EntityDoubleFactory) -> None:
        item = factory.create(article()).get("title").first()
        with pytest.raises(ImmutableDoubleError):
            item.value = "New"
        with pytest.raises(ImmutableDoubleError):
            item.set_value("New")

    def test_create_ignores_mutable_flag(self, factory: EntityDoubleFactory) -> None:
        node = factory.create(article(mutable=True))
        with pytest.raises(ImmutableDoubleError):
            node.set("title", "New")


class TestMutable:
    def test_set_then_get(self, factory: EntityDoubleFactory) -> None:
        node = factory.create_mutable(article())
        before = node.get("title")
        assert node.set("title", "New") is node
        after = node.get("title")
        assert after.value == "New"
        assert after is not before
        assert node.get("title") is after

    def test_set_chains(self, factory: EntityDoubleFactory) -> None:
        node = factory.create_mutable(article(fields={"title": "a", "body": "b"}))
        node.set("title", "A").set("body", "B", notify=False)
        assert node.get("title").value == "A"
        assert node.get("body").value == "B"

    def test_property_set(self, factory: EntityDoubleFactory) -> None:
        node = factory.create_mutable(article())
        node.title = "New"
        assert node.title.value == "New"

    def test_set_undefined_field(self, factory: EntityDoubleFactory) -> None:
        node = factory.create_mutable(article())
        with pytest.raises(UndefinedFieldError):
            node.set("body", "x")

    def test_field_list_set_value(self, factory: EntityDoubleFactory) -> None:
        node = factory.create_mutable(article())
        title = node.get("title")
        assert title.set_value("New") is title
        assert title.value == "New"
        assert node.get("title").value == "New"

    def test_field_list_property_set(self, factory: EntityDoubleFactory) -> None:
        node = factory.create_mutable(article())
        node.get("title").value = "New"
        assert node.get("title").value == "New"

    def test_field_list_unsupported_property(self, factory: EntityDoubleFactory) -> None:
        node = factory.create_mutable(article())
        with pytest.raises(UnsupportedPropertyError):
            node.get("title").target_id = 3

    def test_item_write_visible_on_same_item(self, factory: EntityDoubleFactory) -> None:
        node = factory.create_mutable(article(fields={"body": {"value": "a", "format": "plain"}}))
        item = node.get("body").first()
        item.format = "html"
        assert item.format == "html"
        assert item.set_value({"value": "b"}) is item
        assert item.get_value() == {"value": "b"}

    def test_doubles_do_not_share_state(self, factory: EntityDoubleFactory) -> None:
        definition = EntityDoubleDefinition.from_mapping(article())
        first = factory.create_mutable(definition)
        second = factory.create_mutable(definition)
        first.set("title", "Changed")
        assert second.get("title").value == "Hello"
