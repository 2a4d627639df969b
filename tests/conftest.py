"""Shared pytest fixtures and test helpers for standin tests."""

from __future__ import annotations

from typing import Any

import pytest

from standin.backends import BUILTIN_BACKENDS
from standin.domain.capabilities import CapabilityRegistry
from standin.domain.catalog import load_entity_catalog
from standin.factory import EntityDoubleFactory

pytest_plugins = ["pytester"]


@pytest.fixture
def registry() -> CapabilityRegistry:
    """Fresh registry loaded with the entity catalog.

    Isolated per test so synthesized capabilities never leak between tests.
    """
    return load_entity_catalog(CapabilityRegistry())


@pytest.fixture(params=sorted(BUILTIN_BACKENDS))
def backend_name(request: pytest.FixtureRequest) -> str:
    """Every built-in backend name; tests using it run once per backend."""
    return request.param


@pytest.fixture
def factory(backend_name: str, registry: CapabilityRegistry) -> EntityDoubleFactory:
    """Factory on each built-in backend in turn."""
    return EntityDoubleFactory(BUILTIN_BACKENDS[backend_name](), registry=registry)


@pytest.fixture
def mock_only_factory(registry: CapabilityRegistry) -> EntityDoubleFactory:
    return EntityDoubleFactory(BUILTIN_BACKENDS["mock"](), registry=registry)


@pytest.fixture
def proxy_only_factory(registry: CapabilityRegistry) -> EntityDoubleFactory:
    return EntityDoubleFactory(BUILTIN_BACKENDS["proxy"](), registry=registry)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def article(**overrides: Any) -> dict[str, Any]:
    """Definition mapping for a fieldable ``node:article``."""
    definition: dict[str, Any] = {
        "entity_type": "node",
        "bundle": "article",
        "id": 1,
        "uuid": "9b0c5e52-4f7e-4c3a-9d55-0f7e4a1b2c3d",
        "label": "Hello",
        "fields": {"title": "Hello"},
        "interfaces": ["fieldable"],
    }
    definition.update(overrides)
    return definition
