"""standin — capability-driven entity doubles for isolated unit tests.

Build lightweight stand-ins for entity, field list and field item objects
from declarative definitions, on a ``unittest.mock`` or dispatch-table
backend.
"""

from standin.backends import DoubleBackend, MockBackend, ProxyBackend
from standin.domain.builder import EntityDoubleDefinitionBuilder
from standin.domain.capabilities import CapabilityRegistry, CapabilitySpec, MethodSpec
from standin.domain.catalog import default_registry
from standin.domain.definitions import EntityDoubleDefinition, FieldDoubleDefinition
from standin.domain.errors import (
    BackendNotFoundError,
    DoubleConfigurationError,
    DoubleError,
    GuardrailError,
    ImmutableDoubleError,
    MissingResolverError,
    UndefinedFieldError,
    UnsupportedOperationError,
    UnsupportedPropertyError,
)
from standin.factory import EntityDoubleFactory

__version__ = "0.1.0"

__all__ = [
    "BackendNotFoundError",
    "CapabilityRegistry",
    "CapabilitySpec",
    "DoubleBackend",
    "DoubleConfigurationError",
    "DoubleError",
    "EntityDoubleDefinition",
    "EntityDoubleDefinitionBuilder",
    "EntityDoubleFactory",
    "FieldDoubleDefinition",
    "GuardrailError",
    "ImmutableDoubleError",
    "MethodSpec",
    "MissingResolverError",
    "MockBackend",
    "ProxyBackend",
    "UndefinedFieldError",
    "UnsupportedOperationError",
    "UnsupportedPropertyError",
    "__version__",
    "default_registry",
]
