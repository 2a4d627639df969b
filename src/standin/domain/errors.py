"""Exception taxonomy for entity doubles.

Every failure a double can raise derives from :class:`DoubleError`. The
message templates are part of the public contract: tests downstream assert
on them verbatim, so change them only with a major version.

INVARIANT: Failures are raised, never logged.
"""

from __future__ import annotations

IMMUTABLE_FIELD_TEMPLATE = (
    "cannot modify field '{field}' on an immutable double; "
    "construct a mutable double if you need to test mutations."
)
UNDEFINED_FIELD_TEMPLATE = "field '{field}' is not defined on this entity double"
UNSUPPORTED_METHOD_TEMPLATE = (
    "method '{method}' is not supported: this is a unit-test value object; "
    "use a full integration-style test for this behavior"
)
MISSING_RESOLVER_TEMPLATE = (
    "method '{method}' requires an entry in methodOverrides "
    "(declaring interface: '{interface}')"
)


class DoubleError(Exception):
    """Base class for every error raised by a double or its construction."""


class DoubleConfigurationError(DoubleError, ValueError):
    """The definition itself is invalid. Raised at construction, never later."""


class UndefinedFieldError(DoubleError, LookupError, AttributeError):
    """A field name was accessed that the definition does not declare.

    Also an ``AttributeError`` so property-style access behaves with
    ``hasattr`` and ``getattr(obj, name, default)``.
    """

    def __init__(self, field_name: str) -> None:
        super().__init__(UNDEFINED_FIELD_TEMPLATE.format(field=field_name))
        self.field_name = field_name


class ImmutableDoubleError(DoubleError):
    """A write was attempted on a double constructed as immutable."""

    def __init__(self, field_name: str) -> None:
        super().__init__(IMMUTABLE_FIELD_TEMPLATE.format(field=field_name))
        self.field_name = field_name


class UnsupportedPropertyError(DoubleError):
    """A property write the double has no semantics for."""


class GuardrailError(DoubleError, NotImplementedError):
    """A capability method was called that the definition does not cover."""

    def __init__(self, message: str, method: str) -> None:
        super().__init__(message)
        self.method = method


class UnsupportedOperationError(GuardrailError):
    """A catalogued operation that needs real runtime services."""

    def __init__(self, method: str) -> None:
        super().__init__(UNSUPPORTED_METHOD_TEMPLATE.format(method=method), method)


class MissingResolverError(GuardrailError):
    """A declared capability method with neither override nor core resolver."""

    def __init__(self, method: str, interface: str) -> None:
        super().__init__(
            MISSING_RESOLVER_TEMPLATE.format(method=method, interface=interface),
            method,
        )
        self.interface = interface


class BackendNotFoundError(DoubleError, KeyError):
    """No double-construction backend is registered under the requested name."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ""
