"""Method resolution shared by every backend.

A :class:`ResolverChain` answers one double's method calls. The order is
evaluated fresh on every call and never memoized:

1. an entry in the definition's ``method_overrides`` always wins;
2. otherwise the core resolver for the method, if there is one;
3. otherwise the :class:`GuardrailEnforcer` fallback for a declared
   capability method.

Resolvers are called as ``resolver(context, *args, **kwargs)``. A chaining
resolver returns :data:`SELF`; the backend substitutes the double itself.

The backend receives a :class:`DoubleBlueprint` and nothing else: it never
sees definitions, state containers or field caches.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from standin.core.guardrails import GuardrailEnforcer
from standin.domain.capabilities import Capability
from standin.domain.composition import ResolvedCapabilities

Resolver = Callable[..., Any]

PROPERTY_GET = "__getattr__"
PROPERTY_SET = "__setattr__"
PROPERTY_HOOKS = frozenset({PROPERTY_GET, PROPERTY_SET})


class _SelfSentinel:
    """Placeholder a resolver returns when the call should yield the double."""

    _instance: _SelfSentinel | None = None

    def __new__(cls) -> _SelfSentinel:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SELF"


SELF = _SelfSentinel()


class ResolverChain:
    """Overrides, then core resolvers, then the guardrail, per call."""

    def __init__(
        self,
        resolvers: Mapping[str, Resolver],
        *,
        context: Mapping[str, Any],
        declared: Mapping[str, str] | None = None,
        overrides: Mapping[str, Any] | None = None,
        guardrails: GuardrailEnforcer | None = None,
    ) -> None:
        self._resolvers = dict(resolvers)
        self._declared = dict(declared or {})
        self._overrides = dict(overrides or {})
        self._guardrails = guardrails or GuardrailEnforcer()
        self.context = dict(context)

    def handles(self, method: str) -> bool:
        return method in self._overrides or method in self._resolvers or method in self._declared

    def method_names(self) -> tuple[str, ...]:
        """Every callable method a backend must bind, property hooks excluded.

        Declared capability methods come first in declaration order, then
        override-only methods. Core resolvers for methods no requested
        capability declares are reachable only through the property hooks.
        """
        names = dict.fromkeys(self._declared)
        names.update(dict.fromkeys(self._overrides))
        return tuple(name for name in names if name not in PROPERTY_HOOKS)

    def call(self, method: str, *args: Any, **kwargs: Any) -> Any:
        """Resolve one call to *method*.

        Raises:
            AttributeError: If nothing in the chain handles *method*.
            GuardrailError: In strict mode, for a declared method without
                override or core resolver.
        """
        if method in self._overrides:
            override = self._overrides[method]
            if callable(override):
                return override(self.context, *args, **kwargs)
            return override

        resolver = self._resolvers.get(method)
        if resolver is not None:
            return resolver(self.context, *args, **kwargs)

        interface = self._declared.get(method)
        if interface is not None:
            return self._guardrails.fallback(method, interface)

        msg = f"No resolver handles method {method!r}"
        raise AttributeError(msg)


@dataclass(frozen=True)
class DoubleBlueprint:
    """Everything a backend needs to build one double.

    Attributes:
        label: Human-readable name used in the double's repr.
        capabilities: Result of interface composition.
        interfaces: Materialized class for each name in ``capabilities.names``.
        primary: The single class a one-class backend builds from.
        satisfies: Every capability name ``isinstance`` must accept.
        chain: Resolution for every bound method and property hook.
    """

    label: str
    capabilities: ResolvedCapabilities
    interfaces: tuple[type[Capability], ...]
    primary: type[Capability]
    satisfies: frozenset[str]
    chain: ResolverChain
    methods: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        if not self.methods:
            object.__setattr__(self, "methods", self.chain.method_names())

    @property
    def context(self) -> dict[str, Any]:
        return self.chain.context

    def handles_property_get(self) -> bool:
        return self.chain.handles(PROPERTY_GET)

    def handles_property_set(self) -> bool:
        return self.chain.handles(PROPERTY_SET)
