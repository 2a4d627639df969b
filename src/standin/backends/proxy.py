"""Backend building doubles on a dispatch-table proxy.

A :class:`DoubleProxy` holds a table of bound methods keyed by name and two
property hooks for unknown attribute reads and writes. It claims
capabilities through :class:`~standin.domain.capabilities.CapabilityMeta`,
so one object can satisfy any number of sibling capabilities without a
synthesized union class.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from standin.backends.base import DoubleBackend, make_dispatcher, property_hooks
from standin.core.dispatch import DoubleBlueprint

logger = logging.getLogger(__name__)


class DoubleProxy:
    """Generic double: a method table plus property hooks."""

    __slots__ = (
        "_standin_label",
        "_standin_satisfies",
        "_standin_methods",
        "_standin_getter",
        "_standin_setter",
    )

    def __init__(self, label: str, satisfies: frozenset[str]) -> None:
        object.__setattr__(self, "_standin_label", label)
        object.__setattr__(self, "_standin_satisfies", satisfies)
        object.__setattr__(self, "_standin_methods", {})
        object.__setattr__(self, "_standin_getter", None)
        object.__setattr__(self, "_standin_setter", None)

    def _standin_bind(
        self,
        methods: dict[str, Callable[..., Any]],
        getter: Callable[..., Any] | None,
        setter: Callable[..., Any] | None,
    ) -> None:
        object.__getattribute__(self, "_standin_methods").update(methods)
        object.__setattr__(self, "_standin_getter", getter)
        object.__setattr__(self, "_standin_setter", setter)

    @staticmethod
    def _standin_capability_check(instance: DoubleProxy, name: str) -> bool:
        return name in object.__getattribute__(instance, "_standin_satisfies")

    def __getattr__(self, name: str) -> Any:
        methods = object.__getattribute__(self, "_standin_methods")
        if name in methods:
            return methods[name]
        getter = object.__getattribute__(self, "_standin_getter")
        if getter is None or name.startswith("_"):
            label = object.__getattribute__(self, "_standin_label")
            msg = f"Double {label!r} has no attribute {name!r}"
            raise AttributeError(msg)
        return getter(name)

    def __setattr__(self, name: str, value: Any) -> None:
        setter = object.__getattribute__(self, "_standin_setter")
        if setter is None or name.startswith("_"):
            label = object.__getattribute__(self, "_standin_label")
            msg = f"Double {label!r} does not accept attribute {name!r}"
            raise AttributeError(msg)
        setter(name, value)

    def __dir__(self) -> list[str]:
        return sorted(object.__getattribute__(self, "_standin_methods"))

    def __repr__(self) -> str:
        label = object.__getattribute__(self, "_standin_label")
        satisfies = ", ".join(sorted(object.__getattribute__(self, "_standin_satisfies")))
        return f"<DoubleProxy {label} [{satisfies}]>"


class ProxyBackend(DoubleBackend):
    """Builds :class:`DoubleProxy` doubles."""

    name = "proxy"
    supports_intersection = True

    def build(self, blueprint: DoubleBlueprint) -> DoubleProxy:
        double = DoubleProxy(blueprint.label, blueprint.satisfies)
        methods = {
            method: make_dispatcher(blueprint.chain, method, double)
            for method in blueprint.methods
        }
        getter, setter = property_hooks(blueprint, double)
        double._standin_bind(methods, getter, setter)

        logger.debug(
            "Built proxy double %s satisfying %s (%d methods)",
            blueprint.label,
            sorted(blueprint.satisfies),
            len(methods),
        )
        return double
