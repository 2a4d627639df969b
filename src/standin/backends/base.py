"""Backend wiring contract.

A backend turns a :class:`DoubleBlueprint` into a concrete object. It must:

- satisfy ``isinstance`` for every capability in ``blueprint.satisfies``;
- bind every name in ``blueprint.methods`` so a call runs the chain;
- route unknown attribute reads and writes to the property hooks;
- return the double itself wherever the chain returns ``SELF``.

Backends differ only in how they build the object. Resolution, caching and
errors live in the core, so the same definition behaves identically on
every backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, ClassVar

from standin.core.dispatch import PROPERTY_GET, PROPERTY_SET, SELF, DoubleBlueprint, ResolverChain


def make_dispatcher(chain: ResolverChain, method: str, double: Any) -> Callable[..., Any]:
    """Return a callable running *method* through *chain* on behalf of *double*."""

    def dispatch(*args: Any, **kwargs: Any) -> Any:
        result = chain.call(method, *args, **kwargs)
        return double if result is SELF else result

    dispatch.__name__ = method
    dispatch.__qualname__ = method
    return dispatch


def property_hooks(
    blueprint: DoubleBlueprint, double: Any
) -> tuple[Callable[..., Any] | None, Callable[..., Any] | None]:
    """Return the (getter, setter) dispatchers the blueprint handles, else ``None``."""
    getter: Callable[..., Any] | None = None
    setter: Callable[..., Any] | None = None
    if blueprint.handles_property_get():
        getter = make_dispatcher(blueprint.chain, PROPERTY_GET, double)
    if blueprint.handles_property_set():
        setter = make_dispatcher(blueprint.chain, PROPERTY_SET, double)
    return getter, setter


class DoubleBackend(ABC):
    """Builds doubles from blueprints.

    Subclasses set :attr:`name` (the key used by settings and the plugin
    manager) and :attr:`supports_intersection`: whether one object can
    expose several unrelated capabilities without a synthesized union.
    """

    name: ClassVar[str]
    supports_intersection: ClassVar[bool] = False

    @abstractmethod
    def build(self, blueprint: DoubleBlueprint) -> Any:
        """Construct and return the double described by *blueprint*."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
