"""Capability specs and the registry that materializes them as classes.

A capability is supplied externally as a name, its parent capabilities and
its method signatures. The registry turns each spec into an abstract class
(:class:`CapabilityMeta`) so doubles can satisfy ``isinstance`` checks, and
synthesizes combined capabilities for backends that accept a single class.

The registry is the long-lived value that owns the process-wide caches:
materialized classes keyed by name, and synthesized capabilities keyed by
the sorted tuple of input names. Pass it explicitly to call sites.
"""

from __future__ import annotations

import hashlib
import inspect
import logging
from abc import ABCMeta, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import BaseModel, Field, field_validator

from standin.domain.errors import DoubleConfigurationError

logger = logging.getLogger(__name__)

SYNTHESIZED_PREFIX = "combined_"


class MethodSpec(BaseModel):
    """A method signature: name, positional parameter names, optional defaults."""

    model_config = {"frozen": True}

    name: str
    params: tuple[str, ...] = ()
    defaults: dict[str, Any] = Field(default_factory=dict)

    def signature(self) -> inspect.Signature:
        parameters = [inspect.Parameter("self", inspect.Parameter.POSITIONAL_OR_KEYWORD)]
        for param in self.params:
            default = self.defaults.get(param, inspect.Parameter.empty)
            parameters.append(
                inspect.Parameter(param, inspect.Parameter.POSITIONAL_OR_KEYWORD, default=default)
            )
        return inspect.Signature(parameters)


class CapabilitySpec(BaseModel):
    """One named interface: its parents and the methods it declares itself."""

    model_config = {"frozen": True}

    name: str
    parents: tuple[str, ...] = ()
    methods: tuple[MethodSpec, ...] = ()
    doc: str = ""

    @field_validator("methods", mode="before")
    @classmethod
    def _coerce_methods(cls, value: Any) -> Any:
        if value is None:
            return ()
        coerced = []
        for item in value:
            if isinstance(item, str):
                coerced.append(MethodSpec(name=item))
            elif isinstance(item, (tuple, list)):
                coerced.append(MethodSpec(name=item[0], params=tuple(item[1:])))
            else:
                coerced.append(item)
        return tuple(coerced)

    @property
    def method_names(self) -> tuple[str, ...]:
        return tuple(m.name for m in self.methods)


class CapabilityMeta(ABCMeta):
    """Metaclass for materialized capabilities.

    Objects whose type defines ``_standin_capability_check`` answer
    ``isinstance`` themselves; this is how dispatch-table doubles claim
    capabilities without a generated class per combination.
    """

    def __instancecheck__(cls, instance: Any) -> bool:
        name = cls.__dict__.get("__capability__")
        checker = getattr(type(instance), "_standin_capability_check", None)
        if name is not None and checker is not None:
            return bool(checker(instance, name))
        return super().__instancecheck__(instance)


class Capability(metaclass=CapabilityMeta):
    """Root of every materialized capability class."""

    __capability__: str | None = None


def _abstract_stub(method: MethodSpec) -> Callable[..., Any]:
    def stub(self: Any, *args: Any, **kwargs: Any) -> Any:
        raise NotImplementedError(method.name)

    stub.__name__ = method.name
    stub.__qualname__ = method.name
    stub.__signature__ = method.signature()  # type: ignore[attr-defined]
    return abstractmethod(stub)


def _class_name(name: str) -> str:
    return "".join(part.capitalize() for part in name.split("_")) + "Capability"


class CapabilityRegistry:
    """Catalog of capability specs plus their materialized classes."""

    def __init__(self, specs: Iterable[CapabilitySpec] = ()) -> None:
        self._specs: dict[str, CapabilitySpec] = {}
        self._classes: dict[str, type[Capability]] = {}
        self._synthesized: dict[tuple[str, ...], str] = {}
        for spec in specs:
            self.register(spec)

    # ------------------------------------------------------------------
    # Registration and lookup
    # ------------------------------------------------------------------

    def register(self, spec: CapabilitySpec) -> None:
        """Add *spec*. Parents must already be registered."""
        existing = self._specs.get(spec.name)
        if existing is not None:
            if existing == spec:
                return
            msg = f"Capability {spec.name!r} is already registered with a different spec"
            raise DoubleConfigurationError(msg)
        for parent in spec.parents:
            if parent not in self._specs:
                msg = f"Capability {spec.name!r} extends unknown capability {parent!r}"
                raise DoubleConfigurationError(msg)
        self._specs[spec.name] = spec

    def has(self, name: str) -> bool:
        return name in self._specs

    def get(self, name: str) -> CapabilitySpec:
        try:
            return self._specs[name]
        except KeyError:
            msg = f"Unknown capability {name!r}"
            raise DoubleConfigurationError(msg) from None

    def names(self) -> list[str]:
        return list(self._specs)

    # ------------------------------------------------------------------
    # Hierarchy
    # ------------------------------------------------------------------

    def ancestors(self, name: str) -> set[str]:
        """Return every strict ancestor of *name*."""
        found: set[str] = set()
        pending = list(self.get(name).parents)
        while pending:
            parent = pending.pop()
            if parent in found:
                continue
            found.add(parent)
            pending.extend(self.get(parent).parents)
        return found

    def is_ancestor(self, candidate: str, of: str) -> bool:
        return candidate != of and candidate in self.ancestors(of)

    def closure(self, names: Iterable[str]) -> list[str]:
        """Return *names* plus all their ancestors, most specific first."""
        ordered: dict[str, None] = {}
        pending = list(names)
        while pending:
            name = pending.pop(0)
            if name in ordered:
                continue
            ordered[name] = None
            pending.extend(self.get(name).parents)
        return list(ordered)

    def methods_for(self, names: Iterable[str]) -> dict[str, str]:
        """Map every method reachable from *names* to its declaring capability."""
        methods: dict[str, str] = {}
        for name in self.closure(names):
            for method in self.get(name).method_names:
                methods.setdefault(method, name)
        return methods

    def declaring_capability(self, method: str, names: Iterable[str]) -> str | None:
        return self.methods_for(names).get(method)

    # ------------------------------------------------------------------
    # Materialization
    # ------------------------------------------------------------------

    def interface(self, name: str) -> type[Capability]:
        """Return the abstract class for *name*, creating it on first use."""
        cached = self._classes.get(name)
        if cached is not None:
            return cached

        spec = self.get(name)
        bases = tuple(self.interface(parent) for parent in spec.parents) or (Capability,)
        namespace: dict[str, Any] = {
            "__capability__": name,
            "__module__": __name__,
            "__doc__": spec.doc or f"Materialized {name!r} capability.",
        }
        for method in spec.methods:
            namespace[method.name] = _abstract_stub(method)

        cls = CapabilityMeta(_class_name(name), bases, namespace)
        self._classes[name] = cls
        logger.debug("Materialized capability %s as %s", name, cls.__name__)
        return cls

    def synthesize(self, names: Iterable[str]) -> str:
        """Register one capability extending all *names*; reuse it for the same set."""
        key = tuple(sorted(set(names)))
        cached = self._synthesized.get(key)
        if cached is not None:
            return cached

        for name in key:
            self.get(name)
        digest = hashlib.sha256("|".join(key).encode("utf-8")).hexdigest()[:12]
        synthesized = f"{SYNTHESIZED_PREFIX}{digest}"
        self.register(
            CapabilitySpec(
                name=synthesized,
                parents=key,
                doc=f"Synthesized union of {', '.join(key)}.",
            )
        )
        self._synthesized[key] = synthesized
        logger.debug("Synthesized capability %s for %s", synthesized, key)
        return synthesized

    @property
    def synthesized_count(self) -> int:
        return len(self._synthesized)
