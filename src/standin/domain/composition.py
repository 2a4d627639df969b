"""Interface composition — which capabilities an entity double must expose.

Pure function of the requested names and the registry:

1. The root capability is always included.
2. A requested capability that is a strict ancestor of another requested
   one is dropped (the descendant already covers it).
3. Backends that accept a single class cannot expose two sibling
   capabilities at once; for them the remaining names are folded into one
   synthesized capability, cached on the registry by the sorted name set.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from standin.domain.capabilities import CapabilityRegistry
from standin.domain.definitions import ROOT_CAPABILITY


@dataclass(frozen=True)
class ResolvedCapabilities:
    """Result of interface composition."""

    names: tuple[str, ...]
    synthesized: str | None = None

    @property
    def primary(self) -> str:
        """The single capability a one-class backend should build from."""
        return self.synthesized or self.names[0]


def resolve_capabilities(
    requested: Iterable[str],
    registry: CapabilityRegistry,
    *,
    supports_intersection: bool,
) -> ResolvedCapabilities:
    """Compute the capability set for a double.

    Raises:
        DoubleConfigurationError: If a requested name is not registered.
    """
    names = list(dict.fromkeys([ROOT_CAPABILITY, *requested]))
    for name in names:
        registry.get(name)

    kept = tuple(
        name
        for name in names
        if not any(registry.is_ancestor(name, other) for other in names if other != name)
    )

    if supports_intersection or len(kept) < 2:
        return ResolvedCapabilities(names=kept)
    return ResolvedCapabilities(names=kept, synthesized=registry.synthesize(kept))
