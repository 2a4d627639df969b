"""Pluggy hook specifications for standin backend discovery."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from standin.backends.base import DoubleBackend

hookspec = pluggy.HookspecMarker("standin")


class StandinHookSpec:
    """Hook specifications for the standin plugin system."""

    @hookspec
    def standin_register_backends(self) -> dict[str, type[DoubleBackend]] | None:
        """Return backend name -> backend class mappings."""
