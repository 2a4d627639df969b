"""Built-in plugin registering the ``mock`` and ``proxy`` backends."""

from __future__ import annotations

import pluggy

from standin.backends import BUILTIN_BACKENDS
from standin.backends.base import DoubleBackend

hookimpl = pluggy.HookimplMarker("standin")


class BuiltinBackendsPlugin:
    """Registers the backends that ship with the package."""

    @hookimpl
    def standin_register_backends(self) -> dict[str, type[DoubleBackend]]:
        return dict(BUILTIN_BACKENDS)


class SingleBackendPlugin:
    """Registers one backend class under its ``name``.

    Wraps an entry point that names a :class:`DoubleBackend` subclass
    directly instead of a plugin.
    """

    def __init__(self, backend_cls: type[DoubleBackend]) -> None:
        self.backend_cls = backend_cls

    @hookimpl
    def standin_register_backends(self) -> dict[str, type[DoubleBackend]]:
        return {self.backend_cls.name: self.backend_cls}
