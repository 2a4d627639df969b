"""Backend discovery and lookup.

Discovery: entry points (pip-installed) via pluggy setuptools entrypoints in
the ``standin.backends`` group, plus the built-in ``mock`` and ``proxy``
backends. Each plugin's ``standin_register_backends`` hook contributes
name -> backend class mappings.
"""

from __future__ import annotations

import inspect
import logging

import pluggy

from standin.backends.base import DoubleBackend
from standin.domain.errors import BackendNotFoundError
from standin.plugins.builtins.backends import BuiltinBackendsPlugin, SingleBackendPlugin
from standin.plugins.hookspecs import StandinHookSpec

PROJECT_NAME = "standin"
ENTRY_POINT_GROUP = "standin.backends"

logger = logging.getLogger(__name__)


class BackendManager:
    """Manages backend plugin discovery, loading, and lookup."""

    def __init__(self, *, builtins: bool = True) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(StandinHookSpec)
        self._backends: dict[str, type[DoubleBackend]] | None = None
        self._loaded: bool = False
        if builtins:
            self.register_plugin(BuiltinBackendsPlugin(), name="builtin-backends")

    def discover_and_load(self) -> list[str]:
        """Discover plugins from the ``standin.backends`` entry point group.

        Returns a list of registered plugin names.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._adapt_entry_point_plugins()
        self._backends = None
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        self._backends = None
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        """Unregister a plugin instance."""
        self._pm.unregister(plugin)
        self._backends = None

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def list_plugin_names(self) -> list[str]:
        """Return names of all registered plugins."""
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Backend lookup
    # ------------------------------------------------------------------

    def backends(self) -> dict[str, type[DoubleBackend]]:
        """Return every registered backend class keyed by name."""
        if self._backends is None:
            self._backends = self._collect_backends()
        return dict(self._backends)

    def backend_names(self) -> list[str]:
        return sorted(self.backends())

    def get_backend(self, name: str) -> DoubleBackend:
        """Instantiate the backend registered under *name*.

        Raises:
            BackendNotFoundError: If no plugin registers *name*.
        """
        backends = self.backends()
        backend_cls = backends.get(name)
        if backend_cls is None:
            available = ", ".join(sorted(backends)) or "none"
            msg = f"Unknown backend {name!r} (available: {available})"
            raise BackendNotFoundError(msg)
        return backend_cls()

    def _collect_backends(self) -> dict[str, type[DoubleBackend]]:
        collected: dict[str, type[DoubleBackend]] = {}
        # Registration order: a later plugin overrides an earlier one.
        for impl in self._pm.hook.standin_register_backends.get_hookimpls():
            plugin_name = impl.plugin_name
            hook = impl.function
            try:
                backend_map = hook()
            except Exception:
                logger.warning(
                    "Failed to collect backends from plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            if backend_map is None:
                continue
            if not isinstance(backend_map, dict):
                logger.warning("Plugin %s returned non-dict backend registrations", plugin_name)
                continue

            for backend_name, backend_cls in backend_map.items():
                if not (inspect.isclass(backend_cls) and issubclass(backend_cls, DoubleBackend)):
                    logger.warning(
                        "Skipping backend registration %r from plugin %s: not a DoubleBackend",
                        backend_name,
                        plugin_name,
                    )
                    continue
                collected[backend_name] = backend_cls
        return collected

    def _adapt_entry_point_plugins(self) -> None:
        """Turn class objects loaded from entry points into usable plugins.

        An entry point may name a plugin class (instantiated here) or a
        :class:`DoubleBackend` subclass (wrapped in a single-backend plugin).
        Hooks registered on a bare class would run with ``self`` unbound.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            plugin_name = self._pm.get_name(plugin) or plugin.__name__

            if issubclass(plugin, DoubleBackend):
                self._pm.unregister(plugin)
                self._pm.register(SingleBackendPlugin(plugin), name=plugin_name)
                logger.debug("Wrapped entry-point backend %s as a plugin", plugin_name)
                continue
            if not self._declares_hooks(plugin):
                continue

            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Could not instantiate plugin class %s", plugin_name, exc_info=True)
                continue
            self._pm.register(instance, name=plugin_name)

    @staticmethod
    def _declares_hooks(cls: type) -> bool:
        # HookimplMarker("standin") tags each decorated function with ``standin_impl``.
        return any(
            getattr(getattr(cls, attr, None), f"{PROJECT_NAME}_impl", None)
            for attr in dir(cls)
            if not attr.startswith("_")
        )
