"""Extension layer — backend discovery via pluggy.

Discovery: entry points (pip-installed) in the ``standin.backends`` group.
INVARIANT: Plugin failures are warnings, never errors.
"""

from standin.plugins.manager import BackendManager

__all__ = ["BackendManager"]
