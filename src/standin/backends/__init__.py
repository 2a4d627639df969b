"""Double construction backends.

INVARIANT: Backends never resolve values themselves; every call goes
through the core resolver chain.
"""

from standin.backends.base import DoubleBackend
from standin.backends.mock import MockBackend
from standin.backends.proxy import ProxyBackend

BUILTIN_BACKENDS: dict[str, type[DoubleBackend]] = {
    MockBackend.name: MockBackend,
    ProxyBackend.name: ProxyBackend,
}

__all__ = ["BUILTIN_BACKENDS", "DoubleBackend", "MockBackend", "ProxyBackend"]
