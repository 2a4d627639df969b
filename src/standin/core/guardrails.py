"""Guardrails for capability methods a definition does not cover.

Two failure kinds, both raised in strict mode and both ``None`` in lenient
mode:

- catalogued operations that need real runtime services (storage, access
  control, translation, routing, reference traversal) raise
  :class:`UnsupportedOperationError`;
- any other declared method without an override or core resolver raises
  :class:`MissingResolverError` naming the declaring capability.
"""

from __future__ import annotations

from standin.domain.errors import MissingResolverError, UnsupportedOperationError

UNSUPPORTED_METHODS: dict[str, str] = {
    "save": "requires entity storage",
    "delete": "requires entity storage",
    "access": "requires access control services",
    "get_translation": "requires translation services",
    "to_url": "requires routing services",
    "referenced_entities": "requires entity reference traversal",
}


class GuardrailEnforcer:
    """Fallback policy for one double, strict or lenient."""

    def __init__(self, *, lenient: bool = False) -> None:
        self.lenient = lenient

    @staticmethod
    def is_unsupported(method: str) -> bool:
        return method in UNSUPPORTED_METHODS

    @staticmethod
    def reason(method: str) -> str | None:
        return UNSUPPORTED_METHODS.get(method)

    @staticmethod
    def unsupported_error(method: str) -> UnsupportedOperationError:
        return UnsupportedOperationError(method)

    @staticmethod
    def missing_resolver_error(method: str, interface: str) -> MissingResolverError:
        return MissingResolverError(method, interface)

    def fallback(self, method: str, interface: str) -> None:
        """Apply the guardrail for *method* declared by *interface*.

        Returns ``None`` in lenient mode; raises otherwise.
        """
        if self.lenient:
            return None
        if self.is_unsupported(method):
            raise self.unsupported_error(method)
        raise self.missing_resolver_error(method, interface)
