"""Per-instance field overrides for mutable doubles.

Tracks field value changes separately from the immutable definition. One
container exists per mutable double and lives exactly as long as it.
"""

from __future__ import annotations

from typing import Any


class MutableStateContainer:
    """Mutated field values keyed by field name."""

    def __init__(self) -> None:
        self._field_values: dict[str, Any] = {}

    def has_field_value(self, field_name: str) -> bool:
        return field_name in self._field_values

    def get_field_value(self, field_name: str) -> Any:
        """Return the mutated value for *field_name*.

        Raises:
            KeyError: If the field has not been mutated.
        """
        if field_name not in self._field_values:
            msg = f"Field '{field_name}' has not been mutated."
            raise KeyError(msg)
        return self._field_values[field_name]

    def set_field_value(self, field_name: str, value: Any) -> None:
        self._field_values[field_name] = value

    def reset(self) -> None:
        self._field_values.clear()

    def get_all(self) -> dict[str, Any]:
        return dict(self._field_values)
