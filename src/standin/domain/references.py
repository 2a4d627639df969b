"""Entity reference normalization for field values.

Accepted shorthands for a reference field:

- a single entity double: ``author``
- a mapping with an entity: ``{"entity": author}`` or
  ``{"entity": author, "target_id": 42}``
- a list of either form: ``[tag1, {"entity": tag2}]``

Each becomes ``{"entity": double, "target_id": double.id()}``. An explicit
``target_id`` must agree with the entity's own id.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from standin.domain.errors import DoubleConfigurationError

EntityCheck = Callable[[Any], bool]

_MISSING = object()


def _is_entity_item(item: Any, is_entity: EntityCheck) -> bool:
    return isinstance(item, Mapping) and is_entity(item.get("entity"))


def contains_entity_references(value: Any, is_entity: EntityCheck) -> bool:
    """Return True when *value* uses any entity reference shorthand."""
    if is_entity(value) or _is_entity_item(value, is_entity):
        return True
    if isinstance(value, (list, tuple)):
        return any(is_entity(item) or _is_entity_item(item, is_entity) for item in value)
    return False


def normalize(value: Any, is_entity: EntityCheck) -> list[dict[str, Any]]:
    """Expand reference shorthands into ``{"entity", "target_id"}`` items.

    Non-reference elements of a list are dropped.

    Raises:
        DoubleConfigurationError: If an explicit ``target_id`` disagrees
            with the referenced entity's id.
    """
    if is_entity(value):
        return [_normalize_item(value)]
    if _is_entity_item(value, is_entity):
        return [_normalize_item(value["entity"], value.get("target_id", _MISSING))]
    if not isinstance(value, (list, tuple)):
        return []

    result: list[dict[str, Any]] = []
    for item in value:
        if is_entity(item):
            result.append(_normalize_item(item))
        elif _is_entity_item(item, is_entity):
            result.append(_normalize_item(item["entity"], item.get("target_id", _MISSING)))
    return result


def _normalize_item(entity: Any, explicit_target_id: Any = _MISSING) -> dict[str, Any]:
    entity_id = entity.id()
    if explicit_target_id is not _MISSING and explicit_target_id is not None:
        if explicit_target_id != entity_id:
            msg = (
                f"Entity reference target_id mismatch: provided '{explicit_target_id}' "
                f"but entity has ID '{entity_id}'. Either omit target_id (it will be "
                "auto-populated) or ensure it matches the entity's ID."
            )
            raise DoubleConfigurationError(msg)
    return {"entity": entity, "target_id": entity_id}


def extract_entities(items: list[Any]) -> dict[int, Any]:
    """Return referenced entities keyed by delta."""
    return {
        delta: item["entity"]
        for delta, item in enumerate(items)
        if isinstance(item, Mapping) and "entity" in item and item["entity"] is not None
    }
