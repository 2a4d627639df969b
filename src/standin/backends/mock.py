"""Backend building doubles on :class:`unittest.mock.NonCallableMock`.

A mock ``spec`` takes exactly one class, so this backend relies on
interface composition to synthesize a combined capability whenever the
double needs several unrelated ones. ``isinstance`` holds because a specced
mock reports the spec class as its ``__class__``.

Each bound method is a child :class:`~unittest.mock.Mock` attached to the
double, whose side effect runs the resolver chain, so call assertions work
as on any mock::

    double.label()
    double.label.assert_called_once_with()
    assert double.mock_calls == [call.label()]

Property-style reads of public names go to the chain first, so a field
named ``called`` or ``return_value`` resolves exactly as on the proxy
backend. The mock's own API answers only names the chain rejects with
``AttributeError``. Public writes always go to the chain.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any
from unittest.mock import Mock, NonCallableMock

from standin.backends.base import DoubleBackend, make_dispatcher, property_hooks
from standin.core.dispatch import DoubleBlueprint

logger = logging.getLogger(__name__)

_GETTER = "_standin_property_get"
_SETTER = "_standin_property_set"
_BOUND = "_standin_bound_methods"
_BOOKKEEPING = "_standin_bookkeeping"


@contextmanager
def _mock_bookkeeping(double: Any) -> Iterator[None]:
    """Let the mock machinery reach its own attributes on *double*."""
    if not isinstance(double, CapabilityMock):
        yield
        return
    state = object.__getattribute__(double, "__dict__")
    state[_BOOKKEEPING] = state.get(_BOOKKEEPING, 0) + 1
    try:
        yield
    finally:
        state[_BOOKKEEPING] -= 1


class CapabilityMock(NonCallableMock):
    """A specced mock that hands public attributes to property hooks.

    Reads of spec names and bound methods, and any underscored name, behave
    exactly as on a plain :class:`NonCallableMock`.
    """

    def _property_hook(self, key: str, name: str) -> Callable[..., Any] | None:
        if name.startswith("_"):
            return None
        state = object.__getattribute__(self, "__dict__")
        hook = state.get(key)
        if hook is None or state.get(_BOOKKEEPING):
            return None
        if key == _GETTER and (
            name in state.get(_BOUND, ()) or name in (state.get("_mock_methods") or ())
        ):
            return None
        return hook

    def __getattribute__(self, name: str) -> Any:
        if name.startswith("_"):
            return super().__getattribute__(name)
        getter = self._property_hook(_GETTER, name)
        if getter is None:
            return super().__getattribute__(name)
        try:
            return getter(name)
        except AttributeError:
            # Unowned by the chain: the mock API may answer, else __getattr__ re-raises.
            return super().__getattribute__(name)

    def __getattr__(self, name: str) -> Any:
        getter = self._property_hook(_GETTER, name)
        if getter is None:
            return super().__getattr__(name)
        return getter(name)

    def __setattr__(self, name: str, value: Any) -> None:
        setter = self._property_hook(_SETTER, name)
        if setter is None:
            super().__setattr__(name, value)
            return
        setter(name, value)

    def reset_mock(self, *args: Any, **kwargs: Any) -> None:
        with _mock_bookkeeping(self):
            super().reset_mock(*args, **kwargs)


class BoundMethodMock(Mock):
    """Child mock for one bound method.

    Call recording on the parent double runs with the double's property
    hooks suspended, so ``mock_calls`` is always the mock's own list.
    """

    def _increment_mock_call(self, /, *args: Any, **kwargs: Any) -> None:
        with _mock_bookkeeping(self._mock_new_parent):
            super()._increment_mock_call(*args, **kwargs)


class MockBackend(DoubleBackend):
    """Builds :class:`CapabilityMock` doubles."""

    name = "mock"
    supports_intersection = False

    def build(self, blueprint: DoubleBlueprint) -> CapabilityMock:
        double = CapabilityMock(spec=blueprint.primary, name=blueprint.label)

        for method in blueprint.methods:
            # Unnamed, so the double adopts it as a child under *method*.
            child = BoundMethodMock(side_effect=make_dispatcher(blueprint.chain, method, double))
            # Bypass the property hook: override-only methods are not in the spec.
            NonCallableMock.__setattr__(double, method, child)

        state = double.__dict__
        state[_BOUND] = frozenset(blueprint.methods)
        getter, setter = property_hooks(blueprint, double)
        if getter is not None:
            state[_GETTER] = getter
        if setter is not None:
            state[_SETTER] = setter

        logger.debug(
            "Built mock double %s with spec %s (%d methods)",
            blueprint.label,
            blueprint.primary.__name__,
            len(blueprint.methods),
        )
        return double
