"""Tests for the exception taxonomy and message templates."""

from __future__ import annotations

import pytest

from standin.domain.errors import (
    BackendNotFoundError,
    DoubleConfigurationError,
    DoubleError,
    GuardrailError,
    ImmutableDoubleError,
    MissingResolverError,
    UndefinedFieldError,
    UnsupportedOperationError,
)


class TestMessages:
    def test_immutable(self) -> None:
        error = ImmutableDoubleError("title")
        assert str(error) == (
            "cannot modify field 'title' on an immutable double; "
            "construct a mutable double if you need to test mutations."
        )
        assert error.field_name == "title"

    def test_undefined_field(self) -> None:
        error = UndefinedFieldError("body")
        assert str(error) == "field 'body' is not defined on this entity double"
        assert error.field_name == "body"

    def test_unsupported_operation(self) -> None:
        error = UnsupportedOperationError("save")
        assert str(error) == (
            "method 'save' is not supported: this is a unit-test value object; "
            "use a full integration-style test for this behavior"
        )
        assert error.method == "save"

    def test_missing_resolver(self) -> None:
        error = MissingResolverError("get_title", "node")
        assert str(error) == (
            "method 'get_title' requires an entry in methodOverrides "
            "(declaring interface: 'node')"
        )
        assert error.interface == "node"

    def test_backend_not_found_is_readable(self) -> None:
        assert str(BackendNotFoundError("Unknown backend 'x'")) == "Unknown backend 'x'"


class TestHierarchy:
    @pytest.mark.parametrize(
        ("error", "bases"),
        [
            (DoubleConfigurationError("x"), (DoubleError, ValueError)),
            (UndefinedFieldError("f"), (DoubleError, LookupError, AttributeError)),
            (ImmutableDoubleError("f"), (DoubleError,)),
            (UnsupportedOperationError("m"), (GuardrailError, NotImplementedError)),
            (MissingResolverError("m", "i"), (GuardrailError, NotImplementedError)),
            (BackendNotFoundError("b"), (DoubleError, KeyError)),
        ],
    )
    def test_bases(self, error: Exception, bases: tuple[type[Exception], ...]) -> None:
        for base in bases:
            assert isinstance(error, base)
