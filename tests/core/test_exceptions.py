"""
Tests for the pylinalgebra exception hierarchy.

Validates:
    - Inheritance chain (all exceptions catchable via LinAlgebraError)
    - Builtin bases for argument errors (TypeError, ValueError, IndexError)
    - Diagnostic attributes and their None defaults
"""

import pytest

from pylinalgebra.core.exceptions import (
    DimensionError,
    InvalidArgumentError,
    InvalidOperationError,
    LinAlgebraError,
    NotSupportedError,
    NullArgumentError,
    OutOfRangeError,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Inheritance hierarchy
# ═══════════════════════════════════════════════════════════════════════


class TestInheritance:
    """Every exception is catchable via LinAlgebraError."""

    @pytest.mark.parametrize("exc", [
        NullArgumentError,
        InvalidArgumentError,
        DimensionError,
        OutOfRangeError,
    ])
    def test_argument_errors_are_validation_errors(self, exc):
        with pytest.raises(ValidationError):
            raise exc("bad input")

    @pytest.mark.parametrize("exc", [
        ValidationError,
        NullArgumentError,
        InvalidArgumentError,
        DimensionError,
        OutOfRangeError,
        InvalidOperationError,
        NotSupportedError,
    ])
    def test_everything_is_linalgebra_error(self, exc):
        with pytest.raises(LinAlgebraError):
            raise exc("failed")

    def test_null_argument_is_type_error(self):
        with pytest.raises(TypeError):
            raise NullArgumentError("x: must not be None", name="x")

    def test_invalid_argument_is_value_error(self):
        with pytest.raises(ValueError):
            raise InvalidArgumentError("not a permutation")

    def test_out_of_range_is_index_error(self):
        with pytest.raises(IndexError):
            raise OutOfRangeError("index 5 out of range", name="index", value=5)

    def test_invalid_operation_is_not_validation_error(self):
        """Structural refusals are not argument problems."""
        err = InvalidOperationError("refused")
        assert not isinstance(err, ValidationError)

    def test_not_supported_is_not_validation_error(self):
        err = NotSupportedError("no order")
        assert not isinstance(err, ValidationError)


# ═══════════════════════════════════════════════════════════════════════
# Attributes
# ═══════════════════════════════════════════════════════════════════════


class TestAttributes:
    """Diagnostic attributes are stored and default to None."""

    def test_null_argument_name(self):
        err = NullArgumentError("v: must not be None", name="v")
        assert err.name == "v"
        assert str(err) == "v: must not be None"

    def test_dimension_error_expected_actual(self):
        err = DimensionError("length mismatch", expected=3, actual=4)
        assert err.expected == 3
        assert err.actual == 4

    def test_dimension_error_defaults(self):
        err = DimensionError("length mismatch")
        assert err.expected is None
        assert err.actual is None

    def test_out_of_range_name_value(self):
        err = OutOfRangeError("bad", name="index", value=-1)
        assert err.name == "index"
        assert err.value == -1

    def test_invalid_operation_attributes(self):
        err = InvalidOperationError("refused", operation="permute_rows", storage_kind="diagonal")
        assert err.operation == "permute_rows"
        assert err.storage_kind == "diagonal"

    def test_not_supported_attributes(self):
        err = NotSupportedError("no order", operation="maximum", dtype="complex128")
        assert err.operation == "maximum"
        assert err.dtype == "complex128"

    def test_not_supported_defaults(self):
        err = NotSupportedError("no order")
        assert err.operation is None
        assert err.dtype is None
