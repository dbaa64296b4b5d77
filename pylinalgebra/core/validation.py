"""
Input validation utilities for pylinalgebra.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent. Every public vector and matrix
operation validates through these functions before touching storage, so
a failed call never leaves a partially applied mutation behind.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

from collections.abc import Iterable
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylinalgebra.core.exceptions import (
    DimensionError,
    InvalidArgumentError,
    NotSupportedError,
    NullArgumentError,
    OutOfRangeError,
    ValidationError,
)


def check_not_none(value: Any, name: str) -> None:
    """
    Verify a required argument was supplied.

    Args:
        value: Argument to check
        name: Parameter name for error messages

    Raises:
        NullArgumentError: If value is None
    """
    if value is None:
        raise NullArgumentError(f"{name}: must not be None", name=name)


def check_callable(func: Any, name: str) -> None:
    """
    Verify an argument is callable.

    Raises:
        NullArgumentError: If func is None
        ValidationError: If func is not callable
    """
    check_not_none(func, name)
    if not callable(func):
        raise ValidationError(
            f"{name}: expected a callable, got {type(func).__name__}"
        )


def check_size(size: int, name: str) -> None:
    """
    Verify a vector length or matrix dimension is strictly positive.

    Args:
        size: Size to check
        name: Parameter name for error messages

    Raises:
        OutOfRangeError: If size is not a positive integer
    """
    if size < 1:
        raise OutOfRangeError(
            f"{name}: must be positive, got {size}", name=name, value=size
        )


def check_integer(value: Any, name: str) -> None:
    """
    Verify an index or count is an integer, not a float that happens to
    truncate to one.

    Raises:
        InvalidArgumentError: If value is not a Python or numpy integer
    """
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
        raise InvalidArgumentError(
            f"{name}: expected an integer index, got {value!r} "
            f"({type(value).__name__})"
        )


def check_index(index: int, upper: int, name: str) -> None:
    """
    Verify 0 <= index < upper.

    Args:
        index: Index to check
        upper: Exclusive upper bound (the length of the indexed axis)
        name: Parameter name for error messages

    Raises:
        InvalidArgumentError: If index is not an integer
        OutOfRangeError: If index is outside [0, upper)
    """
    check_integer(index, name)
    if index < 0 or index >= upper:
        raise OutOfRangeError(
            f"{name}: index {index} out of range [0, {upper})",
            name=name, value=index,
        )


def check_insert_index(index: int, upper: int, name: str) -> None:
    """
    Verify 0 <= index <= upper (insertion may append at the end).

    Raises:
        InvalidArgumentError: If index is not an integer
        OutOfRangeError: If index is outside [0, upper]
    """
    check_integer(index, name)
    if index < 0 or index > upper:
        raise OutOfRangeError(
            f"{name}: insertion index {index} out of range [0, {upper}]",
            name=name, value=index,
        )


def check_count(count: int, name: str) -> None:
    """
    Verify a region count is at least one.

    Raises:
        OutOfRangeError: If count < 1
    """
    if count < 1:
        raise OutOfRangeError(
            f"{name}: must be at least 1, got {count}", name=name, value=count
        )


def check_range(index: int, count: int, upper: int, name: str) -> None:
    """
    Verify [index, index + count) is a non-empty region inside [0, upper).

    Args:
        index: First position of the region
        count: Number of positions in the region
        upper: Length of the indexed axis
        name: Parameter name for error messages

    Raises:
        OutOfRangeError: If index < 0, count < 1 or index + count > upper
    """
    check_index(index, upper, name)
    check_count(count, f"{name} count")
    if index + count > upper:
        raise OutOfRangeError(
            f"{name}: region [{index}, {index + count}) exceeds length {upper}",
            name=name, value=index + count,
        )


def check_same_length(actual: int, expected: int, name: str) -> None:
    """
    Verify an operand has the expected length.

    Raises:
        DimensionError: If the lengths differ
    """
    if actual != expected:
        raise DimensionError(
            f"{name}: expected length {expected}, got {actual}",
            expected=expected, actual=actual,
        )


def check_same_shape(
    actual: tuple[int, int],
    expected: tuple[int, int],
    name: str
) -> None:
    """
    Verify an operand has the expected (rows, columns) shape.

    Raises:
        DimensionError: If the shapes differ
    """
    if tuple(actual) != tuple(expected):
        raise DimensionError(
            f"{name}: expected shape {tuple(expected)}, got {tuple(actual)}",
            expected=tuple(expected), actual=tuple(actual),
        )


def check_indices(indices: Iterable[int], upper: int, name: str) -> list[int]:
    """
    Materialize an index collection and verify every entry is in range.

    The collection is consumed once; the returned list is what callers
    should iterate, so lazy generators are safe to pass.

    Args:
        indices: Iterable of 0-based indices
        upper: Exclusive upper bound
        name: Parameter name for error messages

    Returns:
        The indices as a list of ints

    Raises:
        NullArgumentError: If indices is None
        InvalidArgumentError: If any entry is not an integer
        OutOfRangeError: If any entry is outside [0, upper)
    """
    check_not_none(indices, name)
    result = list(indices)
    for i in result:
        check_index(i, upper, name)
    return [int(i) for i in result]


def check_castable(source: Any, target: Any, operation: str) -> None:
    """
    Verify values of one element type can be stored in another without
    losing their kind.

    Narrowing precision within a kind (complex128 into complex64, float64
    into float32) is allowed; complex into real is not, because the
    imaginary part would be dropped.

    Args:
        source: dtype of the values being written
        target: dtype of the receiving vector or matrix
        operation: Operation name for error messages

    Raises:
        NotSupportedError: If source cannot be cast to target within its kind
    """
    src = np.dtype(source)
    dst = np.dtype(target)
    if not np.can_cast(src, dst, casting='same_kind'):
        raise NotSupportedError(
            f"{operation}: cannot combine element type {src.name} with "
            f"{dst.name} without discarding the imaginary part",
            operation=operation, dtype=dst.name,
        )


def check_array(array: ArrayLike, name: str) -> NDArray[Any]:
    """
    Validate and convert input to a numeric numpy array.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with numeric dtype

    Raises:
        NullArgumentError: If array is None
        ValidationError: If input cannot be converted to a numeric array
    """
    check_not_none(array, name)
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )

    if not np.issubdtype(result.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    return result


def check_ndim(array: NDArray[Any], ndim: int, name: str) -> None:
    """
    Verify array has exactly the specified number of dimensions.

    Raises:
        DimensionError: If array has wrong number of dimensions
    """
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_p_norm(p: float, name: str = "p") -> None:
    """
    Verify a norm order is strictly positive.

    Raises:
        OutOfRangeError: If p <= 0
    """
    if not p > 0:
        raise OutOfRangeError(
            f"{name}: norm order must be positive, got {p}",
            name=name, value=p,
        )


__all__ = [
    'check_not_none',
    'check_callable',
    'check_size',
    'check_integer',
    'check_index',
    'check_insert_index',
    'check_count',
    'check_range',
    'check_same_length',
    'check_same_shape',
    'check_indices',
    'check_castable',
    'check_array',
    'check_ndim',
    'check_p_norm',
]
