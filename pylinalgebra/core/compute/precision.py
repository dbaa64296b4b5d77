"""
Numerical precision constants and utilities.

Provides machine epsilon, default comparison tolerances and the tolerant
array comparison behind Vector.almost_equal and Matrix.almost_equal.
Exact comparisons (masks, zero and one short-circuits) never go through
this module.
"""

import numpy as np
from numpy.typing import DTypeLike, NDArray
from typing import Any


# Machine epsilon for float64
EPSILON_64: float = np.finfo(np.float64).eps  # ~2.22e-16

# Machine epsilon for float32
EPSILON_32: float = np.finfo(np.float32).eps  # ~1.19e-7

# Default tolerance for numerical comparisons (relative)
DEFAULT_RTOL: float = 1e-12

# Default tolerance for considering values as zero (absolute)
DEFAULT_ATOL: float = 1e-14

# Single precision accumulates error quickly; compare it loosely
SINGLE_RTOL: float = 1e-5
SINGLE_ATOL: float = 1e-6


def machine_epsilon(dtype: DTypeLike = np.float64) -> float:
    """
    Get machine epsilon for a given dtype.

    Complex dtypes report the epsilon of their real component.

    Args:
        dtype: NumPy dtype or type

    Returns:
        Machine epsilon for the dtype
    """
    return float(np.finfo(dtype).eps)


def default_tolerance(dtype: DTypeLike = np.float64) -> tuple[float, float]:
    """
    Default (rtol, atol) pair for an element type.

    Args:
        dtype: NumPy dtype or type

    Returns:
        (rtol, atol)
    """
    if machine_epsilon(dtype) > EPSILON_64:
        return SINGLE_RTOL, SINGLE_ATOL
    return DEFAULT_RTOL, DEFAULT_ATOL


def is_close(
    a: Any | NDArray[Any],
    b: Any | NDArray[Any],
    rtol: float = DEFAULT_RTOL,
    atol: float = DEFAULT_ATOL
) -> bool | NDArray[np.bool_]:
    """
    Check if values are numerically close.

    Uses the formula: |a - b| <= atol + rtol * |b|

    Args:
        a: First value(s)
        b: Second value(s)
        rtol: Relative tolerance
        atol: Absolute tolerance

    Returns:
        Boolean or boolean array indicating closeness
    """
    return np.abs(a - b) <= atol + rtol * np.abs(b)


def almost_equal(
    a: NDArray[Any],
    b: NDArray[Any],
    rtol: float | None = None,
    atol: float | None = None
) -> bool:
    """
    True if two equally shaped arrays agree elementwise within tolerance.

    NaN never compares close. Arrays of different shapes are never equal.

    Args:
        a: First array
        b: Second array
        rtol: Relative tolerance, defaults from the wider dtype of a and b
        atol: Absolute tolerance, defaults from the wider dtype of a and b
    """
    if a.shape != b.shape:
        return False
    default_rtol, default_atol = default_tolerance(
        np.result_type(a.dtype, b.dtype)
    )
    rtol = default_rtol if rtol is None else rtol
    atol = default_atol if atol is None else atol
    return bool(np.all(is_close(a, b, rtol=rtol, atol=atol)))
