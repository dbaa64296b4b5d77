"""
Numeric traits for the supported element types.

Vectors and matrices are generic over their element type, but the set of
element types is closed: single and double precision reals and their
complex counterparts. Each type is described once by a frozen
NumericTraits record (its zero, its one, whether it is totally ordered,
whether it has a remainder) and resolved from the numpy dtype when a
storage is created. Generic code asks the traits, never the values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import DTypeLike

from pylinalgebra.core.exceptions import InvalidArgumentError, NotSupportedError

DEFAULT_DTYPE = np.dtype(np.float64)
DEFAULT_COMPLEX_DTYPE = np.dtype(np.complex128)


@dataclass(frozen=True)
class NumericTraits:
    """
    Arithmetic identities and capabilities of one element type.

    Attributes:
        name: Short name ('float64', 'complex128', ...)
        dtype: The numpy dtype
        zero: Additive identity as a numpy scalar
        one: Multiplicative identity as a numpy scalar
        ordered: True if values are totally ordered (reals only)
        is_complex: True for complex element types
        real_dtype: dtype of magnitudes and norms
    """
    name: str
    dtype: np.dtype
    zero: Any
    one: Any
    ordered: bool
    is_complex: bool
    real_dtype: np.dtype

    @classmethod
    def build(cls, dtype: DTypeLike) -> NumericTraits:
        dt = np.dtype(dtype)
        is_complex = np.issubdtype(dt, np.complexfloating)
        real_dtype = np.dtype(dt.char.lower()) if is_complex else dt
        return cls(
            name=dt.name,
            dtype=dt,
            zero=dt.type(0),
            one=dt.type(1),
            ordered=not is_complex,
            is_complex=is_complex,
            real_dtype=real_dtype,
        )

    @property
    def supports_modulus(self) -> bool:
        return not self.is_complex

    def coerce(self, value: Any) -> Any:
        """
        Convert a Python or numpy scalar to this element type.

        Raises:
            NotSupportedError: If value is complex and this type is real
            InvalidArgumentError: If value is not a number
        """
        if not self.is_complex and isinstance(value, (complex, np.complexfloating)):
            raise NotSupportedError(
                f"scalar: complex value {value!r} cannot be stored in "
                f"element type {self.name}",
                operation="coerce", dtype=self.name,
            )
        try:
            return self.dtype.type(value)
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(
                f"scalar: cannot convert {value!r} to element type {self.name}"
            ) from e

    def magnitude(self, value: Any) -> float:
        """Absolute value (modulus for complex values) as a float."""
        return float(abs(value))

    def magnitudes(self, values: np.ndarray) -> np.ndarray:
        """Elementwise absolute value of an array of this type."""
        return np.abs(values)

    def is_zero(self, value: Any) -> bool:
        return value == self.zero

    def is_one(self, value: Any) -> bool:
        return value == self.one

    def require_ordering(self, operation: str) -> None:
        """
        Verify this element type has a total order.

        Raises:
            NotSupportedError: For complex element types
        """
        if not self.ordered:
            raise NotSupportedError(
                f"{operation}: not supported for element type {self.name} "
                f"(no total order)",
                operation=operation, dtype=self.name,
            )

    def require_modulus(self, operation: str) -> None:
        """
        Verify this element type defines a remainder.

        Raises:
            NotSupportedError: For complex element types
        """
        if not self.supports_modulus:
            raise NotSupportedError(
                f"{operation}: not supported for element type {self.name} "
                f"(no remainder)",
                operation=operation, dtype=self.name,
            )

    def format(self, value: Any) -> str:
        if self.is_complex:
            return f"{complex(value):.6g}"
        return f"{float(value):.6g}"


FLOAT32 = NumericTraits.build(np.float32)
FLOAT64 = NumericTraits.build(np.float64)
COMPLEX64 = NumericTraits.build(np.complex64)
COMPLEX128 = NumericTraits.build(np.complex128)

_REGISTRY: dict[np.dtype, NumericTraits] = {
    t.dtype: t for t in (FLOAT32, FLOAT64, COMPLEX64, COMPLEX128)
}

SUPPORTED_DTYPES = frozenset(_REGISTRY)


def traits_for(dtype: DTypeLike) -> NumericTraits:
    """
    Resolve the traits record for a numpy dtype.

    Args:
        dtype: Any numpy dtype specifier

    Returns:
        The NumericTraits for that dtype

    Raises:
        NotSupportedError: If dtype is outside the supported set
    """
    try:
        dt = np.dtype(dtype)
    except TypeError as e:
        raise NotSupportedError(
            f"dtype: cannot interpret {dtype!r} as a numpy dtype",
            operation="traits_for",
        ) from e
    traits = _REGISTRY.get(dt)
    if traits is None:
        supported = ", ".join(sorted(t.name for t in _REGISTRY.values()))
        raise NotSupportedError(
            f"dtype: element type {dt.name} is not supported "
            f"(expected one of {supported})",
            operation="traits_for", dtype=dt.name,
        )
    return traits


def infer_dtype(array: np.ndarray, dtype: DTypeLike | None = None) -> np.dtype:
    """
    Choose the element type for data coming from an array-like.

    An explicit dtype wins. Otherwise complex data maps to complex128 and
    everything else to float64.
    """
    if dtype is not None:
        return traits_for(dtype).dtype
    if np.issubdtype(array.dtype, np.complexfloating):
        return DEFAULT_COMPLEX_DTYPE
    return DEFAULT_DTYPE


__all__ = [
    'NumericTraits',
    'FLOAT32',
    'FLOAT64',
    'COMPLEX64',
    'COMPLEX128',
    'DEFAULT_DTYPE',
    'DEFAULT_COMPLEX_DTYPE',
    'SUPPORTED_DTYPES',
    'traits_for',
    'infer_dtype',
]
