"""
Dense vectors.

Kernels run on the backing numpy array. A result in dense storage is
written in place through np.copyto; any other result receives the
computed array through its block primitive.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import ArrayLike, DTypeLike

from pylinalgebra.core.numeric import DEFAULT_DTYPE
from pylinalgebra.core.validation import check_p_norm
from pylinalgebra.storage.dense import DenseVectorStorage
from pylinalgebra.vector.base import Vector

if TYPE_CHECKING:
    from pylinalgebra.matrix.dense import DenseMatrix


class DenseVector(Vector):
    """
    Vector with every element stored explicitly.

    Args:
        storage: A DenseVectorStorage, or an int length for a zero vector
        dtype: Element type when storage is a length
    """

    def __init__(
        self,
        storage: DenseVectorStorage | int,
        dtype: DTypeLike = DEFAULT_DTYPE
    ):
        if isinstance(storage, (int, np.integer)):
            storage = DenseVectorStorage(int(storage), dtype)
        super().__init__(storage)

    @classmethod
    def of_array(cls, values: ArrayLike, dtype: DTypeLike | None = None) -> DenseVector:
        """Dense vector holding a copy of a 1D array-like."""
        return cls(DenseVectorStorage.of_array(values, dtype))

    @classmethod
    def zeros(cls, size: int, dtype: DTypeLike = DEFAULT_DTYPE) -> DenseVector:
        return cls(DenseVectorStorage(size, dtype))

    @classmethod
    def ones(cls, size: int, dtype: DTypeLike = DEFAULT_DTYPE) -> DenseVector:
        v = cls.zeros(size, dtype)
        v.storage.data[:] = 1
        return v

    def create_vector(self, size: int, fully_mutable: bool = False) -> DenseVector:
        return DenseVector(DenseVectorStorage(size, self.dtype))

    def create_matrix(self, rows: int, columns: int, fully_mutable: bool = False) -> DenseMatrix:
        from pylinalgebra.matrix.dense import DenseMatrix
        return DenseMatrix.zeros(rows, columns, self.dtype)

    @property
    def _data(self) -> np.ndarray:
        return self._storage.data

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _do_add_scalar(self, scalar: Any, result: Vector) -> None:
        self._write(result, self._data + scalar)

    def _do_add(self, other: Vector, result: Vector) -> None:
        self._write(result, self._data + other._values())

    def _do_subtract_scalar(self, scalar: Any, result: Vector) -> None:
        self._write(result, self._data - scalar)

    def _do_subtract(self, other: Vector, result: Vector) -> None:
        self._write(result, self._data - other._values())

    def _do_subtract_from(self, scalar: Any, result: Vector) -> None:
        self._write(result, scalar - self._data)

    def _do_negate(self, result: Vector) -> None:
        self._write(result, -self._data)

    def _do_conjugate(self, result: Vector) -> None:
        self._write(result, np.conj(self._data))

    def _do_multiply(self, scalar: Any, result: Vector) -> None:
        self._write(result, self._data * scalar)

    def _do_divide(self, scalar: Any, result: Vector) -> None:
        with np.errstate(divide='ignore', invalid='ignore'):
            self._write(result, self._data / scalar)

    def _do_divide_by_this(self, scalar: Any, result: Vector) -> None:
        with np.errstate(divide='ignore', invalid='ignore'):
            self._write(result, scalar / self._data)

    def _do_modulus(self, divisor: Any, result: Vector) -> None:
        with np.errstate(divide='ignore', invalid='ignore'):
            self._write(result, np.fmod(self._data, divisor))

    def _do_modulus_by_this(self, dividend: Any, result: Vector) -> None:
        with np.errstate(divide='ignore', invalid='ignore'):
            self._write(result, np.fmod(dividend, self._data))

    def _do_pointwise_multiply(self, other: Vector, result: Vector) -> None:
        self._write(result, self._data * other._values())

    def _do_pointwise_divide(self, divisor: Vector, result: Vector) -> None:
        with np.errstate(divide='ignore', invalid='ignore'):
            self._write(result, self._data / divisor._values())

    def _do_pointwise_modulus(self, divisor: Vector, result: Vector) -> None:
        with np.errstate(divide='ignore', invalid='ignore'):
            self._write(result, np.fmod(self._data, divisor._values()))

    def _do_dot_product(self, other: Vector) -> Any:
        return self.dtype.type(np.dot(self._data, other._values()))

    # ------------------------------------------------------------------
    # Norms and reductions
    # ------------------------------------------------------------------

    def norm(self, p: float) -> float:
        check_p_norm(p)
        magnitudes = np.abs(self._data)
        if p == 1:
            return float(magnitudes.sum())
        if p == 2:
            return float(np.sqrt(np.sum(magnitudes ** 2)))
        if np.isinf(p):
            return float(magnitudes.max())
        return float(np.sum(magnitudes ** p) ** (1.0 / p))

    def absolute_minimum(self) -> float:
        return self._traits.magnitude(self._data[self.absolute_minimum_index()])

    def absolute_minimum_index(self) -> int:
        return int(np.argmin(self._traits.magnitudes(self._data)))

    def absolute_maximum(self) -> float:
        return self._traits.magnitude(self._data[self.absolute_maximum_index()])

    def absolute_maximum_index(self) -> int:
        return int(np.argmax(self._traits.magnitudes(self._data)))

    def maximum_index(self) -> int:
        self._traits.require_ordering("maximum_index")
        return int(np.argmax(self._data))

    def minimum_index(self) -> int:
        self._traits.require_ordering("minimum_index")
        return int(np.argmin(self._data))

    def sum(self) -> Any:
        return self.dtype.type(self._data.sum())

    def sum_magnitudes(self) -> float:
        return float(np.abs(self._data).sum())
