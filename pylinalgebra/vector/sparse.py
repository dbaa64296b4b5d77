"""
Sparse vectors.

Operations that keep zeros at zero (negation, conjugation, scaling,
element-wise products, dot products, reductions) run over the stored
non-zeros only when the result is sparse as well. Everything else
computes a dense array and hands it to the result's storage.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray

from pylinalgebra.core.numeric import DEFAULT_DTYPE
from pylinalgebra.core.validation import check_not_none, check_p_norm
from pylinalgebra.storage._base import StorageKind
from pylinalgebra.storage.sparse import SparseVectorStorage
from pylinalgebra.vector.base import Vector

if TYPE_CHECKING:
    from pylinalgebra.matrix.sparse import SparseMatrix


class SparseVector(Vector):
    """
    Vector storing only its non-zero elements.

    Args:
        storage: A SparseVectorStorage, or an int length for a zero vector
        dtype: Element type when storage is a length
    """

    def __init__(
        self,
        storage: SparseVectorStorage | int,
        dtype: DTypeLike = DEFAULT_DTYPE
    ):
        if isinstance(storage, (int, np.integer)):
            storage = SparseVectorStorage(int(storage), dtype)
        super().__init__(storage)

    @classmethod
    def of_array(cls, values: ArrayLike, dtype: DTypeLike | None = None) -> SparseVector:
        """Sparse vector holding the non-zeros of a dense 1D array-like."""
        return cls(SparseVectorStorage.of_array(values, dtype))

    @classmethod
    def of_indexed(
        cls,
        length: int,
        entries: Iterable[tuple[int, Any]],
        dtype: DTypeLike = DEFAULT_DTYPE
    ) -> SparseVector:
        """
        Sparse vector from (index, value) pairs; later pairs win on repeats.

        Raises:
            NullArgumentError: If entries is None
            OutOfRangeError: If an index is outside [0, length)
        """
        check_not_none(entries, "entries")
        v = cls(SparseVectorStorage(length, dtype))
        for i, value in entries:
            v.storage.set(i, value)
        return v

    @classmethod
    def zeros(cls, size: int, dtype: DTypeLike = DEFAULT_DTYPE) -> SparseVector:
        return cls(SparseVectorStorage(size, dtype))

    def create_vector(self, size: int, fully_mutable: bool = False) -> SparseVector:
        return SparseVector(SparseVectorStorage(size, self.dtype))

    def create_matrix(self, rows: int, columns: int, fully_mutable: bool = False) -> SparseMatrix:
        from pylinalgebra.matrix.sparse import SparseMatrix
        return SparseMatrix.zeros(rows, columns, self.dtype)

    @property
    def nonzero_count(self) -> int:
        return self._storage.nonzero_count

    def _stored(self) -> tuple[NDArray[np.intp], NDArray[Any]]:
        return self._storage._indices, self._storage._values

    @staticmethod
    def _assign_stored(
        result: Vector,
        indices: NDArray[np.intp],
        values: NDArray[Any]
    ) -> None:
        """Replace a sparse result's contents, dropping zeros."""
        keep = values != 0
        result._storage._indices = np.array(indices[keep], dtype=np.intp)
        result._storage._values = np.asarray(values[keep], dtype=result.dtype)

    def _map_stored(self, result: Vector, values: NDArray[Any]) -> None:
        """Write values computed for the stored positions into result."""
        indices, _ = self._stored()
        if result._storage.kind is StorageKind.SPARSE:
            self._assign_stored(result, indices.copy(), values)
            return
        dense = np.zeros(self.count, dtype=np.result_type(values, result.dtype))
        dense[indices] = values
        self._write(result, dense)

    # ------------------------------------------------------------------
    # Hooks that keep zeros at zero
    # ------------------------------------------------------------------

    def _do_negate(self, result: Vector) -> None:
        _, values = self._stored()
        self._map_stored(result, -values)

    def _do_conjugate(self, result: Vector) -> None:
        _, values = self._stored()
        self._map_stored(result, np.conj(values))

    def _do_multiply(self, scalar: Any, result: Vector) -> None:
        _, values = self._stored()
        self._map_stored(result, values * scalar)

    def _do_pointwise_multiply(self, other: Vector, result: Vector) -> None:
        indices, values = self._stored()
        self._map_stored(result, values * other._values()[indices])

    def _do_dot_product(self, other: Vector) -> Any:
        indices, values = self._stored()
        return self.dtype.type(np.dot(values, other._values()[indices]))

    # ------------------------------------------------------------------
    # Hooks that fill zeros
    # ------------------------------------------------------------------

    def _do_add_scalar(self, scalar: Any, result: Vector) -> None:
        self._write(result, self._values() + scalar)

    def _do_add(self, other: Vector, result: Vector) -> None:
        self._write(result, self._values() + other._values())

    def _do_subtract_scalar(self, scalar: Any, result: Vector) -> None:
        self._write(result, self._values() - scalar)

    def _do_subtract(self, other: Vector, result: Vector) -> None:
        self._write(result, self._values() - other._values())

    def _do_divide(self, scalar: Any, result: Vector) -> None:
        with np.errstate(divide='ignore', invalid='ignore'):
            self._write(result, self._values() / scalar)

    def _do_divide_by_this(self, scalar: Any, result: Vector) -> None:
        with np.errstate(divide='ignore', invalid='ignore'):
            self._write(result, scalar / self._values())

    def _do_modulus(self, divisor: Any, result: Vector) -> None:
        with np.errstate(divide='ignore', invalid='ignore'):
            self._write(result, np.fmod(self._values(), divisor))

    def _do_modulus_by_this(self, dividend: Any, result: Vector) -> None:
        with np.errstate(divide='ignore', invalid='ignore'):
            self._write(result, np.fmod(dividend, self._values()))

    def _do_pointwise_divide(self, divisor: Vector, result: Vector) -> None:
        with np.errstate(divide='ignore', invalid='ignore'):
            self._write(result, self._values() / divisor._values())

    def _do_pointwise_modulus(self, divisor: Vector, result: Vector) -> None:
        with np.errstate(divide='ignore', invalid='ignore'):
            self._write(result, np.fmod(self._values(), divisor._values()))

    # ------------------------------------------------------------------
    # Norms and reductions
    # ------------------------------------------------------------------

    def norm(self, p: float) -> float:
        check_p_norm(p)
        _, values = self._stored()
        if values.size == 0:
            return 0.0
        magnitudes = np.abs(values)
        if p == 1:
            return float(magnitudes.sum())
        if p == 2:
            return float(np.sqrt(np.sum(magnitudes ** 2)))
        if np.isinf(p):
            return float(magnitudes.max())
        return float(np.sum(magnitudes ** p) ** (1.0 / p))

    def absolute_minimum(self) -> float:
        return self._traits.magnitude(self._storage._get(self.absolute_minimum_index()))

    def absolute_minimum_index(self) -> int:
        return int(np.argmin(self._traits.magnitudes(self._values())))

    def absolute_maximum(self) -> float:
        return self._traits.magnitude(self._storage._get(self.absolute_maximum_index()))

    def absolute_maximum_index(self) -> int:
        return int(np.argmax(self._traits.magnitudes(self._values())))

    def maximum_index(self) -> int:
        self._traits.require_ordering("maximum_index")
        return int(np.argmax(self._values()))

    def minimum_index(self) -> int:
        self._traits.require_ordering("minimum_index")
        return int(np.argmin(self._values()))

    def sum(self) -> Any:
        _, values = self._stored()
        return self.dtype.type(values.sum())

    def sum_magnitudes(self) -> float:
        _, values = self._stored()
        return float(np.abs(values).sum())
