"""
Dense matrices.

Kernels run on the backing 2D numpy array and hand their output to the
result through _write, so a dense result is filled in place and any
other family receives the array through its block primitive.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, DTypeLike

from pylinalgebra.core.numeric import DEFAULT_DTYPE
from pylinalgebra.matrix.base import Matrix
from pylinalgebra.storage.dense import DenseMatrixStorage
from pylinalgebra.vector.base import Vector
from pylinalgebra.vector.dense import DenseVector


class DenseMatrix(Matrix):
    """
    Matrix with every element stored explicitly.

    Args:
        storage: A DenseMatrixStorage, or an int row count for a zero matrix
        column_count: Column count when storage is a row count
        dtype: Element type when storage is a row count
    """

    def __init__(
        self,
        storage: DenseMatrixStorage | int,
        column_count: int | None = None,
        dtype: DTypeLike = DEFAULT_DTYPE
    ):
        if isinstance(storage, (int, np.integer)):
            columns = storage if column_count is None else column_count
            storage = DenseMatrixStorage(int(storage), int(columns), dtype)
        super().__init__(storage)

    @classmethod
    def of_array(cls, values: ArrayLike, dtype: DTypeLike | None = None) -> DenseMatrix:
        """Dense matrix holding a copy of a 2D array-like."""
        return cls(DenseMatrixStorage.of_array(values, dtype))

    @classmethod
    def zeros(cls, rows: int, columns: int, dtype: DTypeLike = DEFAULT_DTYPE) -> DenseMatrix:
        return cls(DenseMatrixStorage(rows, columns, dtype))

    @classmethod
    def identity(cls, order: int, dtype: DTypeLike = DEFAULT_DTYPE) -> DenseMatrix:
        m = cls.zeros(order, order, dtype)
        np.fill_diagonal(m.storage.data, 1)
        return m

    def create_matrix(self, rows: int, columns: int, fully_mutable: bool = False) -> DenseMatrix:
        return DenseMatrix(DenseMatrixStorage(rows, columns, self.dtype))

    def create_vector(self, size: int, fully_mutable: bool = False) -> DenseVector:
        return DenseVector.zeros(size, self.dtype)

    @property
    def _data(self) -> np.ndarray:
        return self._storage.data

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _do_add(self, other: Matrix, result: Matrix) -> None:
        self._write(result, self._data + other._values())

    def _do_subtract(self, other: Matrix, result: Matrix) -> None:
        self._write(result, self._data - other._values())

    def _do_add_scalar(self, scalar: Any, result: Matrix) -> None:
        self._write(result, self._data + scalar)

    def _do_multiply_scalar(self, scalar: Any, result: Matrix) -> None:
        self._write(result, self._data * scalar)

    def _do_multiply_vector(self, vector: Vector, result: Vector) -> None:
        Vector._write(result, self._data @ vector._values())

    def _do_multiply_matrix(self, other: Matrix, result: Matrix) -> None:
        self._write(result, self._data @ other._values())

    def _do_negate(self, result: Matrix) -> None:
        self._write(result, -self._data)

    # ------------------------------------------------------------------
    # Norms
    # ------------------------------------------------------------------

    def l1_norm(self) -> float:
        return float(np.abs(self._data).sum(axis=0).max())

    def infinity_norm(self) -> float:
        return float(np.abs(self._data).sum(axis=1).max())

    def frobenius_norm(self) -> float:
        return float(np.sqrt(np.sum(np.abs(self._data) ** 2)))
