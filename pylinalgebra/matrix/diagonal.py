"""
Diagonal matrices.

A DiagonalMatrix stores min(rows, columns) entries. Operations whose
result stays diagonal (scaling, negation, diagonal sums and products,
removing a matching row and column) return a DiagonalMatrix. Operations
that may fill the off-diagonal ask create_matrix for a fully mutable
result and get a SparseMatrix. Row or column permutation, sorting,
shuffling and single row or column removal are refused.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, DTypeLike

from pylinalgebra.core.numeric import DEFAULT_DTYPE
from pylinalgebra.core.protocols import Predicate
from pylinalgebra.core.validation import check_callable
from pylinalgebra.matrix.base import Matrix
from pylinalgebra.matrix.sparse import SparseMatrix
from pylinalgebra.storage.diagonal import DiagonalMatrixStorage
from pylinalgebra.vector.base import Vector
from pylinalgebra.vector.sparse import SparseVector


class DiagonalMatrix(Matrix):
    """
    Matrix whose only non-zero elements lie on the main diagonal.

    Args:
        storage: A DiagonalMatrixStorage, or an int row count for a zero matrix
        column_count: Column count when storage is a row count
        dtype: Element type when storage is a row count
    """

    def __init__(
        self,
        storage: DiagonalMatrixStorage | int,
        column_count: int | None = None,
        dtype: DTypeLike = DEFAULT_DTYPE
    ):
        if isinstance(storage, (int, np.integer)):
            columns = storage if column_count is None else column_count
            storage = DiagonalMatrixStorage(int(storage), int(columns), dtype)
        super().__init__(storage)

    @classmethod
    def of_diagonal(
        cls,
        diagonal: ArrayLike,
        row_count: int | None = None,
        column_count: int | None = None,
        dtype: DTypeLike | None = None
    ) -> DiagonalMatrix:
        """
        Diagonal matrix from its diagonal entries.

        Square of order len(diagonal) unless both dimensions are given.

        Raises:
            DimensionError: If len(diagonal) != min(row_count, column_count)
        """
        arr = np.asarray(diagonal)
        n = arr.size if arr.ndim == 1 else 0
        rows = n if row_count is None else row_count
        columns = rows if column_count is None else column_count
        return cls(DiagonalMatrixStorage.of_diagonal(rows, columns, arr, dtype))

    @classmethod
    def zeros(cls, rows: int, columns: int, dtype: DTypeLike = DEFAULT_DTYPE) -> DiagonalMatrix:
        return cls(DiagonalMatrixStorage(rows, columns, dtype))

    @classmethod
    def identity(cls, order: int, dtype: DTypeLike = DEFAULT_DTYPE) -> DiagonalMatrix:
        m = cls.zeros(order, order, dtype)
        m.storage.data[:] = 1
        return m

    @classmethod
    def _unconstrained(cls, rows: int, columns: int, dtype: DTypeLike) -> Matrix:
        return SparseMatrix.zeros(rows, columns, dtype)

    def create_matrix(self, rows: int, columns: int, fully_mutable: bool = False) -> Matrix:
        if fully_mutable:
            return SparseMatrix.zeros(rows, columns, self.dtype)
        return DiagonalMatrix(DiagonalMatrixStorage(rows, columns, self.dtype))

    def create_vector(self, size: int, fully_mutable: bool = False) -> SparseVector:
        return SparseVector.zeros(size, self.dtype)

    @property
    def _diagonal(self) -> np.ndarray:
        return self._storage.data

    # ------------------------------------------------------------------
    # Structure that stays diagonal
    # ------------------------------------------------------------------

    def _sub_matrix_target(
        self,
        row_index: int,
        row_count: int,
        column_index: int,
        column_count: int
    ) -> Matrix:
        if row_index == column_index:
            return self.create_matrix(row_count, column_count)
        return self.create_matrix(row_count, column_count, fully_mutable=True)

    def remove_row_and_column(self, index: int) -> DiagonalMatrix:
        """
        New diagonal matrix without row index and column index.

        Raises:
            OutOfRangeError: If index is outside either dimension
            InvalidArgumentError: If either dimension is 1
        """
        self._check_remove_row_and_column(index)
        result = self.create_matrix(self.row_count - 1, self.column_count - 1)
        result.storage.set_diagonal(np.delete(self._diagonal, index))
        return result

    def transpose(self) -> DiagonalMatrix:
        result = self.create_matrix(self.column_count, self.row_count)
        result.storage.set_diagonal(self._diagonal)
        return result

    def conjugate_transpose(self) -> DiagonalMatrix:
        result = self.create_matrix(self.column_count, self.row_count)
        result.storage.set_diagonal(np.conj(self._diagonal))
        return result

    def diagonal(self) -> Vector:
        return SparseVector.of_array(self._diagonal, self.dtype)

    def is_symmetric(self) -> bool:
        return self.row_count == self.column_count

    # ------------------------------------------------------------------
    # Masks
    # ------------------------------------------------------------------

    def find_mask(self, predicate: Predicate) -> Matrix:
        """
        Mask of the positions where predicate holds.

        When predicate rejects zero only diagonal positions can match and
        the mask is diagonal; otherwise it is a SparseMatrix.
        """
        check_callable(predicate, "predicate")
        if predicate(self._traits.zero):
            return super().find_mask(predicate)
        mask = self.create_matrix(self.row_count, self.column_count)
        hits = np.array([bool(predicate(v)) for v in self._diagonal], dtype=bool)
        mask.storage.set_diagonal(hits.astype(self.dtype))
        return mask

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _do_add(self, other: Matrix, result: Matrix) -> None:
        if isinstance(other, DiagonalMatrix) and isinstance(result, DiagonalMatrix):
            result.storage.set_diagonal(self._diagonal + other._diagonal)
        else:
            self._write(result, self._values() + other._values())

    def _do_subtract(self, other: Matrix, result: Matrix) -> None:
        if isinstance(other, DiagonalMatrix) and isinstance(result, DiagonalMatrix):
            result.storage.set_diagonal(self._diagonal - other._diagonal)
        else:
            self._write(result, self._values() - other._values())

    def _do_add_scalar(self, scalar: Any, result: Matrix) -> None:
        self._write(result, self._values() + scalar)

    def _do_multiply_scalar(self, scalar: Any, result: Matrix) -> None:
        if isinstance(result, DiagonalMatrix):
            result.storage.set_diagonal(self._diagonal * scalar)
        else:
            self._write(result, self._values() * scalar)

    def _do_multiply_vector(self, vector: Vector, result: Vector) -> None:
        k = self._diagonal.size
        out = np.zeros(self.row_count, dtype=np.result_type(self.dtype, vector.dtype))
        out[:k] = self._diagonal * vector._values()[:k]
        Vector._write(result, out)

    def _do_multiply_matrix(self, other: Matrix, result: Matrix) -> None:
        if isinstance(other, DiagonalMatrix) and isinstance(result, DiagonalMatrix):
            k = result.storage.diagonal_length
            product = np.zeros(k, dtype=self.dtype)
            shared = min(k, self._diagonal.size, other._diagonal.size)
            product[:shared] = self._diagonal[:shared] * other._diagonal[:shared]
            result.storage.set_diagonal(product)
            return
        # row i of the product is row i of other scaled by d[i]
        out = np.zeros((self.row_count, other.column_count),
                       dtype=np.result_type(self.dtype, other.dtype))
        k = self._diagonal.size
        out[:k, :] = self._diagonal[:, np.newaxis] * other._values()[:k, :]
        self._write(result, out)

    def _do_negate(self, result: Matrix) -> None:
        if isinstance(result, DiagonalMatrix):
            result.storage.set_diagonal(-self._diagonal)
        else:
            self._write(result, -self._values())

    # ------------------------------------------------------------------
    # Norms
    # ------------------------------------------------------------------

    def l1_norm(self) -> float:
        return float(np.abs(self._diagonal).max())

    def infinity_norm(self) -> float:
        return float(np.abs(self._diagonal).max())

    def frobenius_norm(self) -> float:
        return float(np.sqrt(np.sum(np.abs(self._diagonal) ** 2)))
