"""
Sparse matrices backed by scipy.sparse.

Arithmetic between two sparse operands stays in CSR form and is handed
back to the result storage with assign_sparse. Mixed operands fall back
to dense arrays.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import scipy.sparse as sp
from numpy.typing import ArrayLike, DTypeLike

from pylinalgebra.core.numeric import DEFAULT_DTYPE
from pylinalgebra.matrix.base import Matrix
from pylinalgebra.storage._base import StorageKind
from pylinalgebra.storage.sparse import SparseMatrixStorage
from pylinalgebra.vector.base import Vector
from pylinalgebra.vector.sparse import SparseVector


class SparseMatrix(Matrix):
    """
    Matrix storing only its non-zero elements.

    Args:
        storage: A SparseMatrixStorage, or an int row count for a zero matrix
        column_count: Column count when storage is a row count
        dtype: Element type when storage is a row count
    """

    def __init__(
        self,
        storage: SparseMatrixStorage | int,
        column_count: int | None = None,
        dtype: DTypeLike = DEFAULT_DTYPE
    ):
        if isinstance(storage, (int, np.integer)):
            columns = storage if column_count is None else column_count
            storage = SparseMatrixStorage(int(storage), int(columns), dtype)
        super().__init__(storage)

    @classmethod
    def of_array(cls, values: ArrayLike, dtype: DTypeLike | None = None) -> SparseMatrix:
        """Sparse matrix holding the non-zeros of a dense 2D array-like."""
        return cls(SparseMatrixStorage.of_array(values, dtype))

    @classmethod
    def of_sparse(cls, matrix: sp.spmatrix, dtype: DTypeLike | None = None) -> SparseMatrix:
        """Sparse matrix copied from any scipy.sparse matrix."""
        return cls(SparseMatrixStorage.of_sparse(matrix, dtype))

    @classmethod
    def zeros(cls, rows: int, columns: int, dtype: DTypeLike = DEFAULT_DTYPE) -> SparseMatrix:
        return cls(SparseMatrixStorage(rows, columns, dtype))

    @classmethod
    def identity(cls, order: int, dtype: DTypeLike = DEFAULT_DTYPE) -> SparseMatrix:
        m = cls.zeros(order, order, dtype)
        m.storage.assign_sparse(sp.identity(order, dtype=m.dtype, format='csr'))
        return m

    def create_matrix(self, rows: int, columns: int, fully_mutable: bool = False) -> SparseMatrix:
        return SparseMatrix(SparseMatrixStorage(rows, columns, self.dtype))

    def create_vector(self, size: int, fully_mutable: bool = False) -> SparseVector:
        return SparseVector.zeros(size, self.dtype)

    @property
    def nonzero_count(self) -> int:
        return self._storage.nonzero_count

    def to_sparse(self) -> sp.csr_matrix:
        """CSR copy of the contents."""
        return self._storage.to_csr()

    def _csr(self) -> sp.csr_matrix:
        return self._storage.to_csr()

    def _write_sparse(self, result: Matrix, matrix: sp.spmatrix) -> None:
        if result.storage.kind is StorageKind.SPARSE:
            result.storage.assign_sparse(matrix)
        else:
            self._write(result, matrix.toarray())

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _do_add(self, other: Matrix, result: Matrix) -> None:
        if isinstance(other, SparseMatrix):
            self._write_sparse(result, self._csr() + other._csr())
        else:
            self._write(result, self._values() + other._values())

    def _do_subtract(self, other: Matrix, result: Matrix) -> None:
        if isinstance(other, SparseMatrix):
            self._write_sparse(result, self._csr() - other._csr())
        else:
            self._write(result, self._values() - other._values())

    def _do_add_scalar(self, scalar: Any, result: Matrix) -> None:
        self._write(result, self._values() + scalar)

    def _do_multiply_scalar(self, scalar: Any, result: Matrix) -> None:
        self._write_sparse(result, self._csr() * scalar)

    def _do_multiply_vector(self, vector: Vector, result: Vector) -> None:
        Vector._write(result, np.asarray(self._csr() @ vector._values()).reshape(-1))

    def _do_multiply_matrix(self, other: Matrix, result: Matrix) -> None:
        if isinstance(other, SparseMatrix):
            self._write_sparse(result, self._csr() @ other._csr())
        else:
            self._write(result, np.asarray(self._csr() @ other._values()))

    def _do_negate(self, result: Matrix) -> None:
        self._write_sparse(result, -self._csr())

    # ------------------------------------------------------------------
    # Norms
    # ------------------------------------------------------------------

    def l1_norm(self) -> float:
        sums = np.asarray(abs(self._csr()).sum(axis=0)).reshape(-1)
        return float(sums.max())

    def infinity_norm(self) -> float:
        sums = np.asarray(abs(self._csr()).sum(axis=1)).reshape(-1)
        return float(sums.max())

    def frobenius_norm(self) -> float:
        data = self._csr().data
        return float(np.sqrt(np.sum(np.abs(data) ** 2)))
