"""
Sparse storage: only non-zero elements are kept.

Vectors keep two parallel numpy arrays (sorted indices, values) and locate
entries with a binary search. Matrices keep a scipy.sparse LIL matrix,
which supports cheap single-element and row-block updates; arithmetic
kernels convert to CSR on demand.

Zeros are never stored explicitly: writing zero to a position removes it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import numpy as np
import scipy.sparse as sp
from numpy.typing import ArrayLike, DTypeLike, NDArray

from pylinalgebra.core.capabilities import (
    CAPABILITY_FULLY_MUTABLE,
    CAPABILITY_PERMUTE_COLUMNS,
    CAPABILITY_PERMUTE_ROWS,
    CAPABILITY_REMOVE_COLUMN,
    CAPABILITY_REMOVE_ROW,
    CAPABILITY_SPARSE_ENUMERATION,
)
from pylinalgebra.core.numeric import DEFAULT_DTYPE, infer_dtype
from pylinalgebra.core.validation import (
    check_array,
    check_callable,
    check_castable,
    check_ndim,
    check_same_shape,
)
from pylinalgebra.storage._base import MatrixStorage, StorageKind, VectorStorage


# =====================================================================
# Sparse vector
# =====================================================================

class SparseVectorStorage(VectorStorage):
    """Non-zero vector elements as sorted (index, value) arrays."""

    kind = StorageKind.SPARSE
    _capabilities = frozenset({CAPABILITY_FULLY_MUTABLE, CAPABILITY_SPARSE_ENUMERATION})

    def __init__(self, length: int, dtype: DTypeLike = DEFAULT_DTYPE):
        super().__init__(length, dtype)
        self._indices = np.empty(0, dtype=np.intp)
        self._values = np.empty(0, dtype=self.dtype)

    @classmethod
    def of_array(
        cls,
        values: ArrayLike,
        dtype: DTypeLike | None = None
    ) -> SparseVectorStorage:
        """Build from a dense 1D array-like, keeping only its non-zeros."""
        arr = check_array(values, "values")
        check_ndim(arr, 1, "values")
        storage = cls(arr.shape[0], infer_dtype(arr, dtype))
        check_castable(arr.dtype, storage.dtype, "values")
        storage.write_block(0, arr.astype(storage.dtype))
        return storage

    @property
    def nonzero_count(self) -> int:
        return int(self._indices.size)

    def _find(self, index: int) -> tuple[int, bool]:
        pos = int(np.searchsorted(self._indices, index))
        return pos, pos < self._indices.size and self._indices[pos] == index

    def _get(self, index: int) -> Any:
        pos, found = self._find(index)
        return self._values[pos] if found else self._traits.zero

    def _set(self, index: int, value: Any) -> None:
        pos, found = self._find(index)
        if self._traits.is_zero(value):
            if found:
                self._indices = np.delete(self._indices, pos)
                self._values = np.delete(self._values, pos)
        elif found:
            self._values[pos] = value
        else:
            self._indices = np.insert(self._indices, pos, index)
            self._values = np.insert(self._values, pos, value)

    def to_array(self) -> NDArray[Any]:
        arr = np.zeros(self._length, dtype=self.dtype)
        arr[self._indices] = self._values
        return arr

    def read_block(self, index: int, count: int) -> NDArray[Any]:
        arr = np.zeros(count, dtype=self.dtype)
        lo, hi = np.searchsorted(self._indices, [index, index + count])
        arr[self._indices[lo:hi] - index] = self._values[lo:hi]
        return arr

    def write_block(self, index: int, values: NDArray[Any]) -> None:
        values = np.asarray(values, dtype=self.dtype)
        lo, hi = np.searchsorted(self._indices, [index, index + values.size])
        nz = np.flatnonzero(values)
        self._indices = np.concatenate(
            [self._indices[:lo], nz.astype(np.intp) + index, self._indices[hi:]]
        )
        self._values = np.concatenate(
            [self._values[:lo], values[nz], self._values[hi:]]
        )

    def _copy_to(self, target: VectorStorage, skip_clearing: bool) -> None:
        if isinstance(target, SparseVectorStorage):
            target._indices = self._indices.copy()
            target._values = self._values.astype(target.dtype)
            return
        if not skip_clearing:
            target.clear()
        for i, v in zip(self._indices, self._values):
            target._set(int(i), v)

    def enumerate_nonzero(self) -> Iterator[tuple[int, Any]]:
        for i, v in zip(self._indices.tolist(), self._values.copy()):
            yield i, v

    def map_inplace(
        self,
        func: Callable[[Any], Any],
        force_map_zeros: bool = False
    ) -> None:
        check_callable(func, "func")
        if force_map_zeros or not self._traits.is_zero(func(self._traits.zero)):
            super().map_inplace(func, force_map_zeros)
            return
        mapped = np.array([func(v) for v in self._values], dtype=self.dtype)
        self._keep_nonzero(self._indices, mapped)

    def map_indexed_inplace(
        self,
        func: Callable[[int, Any], Any],
        force_map_zeros: bool = False
    ) -> None:
        check_callable(func, "func")
        if force_map_zeros:
            super().map_indexed_inplace(func, force_map_zeros)
            return
        mapped = np.array(
            [func(int(i), v) for i, v in zip(self._indices, self._values)],
            dtype=self.dtype,
        )
        self._keep_nonzero(self._indices, mapped)

    def _keep_nonzero(self, indices: NDArray[np.intp], values: NDArray[Any]) -> None:
        keep = values != self._traits.zero
        self._indices = indices[keep]
        self._values = values[keep]


# =====================================================================
# Sparse matrix
# =====================================================================

class SparseMatrixStorage(MatrixStorage):
    """Non-zero matrix elements in a scipy.sparse LIL matrix."""

    kind = StorageKind.SPARSE
    _capabilities = frozenset({
        CAPABILITY_FULLY_MUTABLE,
        CAPABILITY_PERMUTE_ROWS,
        CAPABILITY_PERMUTE_COLUMNS,
        CAPABILITY_REMOVE_ROW,
        CAPABILITY_REMOVE_COLUMN,
        CAPABILITY_SPARSE_ENUMERATION,
    })

    def __init__(
        self,
        row_count: int,
        column_count: int,
        dtype: DTypeLike = DEFAULT_DTYPE
    ):
        super().__init__(row_count, column_count, dtype)
        self._data = sp.lil_matrix((self._row_count, self._column_count), dtype=self.dtype)

    @classmethod
    def of_array(
        cls,
        values: ArrayLike,
        dtype: DTypeLike | None = None
    ) -> SparseMatrixStorage:
        """Build from a dense 2D array-like, keeping only its non-zeros."""
        arr = check_array(values, "values")
        check_ndim(arr, 2, "values")
        storage = cls(arr.shape[0], arr.shape[1], infer_dtype(arr, dtype))
        check_castable(arr.dtype, storage.dtype, "values")
        storage.assign_sparse(sp.csr_matrix(arr.astype(storage.dtype)))
        return storage

    @classmethod
    def of_sparse(
        cls,
        matrix: sp.spmatrix,
        dtype: DTypeLike | None = None
    ) -> SparseMatrixStorage:
        """Build from any scipy.sparse matrix."""
        dt = infer_dtype(np.empty(0, dtype=matrix.dtype), dtype)
        storage = cls(matrix.shape[0], matrix.shape[1], dt)
        check_castable(matrix.dtype, storage.dtype, "matrix")
        storage.assign_sparse(matrix)
        return storage

    @property
    def nonzero_count(self) -> int:
        return int(self._data.count_nonzero())

    def to_csr(self) -> sp.csr_matrix:
        """CSR copy for arithmetic kernels."""
        return self._data.tocsr()

    def assign_sparse(self, matrix: sp.spmatrix) -> None:
        """
        Replace the contents with a scipy.sparse matrix of the same shape.

        Explicitly stored zeros are dropped.
        """
        check_same_shape(matrix.shape, self.shape, "matrix")
        coo = sp.coo_matrix(matrix)
        keep = coo.data != 0
        self._data = sp.coo_matrix(
            (coo.data[keep].astype(self.dtype), (coo.row[keep], coo.col[keep])),
            shape=self.shape,
        ).tolil()

    def _get(self, row: int, column: int) -> Any:
        return self.dtype.type(self._data[row, column])

    def _set(self, row: int, column: int, value: Any) -> None:
        self._data[row, column] = value

    def to_array(self) -> NDArray[Any]:
        return self._data.toarray()

    def read_block(
        self,
        row: int,
        row_count: int,
        column: int,
        column_count: int
    ) -> NDArray[Any]:
        return self._data[row:row + row_count, column:column + column_count].toarray()

    def write_block(self, row: int, column: int, block: NDArray[Any]) -> None:
        h, w = block.shape
        self._data[row:row + h, column:column + w] = np.asarray(block, dtype=self.dtype)

    def _clear_region(
        self,
        row: int,
        row_count: int,
        column: int,
        column_count: int
    ) -> None:
        if row == 0 and column == 0 and (row_count, column_count) == self.shape:
            self._data = sp.lil_matrix(self.shape, dtype=self.dtype)
            return
        super()._clear_region(row, row_count, column, column_count)

    def _copy_to(self, target: MatrixStorage, skip_clearing: bool) -> None:
        if isinstance(target, SparseMatrixStorage):
            target.assign_sparse(self._data)
            return
        if not skip_clearing:
            target.clear()
        for r, c, v in self.enumerate_nonzero():
            target._set(r, c, v)

    def enumerate_nonzero(self) -> Iterator[tuple[int, int, Any]]:
        coo = self._data.tocoo()
        order = np.lexsort((coo.row, coo.col))
        for k in order:
            v = coo.data[k]
            if v != 0:
                yield int(coo.row[k]), int(coo.col[k]), v

    def map_inplace(
        self,
        func: Callable[[Any], Any],
        force_map_zeros: bool = False
    ) -> None:
        check_callable(func, "func")
        if force_map_zeros or not self._traits.is_zero(func(self._traits.zero)):
            super().map_inplace(func, force_map_zeros)
            return
        coo = self._data.tocoo()
        mapped = np.array([func(v) for v in coo.data], dtype=self.dtype)
        self.assign_sparse(sp.coo_matrix((mapped, (coo.row, coo.col)), shape=self.shape))

    def map_indexed_inplace(
        self,
        func: Callable[[int, int, Any], Any],
        force_map_zeros: bool = False
    ) -> None:
        check_callable(func, "func")
        if force_map_zeros:
            super().map_indexed_inplace(func, force_map_zeros)
            return
        coo = self._data.tocoo()
        mapped = np.array(
            [func(int(r), int(c), v) for r, c, v in zip(coo.row, coo.col, coo.data)],
            dtype=self.dtype,
        )
        self.assign_sparse(sp.coo_matrix((mapped, (coo.row, coo.col)), shape=self.shape))
