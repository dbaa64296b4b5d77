"""
Generic matrix core.

Matrix holds the storage-independent logic: validation, structural edits
(insert, remove, select, append, stack), permutation-driven reordering,
sorting, shuffling and predicate masks. Element-wise arithmetic and norms
are per-family hooks.

Structural edits never resize in place; they return a new matrix. Edits
that may break a constrained family's structure allocate their result
with fully_mutable=True. Operations a family refuses outright are
gated on the capabilities its storage advertises.

Masks and index enumerations walk the matrix column by column, and rows
within each column.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Sequence
from typing import Any, Callable

import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray

from pylinalgebra.core.capabilities import (
    CAPABILITY_PERMUTE_COLUMNS,
    CAPABILITY_PERMUTE_ROWS,
    CAPABILITY_REMOVE_COLUMN,
    CAPABILITY_REMOVE_ROW,
)
from pylinalgebra.core.compute.precision import almost_equal
from pylinalgebra.core.compute.sorting import stable_sort_with_indices
from pylinalgebra.core.exceptions import InvalidArgumentError, InvalidOperationError
from pylinalgebra.core.numeric import NumericTraits, infer_dtype
from pylinalgebra.core.protocols import ElementFunction, Predicate, RandomSource
from pylinalgebra.core.validation import (
    check_callable,
    check_castable,
    check_index,
    check_indices,
    check_insert_index,
    check_not_none,
    check_range,
    check_same_length,
    check_same_shape,
    check_size,
)
from pylinalgebra.matrix._one_based import OneBasedMatrixMixin
from pylinalgebra.permutation import Permutation
from pylinalgebra.storage._base import MatrixStorage, StorageKind
from pylinalgebra.vector.base import Vector, is_scalar, selected_positions, skips_zeros


def _as_1d(values: Vector | ArrayLike, dtype: np.dtype, name: str) -> NDArray[Any]:
    check_not_none(values, name)
    if isinstance(values, Vector):
        arr = values.to_array()
    else:
        arr = np.asarray(values).reshape(-1)
    check_castable(arr.dtype, dtype, name)
    return arr.astype(dtype, copy=False)


def _split_key(key: Any) -> tuple[int, int]:
    """Unpack a matrix subscript, which must be a (row, column) pair."""
    if not isinstance(key, tuple) or len(key) != 2:
        raise InvalidArgumentError(
            f"key: expected a (row, column) tuple, got {key!r}"
        )
    return key


class Matrix(OneBasedMatrixMixin, ABC):
    """
    Rectangular matrix over one of the supported element types.

    A matrix exclusively owns its storage; the storage is created with the
    matrix and never replaced.

    Args:
        storage: The element container

    Raises:
        NullArgumentError: If storage is None
    """

    def __init__(self, storage: MatrixStorage):
        check_not_none(storage, "storage")
        self._storage = storage
        self._traits = storage.traits

    # ==================================================================
    # Shape, type and factories
    # ==================================================================

    @property
    def storage(self) -> MatrixStorage:
        return self._storage

    @property
    def row_count(self) -> int:
        return self._storage.row_count

    @property
    def column_count(self) -> int:
        return self._storage.column_count

    @property
    def shape(self) -> tuple[int, int]:
        return self._storage.shape

    @property
    def traits(self) -> NumericTraits:
        return self._traits

    @property
    def dtype(self) -> np.dtype:
        return self._traits.dtype

    @classmethod
    @abstractmethod
    def zeros(cls, rows: int, columns: int, dtype: DTypeLike = np.float64) -> Matrix:
        ...

    @classmethod
    def _unconstrained(cls, rows: int, columns: int, dtype: DTypeLike) -> Matrix:
        """Zero matrix of this family that accepts any value anywhere."""
        return cls.zeros(rows, columns, dtype)

    @abstractmethod
    def create_matrix(self, rows: int, columns: int, fully_mutable: bool = False) -> Matrix:
        """
        New zero matrix of this family and element type.

        With fully_mutable=True constrained families return an unconstrained
        representation instead.
        """
        ...

    @abstractmethod
    def create_vector(self, size: int, fully_mutable: bool = False) -> Vector:
        """New zero vector of the matching family and element type."""
        ...

    def _values(self) -> NDArray[Any]:
        """Elements as a dense 2D array; the live array for dense storage."""
        if self._storage.kind is StorageKind.DENSE:
            return self._storage.data
        return self._storage.to_array()

    @staticmethod
    def _write(result: Matrix, values: NDArray[Any]) -> None:
        if result._storage.kind is StorageKind.DENSE:
            np.copyto(result._storage.data, values, casting='unsafe')
        else:
            result._storage.write_block(0, 0, np.asarray(values, dtype=result.dtype))

    def _require(self, capability: str, operation: str) -> None:
        if not self._storage.supports(capability):
            raise InvalidOperationError(
                f"{operation}: not supported by {self._storage.kind.value} matrices",
                operation=operation, storage_kind=self._storage.kind.value,
            )

    @classmethod
    def create_from_rows(cls, rows: Sequence[Vector | ArrayLike]) -> Matrix:
        """
        Matrix whose i-th row is rows[i].

        The column count is the longest row; shorter rows are zero padded.

        Raises:
            NullArgumentError: If rows is None
            InvalidArgumentError: If rows is empty
        """
        arrays = cls._collect(rows, "rows")
        width = max(a.size for a in arrays)
        dtype = infer_dtype(np.empty(0, dtype=np.result_type(*arrays)))
        result = cls._unconstrained(len(arrays), width, dtype)
        for i, a in enumerate(arrays):
            result._storage.write_block(i, 0, a.astype(dtype)[np.newaxis, :])
        return result

    @classmethod
    def create_from_columns(cls, columns: Sequence[Vector | ArrayLike]) -> Matrix:
        """
        Matrix whose j-th column is columns[j].

        The row count is the longest column; shorter columns are zero padded.

        Raises:
            NullArgumentError: If columns is None
            InvalidArgumentError: If columns is empty
        """
        arrays = cls._collect(columns, "columns")
        height = max(a.size for a in arrays)
        dtype = infer_dtype(np.empty(0, dtype=np.result_type(*arrays)))
        result = cls._unconstrained(height, len(arrays), dtype)
        for j, a in enumerate(arrays):
            result._storage.write_block(0, j, a.astype(dtype)[:, np.newaxis])
        return result

    @staticmethod
    def _collect(items: Sequence[Vector | ArrayLike], name: str) -> list[NDArray[Any]]:
        check_not_none(items, name)
        arrays = [
            item.to_array() if isinstance(item, Vector) else np.asarray(item).reshape(-1)
            for item in items
        ]
        if not arrays:
            raise InvalidArgumentError(f"{name}: must hold at least one vector")
        return arrays

    # ==================================================================
    # Element access
    # ==================================================================

    def at(self, row: int, column: int) -> Any:
        return self._storage.get(row, column)

    def set_at(self, row: int, column: int, value: Any) -> None:
        self._storage.set(row, column, value)

    def __getitem__(self, key: tuple[int, int]) -> Any:
        row, column = _split_key(key)
        return self._storage.get(row, column)

    def __setitem__(self, key: tuple[int, int], value: Any) -> None:
        row, column = _split_key(key)
        self._storage.set(row, column, value)

    def enumerate(self) -> Iterator[Any]:
        """Every element, column by column."""
        return self._storage.enumerate()

    def enumerate_indexed(self) -> Iterator[tuple[int, int, Any]]:
        return self._storage.enumerate_indexed()

    def enumerate_nonzero(self) -> Iterator[tuple[int, int, Any]]:
        return self._storage.enumerate_nonzero()

    def row_indices(self) -> Iterator[int]:
        return iter(range(self.row_count))

    def column_indices(self) -> Iterator[int]:
        return iter(range(self.column_count))

    def enumerate_rows(self, index: int = 0, count: int | None = None) -> Iterator[tuple[int, Vector]]:
        """
        Yield (i, row i) for rows [index, index + count).

        Raises:
            OutOfRangeError: If the range is invalid (raised immediately)
        """
        count = self.row_count - index if count is None else count
        check_range(index, count, self.row_count, "index")
        return ((i, self.row(i)) for i in range(index, index + count))

    def enumerate_columns(self, index: int = 0, count: int | None = None) -> Iterator[tuple[int, Vector]]:
        """
        Yield (j, column j) for columns [index, index + count).

        Raises:
            OutOfRangeError: If the range is invalid (raised immediately)
        """
        count = self.column_count - index if count is None else count
        check_range(index, count, self.column_count, "index")
        return ((j, self.column(j)) for j in range(index, index + count))

    def to_array(self) -> NDArray[Any]:
        return self._storage.to_array()

    def to_row_major_array(self) -> NDArray[Any]:
        return self._storage.to_array().ravel(order='C')

    def to_column_major_array(self) -> NDArray[Any]:
        return self._storage.to_array().ravel(order='F')

    def map_inplace(self, func: ElementFunction, force_map_zeros: bool = False) -> None:
        self._storage.map_inplace(func, force_map_zeros)

    def map_indexed_inplace(
        self,
        func: Callable[[int, int, Any], Any],
        force_map_zeros: bool = False
    ) -> None:
        self._storage.map_indexed_inplace(func, force_map_zeros)

    # ==================================================================
    # Clearing and copying
    # ==================================================================

    def clear(self) -> None:
        self._storage.clear()

    def clear_row(self, index: int) -> None:
        check_index(index, self.row_count, "index")
        self._storage.clear_region(index, 1, 0, self.column_count)

    def clear_column(self, index: int) -> None:
        check_index(index, self.column_count, "index")
        self._storage.clear_region(0, self.row_count, index, 1)

    def clear_sub_matrix(
        self,
        row_index: int,
        row_count: int,
        column_index: int,
        column_count: int
    ) -> None:
        self._storage.clear_region(row_index, row_count, column_index, column_count)

    def clone(self) -> Matrix:
        result = self.create_matrix(self.row_count, self.column_count)
        self._storage.copy_to(result._storage, skip_clearing=True)
        return result

    def copy_to(self, target: Matrix) -> None:
        """
        Copy every element into target.

        Raises:
            NullArgumentError: If target is None
            DimensionError: If target has a different shape
        """
        check_not_none(target, "target")
        self._storage.copy_to(target._storage)

    # ==================================================================
    # Rows, columns, sub-matrices
    # ==================================================================

    def _vector_result(self, size: int, result: Vector | None) -> Vector:
        if result is None:
            return self.create_vector(size)
        check_same_length(result.count, size, "result")
        check_castable(self.dtype, result.dtype, "result")
        return result

    def row(self, index: int, result: Vector | None = None) -> Vector:
        check_index(index, self.row_count, "index")
        target = self._vector_result(self.column_count, result)
        self._storage.copy_sub_row_to(target.storage, index, 0, 0, self.column_count)
        return target

    def column(self, index: int, result: Vector | None = None) -> Vector:
        check_index(index, self.column_count, "index")
        target = self._vector_result(self.row_count, result)
        self._storage.copy_sub_column_to(target.storage, index, 0, 0, self.row_count)
        return target

    def sub_row(
        self,
        row_index: int,
        column_index: int,
        length: int,
        result: Vector | None = None
    ) -> Vector:
        """Elements [column_index, column_index + length) of one row."""
        check_index(row_index, self.row_count, "row_index")
        check_range(column_index, length, self.column_count, "column_index")
        target = self._vector_result(length, result)
        self._storage.copy_sub_row_to(target.storage, row_index, column_index, 0, length)
        return target

    def sub_column(
        self,
        column_index: int,
        row_index: int,
        length: int,
        result: Vector | None = None
    ) -> Vector:
        """Elements [row_index, row_index + length) of one column."""
        check_index(column_index, self.column_count, "column_index")
        check_range(row_index, length, self.row_count, "row_index")
        target = self._vector_result(length, result)
        self._storage.copy_sub_column_to(target.storage, column_index, row_index, 0, length)
        return target

    def set_row(self, index: int, values: Vector | ArrayLike) -> None:
        """
        Overwrite row index.

        Raises:
            NullArgumentError: If values is None
            OutOfRangeError: If index is out of range
            DimensionError: If len(values) != column_count
        """
        arr = _as_1d(values, self.dtype, "values")
        check_index(index, self.row_count, "index")
        check_same_length(arr.size, self.column_count, "values")
        self._storage.write_block(index, 0, arr[np.newaxis, :])

    def set_column(self, index: int, values: Vector | ArrayLike) -> None:
        """
        Overwrite column index.

        Raises:
            NullArgumentError: If values is None
            OutOfRangeError: If index is out of range
            DimensionError: If len(values) != row_count
        """
        arr = _as_1d(values, self.dtype, "values")
        check_index(index, self.column_count, "index")
        check_same_length(arr.size, self.row_count, "values")
        self._storage.write_block(0, index, arr[:, np.newaxis])

    def _sub_matrix_target(
        self,
        row_index: int,
        row_count: int,
        column_index: int,
        column_count: int
    ) -> Matrix:
        return self.create_matrix(row_count, column_count)

    def sub_matrix(
        self,
        row_index: int,
        row_count: int,
        column_index: int,
        column_count: int
    ) -> Matrix:
        """
        New matrix copied from a rectangular region.

        Raises:
            OutOfRangeError: If the region is empty or exceeds the matrix
        """
        check_range(row_index, row_count, self.row_count, "row_index")
        check_range(column_index, column_count, self.column_count, "column_index")
        result = self._sub_matrix_target(row_index, row_count, column_index, column_count)
        self._storage.copy_sub_matrix_to(
            result._storage, row_index, 0, row_count,
            column_index, 0, column_count, skip_clearing=True,
        )
        return result

    def set_sub_matrix(
        self,
        row_index: int,
        column_index: int,
        sub_matrix: Matrix,
        row_count: int | None = None,
        column_count: int | None = None
    ) -> None:
        """
        Overwrite a region with the leading block of sub_matrix.

        Raises:
            NullArgumentError: If sub_matrix is None
            OutOfRangeError: If the region exceeds either matrix
        """
        check_not_none(sub_matrix, "sub_matrix")
        row_count = sub_matrix.row_count if row_count is None else row_count
        column_count = sub_matrix.column_count if column_count is None else column_count
        check_range(row_index, row_count, self.row_count, "row_index")
        check_range(column_index, column_count, self.column_count, "column_index")
        sub_matrix._storage.copy_sub_matrix_to(
            self._storage, 0, row_index, row_count, 0, column_index, column_count,
        )

    def diagonal(self) -> Vector:
        """Main diagonal as a vector of length min(rows, columns)."""
        k = min(self.row_count, self.column_count)
        result = self.create_vector(k)
        result.storage.write_block(
            0, np.array([self._storage._get(i, i) for i in range(k)], dtype=self.dtype)
        )
        return result

    def set_diagonal(self, values: Vector | ArrayLike) -> None:
        """
        Overwrite the main diagonal.

        Raises:
            NullArgumentError: If values is None
            DimensionError: If len(values) != min(rows, columns)
        """
        arr = _as_1d(values, self.dtype, "values")
        check_same_length(arr.size, min(self.row_count, self.column_count), "values")
        for i, v in enumerate(arr):
            self._storage._set(i, i, v)

    def _shaped_result(self, rows: int, columns: int, result: Matrix | None) -> Matrix:
        if result is None:
            return self.create_matrix(rows, columns)
        check_same_shape(result.shape, (rows, columns), "result")
        return result

    def upper_triangle(self, result: Matrix | None = None) -> Matrix:
        target = self._shaped_result(self.row_count, self.column_count, result)
        self._write(target, np.triu(self._values()))
        return target

    def lower_triangle(self, result: Matrix | None = None) -> Matrix:
        target = self._shaped_result(self.row_count, self.column_count, result)
        self._write(target, np.tril(self._values()))
        return target

    def strictly_upper_triangle(self, result: Matrix | None = None) -> Matrix:
        target = self._shaped_result(self.row_count, self.column_count, result)
        self._write(target, np.triu(self._values(), k=1))
        return target

    def strictly_lower_triangle(self, result: Matrix | None = None) -> Matrix:
        target = self._shaped_result(self.row_count, self.column_count, result)
        self._write(target, np.tril(self._values(), k=-1))
        return target

    def transpose(self) -> Matrix:
        result = self.create_matrix(self.column_count, self.row_count)
        self._write(result, self._values().T)
        return result

    def conjugate_transpose(self) -> Matrix:
        """Transpose with every element conjugated; same as transpose for reals."""
        if not self._traits.is_complex:
            return self.transpose()
        result = self.create_matrix(self.column_count, self.row_count)
        self._write(result, np.conj(self._values().T))
        return result

    def is_symmetric(self) -> bool:
        if self.row_count != self.column_count:
            return False
        values = self._values()
        return bool(np.array_equal(values, values.T))

    # ==================================================================
    # Structural edits
    # ==================================================================

    def insert_row(self, row_index: int, row: Vector | ArrayLike) -> Matrix:
        """
        New matrix with row inserted before row_index.

        row_index may equal row_count to append at the bottom.

        Raises:
            NullArgumentError: If row is None
            OutOfRangeError: If row_index is outside [0, row_count]
            DimensionError: If len(row) != column_count
        """
        arr = _as_1d(row, self.dtype, "row")
        check_insert_index(row_index, self.row_count, "row_index")
        check_same_length(arr.size, self.column_count, "row")
        r, c = self.shape
        result = self.create_matrix(r + 1, c, fully_mutable=True)
        if row_index > 0:
            self._storage.copy_sub_matrix_to(result._storage, 0, 0, row_index, 0, 0, c, skip_clearing=True)
        result._storage.write_block(row_index, 0, arr[np.newaxis, :])
        if row_index < r:
            self._storage.copy_sub_matrix_to(
                result._storage, row_index, row_index + 1, r - row_index, 0, 0, c, skip_clearing=True,
            )
        return result

    def insert_column(self, column_index: int, column: Vector | ArrayLike) -> Matrix:
        """
        New matrix with column inserted before column_index.

        column_index may equal column_count to append at the right.

        Raises:
            NullArgumentError: If column is None
            OutOfRangeError: If column_index is outside [0, column_count]
            DimensionError: If len(column) != row_count
        """
        arr = _as_1d(column, self.dtype, "column")
        check_insert_index(column_index, self.column_count, "column_index")
        check_same_length(arr.size, self.row_count, "column")
        r, c = self.shape
        result = self.create_matrix(r, c + 1, fully_mutable=True)
        if column_index > 0:
            self._storage.copy_sub_matrix_to(result._storage, 0, 0, r, 0, 0, column_index, skip_clearing=True)
        result._storage.write_block(0, column_index, arr[:, np.newaxis])
        if column_index < c:
            self._storage.copy_sub_matrix_to(
                result._storage, 0, 0, r, column_index, column_index + 1, c - column_index, skip_clearing=True,
            )
        return result

    def remove_row(self, row_index: int) -> Matrix:
        """
        New matrix without row row_index.

        Raises:
            InvalidOperationError: If the storage family refuses row removal
            OutOfRangeError: If row_index is out of range
            InvalidArgumentError: If only one row remains
        """
        self._require(CAPABILITY_REMOVE_ROW, "remove_row")
        check_index(row_index, self.row_count, "row_index")
        r, c = self.shape
        if r == 1:
            raise InvalidArgumentError("row_index: cannot remove the only row of a matrix")
        if row_index == 0:
            return self.sub_matrix(1, r - 1, 0, c)
        if row_index == r - 1:
            return self.sub_matrix(0, r - 1, 0, c)
        upper = self.sub_matrix(0, row_index, 0, c)
        lower = self.sub_matrix(row_index + 1, r - row_index - 1, 0, c)
        return upper.stack(lower)

    def remove_column(self, column_index: int) -> Matrix:
        """
        New matrix without column column_index.

        Raises:
            InvalidOperationError: If the storage family refuses column removal
            OutOfRangeError: If column_index is out of range
            InvalidArgumentError: If only one column remains
        """
        self._require(CAPABILITY_REMOVE_COLUMN, "remove_column")
        check_index(column_index, self.column_count, "column_index")
        r, c = self.shape
        if c == 1:
            raise InvalidArgumentError("column_index: cannot remove the only column of a matrix")
        if column_index == 0:
            return self.sub_matrix(0, r, 1, c - 1)
        if column_index == c - 1:
            return self.sub_matrix(0, r, 0, c - 1)
        left = self.sub_matrix(0, r, 0, column_index)
        right = self.sub_matrix(0, r, column_index + 1, c - column_index - 1)
        return left.append(right)

    def _check_remove_row_and_column(self, index: int) -> None:
        check_index(index, self.row_count, "index")
        check_index(index, self.column_count, "index")
        if self.row_count == 1 or self.column_count == 1:
            raise InvalidArgumentError(
                f"index: cannot remove a row and column from a {self.row_count}x{self.column_count} matrix"
            )

    def remove_row_and_column(self, index: int) -> Matrix:
        """
        New matrix without row index and column index.

        The four blocks around the removed cross are recombined as
        [[top-left, top-right], [bottom-left, bottom-right]].

        Raises:
            OutOfRangeError: If index is outside either dimension
            InvalidArgumentError: If either dimension is 1
        """
        self._check_remove_row_and_column(index)
        r, c = self.shape
        if index == 0:
            return self.sub_matrix(1, r - 1, 1, c - 1)
        below = r - index - 1
        right = c - index - 1
        top = self.sub_matrix(0, index, 0, index)
        if right > 0:
            top = top.append(self.sub_matrix(0, index, index + 1, right))
        if below == 0:
            return top
        bottom = self.sub_matrix(index + 1, below, 0, index)
        if right > 0:
            bottom = bottom.append(self.sub_matrix(index + 1, below, index + 1, right))
        return top.stack(bottom)

    def select_row_range(self, row_index: int, count: int) -> Matrix:
        return self.sub_matrix(row_index, count, 0, self.column_count)

    def select_column_range(self, column_index: int, count: int) -> Matrix:
        return self.sub_matrix(0, self.row_count, column_index, count)

    def set_rows(self, row_index: int, count: int, source: Matrix) -> None:
        """
        Overwrite rows [row_index, row_index + count) with the leading rows of source.

        Raises:
            NullArgumentError: If source is None
            DimensionError: If source has a different column count
            OutOfRangeError: If either row range is invalid
        """
        check_not_none(source, "source")
        check_same_length(source.column_count, self.column_count, "source columns")
        check_range(row_index, count, self.row_count, "row_index")
        check_range(0, count, source.row_count, "source rows")
        source._storage.copy_sub_matrix_to(
            self._storage, 0, row_index, count, 0, 0, self.column_count,
        )

    def set_columns(self, column_index: int, count: int, source: Matrix) -> None:
        """
        Overwrite columns [column_index, column_index + count) with the leading columns of source.

        Raises:
            NullArgumentError: If source is None
            DimensionError: If source has a different row count
            OutOfRangeError: If either column range is invalid
        """
        check_not_none(source, "source")
        check_same_length(source.row_count, self.row_count, "source rows")
        check_range(column_index, count, self.column_count, "column_index")
        check_range(0, count, source.column_count, "source columns")
        source._storage.copy_sub_matrix_to(
            self._storage, 0, 0, self.row_count, 0, column_index, count,
        )

    def select_rows(self, keep: Iterable[int]) -> Matrix:
        """
        New matrix of the requested rows in the requested order (repeats allowed).

        Raises:
            NullArgumentError: If keep is None
            OutOfRangeError: If keep is empty or names a row outside [0, row_count)
        """
        idx = check_indices(keep, self.row_count, "keep")
        check_size(len(idx), "keep")
        result = self.create_matrix(len(idx), self.column_count, fully_mutable=True)
        result._storage.write_block(0, 0, self._values()[idx, :])
        return result

    def select_columns(self, keep: Iterable[int]) -> Matrix:
        """
        New matrix of the requested columns in the requested order (repeats allowed).

        Raises:
            NullArgumentError: If keep is None
            OutOfRangeError: If keep is empty or names a column outside [0, column_count)
        """
        idx = check_indices(keep, self.column_count, "keep")
        check_size(len(idx), "keep")
        result = self.create_matrix(self.row_count, len(idx), fully_mutable=True)
        result._storage.write_block(0, 0, self._values()[:, idx])
        return result

    def append(self, right: Matrix, result: Matrix | None = None) -> Matrix:
        """
        [self, right] side by side.

        Raises:
            NullArgumentError: If right is None
            DimensionError: If the row counts differ or result has the wrong shape
        """
        check_not_none(right, "right")
        check_same_length(right.row_count, self.row_count, "right rows")
        r, c = self.shape
        shape = (r, c + right.column_count)
        if result is None:
            result = self.create_matrix(*shape, fully_mutable=True)
        else:
            check_same_shape(result.shape, shape, "result")
        self._storage.copy_sub_matrix_to(result._storage, 0, 0, r, 0, 0, c, skip_clearing=True)
        right._storage.copy_sub_matrix_to(
            result._storage, 0, 0, r, 0, c, right.column_count, skip_clearing=True,
        )
        return result

    def stack(self, lower: Matrix, result: Matrix | None = None) -> Matrix:
        """
        [self; lower] one above the other.

        Raises:
            NullArgumentError: If lower is None
            DimensionError: If the column counts differ or result has the wrong shape
        """
        check_not_none(lower, "lower")
        check_same_length(lower.column_count, self.column_count, "lower columns")
        r, c = self.shape
        shape = (r + lower.row_count, c)
        if result is None:
            result = self.create_matrix(*shape, fully_mutable=True)
        else:
            check_same_shape(result.shape, shape, "result")
        self._storage.copy_sub_matrix_to(result._storage, 0, 0, r, 0, 0, c, skip_clearing=True)
        lower._storage.copy_sub_matrix_to(
            result._storage, 0, r, lower.row_count, 0, 0, c, skip_clearing=True,
        )
        return result

    def diagonal_stack(self, lower: Matrix, result: Matrix | None = None) -> Matrix:
        """
        Block diagonal [[self, 0], [0, lower]].

        Raises:
            NullArgumentError: If lower is None
            DimensionError: If result has the wrong shape
        """
        check_not_none(lower, "lower")
        r, c = self.shape
        shape = (r + lower.row_count, c + lower.column_count)
        if result is None:
            result = self.create_matrix(*shape, fully_mutable=True)
        else:
            check_same_shape(result.shape, shape, "result")
            result.clear()
        self._storage.copy_sub_matrix_to(result._storage, 0, 0, r, 0, 0, c, skip_clearing=True)
        lower._storage.copy_sub_matrix_to(
            result._storage, 0, r, lower.row_count, 0, c, lower.column_count, skip_clearing=True,
        )
        return result

    # ==================================================================
    # Permutation, sorting, shuffling
    # ==================================================================

    def permute_rows(self, permutation: Permutation) -> None:
        """
        Move row i to row permutation[i], in place.

        Raises:
            NullArgumentError: If permutation is None
            InvalidOperationError: If the storage family refuses row permutation
            DimensionError: If permutation.dimension != row_count
        """
        check_not_none(permutation, "permutation")
        self._require(CAPABILITY_PERMUTE_ROWS, "permute_rows")
        check_same_length(permutation.dimension, self.row_count, "permutation")
        for i, j in enumerate(permutation.to_inversions()):
            if i != j:
                self._storage.swap_rows(i, j)

    def permute_columns(self, permutation: Permutation) -> None:
        """
        Move column j to column permutation[j], in place.

        Raises:
            NullArgumentError: If permutation is None
            InvalidOperationError: If the storage family refuses column permutation
            DimensionError: If permutation.dimension != column_count
        """
        check_not_none(permutation, "permutation")
        self._require(CAPABILITY_PERMUTE_COLUMNS, "permute_columns")
        check_same_length(permutation.dimension, self.column_count, "permutation")
        for i, j in enumerate(permutation.to_inversions()):
            if i != j:
                self._storage.swap_columns(i, j)

    def sort_by_column(self, column_index: int) -> Permutation:
        """
        Stable-sort the rows by ascending magnitude of one column, in place.

        Returns:
            The permutation p such that permute_rows(p) on an unsorted copy
            reproduces the sorted matrix

        Raises:
            InvalidOperationError: If the storage family refuses row permutation
            OutOfRangeError: If column_index is out of range
        """
        self._require(CAPABILITY_PERMUTE_ROWS, "sort_by_column")
        check_index(column_index, self.column_count, "column_index")
        keys = self._traits.magnitudes(self._values()[:, column_index])
        _, order = stable_sort_with_indices(keys)
        permutation = Permutation(order).inverse()
        self.permute_rows(permutation)
        return permutation

    def sort_by_row(self, row_index: int) -> Permutation:
        """
        Stable-sort the columns by ascending magnitude of one row, in place.

        Returns:
            The permutation p such that permute_columns(p) on an unsorted
            copy reproduces the sorted matrix

        Raises:
            InvalidOperationError: If the storage family refuses column permutation
            OutOfRangeError: If row_index is out of range
        """
        self._require(CAPABILITY_PERMUTE_COLUMNS, "sort_by_row")
        check_index(row_index, self.row_count, "row_index")
        keys = self._traits.magnitudes(self._values()[row_index, :])
        _, order = stable_sort_with_indices(keys)
        permutation = Permutation(order).inverse()
        self.permute_columns(permutation)
        return permutation

    def shuffle_rows(self, rng: RandomSource | int | None = None) -> Permutation:
        """
        Reorder the rows by a uniformly random permutation, in place.

        Args:
            rng: None, an int seed, a numpy Generator or a RandomSource

        Returns:
            The permutation applied

        Raises:
            InvalidOperationError: If the storage family refuses row permutation
        """
        self._require(CAPABILITY_PERMUTE_ROWS, "shuffle_rows")
        permutation = Permutation.random(self.row_count, rng)
        self.permute_rows(permutation)
        return permutation

    def shuffle_columns(self, rng: RandomSource | int | None = None) -> Permutation:
        """
        Reorder the columns by a uniformly random permutation, in place.

        Returns:
            The permutation applied

        Raises:
            InvalidOperationError: If the storage family refuses column permutation
        """
        self._require(CAPABILITY_PERMUTE_COLUMNS, "shuffle_columns")
        permutation = Permutation.random(self.column_count, rng)
        self.permute_columns(permutation)
        return permutation

    # ==================================================================
    # Predicates and masks
    # ==================================================================

    def _predicate_hits(self, predicate: Predicate) -> NDArray[np.bool_]:
        values = self._values()
        return np.array(
            [[bool(predicate(v)) for v in row] for row in values], dtype=bool
        ).reshape(self.shape)

    def find_mask(self, predicate: Predicate) -> Matrix:
        """
        Matrix holding one where predicate holds, zero elsewhere.

        The mask has this matrix's family when that family can hold it.

        Raises:
            NullArgumentError: If predicate is None
        """
        check_callable(predicate, "predicate")
        hits = self._predicate_hits(predicate)
        mask = self.create_matrix(self.row_count, self.column_count)
        if not mask.storage.is_fully_mutable:
            rows, cols = np.nonzero(hits)
            if not all(mask.storage.is_mutable_at(int(r), int(c)) for r, c in zip(rows, cols)):
                mask = self.create_matrix(self.row_count, self.column_count, fully_mutable=True)
        mask._storage.write_block(0, 0, hits.astype(self.dtype))
        return mask

    def find_indices(self, predicate: Predicate) -> Iterator[tuple[int, int]]:
        """
        Lazily yield (row, column) where predicate holds, column by column.

        Raises:
            NullArgumentError: If predicate is None (raised immediately)
        """
        check_callable(predicate, "predicate")
        return self._iter_matching(predicate)

    def _iter_matching(self, predicate: Predicate) -> Iterator[tuple[int, int]]:
        if skips_zeros(self._storage, predicate, self._traits):
            for r, c, value in self._storage.enumerate_nonzero():
                if predicate(value):
                    yield r, c
            return
        for c in range(self.column_count):
            for r in range(self.row_count):
                if predicate(self._storage._get(r, c)):
                    yield r, c

    def _mask_selection(self, mask: Matrix) -> tuple[NDArray[np.intp], NDArray[np.intp]]:
        check_not_none(mask, "mask")
        check_same_shape(mask.shape, self.shape, "mask")
        selected = selected_positions(mask._values(), mask.traits)
        cols, rows = np.nonzero(selected.T)
        return rows, cols

    def enumerate_mask(self, mask: Matrix) -> Iterator[tuple[int, int, Any]]:
        """
        Yield (row, column, value) wherever mask holds exactly one.

        Raises:
            NullArgumentError: If mask is None
            DimensionError: If mask has a different shape
        """
        rows, cols = self._mask_selection(mask)
        return (
            (int(r), int(c), self._storage._get(int(r), int(c)))
            for r, c in zip(rows, cols)
        )

    def _apply_updates(
        self,
        rows: NDArray[np.intp],
        cols: NDArray[np.intp],
        values: list[Any]
    ) -> None:
        if self._storage.is_fully_mutable:
            for r, c, v in zip(rows, cols, values):
                self._storage._set(int(r), int(c), v)
            return
        # constrained storage validates the whole block before writing
        block = self._storage.to_array()
        block[rows, cols] = values
        self._storage.write_block(0, 0, block)

    def on_mask_set(self, mask: Matrix, value: Any) -> None:
        """
        Set value wherever mask holds exactly one.

        Raises:
            NullArgumentError: If mask is None
            DimensionError: If mask has a different shape
            InvalidOperationError: If the storage cannot hold value at a
                selected position (nothing is written)
        """
        rows, cols = self._mask_selection(mask)
        scalar = self._traits.coerce(value)
        self._apply_updates(rows, cols, [scalar] * len(rows))

    def on_mask_apply(self, mask: Matrix, func: ElementFunction) -> None:
        """
        Replace x with func(x) wherever mask holds exactly one.

        Raises:
            NullArgumentError: If mask or func is None
            DimensionError: If mask has a different shape
            InvalidOperationError: If the storage cannot hold a new value
                (nothing is written)
        """
        check_callable(func, "func")
        rows, cols = self._mask_selection(mask)
        values = [
            self._traits.coerce(func(self._storage._get(int(r), int(c))))
            for r, c in zip(rows, cols)
        ]
        self._apply_updates(rows, cols, values)

    def apply_all(self, func: ElementFunction) -> None:
        """Apply func to every element, zeros included."""
        check_callable(func, "func")
        self._storage.map_inplace(func, force_map_zeros=True)

    # ==================================================================
    # Arithmetic
    # ==================================================================

    def _matrix_result(
        self,
        rows: int,
        columns: int,
        other: Matrix | None,
        result: Matrix | None
    ) -> Matrix:
        if other is not None:
            check_castable(other.dtype, self.dtype, "other")
        if result is not None:
            check_same_shape(result.shape, (rows, columns), "result")
            check_castable(self.dtype, result.dtype, "result")
            return result
        mixed = other is not None and other.storage.kind is not self._storage.kind
        return self.create_matrix(rows, columns, fully_mutable=mixed)

    def add(self, other: Matrix | Any, result: Matrix | None = None) -> Matrix:
        """Add another matrix element-wise, or a scalar to every element."""
        check_not_none(other, "other")
        if isinstance(other, Matrix):
            check_same_shape(other.shape, self.shape, "other")
            target = self._matrix_result(*self.shape, other, result)
            self._do_add(other, target)
            return target
        scalar = self._traits.coerce(other)
        if self._traits.is_zero(scalar):
            target = self._matrix_result(*self.shape, None, result)
            self._storage.copy_to(target._storage)
            return target
        target = result if result is not None else self.create_matrix(*self.shape, fully_mutable=True)
        check_same_shape(target.shape, self.shape, "result")
        check_castable(self.dtype, target.dtype, "result")
        self._do_add_scalar(scalar, target)
        return target

    def subtract(self, other: Matrix | Any, result: Matrix | None = None) -> Matrix:
        """Subtract another matrix element-wise, or a scalar from every element."""
        check_not_none(other, "other")
        if isinstance(other, Matrix):
            check_same_shape(other.shape, self.shape, "other")
            target = self._matrix_result(*self.shape, other, result)
            self._do_subtract(other, target)
            return target
        scalar = self._traits.coerce(other)
        return self.add(-scalar, result)

    def multiply(self, other: Matrix | Vector | Any, result: Matrix | Vector | None = None):
        """
        Scalar, matrix-vector or matrix-matrix product.

        Raises:
            NullArgumentError: If other is None
            DimensionError: If the inner dimensions or the result shape disagree
        """
        check_not_none(other, "other")
        if isinstance(other, Vector):
            check_same_length(other.count, self.column_count, "other")
            check_castable(other.dtype, self.dtype, "other")
            target = self._vector_result(self.row_count, result)
            self._do_multiply_vector(other, target)
            return target
        if isinstance(other, Matrix):
            check_same_length(other.row_count, self.column_count, "other rows")
            target = self._matrix_result(self.row_count, other.column_count, other, result)
            self._do_multiply_matrix(other, target)
            return target
        scalar = self._traits.coerce(other)
        target = self._matrix_result(*self.shape, None, result)
        if self._traits.is_one(scalar):
            self._storage.copy_to(target._storage)
        elif self._traits.is_zero(scalar):
            target.clear()
        else:
            self._do_multiply_scalar(scalar, target)
        return target

    def negate(self, result: Matrix | None = None) -> Matrix:
        target = self._matrix_result(*self.shape, None, result)
        self._do_negate(target)
        return target

    @abstractmethod
    def _do_add(self, other: Matrix, result: Matrix) -> None:
        ...

    @abstractmethod
    def _do_subtract(self, other: Matrix, result: Matrix) -> None:
        ...

    @abstractmethod
    def _do_add_scalar(self, scalar: Any, result: Matrix) -> None:
        ...

    @abstractmethod
    def _do_multiply_scalar(self, scalar: Any, result: Matrix) -> None:
        ...

    @abstractmethod
    def _do_multiply_vector(self, vector: Vector, result: Vector) -> None:
        ...

    @abstractmethod
    def _do_multiply_matrix(self, other: Matrix, result: Matrix) -> None:
        ...

    @abstractmethod
    def _do_negate(self, result: Matrix) -> None:
        ...

    # ==================================================================
    # Norms
    # ==================================================================

    @abstractmethod
    def l1_norm(self) -> float:
        """Maximum absolute column sum."""
        ...

    @abstractmethod
    def infinity_norm(self) -> float:
        """Maximum absolute row sum."""
        ...

    @abstractmethod
    def frobenius_norm(self) -> float:
        """Square root of the sum of squared magnitudes."""
        ...

    # ==================================================================
    # Comparison and display
    # ==================================================================

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(
            np.array_equal(self._values(), other._values())
        )

    __hash__ = None

    # Keep numpy scalars on the left from treating matrices as arrays
    __array_ufunc__ = None

    def almost_equal(
        self,
        other: Matrix,
        rtol: float | None = None,
        atol: float | None = None
    ) -> bool:
        """True if other has the same shape and agrees within tolerance."""
        check_not_none(other, "other")
        return almost_equal(self._values(), other._values(), rtol=rtol, atol=atol)

    def __repr__(self) -> str:
        rows = "; ".join(
            ", ".join(self._traits.format(v) for v in row) for row in self._values()
        )
        return f"{self.__class__.__name__}({self.row_count}x{self.column_count} [{rows}])"

    # ==================================================================
    # Operators
    # ==================================================================

    def __add__(self, other: Any) -> Matrix:
        if isinstance(other, Matrix) or is_scalar(other):
            return self.add(other)
        return NotImplemented

    def __radd__(self, other: Any) -> Matrix:
        if is_scalar(other):
            return self.add(other)
        return NotImplemented

    def __sub__(self, other: Any) -> Matrix:
        if isinstance(other, Matrix) or is_scalar(other):
            return self.subtract(other)
        return NotImplemented

    def __rsub__(self, other: Any) -> Matrix:
        if is_scalar(other):
            return self.negate().add(other)
        return NotImplemented

    def __mul__(self, other: Any):
        if isinstance(other, (Matrix, Vector)) or is_scalar(other):
            return self.multiply(other)
        return NotImplemented

    def __rmul__(self, other: Any) -> Matrix:
        if is_scalar(other):
            return self.multiply(other)
        return NotImplemented

    def __matmul__(self, other: Any):
        if isinstance(other, (Matrix, Vector)):
            return self.multiply(other)
        return NotImplemented

    def __neg__(self) -> Matrix:
        return self.negate()

    def __pos__(self) -> Matrix:
        return self.clone()
