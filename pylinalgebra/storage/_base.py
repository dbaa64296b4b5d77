"""
Abstract storage backends for vectors and matrices.

A storage owns the raw element data of exactly one Vector or Matrix and
knows how to read, write, copy and enumerate it. Everything a storage
exposes publicly validates its arguments; the underscore methods and the
block primitives (read_block, write_block) trust their caller.

Each concrete storage carries a StorageKind tag. The vector and matrix
cores dispatch on that tag to take array fast paths and fall back to the
generic block primitives otherwise.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from enum import Enum
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray

from pylinalgebra.core.capabilities import CAPABILITY_FULLY_MUTABLE
from pylinalgebra.core.numeric import DEFAULT_DTYPE, NumericTraits, traits_for
from pylinalgebra.core.validation import (
    check_callable,
    check_castable,
    check_index,
    check_not_none,
    check_range,
    check_same_length,
    check_same_shape,
    check_size,
)


class StorageKind(Enum):
    """Tag identifying the concrete storage family."""
    DENSE = 'dense'
    SPARSE = 'sparse'
    DIAGONAL = 'diagonal'


# =====================================================================
# Vector storage
# =====================================================================

class VectorStorage(ABC):
    """
    Element container of a Vector.

    Args:
        length: Number of elements, at least 1
        dtype: Element type, one of the supported numpy dtypes

    Raises:
        OutOfRangeError: If length < 1
        NotSupportedError: If dtype is not supported
    """

    kind: StorageKind
    _capabilities: frozenset[str] = frozenset()

    def __init__(self, length: int, dtype: DTypeLike = DEFAULT_DTYPE):
        check_size(length, "length")
        self._length = int(length)
        self._traits = traits_for(dtype)

    @property
    def length(self) -> int:
        return self._length

    @property
    def traits(self) -> NumericTraits:
        return self._traits

    @property
    def dtype(self) -> np.dtype:
        return self._traits.dtype

    def supports(self, capability: str) -> bool:
        return capability in self._capabilities

    @property
    def is_fully_mutable(self) -> bool:
        return self.supports(CAPABILITY_FULLY_MUTABLE)

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------

    def get(self, index: int) -> Any:
        check_index(index, self._length, "index")
        return self._get(index)

    def set(self, index: int, value: Any) -> None:
        check_index(index, self._length, "index")
        self._set(index, self._traits.coerce(value))

    @abstractmethod
    def _get(self, index: int) -> Any:
        ...

    @abstractmethod
    def _set(self, index: int, value: Any) -> None:
        ...

    # ------------------------------------------------------------------
    # Block primitives (unchecked)
    # ------------------------------------------------------------------

    @abstractmethod
    def to_array(self) -> NDArray[Any]:
        """Dense copy of all elements."""
        ...

    def read_block(self, index: int, count: int) -> NDArray[Any]:
        """Dense copy of elements [index, index + count)."""
        return self.to_array()[index:index + count]

    @abstractmethod
    def write_block(self, index: int, values: NDArray[Any]) -> None:
        """Overwrite elements [index, index + len(values)) with values."""
        ...

    @abstractmethod
    def enumerate_nonzero(self) -> Iterator[tuple[int, Any]]:
        """Yield (index, value) for every non-zero element, ascending."""
        ...

    # ------------------------------------------------------------------
    # Clearing and bulk assignment
    # ------------------------------------------------------------------

    def clear(self) -> None:
        self._clear_range(0, self._length)

    def clear_range(self, index: int, count: int) -> None:
        check_range(index, count, self._length, "index")
        self._clear_range(index, count)

    def _clear_range(self, index: int, count: int) -> None:
        self.write_block(index, np.zeros(count, dtype=self.dtype))

    def set_values(self, values: ArrayLike) -> None:
        """
        Overwrite every element from a 1D array-like of matching length.

        Raises:
            NullArgumentError: If values is None
            DimensionError: If the length differs
            NotSupportedError: If values are complex and this storage is real
        """
        check_not_none(values, "values")
        arr = np.asarray(values)
        check_castable(arr.dtype, self.dtype, "values")
        arr = arr.astype(self.dtype, copy=False)
        check_same_length(arr.size, self._length, "values")
        self.write_block(0, arr.reshape(-1))

    # ------------------------------------------------------------------
    # Copies
    # ------------------------------------------------------------------

    def copy_to(self, target: VectorStorage, skip_clearing: bool = False) -> None:
        """
        Copy every element into target.

        Args:
            target: Storage of the same length
            skip_clearing: The caller guarantees target is already zero, so
                a sparse source need only write its non-zeros

        Raises:
            NullArgumentError: If target is None
            DimensionError: If the lengths differ
        """
        check_not_none(target, "target")
        check_same_length(target.length, self._length, "target")
        check_castable(self.dtype, target.dtype, "target")
        if target is self:
            return
        self._copy_to(target, skip_clearing)

    def _copy_to(self, target: VectorStorage, skip_clearing: bool) -> None:
        target.write_block(0, self.to_array())

    def copy_sub_vector_to(
        self,
        target: VectorStorage,
        source_index: int,
        target_index: int,
        count: int,
        skip_clearing: bool = False
    ) -> None:
        """
        Copy count elements starting at source_index into target.

        Overlapping regions of the same storage are read through an
        intermediate buffer first, so the result is as if the source region
        had been copied out before any write.

        Raises:
            NullArgumentError: If target is None
            OutOfRangeError: If either region is out of range
        """
        check_not_none(target, "target")
        check_range(source_index, count, self._length, "source_index")
        check_castable(self.dtype, target.dtype, "target")
        check_range(target_index, count, target.length, "target_index")
        block = np.array(self.read_block(source_index, count), copy=True)
        target.write_block(target_index, block)

    def copy_to_row(self, target: MatrixStorage, row_index: int) -> None:
        """
        Write this vector into one row of a matrix storage.

        Raises:
            DimensionError: If length differs from the column count
            OutOfRangeError: If row_index is out of range
        """
        check_not_none(target, "target")
        check_index(row_index, target.row_count, "row_index")
        check_same_length(self._length, target.column_count, "row")
        check_castable(self.dtype, target.dtype, "target")
        target.write_block(row_index, 0, self.to_array()[np.newaxis, :])

    def copy_to_column(self, target: MatrixStorage, column_index: int) -> None:
        """
        Write this vector into one column of a matrix storage.

        Raises:
            DimensionError: If length differs from the row count
            OutOfRangeError: If column_index is out of range
        """
        check_not_none(target, "target")
        check_index(column_index, target.column_count, "column_index")
        check_same_length(self._length, target.row_count, "column")
        check_castable(self.dtype, target.dtype, "target")
        target.write_block(0, column_index, self.to_array()[:, np.newaxis])

    # ------------------------------------------------------------------
    # Enumeration and mapping
    # ------------------------------------------------------------------

    def enumerate(self) -> Iterator[Any]:
        """Yield every element in order, zeros included."""
        yield from self.to_array()

    def enumerate_indexed(self) -> Iterator[tuple[int, Any]]:
        yield from enumerate(self.to_array())

    def map_inplace(
        self,
        func: Callable[[Any], Any],
        force_map_zeros: bool = False
    ) -> None:
        """
        Replace every element x with func(x).

        Storages that keep zeros implicit skip them when func(0) == 0
        unless force_map_zeros is set.
        """
        check_callable(func, "func")
        arr = self.to_array()
        mapped = np.array([func(x) for x in arr], dtype=self.dtype)
        self.write_block(0, mapped)

    def map_indexed_inplace(
        self,
        func: Callable[[int, Any], Any],
        force_map_zeros: bool = False
    ) -> None:
        """
        Replace every element x at index i with func(i, x).

        Storages that keep zeros implicit may skip them unless
        force_map_zeros is set; func must then map zero to zero.
        """
        check_callable(func, "func")
        arr = self.to_array()
        mapped = np.array([func(i, x) for i, x in enumerate(arr)], dtype=self.dtype)
        self.write_block(0, mapped)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(length={self._length}, dtype={self.dtype.name})"


# =====================================================================
# Matrix storage
# =====================================================================

class MatrixStorage(ABC):
    """
    Element container of a Matrix.

    Args:
        row_count: Number of rows, at least 1
        column_count: Number of columns, at least 1
        dtype: Element type, one of the supported numpy dtypes

    Raises:
        OutOfRangeError: If either dimension < 1
        NotSupportedError: If dtype is not supported
    """

    kind: StorageKind
    _capabilities: frozenset[str] = frozenset()

    def __init__(
        self,
        row_count: int,
        column_count: int,
        dtype: DTypeLike = DEFAULT_DTYPE
    ):
        check_size(row_count, "row_count")
        check_size(column_count, "column_count")
        self._row_count = int(row_count)
        self._column_count = int(column_count)
        self._traits = traits_for(dtype)

    @property
    def row_count(self) -> int:
        return self._row_count

    @property
    def column_count(self) -> int:
        return self._column_count

    @property
    def shape(self) -> tuple[int, int]:
        return self._row_count, self._column_count

    @property
    def traits(self) -> NumericTraits:
        return self._traits

    @property
    def dtype(self) -> np.dtype:
        return self._traits.dtype

    def supports(self, capability: str) -> bool:
        return capability in self._capabilities

    @property
    def is_fully_mutable(self) -> bool:
        return self.supports(CAPABILITY_FULLY_MUTABLE)

    def is_mutable_at(self, row: int, column: int) -> bool:
        """True if position (row, column) may hold a non-zero value."""
        return True

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------

    def get(self, row: int, column: int) -> Any:
        check_index(row, self._row_count, "row")
        check_index(column, self._column_count, "column")
        return self._get(row, column)

    def set(self, row: int, column: int, value: Any) -> None:
        check_index(row, self._row_count, "row")
        check_index(column, self._column_count, "column")
        self._set(row, column, self._traits.coerce(value))

    @abstractmethod
    def _get(self, row: int, column: int) -> Any:
        ...

    @abstractmethod
    def _set(self, row: int, column: int, value: Any) -> None:
        ...

    # ------------------------------------------------------------------
    # Block primitives (unchecked)
    # ------------------------------------------------------------------

    @abstractmethod
    def to_array(self) -> NDArray[Any]:
        """Dense 2D copy of all elements."""
        ...

    def read_block(
        self,
        row: int,
        row_count: int,
        column: int,
        column_count: int
    ) -> NDArray[Any]:
        """Dense copy of the region starting at (row, column)."""
        return self.to_array()[row:row + row_count, column:column + column_count]

    @abstractmethod
    def write_block(self, row: int, column: int, block: NDArray[Any]) -> None:
        """
        Overwrite the region starting at (row, column) with a 2D block.

        Implementations either write the whole block or, if it would break
        their structure, raise InvalidOperationError without writing.
        """
        ...

    @abstractmethod
    def enumerate_nonzero(self) -> Iterator[tuple[int, int, Any]]:
        """Yield (row, column, value) for every non-zero, column by column."""
        ...

    def swap_rows(self, i: int, j: int) -> None:
        upper = self.read_block(i, 1, 0, self._column_count).copy()
        lower = self.read_block(j, 1, 0, self._column_count).copy()
        self.write_block(i, 0, lower)
        self.write_block(j, 0, upper)

    def swap_columns(self, i: int, j: int) -> None:
        left = self.read_block(0, self._row_count, i, 1).copy()
        right = self.read_block(0, self._row_count, j, 1).copy()
        self.write_block(0, i, right)
        self.write_block(0, j, left)

    # ------------------------------------------------------------------
    # Clearing
    # ------------------------------------------------------------------

    def clear(self) -> None:
        self._clear_region(0, self._row_count, 0, self._column_count)

    def clear_region(
        self,
        row: int,
        row_count: int,
        column: int,
        column_count: int
    ) -> None:
        check_range(row, row_count, self._row_count, "row")
        check_range(column, column_count, self._column_count, "column")
        self._clear_region(row, row_count, column, column_count)

    def _clear_region(
        self,
        row: int,
        row_count: int,
        column: int,
        column_count: int
    ) -> None:
        self.write_block(row, column, np.zeros((row_count, column_count), dtype=self.dtype))

    def set_values(self, values: ArrayLike) -> None:
        """
        Overwrite every element from a 2D array-like of matching shape.

        Raises:
            NullArgumentError: If values is None
            DimensionError: If the shape differs
            NotSupportedError: If values are complex and this storage is real
        """
        check_not_none(values, "values")
        arr = np.asarray(values)
        check_castable(arr.dtype, self.dtype, "values")
        arr = arr.astype(self.dtype, copy=False)
        check_same_shape(arr.shape, self.shape, "values")
        self.write_block(0, 0, arr)

    # ------------------------------------------------------------------
    # Copies
    # ------------------------------------------------------------------

    def copy_to(self, target: MatrixStorage, skip_clearing: bool = False) -> None:
        """
        Copy every element into target.

        Args:
            target: Storage of the same shape
            skip_clearing: The caller guarantees target is already zero

        Raises:
            NullArgumentError: If target is None
            DimensionError: If the shapes differ
            InvalidOperationError: If target cannot hold the values
        """
        check_not_none(target, "target")
        check_same_shape(target.shape, self.shape, "target")
        check_castable(self.dtype, target.dtype, "target")
        if target is self:
            return
        self._copy_to(target, skip_clearing)

    def _copy_to(self, target: MatrixStorage, skip_clearing: bool) -> None:
        target.write_block(0, 0, self.to_array())

    def copy_sub_matrix_to(
        self,
        target: MatrixStorage,
        source_row: int,
        target_row: int,
        row_count: int,
        source_column: int,
        target_column: int,
        column_count: int,
        skip_clearing: bool = False
    ) -> None:
        """
        Copy a rectangular region into target.

        The source region is read into a buffer before writing, so
        overlapping regions of the same storage copy correctly.

        Raises:
            NullArgumentError: If target is None
            OutOfRangeError: If either region is out of range
            InvalidOperationError: If target cannot hold the values
        """
        check_not_none(target, "target")
        check_range(source_row, row_count, self._row_count, "source_row")
        check_range(source_column, column_count, self._column_count, "source_column")
        check_range(target_row, row_count, target.row_count, "target_row")
        check_range(target_column, column_count, target.column_count, "target_column")
        check_castable(self.dtype, target.dtype, "target")
        block = np.array(
            self.read_block(source_row, row_count, source_column, column_count),
            copy=True,
        )
        target.write_block(target_row, target_column, block)

    def copy_sub_row_to(
        self,
        target: VectorStorage,
        row: int,
        source_column: int,
        target_index: int,
        count: int
    ) -> None:
        """Copy count elements of a row into a vector storage."""
        check_not_none(target, "target")
        check_index(row, self._row_count, "row")
        check_range(source_column, count, self._column_count, "source_column")
        check_castable(self.dtype, target.dtype, "target")
        check_range(target_index, count, target.length, "target_index")
        target.write_block(target_index, self.read_block(row, 1, source_column, count)[0])

    def copy_sub_column_to(
        self,
        target: VectorStorage,
        column: int,
        source_row: int,
        target_index: int,
        count: int
    ) -> None:
        """Copy count elements of a column into a vector storage."""
        check_not_none(target, "target")
        check_index(column, self._column_count, "column")
        check_range(source_row, count, self._row_count, "source_row")
        check_castable(self.dtype, target.dtype, "target")
        check_range(target_index, count, target.length, "target_index")
        target.write_block(target_index, self.read_block(source_row, count, column, 1)[:, 0])

    # ------------------------------------------------------------------
    # Enumeration and mapping
    # ------------------------------------------------------------------

    def enumerate(self) -> Iterator[Any]:
        """Yield every element column by column, zeros included."""
        yield from self.to_array().ravel(order='F')

    def enumerate_indexed(self) -> Iterator[tuple[int, int, Any]]:
        arr = self.to_array()
        for c in range(self._column_count):
            for r in range(self._row_count):
                yield r, c, arr[r, c]

    def map_inplace(
        self,
        func: Callable[[Any], Any],
        force_map_zeros: bool = False
    ) -> None:
        """Replace every element x with func(x)."""
        check_callable(func, "func")
        arr = self.to_array()
        mapped = np.array(
            [[func(x) for x in row] for row in arr], dtype=self.dtype
        ).reshape(self.shape)
        self.write_block(0, 0, mapped)

    def map_indexed_inplace(
        self,
        func: Callable[[int, int, Any], Any],
        force_map_zeros: bool = False
    ) -> None:
        """
        Replace every element x at (r, c) with func(r, c, x).

        Storages that keep zeros implicit may skip them unless
        force_map_zeros is set; func must then map zero to zero.
        """
        check_callable(func, "func")
        arr = self.to_array()
        mapped = np.array(
            [[func(r, c, arr[r, c]) for c in range(self._column_count)]
             for r in range(self._row_count)],
            dtype=self.dtype,
        ).reshape(self.shape)
        self.write_block(0, 0, mapped)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(shape={self.shape}, "
            f"dtype={self.dtype.name})"
        )
