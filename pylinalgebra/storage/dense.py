"""
Dense storage backed by a contiguous numpy array.

Every element is stored explicitly, so any position may hold any value.
The live array is exposed through the data property for the vectorized
fast paths of DenseVector and DenseMatrix.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray

from pylinalgebra.core.capabilities import (
    CAPABILITY_FULLY_MUTABLE,
    CAPABILITY_PERMUTE_COLUMNS,
    CAPABILITY_PERMUTE_ROWS,
    CAPABILITY_REMOVE_COLUMN,
    CAPABILITY_REMOVE_ROW,
)
from pylinalgebra.core.numeric import DEFAULT_DTYPE, infer_dtype
from pylinalgebra.core.validation import check_array, check_castable, check_ndim
from pylinalgebra.storage._base import MatrixStorage, StorageKind, VectorStorage


class DenseVectorStorage(VectorStorage):
    """Vector elements in a 1D numpy array."""

    kind = StorageKind.DENSE
    _capabilities = frozenset({CAPABILITY_FULLY_MUTABLE})

    def __init__(self, length: int, dtype: DTypeLike = DEFAULT_DTYPE):
        super().__init__(length, dtype)
        self._data = np.zeros(self._length, dtype=self.dtype)

    @classmethod
    def of_array(
        cls,
        values: ArrayLike,
        dtype: DTypeLike | None = None
    ) -> DenseVectorStorage:
        """
        Build from a 1D array-like, copying it.

        Raises:
            ValidationError: If values is not numeric
            DimensionError: If values is not 1D
            OutOfRangeError: If values is empty
        """
        arr = check_array(values, "values")
        check_ndim(arr, 1, "values")
        storage = cls(arr.shape[0], infer_dtype(arr, dtype))
        check_castable(arr.dtype, storage.dtype, "values")
        storage._data[:] = arr
        return storage

    @property
    def data(self) -> NDArray[Any]:
        """The live backing array."""
        return self._data

    def _get(self, index: int) -> Any:
        return self._data[index]

    def _set(self, index: int, value: Any) -> None:
        self._data[index] = value

    def to_array(self) -> NDArray[Any]:
        return self._data.copy()

    def read_block(self, index: int, count: int) -> NDArray[Any]:
        return self._data[index:index + count].copy()

    def write_block(self, index: int, values: NDArray[Any]) -> None:
        self._data[index:index + len(values)] = values

    def _clear_range(self, index: int, count: int) -> None:
        self._data[index:index + count] = 0

    def enumerate_nonzero(self) -> Iterator[tuple[int, Any]]:
        for i in np.flatnonzero(self._data):
            yield int(i), self._data[i]

    def enumerate(self) -> Iterator[Any]:
        yield from self._data.copy()


class DenseMatrixStorage(MatrixStorage):
    """Matrix elements in a 2D numpy array."""

    kind = StorageKind.DENSE
    _capabilities = frozenset({
        CAPABILITY_FULLY_MUTABLE,
        CAPABILITY_PERMUTE_ROWS,
        CAPABILITY_PERMUTE_COLUMNS,
        CAPABILITY_REMOVE_ROW,
        CAPABILITY_REMOVE_COLUMN,
    })

    def __init__(
        self,
        row_count: int,
        column_count: int,
        dtype: DTypeLike = DEFAULT_DTYPE
    ):
        super().__init__(row_count, column_count, dtype)
        self._data = np.zeros((self._row_count, self._column_count), dtype=self.dtype)

    @classmethod
    def of_array(
        cls,
        values: ArrayLike,
        dtype: DTypeLike | None = None
    ) -> DenseMatrixStorage:
        """
        Build from a 2D array-like, copying it.

        Raises:
            ValidationError: If values is not numeric
            DimensionError: If values is not 2D
            OutOfRangeError: If either dimension is empty
        """
        arr = check_array(values, "values")
        check_ndim(arr, 2, "values")
        storage = cls(arr.shape[0], arr.shape[1], infer_dtype(arr, dtype))
        check_castable(arr.dtype, storage.dtype, "values")
        storage._data[:, :] = arr
        return storage

    @property
    def data(self) -> NDArray[Any]:
        """The live backing array."""
        return self._data

    def _get(self, row: int, column: int) -> Any:
        return self._data[row, column]

    def _set(self, row: int, column: int, value: Any) -> None:
        self._data[row, column] = value

    def to_array(self) -> NDArray[Any]:
        return self._data.copy()

    def read_block(
        self,
        row: int,
        row_count: int,
        column: int,
        column_count: int
    ) -> NDArray[Any]:
        return self._data[row:row + row_count, column:column + column_count].copy()

    def write_block(self, row: int, column: int, block: NDArray[Any]) -> None:
        h, w = block.shape
        self._data[row:row + h, column:column + w] = block

    def _clear_region(
        self,
        row: int,
        row_count: int,
        column: int,
        column_count: int
    ) -> None:
        self._data[row:row + row_count, column:column + column_count] = 0

    def enumerate_nonzero(self) -> Iterator[tuple[int, int, Any]]:
        cols, rows = np.nonzero(self._data.T)
        for r, c in zip(rows, cols):
            yield int(r), int(c), self._data[r, c]

    def swap_rows(self, i: int, j: int) -> None:
        self._data[[i, j], :] = self._data[[j, i], :]

    def swap_columns(self, i: int, j: int) -> None:
        self._data[:, [i, j]] = self._data[:, [j, i]]
