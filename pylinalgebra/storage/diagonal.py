"""
Diagonal matrix storage.

Only the main diagonal (min(rows, columns) entries) is stored. Every
off-diagonal element is a structural zero: writing zero there is a no-op,
writing anything else raises InvalidOperationError. Block writes check
the whole block before changing anything.

Diagonal storage cannot reorder or drop single rows or columns without
leaving its family, so it advertises none of those capabilities.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray

from pylinalgebra.core.capabilities import CAPABILITY_SPARSE_ENUMERATION
from pylinalgebra.core.exceptions import InvalidOperationError
from pylinalgebra.core.numeric import DEFAULT_DTYPE, infer_dtype
from pylinalgebra.core.validation import (
    check_array,
    check_callable,
    check_castable,
    check_ndim,
    check_same_length,
)
from pylinalgebra.storage._base import MatrixStorage, StorageKind


class DiagonalMatrixStorage(MatrixStorage):
    """Diagonal entries of a (possibly rectangular) matrix in a 1D array."""

    kind = StorageKind.DIAGONAL
    _capabilities = frozenset({CAPABILITY_SPARSE_ENUMERATION})

    def __init__(
        self,
        row_count: int,
        column_count: int,
        dtype: DTypeLike = DEFAULT_DTYPE
    ):
        super().__init__(row_count, column_count, dtype)
        self._diagonal = np.zeros(min(self._row_count, self._column_count), dtype=self.dtype)

    @classmethod
    def of_diagonal(
        cls,
        row_count: int,
        column_count: int,
        diagonal: ArrayLike,
        dtype: DTypeLike | None = None
    ) -> DiagonalMatrixStorage:
        """
        Build from the diagonal entries.

        Raises:
            DimensionError: If diagonal is not 1D of length min(rows, columns)
        """
        arr = check_array(diagonal, "diagonal")
        check_ndim(arr, 1, "diagonal")
        storage = cls(row_count, column_count, infer_dtype(arr, dtype))
        storage.set_diagonal(arr)
        return storage

    @property
    def diagonal_length(self) -> int:
        return self._diagonal.size

    @property
    def data(self) -> NDArray[Any]:
        """The live diagonal array."""
        return self._diagonal

    def get_diagonal(self) -> NDArray[Any]:
        return self._diagonal.copy()

    def set_diagonal(self, values: ArrayLike) -> None:
        arr = np.asarray(values).reshape(-1)
        check_castable(arr.dtype, self.dtype, "diagonal")
        arr = arr.astype(self.dtype, copy=False)
        check_same_length(arr.size, self._diagonal.size, "diagonal")
        self._diagonal[:] = arr

    def is_mutable_at(self, row: int, column: int) -> bool:
        return row == column

    def _refuse(self, row: int, column: int) -> None:
        raise InvalidOperationError(
            f"cannot store a non-zero value at off-diagonal position "
            f"({row}, {column}) of a diagonal matrix",
            operation="set", storage_kind=self.kind.value,
        )

    def _get(self, row: int, column: int) -> Any:
        if row == column:
            return self._diagonal[row]
        return self._traits.zero

    def _set(self, row: int, column: int, value: Any) -> None:
        if row == column:
            self._diagonal[row] = value
        elif not self._traits.is_zero(value):
            self._refuse(row, column)

    def to_array(self) -> NDArray[Any]:
        arr = np.zeros(self.shape, dtype=self.dtype)
        k = self._diagonal.size
        arr[np.arange(k), np.arange(k)] = self._diagonal
        return arr

    def read_block(
        self,
        row: int,
        row_count: int,
        column: int,
        column_count: int
    ) -> NDArray[Any]:
        block = np.zeros((row_count, column_count), dtype=self.dtype)
        rr, cc = self._diagonal_positions(row, row_count, column, column_count)
        block[rr - row, cc - column] = self._diagonal[rr]
        return block

    def _diagonal_positions(
        self,
        row: int,
        row_count: int,
        column: int,
        column_count: int
    ) -> tuple[NDArray[np.intp], NDArray[np.intp]]:
        """Absolute diagonal indices falling inside a region."""
        lo = max(row, column)
        hi = min(row + row_count, column + column_count, self._diagonal.size)
        if hi <= lo:
            empty = np.empty(0, dtype=np.intp)
            return empty, empty
        d = np.arange(lo, hi, dtype=np.intp)
        return d, d

    def write_block(self, row: int, column: int, block: NDArray[Any]) -> None:
        block = np.asarray(block, dtype=self.dtype)
        h, w = block.shape
        rows = np.arange(row, row + h)[:, np.newaxis]
        cols = np.arange(column, column + w)[np.newaxis, :]
        off = rows != cols
        bad = np.argwhere(off & (block != 0))
        if bad.size:
            self._refuse(int(bad[0][0]) + row, int(bad[0][1]) + column)
        d, _ = self._diagonal_positions(row, h, column, w)
        self._diagonal[d] = block[d - row, d - column]

    def _clear_region(
        self,
        row: int,
        row_count: int,
        column: int,
        column_count: int
    ) -> None:
        d, _ = self._diagonal_positions(row, row_count, column, column_count)
        self._diagonal[d] = 0

    def enumerate_nonzero(self) -> Iterator[tuple[int, int, Any]]:
        for i in np.flatnonzero(self._diagonal):
            yield int(i), int(i), self._diagonal[i]

    def _has_off_diagonal(self) -> bool:
        return self._row_count * self._column_count > self._diagonal.size

    def map_inplace(
        self,
        func: Callable[[Any], Any],
        force_map_zeros: bool = False
    ) -> None:
        """
        Map the diagonal.

        Raises:
            InvalidOperationError: If func(0) != 0 and the matrix has
                off-diagonal positions
        """
        check_callable(func, "func")
        if not self._traits.is_zero(func(self._traits.zero)) and self._has_off_diagonal():
            raise InvalidOperationError(
                "map_inplace: function maps zero to a non-zero value, which "
                "would fill the off-diagonal of a diagonal matrix",
                operation="map_inplace", storage_kind=self.kind.value,
            )
        self._diagonal[:] = np.array([func(v) for v in self._diagonal], dtype=self.dtype)

    def map_indexed_inplace(
        self,
        func: Callable[[int, int, Any], Any],
        force_map_zeros: bool = False
    ) -> None:
        check_callable(func, "func")
        if force_map_zeros:
            super().map_indexed_inplace(func, force_map_zeros)
            return
        self._diagonal[:] = np.array(
            [func(i, i, v) for i, v in enumerate(self._diagonal)], dtype=self.dtype
        )
