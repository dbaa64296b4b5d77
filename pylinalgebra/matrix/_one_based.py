"""
1-based indexing for matrices.

Each method shifts its coordinates by one and delegates to the
validated 0-based method of the same name without the _i suffix. Methods
that yield indices shift them back to 1-based. Returned permutations are
not shifted; a Permutation is 0-based by definition and offers its own
elem_i accessors.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any, Callable

from pylinalgebra.vector._one_based import to_zero_based


class OneBasedMatrixMixin:
    """1-based counterparts of the positional Matrix operations."""

    def at_i(self, row: int, column: int) -> Any:
        return self.at(row - 1, column - 1)

    def set_at_i(self, row: int, column: int, value: Any) -> None:
        self.set_at(row - 1, column - 1, value)

    def row_i(self, index: int, result=None):
        return self.row(index - 1, result)

    def column_i(self, index: int, result=None):
        return self.column(index - 1, result)

    def sub_row_i(self, row_index: int, column_index: int, length: int, result=None):
        return self.sub_row(row_index - 1, column_index - 1, length, result)

    def sub_column_i(self, column_index: int, row_index: int, length: int, result=None):
        return self.sub_column(column_index - 1, row_index - 1, length, result)

    def set_row_i(self, index: int, values) -> None:
        self.set_row(index - 1, values)

    def set_column_i(self, index: int, values) -> None:
        self.set_column(index - 1, values)

    def clear_row_i(self, index: int) -> None:
        self.clear_row(index - 1)

    def clear_column_i(self, index: int) -> None:
        self.clear_column(index - 1)

    def insert_row_i(self, row_index: int, row):
        return self.insert_row(row_index - 1, row)

    def insert_column_i(self, column_index: int, column):
        return self.insert_column(column_index - 1, column)

    def remove_row_i(self, row_index: int):
        return self.remove_row(row_index - 1)

    def remove_column_i(self, column_index: int):
        return self.remove_column(column_index - 1)

    def remove_row_and_column_i(self, index: int):
        return self.remove_row_and_column(index - 1)

    def sub_matrix_i(self, row_index: int, row_count: int, column_index: int, column_count: int):
        return self.sub_matrix(row_index - 1, row_count, column_index - 1, column_count)

    def set_sub_matrix_i(
        self,
        row_index: int,
        column_index: int,
        sub_matrix,
        row_count: int | None = None,
        column_count: int | None = None
    ) -> None:
        self.set_sub_matrix(row_index - 1, column_index - 1, sub_matrix, row_count, column_count)

    def select_row_range_i(self, row_index: int, count: int):
        return self.select_row_range(row_index - 1, count)

    def select_column_range_i(self, column_index: int, count: int):
        return self.select_column_range(column_index - 1, count)

    def set_rows_i(self, row_index: int, count: int, source) -> None:
        self.set_rows(row_index - 1, count, source)

    def set_columns_i(self, column_index: int, count: int, source) -> None:
        self.set_columns(column_index - 1, count, source)

    def select_rows_i(self, keep: Iterable[int]):
        return self.select_rows(to_zero_based(keep))

    def select_columns_i(self, keep: Iterable[int]):
        return self.select_columns(to_zero_based(keep))

    def sort_by_row_i(self, row_index: int):
        return self.sort_by_row(row_index - 1)

    def sort_by_column_i(self, column_index: int):
        return self.sort_by_column(column_index - 1)

    def find_indices_i(self, predicate: Callable[[Any], bool]) -> Iterator[tuple[int, int]]:
        return ((r + 1, c + 1) for r, c in self.find_indices(predicate))

    def row_indices_i(self) -> Iterator[int]:
        return (i + 1 for i in self.row_indices())

    def column_indices_i(self) -> Iterator[int]:
        return (j + 1 for j in self.column_indices())

    def enumerate_rows_i(self, index: int = 1, count: int | None = None):
        return ((i + 1, row) for i, row in self.enumerate_rows(index - 1, count))

    def enumerate_columns_i(self, index: int = 1, count: int | None = None):
        return ((j + 1, column) for j, column in self.enumerate_columns(index - 1, count))
