"""
1-based indexing for vectors.

Every method here shifts its coordinates by one and calls the validated
0-based method of the same name without the _i suffix. Nothing is
re-validated, so range errors report the 0-based index.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any, Callable


def to_zero_based(indices: Iterable[int] | None) -> Iterator[int] | None:
    """Shift a 1-based index collection down by one, passing None through."""
    if indices is None:
        return None
    return (int(i) - 1 for i in indices)


class OneBasedVectorMixin:
    """1-based counterparts of the positional Vector operations."""

    def at_i(self, index: int) -> Any:
        return self.at(index - 1)

    def set_at_i(self, index: int, value: Any) -> None:
        self.set_at(index - 1, value)

    def sub_vector_i(self, index: int, count: int):
        return self.sub_vector(index - 1, count)

    def set_sub_vector_i(self, index: int, sub_vector, count: int | None = None) -> None:
        self.set_sub_vector(index - 1, sub_vector, count)

    def clear_sub_vector_i(self, index: int, count: int) -> None:
        self.clear_sub_vector(index - 1, count)

    def copy_sub_vector_to_i(
        self,
        destination,
        source_index: int,
        target_index: int,
        count: int
    ) -> None:
        self.copy_sub_vector_to(destination, source_index - 1, target_index - 1, count)

    def find_indices_i(self, predicate: Callable[[Any], bool]) -> Iterator[int]:
        return (i + 1 for i in self.find_indices(predicate))

    def set_on_indices_i(self, indices: Iterable[int], value: Any) -> None:
        self.set_on_indices(to_zero_based(indices), value)

    def apply_on_indices_i(
        self,
        indices: Iterable[int],
        func: Callable[[Any], Any]
    ) -> None:
        self.apply_on_indices(to_zero_based(indices), func)

    def select_elements_i(self, keep: Iterable[int]):
        return self.select_elements(to_zero_based(keep))

    def indices_i(self) -> Iterator[int]:
        return (i + 1 for i in self.indices())

    def enumerate_indexed_i(self) -> Iterator[tuple[int, Any]]:
        return ((i + 1, v) for i, v in self.enumerate_indexed())

    def minimum_index_i(self) -> int:
        return self.minimum_index() + 1

    def maximum_index_i(self) -> int:
        return self.maximum_index() + 1

    def absolute_minimum_index_i(self) -> int:
        return self.absolute_minimum_index() + 1

    def absolute_maximum_index_i(self) -> int:
        return self.absolute_maximum_index() + 1
