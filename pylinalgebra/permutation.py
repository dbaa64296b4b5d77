"""
Permutations of a fixed number of positions.

A Permutation of dimension n maps each source position i to the target
position p[i]; applied to a sequence, the element at i moves to p[i].
Permutations are immutable and hashable.

Besides the mapping itself a permutation can be written as an inversion
sequence: a list inv of n entries with inv[i] >= i, read as "swap
positions i and inv[i]". Applying those swaps for i = 0, 1, ..., n-1 moves
every element to its target position, which is how matrices reorder their
rows and columns in place.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import Any

import numpy as np

from pylinalgebra.core.compute.random import random_permutation_indices
from pylinalgebra.core.exceptions import InvalidArgumentError
from pylinalgebra.core.protocols import RandomSource
from pylinalgebra.core.validation import (
    check_index,
    check_integer,
    check_not_none,
    check_same_length,
    check_size,
)


class Permutation:
    """
    Bijection on the positions 0..n-1.

    Args:
        indices: p[i] for every i; must hold each of 0..n-1 exactly once

    Raises:
        NullArgumentError: If indices is None
        InvalidArgumentError: If indices is empty, holds a non-integer or
            is not a bijection
    """

    __slots__ = ('_indices',)

    def __init__(self, indices: Iterable[int]):
        check_not_none(indices, "indices")
        values = tuple(indices)
        for value in values:
            check_integer(value, "indices")
        values = tuple(int(i) for i in values)
        if not _is_bijection(values):
            raise InvalidArgumentError(
                f"indices: {list(values)} is not a permutation of "
                f"0..{len(values) - 1}"
            )
        self._indices = values

    @classmethod
    def identity(cls, n: int) -> Permutation:
        """The permutation leaving every position in place."""
        check_size(n, "n")
        return cls(range(n))

    @classmethod
    def random(cls, n: int, rng: RandomSource | int | None = None) -> Permutation:
        """
        Draw a uniformly random permutation.

        Args:
            n: Dimension
            rng: None, an int seed, a numpy Generator or a RandomSource
        """
        check_size(n, "n")
        return cls(random_permutation_indices(n, rng))

    @classmethod
    def from_inversions(cls, inversions: Sequence[int]) -> Permutation:
        """
        Rebuild a permutation from its inversion sequence.

        Exact inverse of to_inversions(): starting from the identity, swap
        positions i and inversions[i] for i = n-1 down to 0.

        Args:
            inversions: Inversion sequence, each entry in [0, n)

        Raises:
            NullArgumentError: If inversions is None
            InvalidArgumentError: If an entry is not an integer
            OutOfRangeError: If an entry is outside [0, n)
        """
        check_not_none(inversions, "inversions")
        inv = list(inversions)
        n = len(inv)
        for value in inv:
            check_index(value, n, "inversions")
        inv = [int(i) for i in inv]

        idx = list(range(n))
        for i in range(n - 1, -1, -1):
            j = inv[i]
            if j != i:
                idx[i], idx[j] = idx[j], idx[i]
        return cls(idx)

    # ------------------------------------------------------------------
    # Mapping access
    # ------------------------------------------------------------------

    @property
    def dimension(self) -> int:
        return len(self._indices)

    def __len__(self) -> int:
        return len(self._indices)

    def __getitem__(self, index: int) -> int:
        check_index(index, len(self._indices), "index")
        return self._indices[index]

    def at(self, index: int) -> int:
        """Target position of source position index."""
        return self[index]

    def elem_i(self, index: int) -> int:
        """1-based counterpart of at(): 1-based position in, 1-based target out."""
        return self.at(index - 1) + 1

    def __iter__(self) -> Iterator[int]:
        return iter(self._indices)

    def elements(self) -> Iterator[int]:
        return iter(self._indices)

    def elements_i(self) -> Iterator[int]:
        return (i + 1 for i in self._indices)

    def to_list(self) -> list[int]:
        return list(self._indices)

    # ------------------------------------------------------------------
    # Algebra
    # ------------------------------------------------------------------

    def inverse(self) -> Permutation:
        """
        The permutation q with q[p[i]] == i for every i.

        Returns:
            Inverse permutation
        """
        inv = [0] * len(self._indices)
        for i, target in enumerate(self._indices):
            inv[target] = i
        return Permutation(inv)

    def to_inversions(self) -> list[int]:
        """
        Encode as an inversion sequence.

        Walks i = 0..n-1 over a scratch copy of the mapping. Whenever the
        value i is not already at position i it is found at some q > i;
        the two entries are swapped and q is recorded. The result
        satisfies from_inversions(to_inversions()) == self, and applying
        swap(i, inv[i]) for ascending i moves element i to position p[i].

        Returns:
            List inv with i <= inv[i] < n
        """
        idx = list(self._indices)
        n = len(idx)
        for i in range(n):
            if idx[i] != i:
                q = idx.index(i, i + 1)
                idx[q] = idx[i]
                idx[i] = q
        return idx

    def apply_to(self, items: Sequence[Any]) -> list[Any]:
        """
        Move items[i] to position p[i].

        Computed with the inversion swaps, so it agrees with the in-place
        reordering used by matrices.

        Args:
            items: Sequence of length dimension

        Returns:
            New list with result[p[i]] == items[i]

        Raises:
            DimensionError: If len(items) != dimension
        """
        check_not_none(items, "items")
        result = list(items)
        check_same_length(len(result), len(self._indices), "items")
        for i, j in enumerate(self.to_inversions()):
            if i != j:
                result[i], result[j] = result[j], result[i]
        return result

    # ------------------------------------------------------------------
    # Value semantics
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Permutation):
            return NotImplemented
        return self._indices == other._indices

    def __hash__(self) -> int:
        return hash(self._indices)

    def __repr__(self) -> str:
        return f"Permutation({list(self._indices)})"


def _is_bijection(values: tuple[int, ...]) -> bool:
    n = len(values)
    if n == 0:
        return False
    seen = np.zeros(n, dtype=bool)
    for v in values:
        if v < 0 or v >= n or seen[v]:
            return False
        seen[v] = True
    return True


__all__ = ['Permutation']
