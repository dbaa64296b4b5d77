"""
Random permutation draws for shuffles.

The only randomness the package consumes is a uniform permutation of
range(n). Callers may pass nothing (fresh default generator), an integer
seed, a numpy Generator, or any RandomSource.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pylinalgebra.core.exceptions import ValidationError
from pylinalgebra.core.protocols import RandomSource


def resolve_random_source(
    rng: RandomSource | int | None = None
) -> RandomSource:
    """
    Turn the user's rng argument into something with permutation(n).

    Args:
        rng: None, an int seed, a numpy Generator or a RandomSource

    Returns:
        A RandomSource

    Raises:
        ValidationError: If rng is none of the accepted kinds
    """
    if rng is None or isinstance(rng, (int, np.integer)):
        return np.random.default_rng(rng)
    if isinstance(rng, RandomSource):
        return rng
    raise ValidationError(
        f"rng: expected None, an int seed or an object with permutation(n), "
        f"got {type(rng).__name__}"
    )


def random_permutation_indices(
    n: int,
    rng: RandomSource | int | None = None
) -> NDArray[np.intp]:
    """
    Draw a uniformly random arrangement of 0..n-1.

    Args:
        n: Number of elements
        rng: See resolve_random_source

    Returns:
        Integer array holding each of 0..n-1 exactly once
    """
    source = resolve_random_source(rng)
    return np.asarray(source.permutation(n), dtype=np.intp)


__all__ = ['resolve_random_source', 'random_permutation_indices']
