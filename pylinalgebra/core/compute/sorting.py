"""
Stable key sort used by Matrix.sort_by_row and Matrix.sort_by_column.

Keys are sorted together with an item array so the caller learns where
every input position went. Ties keep their input order.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any


def stable_sort_with_indices(
    keys: ArrayLike,
    items: ArrayLike | None = None
) -> tuple[NDArray[Any], NDArray[np.intp]]:
    """
    Sort keys ascending, carrying items along.

    Args:
        keys: 1D array of sort keys (must be totally ordered)
        items: Values to reorder alongside keys. Defaults to the identity
            0..n-1 so the result tells where each sorted key came from.

    Returns:
        (sorted_keys, reordered_items)
    """
    keys = np.asarray(keys)
    order = np.argsort(keys, kind='stable')
    if items is None:
        return keys[order], order.astype(np.intp)
    return keys[order], np.asarray(items)[order]


__all__ = ['stable_sort_with_indices']
