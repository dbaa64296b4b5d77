"""
Shared compute infrastructure for pylinalgebra.

Small numeric collaborators consumed by the vector and matrix cores.

Submodules:
    precision: Machine epsilon, tolerances and tolerant comparison
    sorting: Stable key sort carrying an index array
    random: Uniform random permutation draws
"""

from pylinalgebra.core.compute.precision import (
    DEFAULT_ATOL,
    DEFAULT_RTOL,
    almost_equal,
    default_tolerance,
    machine_epsilon,
)
from pylinalgebra.core.compute.random import (
    random_permutation_indices,
    resolve_random_source,
)
from pylinalgebra.core.compute.sorting import stable_sort_with_indices

__all__ = [
    # Precision
    "DEFAULT_ATOL",
    "DEFAULT_RTOL",
    "almost_equal",
    "default_tolerance",
    "machine_epsilon",
    # Randomness
    "random_permutation_indices",
    "resolve_random_source",
    # Sorting
    "stable_sort_with_indices",
]
