"""
Core protocols for pylinalgebra.

These define structural interfaces for the collaborators the vector and
matrix cores consume without owning: random sources for shuffles and
anything that advertises optional capabilities. We use Protocol
(structural typing) rather than ABC (nominal typing) so that a plain
numpy Generator satisfies RandomSource without adapters.

Design Principles:
    - Minimal contracts: prescribe only what's truly universal
    - Capability-driven: use supports() for optional features
"""

from typing import Any, Callable, Protocol, runtime_checkable

import numpy as np
from numpy.typing import NDArray

# Element predicate and element transformation signatures
Predicate = Callable[[Any], bool]
ElementFunction = Callable[[Any], Any]


@runtime_checkable
class RandomSource(Protocol):
    """
    Source of uniformly random permutations.

    numpy.random.Generator implements this protocol directly.
    """

    def permutation(self, n: int) -> NDArray[np.integer]:
        """
        Draw a uniformly random permutation of range(n).

        Args:
            n: Number of elements

        Returns:
            Array holding each of 0..n-1 exactly once
        """
        ...


@runtime_checkable
class SupportsCapabilities(Protocol):
    """
    Anything that advertises optional operations through supports().

    Storage backends implement this so that the generic matrix core can
    refuse structurally disallowed operations without knowing the concrete
    family.
    """

    def supports(self, capability: str) -> bool:
        """
        Check if a given capability is supported.

        Args:
            capability: One of the constants in pylinalgebra.core.capabilities

        Returns:
            True if the capability is supported, False otherwise

        Note:
            Unknown capabilities MUST return False, never raise.
        """
        ...
