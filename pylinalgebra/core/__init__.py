"""
Core infrastructure for pylinalgebra.

This module provides shared abstractions and utilities used by the
permutation, storage, vector and matrix packages.

Key components:
    protocols: RandomSource, SupportsCapabilities protocols
    capabilities: Storage capability constants
    numeric: Element type traits
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Precision, sorting and randomness helpers
"""

from pylinalgebra.core.protocols import RandomSource, SupportsCapabilities
from pylinalgebra.core.numeric import NumericTraits, traits_for
from pylinalgebra.core.exceptions import (
    LinAlgebraError,
    ValidationError,
    NullArgumentError,
    InvalidArgumentError,
    DimensionError,
    OutOfRangeError,
    InvalidOperationError,
    NotSupportedError,
)

__all__ = [
    # Protocols
    "RandomSource",
    "SupportsCapabilities",
    # Numeric traits
    "NumericTraits",
    "traits_for",
    # Exceptions
    "LinAlgebraError",
    "ValidationError",
    "NullArgumentError",
    "InvalidArgumentError",
    "DimensionError",
    "OutOfRangeError",
    "InvalidOperationError",
    "NotSupportedError",
]
