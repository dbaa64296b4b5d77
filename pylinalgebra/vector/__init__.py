"""
Vectors over dense and sparse storage.

Submodules:
    base: The generic Vector core and its per-storage hooks
    dense: DenseVector
    sparse: SparseVector
"""

from pylinalgebra.vector.base import Vector
from pylinalgebra.vector.dense import DenseVector
from pylinalgebra.vector.sparse import SparseVector

__all__ = [
    "Vector",
    "DenseVector",
    "SparseVector",
]
