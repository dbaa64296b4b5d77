"""
Matrices over dense, sparse and diagonal storage.

Submodules:
    base: The generic Matrix core and its per-storage hooks
    dense: DenseMatrix
    sparse: SparseMatrix (scipy.sparse backed)
    diagonal: DiagonalMatrix
"""

from pylinalgebra.matrix.base import Matrix
from pylinalgebra.matrix.dense import DenseMatrix
from pylinalgebra.matrix.sparse import SparseMatrix
from pylinalgebra.matrix.diagonal import DiagonalMatrix

__all__ = [
    "Matrix",
    "DenseMatrix",
    "SparseMatrix",
    "DiagonalMatrix",
]
