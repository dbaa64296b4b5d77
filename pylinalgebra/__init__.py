"""
PyLinAlgebra: generic vectors, matrices and permutations for Python.

Vectors and matrices share one storage-independent core over pluggable
dense, sparse and diagonal storage. Permutations drive row and column
reordering, sorting and shuffling.

Submodules:
    core: Exceptions, validation, numeric traits and compute helpers
    storage: Dense, sparse and diagonal storage backends
    vector: Vector, DenseVector, SparseVector
    matrix: Matrix, DenseMatrix, SparseMatrix, DiagonalMatrix
    permutation: Permutation and its inversion-sequence codec
"""

__version__ = "0.1.0"

from pylinalgebra.permutation import Permutation
from pylinalgebra.vector import Vector, DenseVector, SparseVector
from pylinalgebra.matrix import Matrix, DenseMatrix, SparseMatrix, DiagonalMatrix

__all__ = [
    "__version__",
    "Permutation",
    "Vector",
    "DenseVector",
    "SparseVector",
    "Matrix",
    "DenseMatrix",
    "SparseMatrix",
    "DiagonalMatrix",
]
