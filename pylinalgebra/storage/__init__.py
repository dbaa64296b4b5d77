"""
Storage backends for vectors and matrices.

Submodules:
    _base: StorageKind tag and the VectorStorage / MatrixStorage interfaces
    dense: numpy-backed dense storage
    sparse: sorted-array sparse vectors and scipy.sparse matrices
    diagonal: diagonal-only matrix storage
"""

from pylinalgebra.storage._base import MatrixStorage, StorageKind, VectorStorage
from pylinalgebra.storage.dense import DenseMatrixStorage, DenseVectorStorage
from pylinalgebra.storage.diagonal import DiagonalMatrixStorage
from pylinalgebra.storage.sparse import SparseMatrixStorage, SparseVectorStorage

__all__ = [
    "StorageKind",
    "VectorStorage",
    "MatrixStorage",
    "DenseVectorStorage",
    "DenseMatrixStorage",
    "SparseVectorStorage",
    "SparseMatrixStorage",
    "DiagonalMatrixStorage",
]
