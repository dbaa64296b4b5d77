"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pylinalgebra import DenseMatrix, DenseVector, DiagonalMatrix, SparseMatrix, SparseVector


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture(params=[DenseVector, SparseVector], ids=["dense", "sparse"])
def vector_cls(request):
    """Every vector family."""
    return request.param


@pytest.fixture(params=[DenseMatrix, SparseMatrix], ids=["dense", "sparse"])
def matrix_cls(request):
    """Every matrix family that accepts arbitrary values."""
    return request.param


@pytest.fixture
def grid():
    """3x4 matrix with distinct entries 1..12 laid out row by row."""
    return np.arange(1.0, 13.0).reshape(3, 4)


@pytest.fixture
def diagonal_3x3():
    """diag(1, 2, 3)."""
    return DiagonalMatrix.of_diagonal([1.0, 2.0, 3.0])
