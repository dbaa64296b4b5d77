"""
Tests for matrix arithmetic, products and norms.

Results keep the left operand's family; a left operand mixed with another
family, or shifted by a non-zero scalar, yields its unconstrained form.
"""

import numpy as np
import pytest

from pylinalgebra import (
    DenseMatrix,
    DenseVector,
    SparseMatrix,
    SparseVector,
)
from pylinalgebra.core.exceptions import DimensionError, NotSupportedError, NullArgumentError


@pytest.fixture
def a(matrix_cls):
    return matrix_cls.of_array([[1.0, -2.0], [3.0, 4.0]])


@pytest.fixture
def b(matrix_cls):
    return matrix_cls.of_array([[0.5, 0.0], [0.0, 2.0]])


# ═══════════════════════════════════════════════════════════════════════
# Element-wise
# ═══════════════════════════════════════════════════════════════════════


class TestAddSubtract:

    def test_add(self, a, b):
        result = a + b
        assert type(result) is type(a)
        np.testing.assert_array_equal(result.to_array(), [[1.5, -2.0], [3.0, 6.0]])

    def test_subtract(self, a, b):
        np.testing.assert_array_equal((a - b).to_array(), [[0.5, -2.0], [3.0, 2.0]])

    def test_operands_unchanged(self, a, b):
        a + b
        np.testing.assert_array_equal(a.to_array(), [[1.0, -2.0], [3.0, 4.0]])

    def test_add_scalar(self, a):
        np.testing.assert_array_equal((a + 1).to_array(), [[2.0, -1.0], [4.0, 5.0]])
        np.testing.assert_array_equal((1 + a).to_array(), [[2.0, -1.0], [4.0, 5.0]])

    def test_add_zero_is_copy(self, a):
        result = a + 0
        assert result == a
        assert result is not a

    def test_subtract_scalar(self, a):
        np.testing.assert_array_equal((a - 1).to_array(), [[0.0, -3.0], [2.0, 3.0]])

    def test_scalar_minus_matrix(self, a):
        np.testing.assert_array_equal((1 - a).to_array(), [[0.0, 3.0], [-2.0, -3.0]])

    def test_shape_mismatch(self, a, matrix_cls):
        with pytest.raises(DimensionError):
            a + matrix_cls(2, 3)

    def test_none(self, a):
        with pytest.raises(NullArgumentError):
            a.add(None)

    def test_result_argument(self, a, b, matrix_cls):
        target = matrix_cls(2, 2)
        returned = a.add(b, target)
        assert returned is target
        np.testing.assert_array_equal(target.to_array(), [[1.5, -2.0], [3.0, 6.0]])

    def test_result_wrong_shape(self, a, b, matrix_cls):
        with pytest.raises(DimensionError):
            a.add(b, matrix_cls(3, 2))

    def test_negate(self, a):
        result = -a
        assert type(result) is type(a)
        np.testing.assert_array_equal(result.to_array(), [[-1.0, 2.0], [-3.0, -4.0]])

    def test_pos_is_copy(self, a):
        result = +a
        assert result == a
        assert result is not a


class TestMixedFamilies:

    def test_dense_plus_sparse_is_dense(self):
        result = DenseMatrix.identity(2) + SparseMatrix.identity(2)
        assert isinstance(result, DenseMatrix)
        np.testing.assert_array_equal(result.to_array(), 2 * np.eye(2))

    def test_sparse_plus_dense_is_sparse(self):
        result = SparseMatrix.identity(2) + DenseMatrix.of_array(np.ones((2, 2)))
        assert isinstance(result, SparseMatrix)
        np.testing.assert_array_equal(result.to_array(), [[2.0, 1.0], [1.0, 2.0]])

    def test_sparse_stays_sparse(self):
        result = SparseMatrix.identity(3) * 2 - SparseMatrix.identity(3)
        assert isinstance(result, SparseMatrix)
        assert result.nonzero_count == 3


class TestMixedElementTypes:
    """A real matrix never absorbs a complex operand."""

    def test_real_plus_complex_refused(self, matrix_cls):
        real = matrix_cls.of_array([[1.0, 2.0]], dtype=np.float32)
        cplx = matrix_cls.of_array([[1j, 1.0]])
        with pytest.raises(NotSupportedError):
            real + cplx
        with pytest.raises(NotSupportedError):
            real.subtract(cplx)
        np.testing.assert_array_equal(real.to_array(), [[1.0, 2.0]])

    def test_complex_plus_real_widens(self, matrix_cls):
        cplx = matrix_cls.of_array([[1j, 1.0]])
        real = matrix_cls.of_array([[1.0, 2.0]])
        result = cplx + real
        assert result.dtype == np.complex128
        np.testing.assert_array_equal(result.to_array(), [[1 + 1j, 3.0]])

    def test_product_with_complex_refused(self, matrix_cls):
        real = matrix_cls.of_array([[1.0, 0.0], [0.0, 1.0]])
        with pytest.raises(NotSupportedError):
            real @ matrix_cls.of_array([[1j, 0.0], [0.0, 1.0]])
        with pytest.raises(NotSupportedError):
            real * DenseVector.of_array([1j, 1.0])

    def test_real_result_for_complex_refused(self, matrix_cls):
        cplx = matrix_cls.of_array([[1j, 1.0]])
        with pytest.raises(NotSupportedError):
            cplx.negate(result=matrix_cls(1, 2))

    def test_complex_scalar_refused(self, a):
        with pytest.raises(NotSupportedError):
            a.add(1j)
        with pytest.raises(NotSupportedError):
            a * (1 + 2j)

    def test_set_row_complex_into_real_refused(self, a):
        with pytest.raises(NotSupportedError):
            a.set_row(0, [1j, 2.0])
        assert a[0, 0] == 1.0

    def test_set_sub_matrix_complex_into_real_refused(self, matrix_cls, a):
        with pytest.raises(NotSupportedError):
            a.set_sub_matrix(0, 0, matrix_cls.of_array([[1j]]))
        assert a[0, 0] == 1.0

    def test_copy_to_real_refused(self, matrix_cls):
        source = matrix_cls.of_array([[1j]])
        with pytest.raises(NotSupportedError):
            source.copy_to(matrix_cls(1, 1))


# ═══════════════════════════════════════════════════════════════════════
# Products
# ═══════════════════════════════════════════════════════════════════════


class TestScalarProduct:

    def test_scale(self, a):
        np.testing.assert_array_equal((a * 2).to_array(), [[2.0, -4.0], [6.0, 8.0]])

    def test_reflected(self, a):
        np.testing.assert_array_equal((2 * a).to_array(), (a * 2).to_array())

    def test_numpy_scalar_on_left(self, a):
        result = np.float64(2.0) * a
        assert type(result) is type(a)
        np.testing.assert_array_equal(result.to_array(), [[2.0, -4.0], [6.0, 8.0]])

    def test_by_one_copies(self, a):
        result = a * 1
        assert result == a
        assert result is not a

    def test_by_zero_clears(self, a, matrix_cls):
        assert (a * 0) == matrix_cls(2, 2)


class TestMatrixVector:

    def test_product(self, a, vector_cls):
        result = a * vector_cls.of_array([1.0, 1.0])
        np.testing.assert_array_equal(result.to_array(), [-1.0, 7.0])

    def test_result_family(self):
        v = DenseVector.of_array([1.0, 2.0])
        assert isinstance(DenseMatrix.identity(2) * v, DenseVector)
        assert isinstance(SparseMatrix.identity(2) * v, SparseVector)

    def test_matmul_operator(self, a, vector_cls):
        v = vector_cls.of_array([2.0, 0.0])
        np.testing.assert_array_equal((a @ v).to_array(), [2.0, 6.0])

    def test_length_mismatch(self, a, vector_cls):
        with pytest.raises(DimensionError):
            a * vector_cls.of_array([1.0, 2.0, 3.0])

    def test_result_argument(self, a):
        target = DenseVector.zeros(2)
        returned = a.multiply(DenseVector.of_array([1.0, 0.0]), target)
        assert returned is target
        np.testing.assert_array_equal(target.to_array(), [1.0, 3.0])

    def test_rectangular(self, matrix_cls, grid):
        m = matrix_cls.of_array(grid)
        v = DenseVector.of_array([1.0, 0.0, 0.0, 1.0])
        np.testing.assert_array_equal((m * v).to_array(), grid @ np.array([1.0, 0.0, 0.0, 1.0]))


class TestMatrixMatrix:

    def test_product(self, a, b):
        result = a @ b
        np.testing.assert_allclose(result.to_array(), np.array([[1.0, -2.0], [3.0, 4.0]]) @ np.diag([0.5, 2.0]))

    def test_star_and_matmul_agree(self, a, b):
        assert (a * b) == (a @ b)

    def test_rectangular(self, matrix_cls, grid):
        m = matrix_cls.of_array(grid)
        result = m @ m.transpose()
        assert result.shape == (3, 3)
        np.testing.assert_allclose(result.to_array(), grid @ grid.T)

    def test_inner_dimension_checked(self, matrix_cls, grid):
        m = matrix_cls.of_array(grid)
        with pytest.raises(DimensionError):
            m @ m

    def test_mixed_families(self, grid):
        dense = DenseMatrix.of_array(grid)
        sparse = SparseMatrix.identity(4)
        np.testing.assert_array_equal((dense @ sparse).to_array(), grid)
        result = SparseMatrix.identity(3) @ dense
        assert isinstance(result, SparseMatrix)
        np.testing.assert_array_equal(result.to_array(), grid)

    def test_matmul_rejects_scalar(self, a):
        with pytest.raises(TypeError):
            a @ 2


# ═══════════════════════════════════════════════════════════════════════
# Norms
# ═══════════════════════════════════════════════════════════════════════


class TestNorms:

    def test_l1(self, a):
        assert a.l1_norm() == pytest.approx(6.0)

    def test_infinity(self, a):
        assert a.infinity_norm() == pytest.approx(7.0)

    def test_frobenius(self, a):
        assert a.frobenius_norm() == pytest.approx(np.sqrt(30.0))

    def test_complex_frobenius(self):
        m = DenseMatrix.of_array([[3 + 4j, 0], [0, 0]])
        assert m.frobenius_norm() == pytest.approx(5.0)
