"""
Tests for DiagonalMatrix.

Results stay diagonal where they can; operations that may fill the
off-diagonal produce a SparseMatrix; reorderings and single row or
column removals are refused.
"""

import numpy as np
import pytest

from pylinalgebra import (
    DenseMatrix,
    DenseVector,
    DiagonalMatrix,
    Permutation,
    SparseMatrix,
    SparseVector,
)
from pylinalgebra.core.exceptions import (
    DimensionError,
    InvalidArgumentError,
    InvalidOperationError,
    OutOfRangeError,
)


# ═══════════════════════════════════════════════════════════════════════
# Construction and access
# ═══════════════════════════════════════════════════════════════════════


class TestConstruction:

    def test_of_diagonal(self, diagonal_3x3):
        np.testing.assert_array_equal(diagonal_3x3.to_array(), np.diag([1.0, 2.0, 3.0]))

    def test_rectangular(self):
        d = DiagonalMatrix.of_diagonal([1.0, 2.0], 2, 3)
        assert d.shape == (2, 3)
        np.testing.assert_array_equal(d.to_array(), [[1.0, 0.0, 0.0], [0.0, 2.0, 0.0]])

    def test_rectangular_length_checked(self):
        with pytest.raises(DimensionError):
            DiagonalMatrix.of_diagonal([1.0, 2.0, 3.0], 2, 3)

    def test_identity(self):
        np.testing.assert_array_equal(DiagonalMatrix.identity(2).to_array(), np.eye(2))

    def test_set_off_diagonal_refused(self, diagonal_3x3):
        with pytest.raises(InvalidOperationError):
            diagonal_3x3[0, 2] = 1.0

    def test_set_zero_off_diagonal_allowed(self, diagonal_3x3):
        diagonal_3x3[0, 2] = 0.0
        assert diagonal_3x3[0, 2] == 0.0

    def test_diagonal_vector(self, diagonal_3x3):
        v = diagonal_3x3.diagonal()
        assert isinstance(v, SparseVector)
        np.testing.assert_array_equal(v.to_array(), [1.0, 2.0, 3.0])

    def test_row_is_sparse(self, diagonal_3x3):
        row = diagonal_3x3.row(1)
        assert isinstance(row, SparseVector)
        np.testing.assert_array_equal(row.to_array(), [0.0, 2.0, 0.0])

    def test_enumerate_nonzero(self, diagonal_3x3):
        assert [(r, c) for r, c, _ in diagonal_3x3.enumerate_nonzero()] == [(0, 0), (1, 1), (2, 2)]

    def test_clone_stays_diagonal(self, diagonal_3x3):
        copy = diagonal_3x3.clone()
        assert isinstance(copy, DiagonalMatrix)
        assert copy == diagonal_3x3

    def test_set_row_off_diagonal_refused(self, diagonal_3x3):
        with pytest.raises(InvalidOperationError):
            diagonal_3x3.set_row(0, [1.0, 1.0, 0.0])
        assert diagonal_3x3[0, 0] == 1.0


# ═══════════════════════════════════════════════════════════════════════
# Refused operations
# ═══════════════════════════════════════════════════════════════════════


class TestRefused:

    @pytest.mark.parametrize("call", [
        lambda d: d.permute_rows(Permutation([1, 0, 2])),
        lambda d: d.permute_columns(Permutation([1, 0, 2])),
        lambda d: d.sort_by_column(0),
        lambda d: d.sort_by_row(0),
        lambda d: d.shuffle_rows(0),
        lambda d: d.shuffle_columns(0),
        lambda d: d.remove_row(0),
        lambda d: d.remove_column(0),
    ], ids=[
        "permute_rows", "permute_columns", "sort_by_column", "sort_by_row",
        "shuffle_rows", "shuffle_columns", "remove_row", "remove_column",
    ])
    def test_refused(self, diagonal_3x3, call):
        with pytest.raises(InvalidOperationError) as info:
            call(diagonal_3x3)
        assert info.value.storage_kind == "diagonal"
        np.testing.assert_array_equal(diagonal_3x3.to_array(), np.diag([1.0, 2.0, 3.0]))

    def test_map_filling_zeros_refused(self, diagonal_3x3):
        with pytest.raises(InvalidOperationError):
            diagonal_3x3.apply_all(lambda x: x + 1)


# ═══════════════════════════════════════════════════════════════════════
# Structure
# ═══════════════════════════════════════════════════════════════════════


class TestStructure:

    @pytest.mark.parametrize("index, expected", [
        (0, [2.0, 3.0]),
        (1, [1.0, 3.0]),
        (2, [1.0, 2.0]),
    ])
    def test_remove_row_and_column_stays_diagonal(self, diagonal_3x3, index, expected):
        result = diagonal_3x3.remove_row_and_column(index)
        assert isinstance(result, DiagonalMatrix)
        np.testing.assert_array_equal(result.to_array(), np.diag(expected))

    def test_remove_row_and_column_checked(self, diagonal_3x3):
        with pytest.raises(OutOfRangeError):
            diagonal_3x3.remove_row_and_column(3)
        with pytest.raises(InvalidArgumentError):
            DiagonalMatrix.identity(1).remove_row_and_column(0)

    def test_insert_row_leaves_family(self, diagonal_3x3):
        result = diagonal_3x3.insert_row(0, [1.0, 1.0, 1.0])
        assert isinstance(result, SparseMatrix)
        np.testing.assert_array_equal(
            result.to_array(), np.vstack([np.ones(3), np.diag([1.0, 2.0, 3.0])])
        )

    def test_select_rows_leaves_family(self, diagonal_3x3):
        result = diagonal_3x3.select_rows([2, 0])
        assert isinstance(result, SparseMatrix)
        np.testing.assert_array_equal(result.to_array(), [[0.0, 0.0, 3.0], [1.0, 0.0, 0.0]])

    def test_aligned_sub_matrix_is_diagonal(self, diagonal_3x3):
        sub = diagonal_3x3.sub_matrix(1, 2, 1, 2)
        assert isinstance(sub, DiagonalMatrix)
        np.testing.assert_array_equal(sub.to_array(), np.diag([2.0, 3.0]))

    def test_offset_sub_matrix_is_sparse(self, diagonal_3x3):
        sub = diagonal_3x3.sub_matrix(0, 2, 1, 2)
        assert isinstance(sub, SparseMatrix)
        np.testing.assert_array_equal(sub.to_array(), [[0.0, 0.0], [2.0, 0.0]])

    def test_append_leaves_family(self, diagonal_3x3):
        result = diagonal_3x3.append(DiagonalMatrix.identity(3))
        assert isinstance(result, SparseMatrix)
        assert result.shape == (3, 6)

    def test_transpose_rectangular(self):
        d = DiagonalMatrix.of_diagonal([1.0, 2.0], 2, 4)
        t = d.transpose()
        assert isinstance(t, DiagonalMatrix)
        assert t.shape == (4, 2)
        np.testing.assert_array_equal(t.to_array(), d.to_array().T)

    def test_triangles_stay_diagonal(self, diagonal_3x3):
        assert diagonal_3x3.upper_triangle() == diagonal_3x3
        assert diagonal_3x3.strictly_lower_triangle().frobenius_norm() == 0.0

    def test_is_symmetric(self, diagonal_3x3):
        assert diagonal_3x3.is_symmetric()
        assert not DiagonalMatrix(2, 3).is_symmetric()


# ═══════════════════════════════════════════════════════════════════════
# Masks
# ═══════════════════════════════════════════════════════════════════════


class TestMasks:

    def test_mask_rejecting_zero_is_diagonal(self, diagonal_3x3):
        mask = diagonal_3x3.find_mask(lambda x: x > 1)
        assert isinstance(mask, DiagonalMatrix)
        np.testing.assert_array_equal(mask.to_array(), np.diag([0.0, 1.0, 1.0]))

    def test_mask_accepting_zero_is_sparse(self, diagonal_3x3):
        mask = diagonal_3x3.find_mask(lambda x: x < 2)
        assert isinstance(mask, SparseMatrix)
        expected = np.ones((3, 3))
        expected[1, 1] = expected[2, 2] = 0.0
        np.testing.assert_array_equal(mask.to_array(), expected)

    def test_find_indices_diagonal_only(self, diagonal_3x3):
        assert list(diagonal_3x3.find_indices(lambda x: x >= 2)) == [(1, 1), (2, 2)]

    def test_find_indices_zero_matches(self):
        d = DiagonalMatrix.identity(2)
        assert list(d.find_indices(lambda x: x == 0)) == [(1, 0), (0, 1)]

    def test_on_mask_set_on_diagonal(self, diagonal_3x3):
        diagonal_3x3.on_mask_set(DiagonalMatrix.of_diagonal([1.0, 0.0, 1.0]), 9.0)
        np.testing.assert_array_equal(diagonal_3x3.diagonal().to_array(), [9.0, 2.0, 9.0])

    def test_on_mask_set_off_diagonal_is_atomic(self, diagonal_3x3):
        mask = SparseMatrix.of_array([[1.0, 1.0, 0.0], [0.0, 0.0, 0.0], [0.0, 0.0, 0.0]])
        with pytest.raises(InvalidOperationError):
            diagonal_3x3.on_mask_set(mask, 5.0)
        np.testing.assert_array_equal(diagonal_3x3.to_array(), np.diag([1.0, 2.0, 3.0]))

    def test_on_mask_set_zero_off_diagonal_allowed(self, diagonal_3x3):
        mask = SparseMatrix.of_array(np.ones((3, 3)))
        diagonal_3x3.on_mask_set(mask, 0.0)
        assert diagonal_3x3.frobenius_norm() == 0.0

    def test_on_mask_apply(self, diagonal_3x3):
        diagonal_3x3.on_mask_apply(DiagonalMatrix.identity(3), lambda x: x * 10)
        np.testing.assert_array_equal(diagonal_3x3.diagonal().to_array(), [10.0, 20.0, 30.0])


# ═══════════════════════════════════════════════════════════════════════
# Arithmetic and norms
# ═══════════════════════════════════════════════════════════════════════


class TestArithmetic:

    def test_add_diagonal(self, diagonal_3x3):
        result = diagonal_3x3 + diagonal_3x3
        assert isinstance(result, DiagonalMatrix)
        np.testing.assert_array_equal(result.to_array(), np.diag([2.0, 4.0, 6.0]))

    def test_subtract_diagonal(self, diagonal_3x3):
        result = diagonal_3x3 - DiagonalMatrix.identity(3)
        assert isinstance(result, DiagonalMatrix)
        np.testing.assert_array_equal(result.to_array(), np.diag([0.0, 1.0, 2.0]))

    def test_add_dense_leaves_family(self, diagonal_3x3):
        result = diagonal_3x3 + DenseMatrix.of_array(np.ones((3, 3)))
        assert isinstance(result, SparseMatrix)
        np.testing.assert_array_equal(result.to_array(), np.ones((3, 3)) + np.diag([1.0, 2.0, 3.0]))

    def test_add_scalar_leaves_family(self, diagonal_3x3):
        result = diagonal_3x3 + 1
        assert isinstance(result, SparseMatrix)
        np.testing.assert_array_equal(result.to_array(), np.diag([1.0, 2.0, 3.0]) + 1)

    def test_scale_stays_diagonal(self, diagonal_3x3):
        result = 2 * diagonal_3x3
        assert isinstance(result, DiagonalMatrix)
        np.testing.assert_array_equal(result.to_array(), np.diag([2.0, 4.0, 6.0]))

    def test_negate(self, diagonal_3x3):
        result = -diagonal_3x3
        assert isinstance(result, DiagonalMatrix)
        np.testing.assert_array_equal(result.to_array(), np.diag([-1.0, -2.0, -3.0]))

    def test_product_of_diagonals(self, diagonal_3x3):
        result = diagonal_3x3 @ diagonal_3x3
        assert isinstance(result, DiagonalMatrix)
        np.testing.assert_array_equal(result.to_array(), np.diag([1.0, 4.0, 9.0]))

    def test_rectangular_product(self):
        a = DiagonalMatrix.of_diagonal([1.0, 2.0], 2, 3)
        b = DiagonalMatrix.of_diagonal([3.0, 4.0, 5.0], 3, 3)
        result = a @ b
        assert result.shape == (2, 3)
        np.testing.assert_array_equal(result.to_array(), a.to_array() @ b.to_array())

    def test_product_with_dense(self, diagonal_3x3, grid):
        result = diagonal_3x3 @ DenseMatrix.of_array(grid)
        np.testing.assert_array_equal(result.to_array(), np.diag([1.0, 2.0, 3.0]) @ grid)

    def test_matrix_vector(self, diagonal_3x3):
        result = diagonal_3x3 * DenseVector.of_array([1.0, 1.0, 2.0])
        assert isinstance(result, SparseVector)
        np.testing.assert_array_equal(result.to_array(), [1.0, 2.0, 6.0])

    def test_rectangular_matrix_vector(self):
        d = DiagonalMatrix.of_diagonal([2.0, 3.0], 3, 2)
        result = d * DenseVector.of_array([1.0, 1.0])
        np.testing.assert_array_equal(result.to_array(), [2.0, 3.0, 0.0])


class TestNorms:

    def test_norms(self):
        d = DiagonalMatrix.of_diagonal([3.0, -4.0])
        assert d.l1_norm() == pytest.approx(4.0)
        assert d.infinity_norm() == pytest.approx(4.0)
        assert d.frobenius_norm() == pytest.approx(5.0)

    def test_norms_agree_with_dense(self, diagonal_3x3):
        dense = DenseMatrix.of_array(diagonal_3x3.to_array())
        assert diagonal_3x3.l1_norm() == pytest.approx(dense.l1_norm())
        assert diagonal_3x3.frobenius_norm() == pytest.approx(dense.frobenius_norm())
