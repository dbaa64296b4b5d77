"""
Tests for matrix predicates and masks.

Index enumerations run column by column, rows within each column.
"""

import numpy as np
import pytest

from pylinalgebra import DenseMatrix, SparseMatrix
from pylinalgebra.core.exceptions import DimensionError, NullArgumentError


@pytest.fixture
def m(matrix_cls, grid):
    return matrix_cls.of_array(grid)


class TestFindMask:

    def test_mask(self, m, grid):
        mask = m.find_mask(lambda x: x > 6)
        np.testing.assert_array_equal(mask.to_array(), (grid > 6).astype(float))
        assert type(mask) is type(m)

    def test_none(self, m):
        with pytest.raises(NullArgumentError):
            m.find_mask(None)


class TestFindIndices:

    def test_column_major_order(self, m):
        assert list(m.find_indices(lambda x: x in (2.0, 5.0))) == [(1, 0), (0, 1)]

    def test_all_matches_order(self, matrix_cls):
        a = matrix_cls(2, 2)
        assert list(a.find_indices(lambda x: True)) == [(0, 0), (1, 0), (0, 1), (1, 1)]

    def test_lazy_and_eager_validation(self, m):
        with pytest.raises(NullArgumentError):
            m.find_indices(None)
        it = m.find_indices(lambda x: x > 11)
        assert next(it) == (2, 3)

    def test_sparse_scan_visits_stored_values_column_by_column(self):
        a = SparseMatrix(3, 3)
        a[0, 2] = 7.0
        a[2, 0] = 4.0
        a[1, 1] = 5.0
        seen = []

        def pred(x):
            seen.append(float(x))
            return x > 4

        assert list(a.find_indices(pred)) == [(1, 1), (0, 2)]
        # one call to test zero, then the stored values in column order
        assert seen == [0.0, 4.0, 5.0, 7.0]

    def test_dense_scan_visits_every_element(self):
        a = DenseMatrix(2, 2)
        seen = []
        list(a.find_indices(lambda x: seen.append(x)))
        assert len(seen) == 4

    def test_predicate_matching_zero_visits_implicit_zeros(self):
        a = SparseMatrix(2, 2)
        a[1, 0] = 3.0
        assert list(a.find_indices(lambda x: x == 0)) == [(0, 0), (0, 1), (1, 1)]


class TestOnMask:

    def test_on_mask_set(self, m, matrix_cls, grid):
        mask = matrix_cls.of_array([[1.0, 0.0, 0.0, 0.0],
                                    [0.0, 1.0, 0.0, 0.0],
                                    [0.0, 0.0, 0.0, 1.0]])
        m.on_mask_set(mask, 0.0)
        expected = grid.copy()
        expected[0, 0] = expected[1, 1] = expected[2, 3] = 0.0
        np.testing.assert_array_equal(m.to_array(), expected)

    def test_on_mask_apply(self, m, grid):
        m.on_mask_apply(m.find_mask(lambda x: x > 10), lambda x: -x)
        expected = np.where(grid > 10, -grid, grid)
        np.testing.assert_array_equal(m.to_array(), expected)

    def test_enumerate_mask(self, m, matrix_cls):
        mask = matrix_cls.of_array([[0.0, 1.0, 0.0, 0.0],
                                    [1.0, 0.0, 0.0, 0.0],
                                    [0.0, 0.0, 0.0, 0.0]])
        assert [(r, c, float(v)) for r, c, v in m.enumerate_mask(mask)] == [
            (1, 0, 5.0), (0, 1, 2.0),
        ]

    def test_mask_of_other_family(self, grid):
        a = DenseMatrix.of_array(grid)
        mask = SparseMatrix(3, 4)
        mask[2, 2] = 1.0
        a.on_mask_set(mask, 0.0)
        assert a[2, 2] == 0.0
        assert a[0, 0] == 1.0

    def test_stray_values_warn(self, m, matrix_cls):
        mask = matrix_cls(3, 4)
        mask[0, 0] = 0.5
        mask[0, 1] = 1.0
        with pytest.warns(UserWarning, match="neither zero nor one"):
            m.on_mask_set(mask, 0.0)
        assert m[0, 0] == 1.0
        assert m[0, 1] == 0.0

    @staticmethod
    def _near_one_mask(matrix_cls):
        mask = matrix_cls(3, 4)
        mask[0, 0] = np.nan
        mask[1, 0] = 1 + 1e-12
        mask[2, 0] = 1.0
        return mask

    def test_near_one_and_nan_not_selected_by_set(self, m, matrix_cls, grid):
        with pytest.warns(UserWarning, match="2 entries"):
            m.on_mask_set(self._near_one_mask(matrix_cls), -1.0)
        expected = grid.copy()
        expected[2, 0] = -1.0
        np.testing.assert_array_equal(m.to_array(), expected)

    def test_near_one_and_nan_not_selected_by_enumerate(self, m, matrix_cls):
        with pytest.warns(UserWarning, match="neither zero nor one"):
            selected = list(m.enumerate_mask(self._near_one_mask(matrix_cls)))
        assert [(r, c, float(v)) for r, c, v in selected] == [(2, 0, 9.0)]

    def test_shape_checked(self, m, matrix_cls):
        with pytest.raises(DimensionError):
            m.on_mask_set(matrix_cls(4, 3), 1.0)

    def test_mask_none(self, m):
        with pytest.raises(NullArgumentError):
            m.on_mask_apply(None, abs)

    def test_func_none(self, m, matrix_cls):
        with pytest.raises(NullArgumentError):
            m.on_mask_apply(matrix_cls(3, 4), None)


class TestApplyAll:

    def test_visits_zeros(self, matrix_cls):
        a = matrix_cls(2, 2)
        a.apply_all(lambda x: x + 2)
        np.testing.assert_array_equal(a.to_array(), np.full((2, 2), 2.0))
