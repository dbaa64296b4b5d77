"""
Tests for the 1-based matrix accessors.
"""

import numpy as np
import pytest

from pylinalgebra.core.exceptions import OutOfRangeError


@pytest.fixture
def m(matrix_cls, grid):
    return matrix_cls.of_array(grid)


class TestOneBasedAccess:

    def test_at_i(self, m):
        assert m.at_i(1, 1) == 1.0
        assert m.at_i(3, 4) == 12.0

    def test_zero_is_out_of_range(self, m):
        with pytest.raises(OutOfRangeError):
            m.at_i(0, 1)

    def test_set_at_i(self, m):
        m.set_at_i(2, 3, -1.0)
        assert m[1, 2] == -1.0

    def test_row_and_column(self, m, grid):
        np.testing.assert_array_equal(m.row_i(1).to_array(), grid[0])
        np.testing.assert_array_equal(m.column_i(4).to_array(), grid[:, 3])

    def test_indices(self, m):
        assert list(m.row_indices_i()) == [1, 2, 3]
        assert list(m.column_indices_i()) == [1, 2, 3, 4]

    def test_enumerate_rows_i(self, m):
        assert [i for i, _ in m.enumerate_rows_i(2)] == [2, 3]

    def test_find_indices_i(self, m):
        assert list(m.find_indices_i(lambda x: x in (2.0, 5.0))) == [(2, 1), (1, 2)]


class TestOneBasedStructure:

    def test_sub_matrix_i(self, m, grid):
        np.testing.assert_array_equal(m.sub_matrix_i(2, 2, 3, 2).to_array(), grid[1:3, 2:4])

    def test_remove_row_i(self, m, grid):
        np.testing.assert_array_equal(m.remove_row_i(1).to_array(), grid[1:])

    def test_remove_column_i(self, m, grid):
        np.testing.assert_array_equal(m.remove_column_i(4).to_array(), grid[:, :3])

    def test_insert_row_i(self, m):
        result = m.insert_row_i(4, [0.0, 0.0, 0.0, 0.0])
        assert result.shape == (4, 4)
        assert result.row_i(4).to_array().sum() == 0.0

    def test_select_rows_i(self, m, grid):
        np.testing.assert_array_equal(m.select_rows_i([3, 1]).to_array(), grid[[2, 0]])

    def test_set_row_i(self, m):
        m.set_row_i(3, [0.0, 0.0, 0.0, 0.0])
        assert m.row(2).to_array().sum() == 0.0

    def test_sort_by_column_i_returns_zero_based(self, matrix_cls):
        a = matrix_cls.of_array([[3.0], [1.0], [2.0]])
        p = a.sort_by_column_i(1)
        assert p.to_list() == [2, 0, 1]
        np.testing.assert_array_equal(a.to_array().ravel(), [1.0, 2.0, 3.0])
