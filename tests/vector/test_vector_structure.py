"""
Tests for vector construction, element access and structural operations.
"""

import numpy as np
import pytest

from pylinalgebra import DenseMatrix, DenseVector, SparseMatrix, SparseVector
from pylinalgebra.core.exceptions import (
    DimensionError,
    NotSupportedError,
    NullArgumentError,
    OutOfRangeError,
)


@pytest.fixture
def five(vector_cls):
    """[1, 2, 3, 4, 5] in the family under test."""
    return vector_cls.of_array([1.0, 2.0, 3.0, 4.0, 5.0])


# ═══════════════════════════════════════════════════════════════════════
# Construction
# ═══════════════════════════════════════════════════════════════════════


class TestConstruction:

    def test_zero_vector_from_length(self, vector_cls):
        v = vector_cls(4)
        assert v.count == 4
        assert len(v) == 4
        np.testing.assert_array_equal(v.to_array(), np.zeros(4))

    def test_length_must_be_positive(self, vector_cls):
        with pytest.raises(OutOfRangeError):
            vector_cls(0)

    def test_dtype(self, vector_cls):
        assert vector_cls(2, np.float32).dtype == np.float32
        assert vector_cls.of_array([1, 2]).dtype == np.float64

    def test_unsupported_dtype(self, vector_cls):
        with pytest.raises(NotSupportedError):
            vector_cls(2, np.int64)

    def test_none_storage(self):
        with pytest.raises(NullArgumentError):
            DenseVector(None)

    def test_ones(self):
        np.testing.assert_array_equal(DenseVector.ones(3).to_array(), [1.0, 1.0, 1.0])

    def test_sparse_of_indexed(self):
        v = SparseVector.of_indexed(5, [(1, 2.0), (3, 4.0), (1, 7.0)])
        np.testing.assert_array_equal(v.to_array(), [0.0, 7.0, 0.0, 4.0, 0.0])
        assert v.nonzero_count == 2

    def test_sparse_of_indexed_range_checked(self):
        with pytest.raises(OutOfRangeError):
            SparseVector.of_indexed(2, [(2, 1.0)])


# ═══════════════════════════════════════════════════════════════════════
# Element access
# ═══════════════════════════════════════════════════════════════════════


class TestAccess:

    def test_getitem_setitem(self, five):
        five[0] = 10
        assert five[0] == 10.0
        assert five.at(4) == 5.0

    @pytest.mark.parametrize("index", [-1, 5])
    def test_out_of_range(self, five, index):
        with pytest.raises(OutOfRangeError):
            five.at(index)
        with pytest.raises(OutOfRangeError):
            five.set_at(index, 1.0)

    def test_iteration(self, five):
        assert [float(x) for x in five] == [1.0, 2.0, 3.0, 4.0, 5.0]

    def test_enumerate_indexed(self, vector_cls):
        v = vector_cls.of_array([7.0, 0.0])
        assert [(i, float(x)) for i, x in v.enumerate_indexed()] == [(0, 7.0), (1, 0.0)]

    def test_enumerate_nonzero(self, vector_cls):
        v = vector_cls.of_array([0.0, 2.0, 0.0, 4.0])
        assert [i for i, _ in v.enumerate_nonzero()] == [1, 3]

    def test_indices(self, five):
        assert list(five.indices()) == [0, 1, 2, 3, 4]


# ═══════════════════════════════════════════════════════════════════════
# Copies and sub-vectors
# ═══════════════════════════════════════════════════════════════════════


class TestCopies:

    def test_clone_is_independent(self, five):
        copy = five.clone()
        copy[0] = 99.0
        assert five[0] == 1.0
        assert type(copy) is type(five)

    def test_copy_to(self, five, vector_cls):
        target = vector_cls.zeros(5)
        five.copy_to(target)
        assert target == five

    def test_copy_to_length_mismatch(self, five, vector_cls):
        with pytest.raises(DimensionError):
            five.copy_to(vector_cls.zeros(4))

    def test_clear(self, five):
        five.clear()
        assert five.norm(1) == 0.0

    def test_clear_sub_vector(self, five):
        five.clear_sub_vector(1, 2)
        np.testing.assert_array_equal(five.to_array(), [1.0, 0.0, 0.0, 4.0, 5.0])

    def test_set_values(self, five):
        five.set_values([5, 4, 3, 2, 1])
        np.testing.assert_array_equal(five.to_array(), [5.0, 4.0, 3.0, 2.0, 1.0])


class TestSubVectors:

    def test_sub_vector(self, five):
        sub = five.sub_vector(1, 3)
        np.testing.assert_array_equal(sub.to_array(), [2.0, 3.0, 4.0])
        assert type(sub) is type(five)

    def test_sub_vector_overrun(self, five):
        with pytest.raises(OutOfRangeError):
            five.sub_vector(3, 3)

    def test_sub_vector_empty(self, five):
        with pytest.raises(OutOfRangeError):
            five.sub_vector(0, 0)

    def test_set_sub_vector(self, five, vector_cls):
        five.set_sub_vector(1, vector_cls.of_array([9.0, 8.0]))
        np.testing.assert_array_equal(five.to_array(), [1.0, 9.0, 8.0, 4.0, 5.0])

    def test_set_sub_vector_count(self, five):
        five.set_sub_vector(3, [7.0, 6.0, 5.0], count=2)
        np.testing.assert_array_equal(five.to_array(), [1.0, 2.0, 3.0, 7.0, 6.0])

    def test_set_sub_vector_overrun(self, five):
        with pytest.raises(OutOfRangeError):
            five.set_sub_vector(4, [1.0, 2.0])

    def test_copy_sub_vector_to_self_overlapping(self, five):
        five.copy_sub_vector_to(five, 1, 0, 4)
        np.testing.assert_array_equal(five.to_array(), [2.0, 3.0, 4.0, 5.0, 5.0])

    def test_copy_sub_vector_to_other(self, five, vector_cls):
        target = vector_cls.zeros(3)
        five.copy_sub_vector_to(target, 3, 1, 2)
        np.testing.assert_array_equal(target.to_array(), [0.0, 4.0, 5.0])

    def test_select_elements(self, five):
        picked = five.select_elements([4, 0, 0])
        np.testing.assert_array_equal(picked.to_array(), [5.0, 1.0, 1.0])

    def test_select_elements_generator(self, five):
        picked = five.select_elements(i for i in (2, 3))
        np.testing.assert_array_equal(picked.to_array(), [3.0, 4.0])

    def test_select_elements_empty(self, five):
        with pytest.raises(OutOfRangeError):
            five.select_elements([])

    def test_select_elements_out_of_range(self, five):
        with pytest.raises(OutOfRangeError):
            five.select_elements([0, 5])

    def test_select_elements_none(self, five):
        with pytest.raises(NullArgumentError):
            five.select_elements(None)


class TestMatrixViews:

    def test_column_matrix(self, five):
        m = five.to_column_matrix()
        assert m.shape == (5, 1)
        np.testing.assert_array_equal(m.to_array()[:, 0], five.to_array())

    def test_row_matrix(self, five):
        m = five.to_row_matrix()
        assert m.shape == (1, 5)
        np.testing.assert_array_equal(m.to_array()[0], five.to_array())

    def test_matching_family(self):
        assert isinstance(DenseVector.ones(2).to_row_matrix(), DenseMatrix)
        assert isinstance(SparseVector.of_array([1.0]).to_column_matrix(), SparseMatrix)


# ═══════════════════════════════════════════════════════════════════════
# Mapping, equality, display
# ═══════════════════════════════════════════════════════════════════════


class TestMapping:

    def test_map_inplace(self, five):
        five.map_inplace(lambda x: x * x)
        np.testing.assert_array_equal(five.to_array(), [1.0, 4.0, 9.0, 16.0, 25.0])

    def test_map_indexed_inplace(self, five):
        five.map_indexed_inplace(lambda i, x: x + i)
        np.testing.assert_array_equal(five.to_array(), [1.0, 3.0, 5.0, 7.0, 9.0])

    def test_map_none(self, five):
        with pytest.raises(NullArgumentError):
            five.map_inplace(None)


class TestEquality:

    def test_equal_across_families(self):
        assert DenseVector.of_array([1.0, 0.0]) == SparseVector.of_array([1.0, 0.0])

    def test_length_differs(self, vector_cls):
        assert vector_cls.zeros(2) != vector_cls.zeros(3)

    def test_not_equal_to_list(self, five):
        assert five != [1.0, 2.0, 3.0, 4.0, 5.0]

    def test_unhashable(self, five):
        with pytest.raises(TypeError):
            hash(five)

    def test_almost_equal(self, vector_cls):
        a = vector_cls.of_array([1.0, 2.0])
        b = vector_cls.of_array([1.0 + 1e-15, 2.0])
        assert a.almost_equal(b)
        assert not a.almost_equal(vector_cls.of_array([1.1, 2.0]))

    def test_almost_equal_length_differs(self, vector_cls):
        assert not vector_cls.zeros(2).almost_equal(vector_cls.zeros(3))

    def test_repr(self):
        assert repr(DenseVector.of_array([1.0, 2.5])) == "DenseVector([1, 2.5])"
