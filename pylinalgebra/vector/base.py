"""
Generic vector core.

Vector holds the storage-independent algebra: argument validation,
short-circuits for the additive and multiplicative identities, result
allocation, masking and structural operations. The element-wise kernels
are abstract _do_* hooks implemented once per storage family; a hook
trusts its caller and never re-validates.

Every arithmetic operation has two forms. Without a result argument a
new vector of the same family is returned. With one, the values are
written into result (which may be self) and result is returned.
"""

from __future__ import annotations

import numbers
import warnings
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any, Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylinalgebra.core.capabilities import CAPABILITY_SPARSE_ENUMERATION
from pylinalgebra.core.compute.precision import almost_equal
from pylinalgebra.core.numeric import NumericTraits
from pylinalgebra.core.protocols import ElementFunction, Predicate, SupportsCapabilities
from pylinalgebra.core.validation import (
    check_callable,
    check_castable,
    check_indices,
    check_not_none,
    check_p_norm,
    check_range,
    check_same_length,
    check_size,
)
from pylinalgebra.storage._base import StorageKind, VectorStorage
from pylinalgebra.vector._one_based import OneBasedVectorMixin

if TYPE_CHECKING:
    from pylinalgebra.matrix.base import Matrix


def is_scalar(value: Any) -> bool:
    """True for Python and numpy numbers (operands of scalar arithmetic)."""
    return isinstance(value, (numbers.Number, np.number))


def selected_positions(mask_values: NDArray[Any], traits: NumericTraits) -> NDArray[np.bool_]:
    """
    Boolean selection of a mask: exactly one is selected, anything else is not.

    Emits a UserWarning when the mask holds values other than zero and one.
    """
    selected = mask_values == traits.one
    stray = ~(selected | (mask_values == traits.zero))
    if np.any(stray):
        warnings.warn(
            f"mask contains {int(np.count_nonzero(stray))} entries that are "
            f"neither zero nor one; they are treated as not selected",
            UserWarning,
            stacklevel=3,
        )
    return selected


def skips_zeros(storage: SupportsCapabilities, predicate: Predicate, traits: NumericTraits) -> bool:
    """
    True when a predicate scan may visit only the stored non-zeros.

    That holds when the storage enumerates its non-zeros directly and the
    predicate rejects zero, so no implicit zero can match.
    """
    return storage.supports(CAPABILITY_SPARSE_ENUMERATION) and not predicate(traits.zero)


class Vector(OneBasedVectorMixin, ABC):
    """
    Fixed-length vector over one of the supported element types.

    A vector exclusively owns its storage; the storage is created with the
    vector and never replaced, so count always equals storage.length.

    Args:
        storage: The element container

    Raises:
        NullArgumentError: If storage is None
    """

    def __init__(self, storage: VectorStorage):
        check_not_none(storage, "storage")
        self._storage = storage
        self._traits = storage.traits

    # ==================================================================
    # Shape, type and factories
    # ==================================================================

    @property
    def storage(self) -> VectorStorage:
        return self._storage

    @property
    def count(self) -> int:
        return self._storage.length

    @property
    def traits(self) -> NumericTraits:
        return self._traits

    @property
    def dtype(self) -> np.dtype:
        return self._traits.dtype

    def __len__(self) -> int:
        return self._storage.length

    @abstractmethod
    def create_vector(self, size: int, fully_mutable: bool = False) -> Vector:
        """New zero vector of this family and element type."""
        ...

    @abstractmethod
    def create_matrix(self, rows: int, columns: int, fully_mutable: bool = False) -> Matrix:
        """New zero matrix of the matching family and element type."""
        ...

    def _values(self) -> NDArray[Any]:
        """Elements as a dense array; the live array for dense storage."""
        if self._storage.kind is StorageKind.DENSE:
            return self._storage.data
        return self._storage.to_array()

    @staticmethod
    def _write(result: Vector, values: NDArray[Any]) -> None:
        if result._storage.kind is StorageKind.DENSE:
            np.copyto(result._storage.data, values, casting='unsafe')
        else:
            result._storage.write_block(0, np.asarray(values, dtype=result.dtype))

    def _prepare_result(self, result: Vector | None) -> Vector:
        if result is None:
            return self.create_vector(self.count)
        check_same_length(result.count, self.count, "result")
        check_castable(self.dtype, result.dtype, "result")
        return result

    def _check_operand(self, other: Vector, name: str) -> None:
        """Same length, and an element type that fits this vector's."""
        check_not_none(other, name)
        check_same_length(other.count, self.count, name)
        check_castable(other.dtype, self.dtype, name)

    # ==================================================================
    # Element access
    # ==================================================================

    def at(self, index: int) -> Any:
        """Element at index (0-based)."""
        return self._storage.get(index)

    def set_at(self, index: int, value: Any) -> None:
        self._storage.set(index, value)

    def __getitem__(self, index: int) -> Any:
        return self._storage.get(index)

    def __setitem__(self, index: int, value: Any) -> None:
        self._storage.set(index, value)

    def __iter__(self) -> Iterator[Any]:
        return self._storage.enumerate()

    def enumerate_indexed(self) -> Iterator[tuple[int, Any]]:
        """Yield (index, value) for every element."""
        return self._storage.enumerate_indexed()

    def enumerate_nonzero(self) -> Iterator[tuple[int, Any]]:
        """Yield (index, value) for every non-zero element."""
        return self._storage.enumerate_nonzero()

    def indices(self) -> Iterator[int]:
        return iter(range(self.count))

    # ==================================================================
    # Structure
    # ==================================================================

    def clear(self) -> None:
        self._storage.clear()

    def clear_sub_vector(self, index: int, count: int) -> None:
        self._storage.clear_range(index, count)

    def clone(self) -> Vector:
        """Independent copy of the same family."""
        result = self.create_vector(self.count)
        self._storage.copy_to(result._storage, skip_clearing=True)
        return result

    def copy_to(self, target: Vector) -> None:
        """
        Copy every element into target.

        Raises:
            NullArgumentError: If target is None
            DimensionError: If target has a different count
        """
        check_not_none(target, "target")
        self._storage.copy_to(target._storage)

    def set_values(self, values: ArrayLike) -> None:
        self._storage.set_values(values)

    def to_array(self) -> NDArray[Any]:
        return self._storage.to_array()

    def sub_vector(self, index: int, count: int) -> Vector:
        """
        New vector holding elements [index, index + count).

        Raises:
            OutOfRangeError: If index < 0, count < 1 or index + count > self.count
        """
        check_range(index, count, self.count, "index")
        result = self.create_vector(count)
        self._storage.copy_sub_vector_to(result._storage, index, 0, count, skip_clearing=True)
        return result

    def set_sub_vector(
        self,
        index: int,
        sub_vector: Vector | ArrayLike,
        count: int | None = None
    ) -> None:
        """
        Overwrite elements starting at index with the leading elements of sub_vector.

        Args:
            index: First position to overwrite
            sub_vector: Source vector or 1D array-like
            count: Number of elements to copy, defaults to len(sub_vector)

        Raises:
            NullArgumentError: If sub_vector is None
            OutOfRangeError: If the region exceeds either vector
            NotSupportedError: If sub_vector is complex and this vector is real
        """
        check_not_none(sub_vector, "sub_vector")
        source = sub_vector.to_array() if isinstance(sub_vector, Vector) else np.asarray(
            sub_vector).reshape(-1)
        check_castable(source.dtype, self.dtype, "sub_vector")
        count = len(source) if count is None else count
        check_range(index, count, self.count, "index")
        check_range(0, count, len(source), "sub_vector")
        self._storage.write_block(index, np.asarray(source[:count], dtype=self.dtype))

    def copy_sub_vector_to(
        self,
        destination: Vector,
        source_index: int,
        target_index: int,
        count: int
    ) -> None:
        """
        Copy count elements from source_index into destination at target_index.

        destination may be this vector; overlapping regions copy as if the
        source region were read out first.

        Raises:
            NullArgumentError: If destination is None
            OutOfRangeError: If either region is out of range
        """
        check_not_none(destination, "destination")
        self._storage.copy_sub_vector_to(destination._storage, source_index, target_index, count)

    def to_column_matrix(self) -> Matrix:
        """count x 1 matrix of the matching family."""
        result = self.create_matrix(self.count, 1)
        self._storage.copy_to_column(result.storage, 0)
        return result

    def to_row_matrix(self) -> Matrix:
        """1 x count matrix of the matching family."""
        result = self.create_matrix(1, self.count)
        self._storage.copy_to_row(result.storage, 0)
        return result

    def select_elements(self, keep: Iterable[int]) -> Vector:
        """
        New vector of the requested elements in the requested order.

        Indices may repeat.

        Raises:
            NullArgumentError: If keep is None
            OutOfRangeError: If keep is empty or holds an index outside [0, count)
        """
        idx = check_indices(keep, self.count, "keep")
        check_size(len(idx), "keep")
        result = self.create_vector(len(idx))
        result._storage.write_block(0, self._values()[idx])
        return result

    def map_inplace(self, func: ElementFunction, force_map_zeros: bool = False) -> None:
        self._storage.map_inplace(func, force_map_zeros)

    def map_indexed_inplace(
        self,
        func: Callable[[int, Any], Any],
        force_map_zeros: bool = False
    ) -> None:
        self._storage.map_indexed_inplace(func, force_map_zeros)

    # ==================================================================
    # Arithmetic
    # ==================================================================

    def add(self, other: Vector | Any, result: Vector | None = None) -> Vector:
        """Add a scalar to every element, or add another vector element-wise."""
        check_not_none(other, "other")
        if isinstance(other, Vector):
            self._check_operand(other, "other")
            target = self._prepare_result(result)
            self._do_add(other, target)
            return target
        scalar = self._traits.coerce(other)
        target = self._prepare_result(result)
        if self._traits.is_zero(scalar):
            self._storage.copy_to(target._storage)
        else:
            self._do_add_scalar(scalar, target)
        return target

    def subtract(self, other: Vector | Any, result: Vector | None = None) -> Vector:
        """Subtract a scalar from every element, or another vector element-wise."""
        check_not_none(other, "other")
        if isinstance(other, Vector):
            self._check_operand(other, "other")
            target = self._prepare_result(result)
            self._do_subtract(other, target)
            return target
        scalar = self._traits.coerce(other)
        target = self._prepare_result(result)
        if self._traits.is_zero(scalar):
            self._storage.copy_to(target._storage)
        else:
            self._do_subtract_scalar(scalar, target)
        return target

    def subtract_from(self, scalar: Any, result: Vector | None = None) -> Vector:
        """scalar - self, element-wise."""
        check_not_none(scalar, "scalar")
        value = self._traits.coerce(scalar)
        target = self._prepare_result(result)
        self._do_subtract_from(value, target)
        return target

    def negate(self, result: Vector | None = None) -> Vector:
        target = self._prepare_result(result)
        self._do_negate(target)
        return target

    def conjugate(self, result: Vector | None = None) -> Vector:
        """Complex conjugate; a plain copy for real element types."""
        target = self._prepare_result(result)
        if self._traits.is_complex:
            self._do_conjugate(target)
        else:
            self._storage.copy_to(target._storage)
        return target

    def multiply(self, scalar: Any, result: Vector | None = None) -> Vector:
        """Multiply every element by a scalar."""
        check_not_none(scalar, "scalar")
        value = self._traits.coerce(scalar)
        target = self._prepare_result(result)
        if self._traits.is_one(value):
            self._storage.copy_to(target._storage)
        elif self._traits.is_zero(value):
            target.clear()
        else:
            self._do_multiply(value, target)
        return target

    def divide(self, scalar: Any, result: Vector | None = None) -> Vector:
        """Divide every element by a scalar."""
        check_not_none(scalar, "scalar")
        value = self._traits.coerce(scalar)
        target = self._prepare_result(result)
        if self._traits.is_one(value):
            self._storage.copy_to(target._storage)
        else:
            self._do_divide(value, target)
        return target

    def divide_by_this(self, scalar: Any, result: Vector | None = None) -> Vector:
        """scalar / self, element-wise."""
        check_not_none(scalar, "scalar")
        value = self._traits.coerce(scalar)
        target = self._prepare_result(result)
        self._do_divide_by_this(value, target)
        return target

    def modulus(self, divisor: Any, result: Vector | None = None) -> Vector:
        """
        Remainder of every element divided by divisor, with the sign of the element.

        Raises:
            NotSupportedError: For complex element types
        """
        check_not_none(divisor, "divisor")
        self._traits.require_modulus("modulus")
        value = self._traits.coerce(divisor)
        target = self._prepare_result(result)
        self._do_modulus(value, target)
        return target

    def modulus_by_this(self, dividend: Any, result: Vector | None = None) -> Vector:
        """
        Remainder of dividend divided by every element.

        Raises:
            NotSupportedError: For complex element types
        """
        check_not_none(dividend, "dividend")
        self._traits.require_modulus("modulus_by_this")
        value = self._traits.coerce(dividend)
        target = self._prepare_result(result)
        self._do_modulus_by_this(value, target)
        return target

    def pointwise_multiply(self, other: Vector, result: Vector | None = None) -> Vector:
        self._check_operand(other, "other")
        target = self._prepare_result(result)
        self._do_pointwise_multiply(other, target)
        return target

    def pointwise_divide(self, divisor: Vector, result: Vector | None = None) -> Vector:
        self._check_operand(divisor, "divisor")
        target = self._prepare_result(result)
        self._do_pointwise_divide(divisor, target)
        return target

    def pointwise_modulus(self, divisor: Vector, result: Vector | None = None) -> Vector:
        self._check_operand(divisor, "divisor")
        self._traits.require_modulus("pointwise_modulus")
        target = self._prepare_result(result)
        self._do_pointwise_modulus(divisor, target)
        return target

    def dot_product(self, other: Vector) -> Any:
        """Sum of element-wise products (no conjugation)."""
        self._check_operand(other, "other")
        return self._do_dot_product(other)

    def conjugate_dot_product(self, other: Vector) -> Any:
        """Sum of conj(self[i]) * other[i]."""
        self._check_operand(other, "other")
        if not self._traits.is_complex:
            return self._do_dot_product(other)
        return self.conjugate()._do_dot_product(other)

    def outer_product(self, other: Vector) -> Matrix:
        return Vector.outer(self, other)

    @staticmethod
    def outer(u: Vector, v: Vector) -> Matrix:
        """
        Matrix M with M[i, j] = u[i] * v[j].

        The result belongs to u's family.
        """
        check_not_none(u, "u")
        check_not_none(v, "v")
        check_castable(v.dtype, u.dtype, "v")
        result = u.create_matrix(u.count, v.count)
        result.storage.write_block(
            0, 0, np.outer(u._values(), v._values()).astype(result.dtype)
        )
        return result

    # ------------------------------------------------------------------
    # Per-storage hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _do_add_scalar(self, scalar: Any, result: Vector) -> None:
        ...

    @abstractmethod
    def _do_add(self, other: Vector, result: Vector) -> None:
        ...

    @abstractmethod
    def _do_subtract_scalar(self, scalar: Any, result: Vector) -> None:
        ...

    @abstractmethod
    def _do_subtract(self, other: Vector, result: Vector) -> None:
        ...

    def _do_subtract_from(self, scalar: Any, result: Vector) -> None:
        self._do_negate(result)
        result._do_add_scalar(scalar, result)

    @abstractmethod
    def _do_negate(self, result: Vector) -> None:
        ...

    @abstractmethod
    def _do_conjugate(self, result: Vector) -> None:
        ...

    @abstractmethod
    def _do_multiply(self, scalar: Any, result: Vector) -> None:
        ...

    @abstractmethod
    def _do_divide(self, scalar: Any, result: Vector) -> None:
        ...

    @abstractmethod
    def _do_divide_by_this(self, scalar: Any, result: Vector) -> None:
        ...

    @abstractmethod
    def _do_modulus(self, divisor: Any, result: Vector) -> None:
        ...

    @abstractmethod
    def _do_modulus_by_this(self, dividend: Any, result: Vector) -> None:
        ...

    @abstractmethod
    def _do_pointwise_multiply(self, other: Vector, result: Vector) -> None:
        ...

    @abstractmethod
    def _do_pointwise_divide(self, divisor: Vector, result: Vector) -> None:
        ...

    @abstractmethod
    def _do_pointwise_modulus(self, divisor: Vector, result: Vector) -> None:
        ...

    @abstractmethod
    def _do_dot_product(self, other: Vector) -> Any:
        ...

    # ==================================================================
    # Norms and reductions
    # ==================================================================

    @abstractmethod
    def norm(self, p: float) -> float:
        """
        p-norm (sum |x|^p)^(1/p); p = inf gives the largest magnitude.

        Raises:
            OutOfRangeError: If p <= 0
        """
        ...

    def normalize(self, p: float) -> Vector:
        """
        New vector scaled to unit p-norm.

        Raises:
            OutOfRangeError: If p <= 0
        """
        check_p_norm(p)
        return self.divide(self.norm(p))

    @abstractmethod
    def absolute_minimum(self) -> float:
        ...

    @abstractmethod
    def absolute_minimum_index(self) -> int:
        ...

    @abstractmethod
    def absolute_maximum(self) -> float:
        ...

    @abstractmethod
    def absolute_maximum_index(self) -> int:
        ...

    @abstractmethod
    def maximum_index(self) -> int:
        """
        Index of the largest element (first one on ties).

        Raises:
            NotSupportedError: For complex element types
        """
        ...

    @abstractmethod
    def minimum_index(self) -> int:
        """
        Index of the smallest element (first one on ties).

        Raises:
            NotSupportedError: For complex element types
        """
        ...

    def maximum(self) -> Any:
        return self._storage._get(self.maximum_index())

    def minimum(self) -> Any:
        return self._storage._get(self.minimum_index())

    @abstractmethod
    def sum(self) -> Any:
        ...

    @abstractmethod
    def sum_magnitudes(self) -> float:
        ...

    # ==================================================================
    # Predicates and masks
    # ==================================================================

    def find_mask(self, predicate: Predicate) -> Vector:
        """
        Same-family vector holding one where predicate holds, zero elsewhere.

        Raises:
            NullArgumentError: If predicate is None
        """
        check_callable(predicate, "predicate")
        hits = np.array([bool(predicate(v)) for v in self._values()], dtype=bool)
        mask = self.create_vector(self.count)
        mask._storage.write_block(0, hits.astype(self.dtype))
        return mask

    def find_indices(self, predicate: Predicate) -> Iterator[int]:
        """
        Lazily yield, in ascending order, the indices where predicate holds.

        Raises:
            NullArgumentError: If predicate is None (raised immediately)
        """
        check_callable(predicate, "predicate")
        return self._iter_matching(predicate)

    def _iter_matching(self, predicate: Predicate) -> Iterator[int]:
        if skips_zeros(self._storage, predicate, self._traits):
            for i, value in self._storage.enumerate_nonzero():
                if predicate(value):
                    yield i
            return
        for i in range(self.count):
            if predicate(self._storage._get(i)):
                yield i

    def set_on_indices(self, indices: Iterable[int], value: Any) -> None:
        """
        Set every listed element to value.

        All indices are validated before anything is written.

        Raises:
            NullArgumentError: If indices is None
            OutOfRangeError: If any index is outside [0, count)
        """
        idx = check_indices(indices, self.count, "indices")
        scalar = self._traits.coerce(value)
        for i in idx:
            self._storage._set(i, scalar)

    def apply_on_indices(self, indices: Iterable[int], func: ElementFunction) -> None:
        """
        Replace every listed element x with func(x).

        All indices are validated and all new values computed from the
        current contents before anything is written.

        Raises:
            NullArgumentError: If indices or func is None
            OutOfRangeError: If any index is outside [0, count)
        """
        check_callable(func, "func")
        idx = check_indices(indices, self.count, "indices")
        updates = [(i, self._traits.coerce(func(self._storage._get(i)))) for i in idx]
        for i, v in updates:
            self._storage._set(i, v)

    def on_mask_set(self, mask: Vector, value: Any) -> None:
        """
        Set value wherever mask holds exactly one.

        Raises:
            NullArgumentError: If mask is None
            DimensionError: If mask has a different count
        """
        check_not_none(mask, "mask")
        check_same_length(mask.count, self.count, "mask")
        selected = np.flatnonzero(selected_positions(mask._values(), mask.traits))
        self.set_on_indices(selected, value)

    def on_mask_apply(self, mask: Vector, func: ElementFunction) -> None:
        """
        Apply func wherever mask holds exactly one.

        Raises:
            NullArgumentError: If mask or func is None
            DimensionError: If mask has a different count
        """
        check_not_none(mask, "mask")
        check_callable(func, "func")
        check_same_length(mask.count, self.count, "mask")
        selected = np.flatnonzero(selected_positions(mask._values(), mask.traits))
        self.apply_on_indices(selected, func)

    def apply_all(self, func: ElementFunction) -> None:
        """Apply func to every element, zeros included."""
        check_callable(func, "func")
        self._storage.map_inplace(func, force_map_zeros=True)

    # ==================================================================
    # Comparison and display
    # ==================================================================

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return self.count == other.count and bool(
            np.array_equal(self._values(), other._values())
        )

    __hash__ = None

    # Keep numpy scalars on the left from treating vectors as arrays
    __array_ufunc__ = None

    def almost_equal(
        self,
        other: Vector,
        rtol: float | None = None,
        atol: float | None = None
    ) -> bool:
        """True if other has the same count and agrees within tolerance."""
        check_not_none(other, "other")
        return almost_equal(self._values(), other._values(), rtol=rtol, atol=atol)

    def __repr__(self) -> str:
        values = ", ".join(self._traits.format(v) for v in self._values())
        return f"{self.__class__.__name__}([{values}])"

    # ==================================================================
    # Operators
    # ==================================================================

    def __add__(self, other: Any) -> Vector:
        if isinstance(other, Vector) or is_scalar(other):
            return self.add(other)
        return NotImplemented

    def __radd__(self, other: Any) -> Vector:
        if is_scalar(other):
            return self.add(other)
        return NotImplemented

    def __sub__(self, other: Any) -> Vector:
        if isinstance(other, Vector) or is_scalar(other):
            return self.subtract(other)
        return NotImplemented

    def __rsub__(self, other: Any) -> Vector:
        if is_scalar(other):
            return self.subtract_from(other)
        return NotImplemented

    def __mul__(self, other: Any) -> Any:
        if isinstance(other, Vector):
            return self.dot_product(other)
        if is_scalar(other):
            return self.multiply(other)
        return NotImplemented

    def __rmul__(self, other: Any) -> Vector:
        if is_scalar(other):
            return self.multiply(other)
        return NotImplemented

    def __matmul__(self, other: Any) -> Any:
        if isinstance(other, Vector):
            return self.dot_product(other)
        return NotImplemented

    def __truediv__(self, other: Any) -> Vector:
        if is_scalar(other):
            return self.divide(other)
        return NotImplemented

    def __rtruediv__(self, other: Any) -> Vector:
        if is_scalar(other):
            return self.divide_by_this(other)
        return NotImplemented

    def __mod__(self, other: Any) -> Vector:
        if is_scalar(other):
            return self.modulus(other)
        return NotImplemented

    def __rmod__(self, other: Any) -> Vector:
        if is_scalar(other):
            return self.modulus_by_this(other)
        return NotImplemented

    def __neg__(self) -> Vector:
        return self.negate()

    def __pos__(self) -> Vector:
        return self.clone()
