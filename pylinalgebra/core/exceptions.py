"""
Exception hierarchy for pylinalgebra.

All exceptions inherit from LinAlgebraError to allow catching any
library-specific error. Argument problems inherit from ValidationError;
operations a storage family structurally refuses raise InvalidOperationError;
operations an element type cannot provide raise NotSupportedError.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class LinAlgebraError(Exception):
    """Base exception for all pylinalgebra errors."""
    pass


class ValidationError(LinAlgebraError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks. Always raised
    before any state is mutated.
    """
    pass


class NullArgumentError(ValidationError, TypeError):
    """
    A required argument was None.

    Attributes:
        name: Name of the missing parameter
    """

    def __init__(self, message: str, name: str | None = None):
        super().__init__(message)
        self.name = name


class InvalidArgumentError(ValidationError, ValueError):
    """
    An argument has the right shape but an unacceptable value.

    Raised, for example, when a permutation index list is not a bijection
    or when a removal would leave an empty matrix.
    """
    pass


class DimensionError(ValidationError):
    """
    Operand dimensions are incorrect or inconsistent.

    Raised when vector lengths or matrix shapes don't match what an
    operation requires.

    Attributes:
        expected: The expected length or shape, if known
        actual: The length or shape that was supplied, if known
    """

    def __init__(
        self,
        message: str,
        expected: int | tuple[int, ...] | None = None,
        actual: int | tuple[int, ...] | None = None
    ):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class OutOfRangeError(ValidationError, IndexError):
    """
    An index or count lies outside its valid range.

    Attributes:
        name: Name of the offending parameter
        value: The rejected value
    """

    def __init__(
        self,
        message: str,
        name: str | None = None,
        value: int | float | None = None
    ):
        super().__init__(message)
        self.name = name
        self.value = value


class InvalidOperationError(LinAlgebraError):
    """
    The storage family structurally refuses the operation.

    Raised when, for example, a diagonal matrix is asked to permute its
    rows or to hold a non-zero value off its diagonal.

    Attributes:
        operation: The refused operation
        storage_kind: Name of the storage family that refused it
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        storage_kind: str | None = None
    ):
        super().__init__(message)
        self.operation = operation
        self.storage_kind = storage_kind


class NotSupportedError(LinAlgebraError):
    """
    The element type cannot provide the requested operation.

    Raised for operations that need a total order (maximum, minimum) or a
    remainder (modulus) on complex element types, and for element types
    outside the supported set.

    Attributes:
        operation: The unsupported operation
        dtype: Name of the element type
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        dtype: str | None = None
    ):
        super().__init__(message)
        self.operation = operation
        self.dtype = dtype
