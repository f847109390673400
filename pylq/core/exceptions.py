"""
Exception hierarchy for PyLQ.

All exceptions inherit from PyLQError to allow catching any library-specific
error. Shape, bounds and conversion errors also inherit from the matching
builtin (IndexError, TypeError) so that generic handlers keep working.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""

from typing import Any


class PyLQError(Exception):
    """Base exception for all PyLQ errors."""
    pass


class ValidationError(PyLQError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Operand dimensions do not match any accepted pattern.

    Raised when a multiplication or solve receives an operand whose relevant
    dimension matches neither the square nor the truncated form of the
    orthogonal factor, or when a solve is requested for an unsupported
    (over- or underdetermined) shape.

    Attributes:
        actual: The offending size or shape
        expected: The accepted size(s) or shape
    """

    def __init__(
        self,
        message: str,
        actual: Any = None,
        expected: Any = None,
    ):
        super().__init__(message)
        self.actual = actual
        self.expected = expected


class BoundsError(ValidationError, IndexError):
    """
    Dimension or element index out of range.

    Attributes:
        index: The requested index
        bounds: Valid range or shape, if meaningful
    """

    def __init__(
        self,
        message: str,
        index: Any = None,
        bounds: Any = None,
    ):
        super().__init__(message)
        self.index = index
        self.bounds = bounds


class TypeConversionError(ValidationError, TypeError):
    """
    Element-type conversion cannot represent a value.

    Raised when converting a factorization or operator to another dtype
    would lose information (complex to real with a non-zero imaginary part,
    overflow to infinity) or when the target is not a LAPACK dtype.

    Attributes:
        source_dtype: dtype being converted from
        target_dtype: dtype being converted to
    """

    def __init__(
        self,
        message: str,
        source_dtype: Any = None,
        target_dtype: Any = None,
    ):
        super().__init__(message)
        self.source_dtype = source_dtype
        self.target_dtype = target_dtype


class NumericalError(PyLQError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Triangular factor is singular.

    Raised when a solve hits an exact zero on the diagonal of L.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        rank: Position of the first zero pivot, if known
        expected_rank: Expected rank (the order of the triangular system)
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.rank = rank
        self.expected_rank = expected_rank


class LapackError(NumericalError):
    """
    A LAPACK routine reported an illegal argument.

    Attributes:
        routine: Name of the LAPACK routine
        info: The (negative) info code returned by the routine
    """

    def __init__(self, message: str, routine: str, info: int):
        super().__init__(message)
        self.routine = routine
        self.info = info
