"""
Core infrastructure for PyLQ.

This module provides shared abstractions and utilities used by the
factorization package.

Key components:
    protocols: OrthogonalOperator, HouseholderBackend protocols
    capabilities: Operator capability strings
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Dtype promotion, tolerances, device selection, Householder kernels
"""

from pylq.core.protocols import OrthogonalOperator, HouseholderBackend
from pylq.core.exceptions import (
    PyLQError,
    ValidationError,
    DimensionError,
    BoundsError,
    TypeConversionError,
    NumericalError,
    SingularMatrixError,
    LapackError,
)

__all__ = [
    # Protocols
    "OrthogonalOperator",
    "HouseholderBackend",
    # Exceptions
    "PyLQError",
    "ValidationError",
    "DimensionError",
    "BoundsError",
    "TypeConversionError",
    "NumericalError",
    "SingularMatrixError",
    "LapackError",
]
