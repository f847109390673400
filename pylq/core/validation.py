"""
Input validation utilities for PyLQ.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray
from typing import Any

from pylq.core.exceptions import ValidationError, DimensionError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[Any]:
    """
    Validate and convert input to numpy array.

    Accepts any array-like and converts to numpy array. Rejects inputs
    that result in object dtype (indicating mixed types or non-numeric data).
    Real and complex dtypes are kept as they are; dtype mapping onto LAPACK
    types happens later, in precision.lq_dtype().

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with numeric dtype

    Raises:
        ValidationError: If input cannot be converted to numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )

    # Reject non-numeric dtypes (strings, bytes, datetime, etc.)
    if not (np.issubdtype(result.dtype, np.number) or result.dtype == np.bool_):
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    return result


def check_finite(array: NDArray[Any], name: str) -> None:
    """
    Verify array contains no NaN or Inf values.

    Args:
        array: Array to check
        name: Parameter name for error messages

    Raises:
        ValidationError: If array contains non-finite values
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_ndim(array: NDArray[Any], ndim: int, name: str) -> None:
    """
    Verify array has exactly the specified number of dimensions.

    Args:
        array: Array to check
        ndim: Required number of dimensions
        name: Parameter name for error messages

    Raises:
        DimensionError: If array has wrong number of dimensions
    """
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}",
            actual=array.ndim,
            expected=ndim,
        )


def check_1d(array: NDArray[Any], name: str) -> None:
    """Verify array is 1-dimensional."""
    check_ndim(array, 1, name)


def check_2d(array: NDArray[Any], name: str) -> None:
    """Verify array is 2-dimensional."""
    check_ndim(array, 2, name)


def check_vector_or_matrix(array: NDArray[Any], name: str) -> None:
    """
    Verify array is a vector (1D) or a matrix (2D).

    Raises:
        DimensionError: For scalars and arrays with more than 2 dimensions
    """
    if array.ndim not in (1, 2):
        raise DimensionError(
            f"{name}: expected vector or matrix, got {array.ndim}D with shape {array.shape}",
            actual=array.ndim,
            expected=(1, 2),
        )


def check_dtype(array: NDArray[Any], dtype: DTypeLike, name: str) -> None:
    """
    Verify a caller-supplied buffer has exactly the given dtype.

    In-place operations never convert their buffer, so a mismatch is an
    error rather than a promotion.

    Raises:
        ValidationError: If the dtypes differ
    """
    expected = np.dtype(dtype)
    if array.dtype != expected:
        raise ValidationError(
            f"{name}: in-place operation requires dtype {expected}, got {array.dtype}"
        )


def check_writeable(array: NDArray[Any], name: str) -> None:
    """
    Verify a caller-supplied buffer can be written in place.

    Raises:
        ValidationError: If the array is read-only
    """
    if not array.flags.writeable:
        raise ValidationError(f"{name}: in-place operation requires a writeable array")
