"""
Tests for input validation utilities.

Validates every function in core/validation.py:
    - check_array: conversion, object and non-numeric rejection
    - check_finite: NaN/Inf detection
    - check_ndim / check_1d / check_2d / check_vector_or_matrix
    - check_dtype / check_writeable: in-place buffer requirements
"""

import numpy as np
import pytest

from pylq.core.exceptions import DimensionError, ValidationError
from pylq.core.validation import (
    check_1d,
    check_2d,
    check_array,
    check_dtype,
    check_finite,
    check_ndim,
    check_vector_or_matrix,
    check_writeable,
)


# ═══════════════════════════════════════════════════════════════════════
# check_array
# ═══════════════════════════════════════════════════════════════════════


class TestCheckArray:
    """check_array converts to ndarray and rejects non-numeric data."""

    def test_nested_list_to_2d(self):
        result = check_array([[1.0, 2.0], [3.0, 4.0]], "A")
        assert isinstance(result, np.ndarray)
        assert result.shape == (2, 2)

    def test_complex_preserved(self):
        arr = np.array([1 + 2j, 3 - 1j], dtype=np.complex64)
        result = check_array(arr, "B")
        assert result.dtype == np.complex64

    def test_float32_preserved(self):
        arr = np.array([1.0, 2.0], dtype=np.float32)
        assert check_array(arr, "B").dtype == np.float32

    def test_integers_kept_for_later_mapping(self):
        result = check_array([1, 2, 3], "B")
        assert np.issubdtype(result.dtype, np.integer)

    def test_object_dtype_rejected(self):
        with pytest.raises(ValidationError, match="object dtype"):
            check_array(np.array([1, "a", None], dtype=object), "A")

    def test_string_dtype_rejected(self):
        with pytest.raises(ValidationError, match="non-numeric"):
            check_array(np.array(["a", "b"]), "A")

    def test_ragged_rejected(self):
        with pytest.raises(ValidationError, match="A"):
            check_array([[1.0, 2.0], [3.0]], "A")


# ═══════════════════════════════════════════════════════════════════════
# check_finite
# ═══════════════════════════════════════════════════════════════════════


class TestCheckFinite:

    def test_finite_passes(self):
        check_finite(np.array([1.0, -2.0, 3.5]), "A")

    def test_nan_counted(self):
        with pytest.raises(ValidationError, match="1 NaN, 0 Inf"):
            check_finite(np.array([1.0, np.nan]), "A")

    def test_complex_inf_detected(self):
        with pytest.raises(ValidationError, match="non-finite"):
            check_finite(np.array([1 + 1j, complex(np.inf, 0)]), "A")


# ═══════════════════════════════════════════════════════════════════════
# Dimensionality
# ═══════════════════════════════════════════════════════════════════════


class TestDimensionality:

    def test_check_ndim_reports_shape(self):
        with pytest.raises(DimensionError, match=r"expected 2D array, got 3D"):
            check_ndim(np.zeros((2, 2, 2)), 2, "A")

    def test_check_1d(self):
        check_1d(np.zeros(3), "tau")
        with pytest.raises(DimensionError):
            check_1d(np.zeros((3, 1)), "tau")

    def test_check_2d(self):
        check_2d(np.zeros((3, 1)), "factors")
        with pytest.raises(DimensionError):
            check_2d(np.zeros(3), "factors")

    def test_vector_and_matrix_accepted(self):
        check_vector_or_matrix(np.zeros(3), "B")
        check_vector_or_matrix(np.zeros((3, 2)), "B")

    def test_scalar_rejected(self):
        with pytest.raises(DimensionError, match="vector or matrix"):
            check_vector_or_matrix(np.float64(1.0), "B")

    def test_3d_rejected(self):
        with pytest.raises(DimensionError) as exc_info:
            check_vector_or_matrix(np.zeros((2, 2, 2)), "B")
        assert exc_info.value.actual == 3


# ═══════════════════════════════════════════════════════════════════════
# In-place buffer requirements
# ═══════════════════════════════════════════════════════════════════════


class TestBufferChecks:

    def test_matching_dtype_passes(self):
        check_dtype(np.zeros(3, dtype=np.complex64), np.complex64, "B")

    def test_dtype_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="requires dtype float64, got float32"):
            check_dtype(np.zeros(3, dtype=np.float32), np.float64, "B")

    def test_read_only_rejected(self):
        arr = np.zeros(3)
        arr.flags.writeable = False
        with pytest.raises(ValidationError, match="writeable"):
            check_writeable(arr, "B")
