"""
Tests for dtype mapping, the promotion table and checked conversion.
"""

import numpy as np
import pytest

from pylq.core.compute.precision import (
    COMPLEX64,
    COMPLEX128,
    FLOAT32,
    FLOAT64,
    LAPACK_DTYPES,
    adjoint_trans,
    complex_dtype,
    convert,
    lq_dtype,
    promote_types,
    real_dtype,
)
from pylq.core.compute.tolerances import FP32, FP64, FP64_ILL_CONDITIONED, select_tolerance
from pylq.core.exceptions import TypeConversionError, ValidationError


class TestLQDtype:

    @pytest.mark.parametrize("dt", [np.int8, np.int32, np.int64, np.uint16, np.bool_])
    def test_integers_and_bool_map_to_float64(self, dt):
        assert lq_dtype(dt) == FLOAT64

    def test_float16_maps_to_float32(self):
        assert lq_dtype(np.float16) == FLOAT32

    @pytest.mark.parametrize("dt", LAPACK_DTYPES)
    def test_lapack_dtypes_unchanged(self, dt):
        assert lq_dtype(dt) == dt

    def test_string_rejected(self):
        with pytest.raises(ValidationError, match="no LAPACK counterpart"):
            lq_dtype(np.str_)


class TestPromotionTable:

    @pytest.mark.parametrize("a, b, expected", [
        (FLOAT32, FLOAT32, FLOAT32),
        (FLOAT32, FLOAT64, FLOAT64),
        (FLOAT32, COMPLEX64, COMPLEX64),
        (FLOAT64, COMPLEX64, COMPLEX128),
        (COMPLEX64, COMPLEX128, COMPLEX128),
        (FLOAT64, COMPLEX128, COMPLEX128),
    ])
    def test_pairs_are_symmetric(self, a, b, expected):
        assert promote_types(a, b) == expected
        assert promote_types(b, a) == expected

    def test_integer_operand_promotes_with_float32(self):
        # integers are factored in float64, so they widen float32 operators
        assert promote_types(np.int64, FLOAT32) == FLOAT64

    def test_agrees_with_numpy_on_lapack_dtypes(self):
        for a in LAPACK_DTYPES:
            for b in LAPACK_DTYPES:
                assert promote_types(a, b) == np.result_type(a, b)


class TestHelpers:

    def test_real_and_complex_counterparts(self):
        assert real_dtype(COMPLEX64) == FLOAT32
        assert real_dtype(FLOAT64) == FLOAT64
        assert complex_dtype(FLOAT32) == COMPLEX64
        assert complex_dtype(COMPLEX128) == COMPLEX128

    def test_adjoint_trans(self):
        assert adjoint_trans(FLOAT64) == 'T'
        assert adjoint_trans(COMPLEX64) == 'C'


class TestConvert:

    def test_always_copies(self):
        a = np.arange(4.0)
        b = convert(a, FLOAT64, 'factors')
        assert b is not a
        b[0] = 10.0
        assert a[0] == 0.0

    def test_widening(self):
        b = convert(np.arange(3.0, dtype=np.float32), COMPLEX128, 'tau')
        assert b.dtype == COMPLEX128
        np.testing.assert_array_equal(b, [0, 1, 2])

    def test_complex_with_zero_imaginary_narrows(self):
        b = convert(np.array([1 + 0j, 2 + 0j]), FLOAT64, 'tau')
        assert b.dtype == FLOAT64
        np.testing.assert_array_equal(b, [1.0, 2.0])

    def test_complex_with_imaginary_part_rejected(self):
        with pytest.raises(TypeConversionError, match="non-zero imaginary") as exc_info:
            convert(np.array([1 + 1j]), FLOAT64, 'tau')
        assert exc_info.value.source_dtype == COMPLEX128
        assert exc_info.value.target_dtype == FLOAT64

    def test_overflow_rejected(self):
        with pytest.raises(TypeConversionError, match="overflow"):
            convert(np.array([1e300]), FLOAT32, 'factors')

    def test_non_lapack_target_rejected(self):
        with pytest.raises(TypeConversionError, match="target must be one of"):
            convert(np.array([1.0]), np.int64, 'factors')


class TestTolerances:

    def test_double_precision_tiers(self):
        assert select_tolerance(FLOAT64) is FP64
        assert select_tolerance(COMPLEX128) is FP64
        assert select_tolerance(FLOAT64, is_ill_conditioned=True) is FP64_ILL_CONDITIONED

    def test_single_precision_tiers(self):
        assert select_tolerance(FLOAT32) is FP32
        assert select_tolerance(COMPLEX64) is FP32
