"""
Numerical precision constants and dtype promotion.

The Householder kernels only run on the four LAPACK element types. Every
operand entering the library is mapped onto one of them with lq_dtype(),
and mixed-type operations pick their working dtype from an explicit
pairwise promotion table rather than from NumPy's general rules.
"""

import numpy as np
from numpy.typing import DTypeLike, NDArray
from typing import Any

from pylq.core.exceptions import TypeConversionError, ValidationError


FLOAT32 = np.dtype(np.float32)
FLOAT64 = np.dtype(np.float64)
COMPLEX64 = np.dtype(np.complex64)
COMPLEX128 = np.dtype(np.complex128)

LAPACK_DTYPES = (FLOAT32, FLOAT64, COMPLEX64, COMPLEX128)

# Pairwise promotion rules. Lookup is symmetric, see promote_types().
_PROMOTION_TABLE: dict[tuple[np.dtype, np.dtype], np.dtype] = {
    (FLOAT32, FLOAT32): FLOAT32,
    (FLOAT32, FLOAT64): FLOAT64,
    (FLOAT32, COMPLEX64): COMPLEX64,
    (FLOAT32, COMPLEX128): COMPLEX128,
    (FLOAT64, FLOAT64): FLOAT64,
    (FLOAT64, COMPLEX64): COMPLEX128,
    (FLOAT64, COMPLEX128): COMPLEX128,
    (COMPLEX64, COMPLEX64): COMPLEX64,
    (COMPLEX64, COMPLEX128): COMPLEX128,
    (COMPLEX128, COMPLEX128): COMPLEX128,
}

_REAL_OF = {
    FLOAT32: FLOAT32,
    FLOAT64: FLOAT64,
    COMPLEX64: FLOAT32,
    COMPLEX128: FLOAT64,
}

_COMPLEX_OF = {
    FLOAT32: COMPLEX64,
    FLOAT64: COMPLEX128,
    COMPLEX64: COMPLEX64,
    COMPLEX128: COMPLEX128,
}


def lq_dtype(dtype: DTypeLike) -> np.dtype:
    """
    Map an input dtype onto the LAPACK dtype the factorization works in.

    Booleans and integers become float64, float16 becomes float32, the four
    LAPACK dtypes are returned unchanged.

    Raises:
        ValidationError: For dtypes with no LAPACK counterpart
            (extended precision, strings, objects, ...)
    """
    dt = np.dtype(dtype)
    if dt in LAPACK_DTYPES:
        return dt
    if dt == np.bool_ or np.issubdtype(dt, np.integer):
        return FLOAT64
    if dt == np.float16:
        return FLOAT32
    raise ValidationError(
        f"dtype {dt} has no LAPACK counterpart; "
        f"expected one of {[str(d) for d in LAPACK_DTYPES]}"
    )


def promote_types(a: DTypeLike, b: DTypeLike) -> np.dtype:
    """Common working dtype of two operands, from the promotion table."""
    da, db = lq_dtype(a), lq_dtype(b)
    try:
        return _PROMOTION_TABLE[(da, db)]
    except KeyError:
        return _PROMOTION_TABLE[(db, da)]


def is_complex(dtype: DTypeLike) -> bool:
    return np.issubdtype(np.dtype(dtype), np.complexfloating)


def real_dtype(dtype: DTypeLike) -> np.dtype:
    """Real dtype of the same precision."""
    return _REAL_OF[lq_dtype(dtype)]


def complex_dtype(dtype: DTypeLike) -> np.dtype:
    """Complex dtype of the same precision."""
    return _COMPLEX_OF[lq_dtype(dtype)]


def adjoint_trans(dtype: DTypeLike) -> str:
    """LAPACK transpose flag that yields the adjoint: 'T' real, 'C' complex."""
    return 'C' if is_complex(dtype) else 'T'


def convert(
    array: NDArray[Any],
    dtype: DTypeLike,
    name: str,
) -> NDArray[Any]:
    """
    Checked conversion of an array to a LAPACK dtype.

    Always returns a new array (deep copy), even when the dtype is unchanged.

    Args:
        array: Array to convert
        dtype: Target dtype, must be one of the LAPACK dtypes
        name: Parameter name for error messages

    Raises:
        TypeConversionError: If the target is not a LAPACK dtype, if a
            complex value with non-zero imaginary part would be narrowed to a
            real dtype, or if a finite value overflows the target precision
    """
    source = array.dtype
    target = np.dtype(dtype)
    if target not in LAPACK_DTYPES:
        raise TypeConversionError(
            f"{name}: cannot convert {source} to {target}, "
            f"target must be one of {[str(d) for d in LAPACK_DTYPES]}",
            source_dtype=source,
            target_dtype=target,
        )

    if is_complex(source) and not is_complex(target):
        if np.any(np.imag(array) != 0):
            raise TypeConversionError(
                f"{name}: cannot convert {source} to {target}, "
                f"array has entries with non-zero imaginary part",
                source_dtype=source,
                target_dtype=target,
            )
        array = np.real(array)

    with np.errstate(over='ignore'):
        result = np.array(array, dtype=target, copy=True)

    overflowed = np.isfinite(array) & ~np.isfinite(result)
    if np.any(overflowed):
        raise TypeConversionError(
            f"{name}: {int(np.sum(overflowed))} finite value(s) overflow {target}",
            source_dtype=source,
            target_dtype=target,
        )
    return result
