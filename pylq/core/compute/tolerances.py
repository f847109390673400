"""
Tolerance tiers for numerical validation.

Defines precision expectations for the different element types:
- FP64 (float64 / complex128): reflector round trips close to machine precision
- FP32 (float32 / complex64): relaxed for single-precision arithmetic
- Ill-conditioned variants for solves where the condition number of L
  amplifies rounding error

Used by the test suite to compare implicit results against dense references.
"""

from dataclasses import dataclass

from numpy.typing import DTypeLike

from pylq.core.compute.precision import real_dtype, FLOAT64


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


FP64 = ToleranceTier(
    rtol=1e-10,
    atol=1e-12,
    name='fp64',
    description='double precision, orthogonal transforms are backward stable',
)

FP64_ILL_CONDITIONED = ToleranceTier(
    rtol=1e-6,
    atol=1e-8,
    name='fp64_ill_conditioned',
    description='double precision, solves with cond(L) > 1e4',
)

FP32 = ToleranceTier(
    rtol=1e-4,
    atol=1e-5,
    name='fp32',
    description='single precision',
)

FP32_ILL_CONDITIONED = ToleranceTier(
    rtol=1e-2,
    atol=1e-3,
    name='fp32_ill_conditioned',
    description='single precision, solves with cond(L) > 1e4',
)


def select_tolerance(
    dtype: DTypeLike,
    is_ill_conditioned: bool = False,
) -> ToleranceTier:
    """Select the tolerance tier matching an element type."""
    if real_dtype(dtype) == FLOAT64:
        return FP64_ILL_CONDITIONED if is_ill_conditioned else FP64
    return FP32_ILL_CONDITIONED if is_ill_conditioned else FP32
