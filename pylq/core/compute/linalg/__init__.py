"""
Linear algebra kernels for PyLQ.

All functions follow these conventions:
    - CPU functions use SciPy (LAPACK under the hood)
    - GPU functions use PyTorch and write NumPy results back
    - In-place kernels overwrite and return the caller's buffer
    - Errors are raised immediately with clear messages

Submodules:
    householder: LQ factor / expand / apply and triangular solves
"""

from pylq.core.compute.linalg.householder import (
    householder_apply_cpu,
    householder_apply_gpu,
    householder_expand_cpu,
    householder_expand_gpu,
    householder_factor_cpu,
    householder_factor_gpu,
    triangular_solve_cpu,
    triangular_solve_gpu,
)

__all__ = [
    "householder_factor_cpu",
    "householder_factor_gpu",
    "householder_expand_cpu",
    "householder_expand_gpu",
    "householder_apply_cpu",
    "householder_apply_gpu",
    "triangular_solve_cpu",
    "triangular_solve_gpu",
]
