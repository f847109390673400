"""
CPU reference backend for the LQ factorization.

Runs the Householder kernels through LAPACK (geqrf/orgqr/ormqr and trtrs
via SciPy). This is the reference implementation; the GPU backend is
validated against it.
"""

from typing import Any
from numpy.typing import NDArray

from pylq.core.compute.linalg.householder import (
    householder_apply_cpu,
    householder_expand_cpu,
    householder_factor_cpu,
    triangular_solve_cpu,
)


class CPULapackBackend:
    """
    CPU backend using LAPACK.

    Implements the HouseholderBackend protocol. Stateless; a single shared
    instance is used by default.
    """

    @property
    def name(self) -> str:
        return 'cpu_lapack'

    def factor(
        self, A: NDArray[Any], overwrite_a: bool = False
    ) -> tuple[NDArray[Any], NDArray[Any]]:
        return householder_factor_cpu(A, overwrite_a=overwrite_a)

    def expand(self, factors: NDArray[Any], tau: NDArray[Any]) -> NDArray[Any]:
        return householder_expand_cpu(factors, tau)

    def apply(
        self,
        side: str,
        trans: str,
        factors: NDArray[Any],
        tau: NDArray[Any],
        C: NDArray[Any],
    ) -> NDArray[Any]:
        return householder_apply_cpu(side, trans, factors, tau, C)

    def solve_triangular(
        self,
        T: NDArray[Any],
        B: NDArray[Any],
        lower: bool,
        trans: str = 'N',
    ) -> NDArray[Any]:
        return triangular_solve_cpu(T, B, lower=lower, trans=trans)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


DEFAULT_BACKEND = CPULapackBackend()
