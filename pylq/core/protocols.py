"""
Core protocols for PyLQ.

These define structural interfaces that implementations must satisfy.
We use Protocol (structural typing) rather than ABC (nominal typing) so that
code depending on an implicit orthogonal operator never needs to know the
concrete class, and so that kernel providers can be swapped freely.

Design Principles:
    - Minimal contracts: prescribe only what's truly universal
    - Capability-driven: use supports() for optional features
"""

from typing import Protocol, Literal, Any, runtime_checkable

import numpy as np
from numpy.typing import NDArray


Side = Literal['L', 'R']
Trans = Literal['N', 'T', 'C']


@runtime_checkable
class OrthogonalOperator(Protocol):
    """
    A matrix-shaped orthogonal/unitary operator that is never materialized
    unless explicitly requested.

    Both LQPackedQ and its adjoint implement this protocol. Callers should
    depend on this capability set only, never on a dense representation.
    """

    @property
    def shape(self) -> tuple[int, int]:
        """Shape of the operator's square form."""
        ...

    @property
    def dtype(self) -> np.dtype:
        ...

    def __getitem__(self, index: tuple[int, int]) -> Any:
        """Single element, computed by applying the operator to a unit vector."""
        ...

    def lmul(self, B: NDArray[Any]) -> NDArray[Any]:
        """Overwrite B with (operator @ B); returns B."""
        ...

    def rmul(self, A: NDArray[Any]) -> NDArray[Any]:
        """Overwrite A with (A @ operator); returns A."""
        ...

    def to_dense(self) -> NDArray[Any]:
        """Explicit dense form of the operator."""
        ...

    def supports(self, capability: str) -> bool:
        """
        Check if this operator supports a given capability.

        Note:
            Unknown capabilities MUST return False, never raise.
        """
        ...


@runtime_checkable
class HouseholderBackend(Protocol):
    """
    Protocol for the reflector kernels consumed by the factorization.

    A backend knows how to factor a dense matrix into packed Householder
    form, expand the reflectors into an explicit matrix, apply them in place
    to a buffer, and run triangular solves. Backends are stateless apart
    from construction-time configuration (device).

    All arrays crossing this boundary are NumPy arrays.
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{library}'
        Examples: 'cpu_lapack', 'gpu_torch'
        """
        ...

    def factor(
        self, A: NDArray[Any], overwrite_a: bool = False
    ) -> tuple[NDArray[Any], NDArray[Any]]:
        """Packed (factors, tau) of the LQ factorization of A."""
        ...

    def expand(self, factors: NDArray[Any], tau: NDArray[Any]) -> NDArray[Any]:
        """Explicit n-by-n Q from a private copy of the packed reflectors."""
        ...

    def apply(
        self,
        side: Side,
        trans: Trans,
        factors: NDArray[Any],
        tau: NDArray[Any],
        C: NDArray[Any],
    ) -> NDArray[Any]:
        """Overwrite C with op(Q) @ C (side 'L') or C @ op(Q) (side 'R')."""
        ...

    def solve_triangular(
        self,
        T: NDArray[Any],
        B: NDArray[Any],
        lower: bool,
        trans: Trans = 'N',
    ) -> NDArray[Any]:
        """Overwrite B with op(T)^-1 @ B; returns B."""
        ...
