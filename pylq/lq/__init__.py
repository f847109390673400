"""
LQ factorization.

Public API:
    lq(A, ...) -> LQ
    lq_inplace(A, ...) -> LQ
    solve(F, B) -> ndarray

The factorization exposes L (dense, recomputed on access) and Q (implicit,
an LQPackedQ). Q and Q.H multiply dense operands from either side with @;
adjoint(B) wraps a dense operand so that products against Q see B^H.

Example:
    >>> from pylq.lq import lq
    >>> F = lq(A)              # A is m x n, m <= n
    >>> x = F.solve(b)         # minimum-norm solution of A x = b
    >>> y = F.Q.H @ z          # z may have n or m rows
"""

from pylq.lq.adjoint import Adjoint, adjoint
from pylq.lq.packed_q import LQPackedQ, AdjointLQPackedQ
from pylq.lq.factorization import LQ, AdjointLQ
from pylq.lq.solvers import lq, lq_inplace, solve

__all__ = [
    "lq",
    "lq_inplace",
    "solve",
    "adjoint",
    "Adjoint",
    "LQ",
    "AdjointLQ",
    "LQPackedQ",
    "AdjointLQPackedQ",
]
