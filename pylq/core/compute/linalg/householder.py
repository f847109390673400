"""
Householder reflector kernels.

Provides the factor / expand / apply / triangular-solve primitives behind
the LQ factorization, on CPU (LAPACK via SciPy) and GPU (PyTorch).

The LQ factorization of A is the QR factorization of A^H: if
A^H = Q_r R, then A = R^H Q_r^H, so L = R^H and Q = Q_r^H. The packed
`factors` of the LQ form are the adjoint of the packed QR output, with the
same tau. Every kernel below therefore runs the QR routine (geqrf, orgqr,
ormqr) on the adjoint of `factors` and flips the transpose flag.

Conventions:
    - factors is (m, n), tau has length k = min(m, n)
    - Q is the n-by-n square form
    - apply() and solve_triangular() write into the caller's buffer and
      return it
    - GPU functions take NumPy arrays, run on the given torch device and
      write NumPy results back
"""

from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy.linalg import get_lapack_funcs, solve_triangular

from pylq.core.exceptions import LapackError, SingularMatrixError
from pylq.core.compute.precision import adjoint_trans, is_complex


def _safecall(f, name: str, *args, **kwargs):
    """
    Call a LAPACK routine, determining lwork automatically and raising on
    illegal arguments.

    Returns the routine outputs without the trailing (work, info) pair.
    """
    lwork = kwargs.get('lwork', None)
    if lwork in (None, -1):
        kwargs['lwork'] = -1
        ret = f(*args, **kwargs)
        kwargs['lwork'] = max(1, int(ret[-2][0].real))
    ret = f(*args, **kwargs)
    if ret[-1] < 0:
        raise LapackError(
            f"illegal value in argument {-ret[-1]} of internal {name}",
            routine=name,
            info=int(ret[-1]),
        )
    return ret[:-2]


def _check_side_trans(side: str, trans: str, dtype: np.dtype) -> None:
    if side not in ('L', 'R'):
        raise ValueError(f"side must be 'L' or 'R', got {side!r}")
    if trans not in ('N', 'T', 'C'):
        raise ValueError(f"trans must be 'N', 'T' or 'C', got {trans!r}")
    if trans == 'T' and is_complex(dtype):
        raise ValueError(
            "trans='T' is not a unitary operation for complex reflectors, use 'C'"
        )


def _as_matrix(C: NDArray[Any], side: str) -> NDArray[Any]:
    """Vectors are columns for left application and rows for right application."""
    if C.ndim == 1:
        return C.reshape(-1, 1) if side == 'L' else C.reshape(1, -1)
    return C


def _write_back(C: NDArray[Any], result: NDArray[Any]) -> NDArray[Any]:
    if not np.shares_memory(result, C):
        C[...] = result.reshape(C.shape)
    return C


def _check_nonsingular_diagonal(T: NDArray[Any]) -> None:
    zeros = np.flatnonzero(np.diagonal(T) == 0)
    if len(zeros) > 0:
        order = min(T.shape)
        raise SingularMatrixError(
            f"Triangular factor is singular: zero on the diagonal at "
            f"position {int(zeros[0])} of {order}",
            matrix_name='L',
            rank=int(zeros[0]),
            expected_rank=order,
        )


# =============================================================================
# CPU (LAPACK via SciPy)
# =============================================================================


def householder_factor_cpu(
    A: NDArray[Any],
    overwrite_a: bool = False,
) -> tuple[NDArray[Any], NDArray[Any]]:
    """
    Packed LQ factorization using LAPACK geqrf on A^H.

    Args:
        A: Matrix to factor (m x n), LAPACK dtype. With overwrite_a=True it
           must be C-contiguous; it is used as the workspace and returned as
           `factors`.
        overwrite_a: Reuse A's memory for the packed factors

    Returns:
        (factors, tau): factors is (m x n) with L in its lower trapezoid and
        the reflectors stored row-wise above it; tau has min(m, n) entries
    """
    a = A if overwrite_a else np.array(A, order='C', copy=True)
    m, n = a.shape
    if min(m, n) == 0:
        return a, np.zeros(0, dtype=a.dtype)

    geqrf, = get_lapack_funcs(('geqrf',), (a,))

    # The C-ordered buffer of A seen through .T is the Fortran-ordered A^T,
    # so conjugating in place hands geqrf A^H without a copy.
    np.conjugate(a, out=a)
    qr, tau = _safecall(geqrf, 'geqrf', a.T, overwrite_a=True)
    if not np.shares_memory(qr, a):
        a[...] = qr.T
    np.conjugate(a, out=a)

    return a, tau


def householder_expand_cpu(
    factors: NDArray[Any],
    tau: NDArray[Any],
) -> NDArray[Any]:
    """
    Explicit n-by-n Q using LAPACK orgqr/ungqr.

    Works on a private n-by-n workspace; `factors` is never modified.
    """
    n = factors.shape[1]
    k = tau.shape[0]
    if k == 0:
        return np.eye(n, dtype=factors.dtype)

    orgqr, = get_lapack_funcs(('orgqr',), (factors,))
    work = np.zeros((n, n), dtype=factors.dtype, order='F')
    work[:, :k] = factors[:k, :].conj().T
    q, = _safecall(orgqr, 'orgqr', work, tau, overwrite_a=True)

    return np.ascontiguousarray(q.conj().T)


def householder_apply_cpu(
    side: str,
    trans: str,
    factors: NDArray[Any],
    tau: NDArray[Any],
    C: NDArray[Any],
) -> NDArray[Any]:
    """
    Apply Q (or its adjoint) to C in place using LAPACK ormqr/unmqr.

    Args:
        side: 'L' for op(Q) @ C, 'R' for C @ op(Q)
        trans: 'N' for Q, 'T' (real) or 'C' for Q^H
        factors: Packed factors (m x n)
        tau: Reflector scale factors (min(m, n),)
        C: Buffer with n rows (side 'L') or n columns (side 'R'), same dtype
           as factors. A 1D buffer is a column for 'L' and a row for 'R'.

    Returns:
        C, overwritten with the product
    """
    _check_side_trans(side, trans, factors.dtype)
    k = tau.shape[0]
    C2 = _as_matrix(C, side)
    if k == 0 or C2.size == 0:
        return C

    ormqr, = get_lapack_funcs(('ormqr',), (factors,))

    # Q = Q_r^H, so applying Q means applying Q_r with the adjoint flag
    qr_trans = adjoint_trans(factors.dtype) if trans == 'N' else 'N'
    reflectors = np.asfortranarray(factors[:k, :].conj().T)
    cq, = _safecall(
        ormqr, 'ormqr', side, qr_trans, reflectors, tau, C2, overwrite_c=True
    )

    return _write_back(C, cq)


def triangular_solve_cpu(
    T: NDArray[Any],
    B: NDArray[Any],
    lower: bool,
    trans: str = 'N',
) -> NDArray[Any]:
    """
    Solve op(T) X = B in place using LAPACK trtrs (via SciPy).

    Raises:
        SingularMatrixError: If T has a zero on its diagonal
    """
    if T.shape[0] == 0 or B.size == 0:
        return B
    _check_nonsingular_diagonal(T)
    X = solve_triangular(T, B, lower=lower, trans=trans, check_finite=False)
    B[...] = X
    return B


# =============================================================================
# GPU (PyTorch)
# =============================================================================


def _to_device(array: NDArray[Any], device: str) -> 'torch.Tensor':
    import torch
    return torch.from_numpy(np.ascontiguousarray(array)).to(device)


def _to_numpy(tensor: 'torch.Tensor') -> NDArray[Any]:
    return tensor.resolve_conj().cpu().numpy()


def _adjoint_tensor(tensor: 'torch.Tensor') -> 'torch.Tensor':
    return tensor.transpose(-2, -1).conj().resolve_conj()


def householder_factor_gpu(
    A: NDArray[Any],
    device: str,
) -> tuple[NDArray[Any], NDArray[Any]]:
    """
    Packed LQ factorization using torch.geqrf on A^H.

    Args:
        A: Matrix to factor (m x n), LAPACK dtype
        device: torch device string ('cuda', 'cuda:0', ...)

    Returns:
        (factors, tau) as NumPy arrays (moved to CPU)
    """
    import torch

    m, n = A.shape
    if min(m, n) == 0:
        return np.array(A, order='C', copy=True), np.zeros(0, dtype=A.dtype)

    qr, tau = torch.geqrf(_adjoint_tensor(_to_device(A, device)))
    factors = np.ascontiguousarray(_to_numpy(_adjoint_tensor(qr)))
    return factors, _to_numpy(tau)


def householder_expand_gpu(
    factors: NDArray[Any],
    tau: NDArray[Any],
    device: str,
) -> NDArray[Any]:
    """Explicit n-by-n Q using torch.linalg.householder_product."""
    import torch

    n = factors.shape[1]
    k = tau.shape[0]
    if k == 0:
        return np.eye(n, dtype=factors.dtype)

    reflectors = _adjoint_tensor(_to_device(factors[:k, :], device))
    work = torch.zeros((n, n), dtype=reflectors.dtype, device=reflectors.device)
    work[:, :k] = reflectors
    q = torch.linalg.householder_product(work, _to_device(tau, device))

    return np.ascontiguousarray(_to_numpy(_adjoint_tensor(q)))


def householder_apply_gpu(
    side: str,
    trans: str,
    factors: NDArray[Any],
    tau: NDArray[Any],
    C: NDArray[Any],
    device: str,
) -> NDArray[Any]:
    """Apply Q (or its adjoint) to C using torch.ormqr; C is overwritten."""
    import torch

    _check_side_trans(side, trans, factors.dtype)
    k = tau.shape[0]
    C2 = _as_matrix(C, side)
    if k == 0 or C2.size == 0:
        return C

    reflectors = _adjoint_tensor(_to_device(factors[:k, :], device))
    out = torch.ormqr(
        reflectors,
        _to_device(tau, device),
        _to_device(C2, device),
        left=(side == 'L'),
        transpose=(trans == 'N'),
    )
    C[...] = _to_numpy(out).reshape(C.shape)
    return C


def triangular_solve_gpu(
    T: NDArray[Any],
    B: NDArray[Any],
    lower: bool,
    trans: str,
    device: str,
) -> NDArray[Any]:
    """Solve op(T) X = B in place using torch.linalg.solve_triangular."""
    import torch

    if T.shape[0] == 0 or B.size == 0:
        return B
    _check_nonsingular_diagonal(T)

    T_t = _to_device(T, device)
    upper = not lower
    if trans != 'N':
        T_t = _adjoint_tensor(T_t) if trans == 'C' else T_t.transpose(-2, -1)
        upper = not upper

    B_t = _to_device(B.reshape(B.shape[0], -1), device)
    X = torch.linalg.solve_triangular(T_t, B_t, upper=upper, left=True)
    B[...] = _to_numpy(X).reshape(B.shape)
    return B
