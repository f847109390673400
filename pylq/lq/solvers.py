"""
Factorization entry points and backend selection.

This module provides lq() and lq_inplace() (public API), the solve()
convenience function and backend dispatch.
"""

import logging
from typing import Any, Literal
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylq.core.compute.device import select_device
from pylq.core.compute.precision import LAPACK_DTYPES, lq_dtype
from pylq.core.exceptions import ValidationError
from pylq.core.protocols import HouseholderBackend
from pylq.core.validation import check_2d, check_array, check_finite as require_finite
from pylq.lq.backends import DEFAULT_BACKEND
from pylq.lq.factorization import LQ, AdjointLQ

logger = logging.getLogger(__name__)


# Type alias for backend selection
BackendChoice = Literal['auto', 'cpu', 'gpu', 'cpu_lapack', 'gpu_torch']


def lq(
    A: ArrayLike,
    *,
    backend: BackendChoice | HouseholderBackend = 'cpu',
    check_finite: bool = True,
) -> LQ:
    """
    Compute the LQ factorization of a matrix.

    A = L Q with L lower trapezoidal (m x min(m, n)) and Q orthogonal/unitary
    (n x n, kept implicit). The LQ factorization is the QR factorization of
    A^H and gives the minimum-norm solution lq(A).solve(b) of an
    underdetermined system with full row rank.

    Args:
        A: Matrix to factor (m x n), or a scalar (treated as 1 x 1). Integer
           and boolean inputs are factored in float64, float16 in float32.
        backend: Kernel provider:
            - 'cpu' / 'cpu_lapack': LAPACK via SciPy (default)
            - 'gpu' / 'gpu_torch': PyTorch on CUDA
            - 'auto': CUDA if available, else CPU
            - any HouseholderBackend instance
        check_finite: Reject inputs containing NaN or Inf

    Returns:
        LQ factorization; A itself is not modified

    Raises:
        ValidationError: If A is not numeric, not 2D or contains NaN/Inf
        RuntimeError: If 'gpu' requested but unavailable

    Example:
        >>> import numpy as np
        >>> from pylq import lq
        >>> F = lq(np.array([[5.0, 7.0], [-2.0, -4.0]]))
        >>> L, Q = F
        >>> np.allclose(L @ Q, [[5.0, 7.0], [-2.0, -4.0]])
        True
    """
    # This is the boundary - validate here, trust everywhere else
    A_arr = check_array(A, 'A')
    if A_arr.ndim == 0:
        A_arr = A_arr.reshape(1, 1)
    check_2d(A_arr, 'A')

    work = np.array(A_arr, dtype=lq_dtype(A_arr.dtype), order='C', copy=True)
    if check_finite:
        require_finite(work, 'A')

    backend_impl = _get_backend(backend)
    factors, tau = backend_impl.factor(work, overwrite_a=True)
    return LQ(factors, tau, backend=backend_impl)


def lq_inplace(
    A: NDArray[Any],
    *,
    backend: BackendChoice | HouseholderBackend = 'cpu',
    check_finite: bool = True,
) -> LQ:
    """
    Compute the LQ factorization using A as the workspace.

    The returned factorization's `factors` is A itself; A's original
    contents are lost.

    Args:
        A: Writeable, C-contiguous 2D array of a LAPACK dtype
           (float32, float64, complex64, complex128)

    Raises:
        ValidationError: If A cannot be used as a workspace
    """
    if not isinstance(A, np.ndarray):
        raise ValidationError(f"A: in-place factorization requires a numpy.ndarray, got {type(A).__name__}")
    check_2d(A, 'A')
    if A.dtype not in LAPACK_DTYPES:
        raise ValidationError(
            f"A: in-place factorization requires a LAPACK dtype, got {A.dtype}"
        )
    if not (A.flags.c_contiguous and A.flags.writeable):
        raise ValidationError("A: in-place factorization requires a writeable C-contiguous array")
    if check_finite:
        require_finite(A, 'A')

    backend_impl = _get_backend(backend)
    factors, tau = backend_impl.factor(A, overwrite_a=True)
    return LQ(factors, tau, backend=backend_impl)


def solve(F: LQ | AdjointLQ, B: ArrayLike) -> NDArray[Any]:
    """
    Solve a linear system through a factorization: F \\ B.

    F is an LQ factorization (minimum-norm solution, m <= n) or its adjoint
    F.H (least-squares solution of A^H X = B, m <= n).
    """
    if not isinstance(F, (LQ, AdjointLQ)):
        raise TypeError(f"F must be an LQ factorization or its adjoint, got {type(F).__name__}")
    return F.solve(B)


def _get_backend(choice: BackendChoice | HouseholderBackend) -> HouseholderBackend:
    """
    Select and instantiate the appropriate backend.

    Raises:
        ValueError: If unknown backend specified
        RuntimeError: If GPU requested but unavailable
    """
    if not isinstance(choice, str):
        if isinstance(choice, HouseholderBackend):
            return choice
        raise ValueError(f"Unknown backend: {choice!r}")

    if choice == 'auto':
        device = select_device('auto')
        if device.device_type == 'cuda':
            from pylq.lq.backends.gpu import GPUTorchBackend
            logger.debug("auto backend selected %s", device)
            return GPUTorchBackend(device.torch_device)
        logger.debug("auto backend selected %s", device)
        return DEFAULT_BACKEND

    elif choice in ('cpu', 'cpu_lapack'):
        return DEFAULT_BACKEND

    elif choice in ('gpu', 'gpu_torch'):
        from pylq.lq.backends.gpu import GPUTorchBackend
        device = select_device('gpu')
        return GPUTorchBackend(device.torch_device)

    else:
        raise ValueError(f"Unknown backend: {choice!r}")
