"""
Implicit orthogonal factor of an LQ factorization.

LQPackedQ wraps the packed reflectors (`factors`, `tau`) of a factorization
and behaves like the n-by-n orthogonal/unitary matrix they define, where n is
the number of columns of `factors`. It is never materialized unless
to_dense() (or np.asarray) is called: every product goes through the
backend's apply kernel.

Multiplication protocol
-----------------------
In-place primitives require the operand's relevant dimension to equal n:

    Q.lmul(B)      B <- Q B          rows(B) == n
    Q.H.lmul(B)    B <- Q^H B        rows(B) == n
    Q.rmul(A)      A <- A Q          cols(A) == n
    Q.H.rmul(A)    A <- A Q^H        cols(A) == n

Out-of-place products promote to a common dtype, copy the operand and call
the primitive. Where the inner dimension of the product is Q's first
dimension (Q^H @ B and A @ Q), Q behaves like its square form when the
operand dimension is n, and like its truncated form when the operand
dimension is m, the row count of the originating matrix: the operand is
zero-extended to n and the square form is applied.

    Q @ B          rows(B) == n
    Q.H @ B        rows(B) in {n, m}     (m only when m < n)
    A @ Q          cols(A) in {n, m}     (m only when m < n)
    A @ Q.H        cols(A) == n

Adjoint operands (pylq.lq.adjoint(B)) are materialized into a fresh buffer
first and then follow the same rules.
"""

import logging
from typing import Any
import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray

from pylq.core.capabilities import ALL_CAPABILITIES
from pylq.core.exceptions import BoundsError, DimensionError
from pylq.core.compute.precision import adjoint_trans, convert, promote_types
from pylq.core.protocols import HouseholderBackend
from pylq.core.validation import (
    check_array,
    check_dtype,
    check_vector_or_matrix,
    check_writeable,
)
from pylq.lq.adjoint import Adjoint
from pylq.lq.backends import DEFAULT_BACKEND

logger = logging.getLogger(__name__)


def _operand(B: ArrayLike, name: str) -> NDArray[Any]:
    arr = check_array(B, name)
    check_vector_or_matrix(arr, name)
    return arr


def _buffer(B: NDArray[Any], dtype: np.dtype, name: str) -> None:
    """Validate a caller-supplied buffer for an in-place operation."""
    if not isinstance(B, np.ndarray):
        raise TypeError(f"{name}: in-place operation requires a numpy.ndarray, got {type(B).__name__}")
    check_writeable(B, name)
    check_dtype(B, dtype, name)
    check_vector_or_matrix(B, name)


def _copy_as(B: NDArray[Any], dtype: np.dtype) -> NDArray[Any]:
    return np.array(B, dtype=dtype, order='C', copy=True)


def _zero_extend_rows(B: NDArray[Any], n: int, dtype: np.dtype) -> NDArray[Any]:
    C = np.zeros((n,) + B.shape[1:], dtype=dtype)
    C[:B.shape[0]] = B
    return C


def _zero_extend_columns(A: NDArray[Any], n: int, dtype: np.dtype) -> NDArray[Any]:
    C = np.zeros(A.shape[:-1] + (n,), dtype=dtype)
    C[..., :A.shape[-1]] = A
    return C


def _right_application_mismatch(rows_or_columns: str, actual: int, m: int, n: int):
    if m >= n:
        raise DimensionError(
            f"the number of {rows_or_columns} of the matrix on the left, {actual}, "
            f"must match the number of columns of the (LQPackedQ) matrix on the "
            f"right, {n}",
            actual=actual,
            expected=n,
        )
    raise DimensionError(
        f"the number of {rows_or_columns} of the matrix on the left, {actual}, "
        f"must match either (1) the number of columns of the (LQPackedQ) matrix "
        f"on the right, {n}, or (2) the number of rows of that matrix's internal "
        f"representation (the factorization's originating matrix's number of "
        f"rows), {m}",
        actual=actual,
        expected=(n, m),
    )


class _ImplicitOperator:
    """Shape queries and NumPy interop shared by Q and its adjoint."""

    # ndarray @ Q must defer to __rmatmul__ instead of densifying Q
    __array_ufunc__ = None

    ndim = 2

    @property
    def shape(self) -> tuple[int, int]:
        n = self.factors.shape[1]
        return n, n

    @property
    def dtype(self) -> np.dtype:
        return self.factors.dtype

    def size(self, dim: int | None = None) -> Any:
        """
        Shape of the square form, or its extent along a 1-based dimension.

        Dimensions beyond the second are singleton.

        Raises:
            BoundsError: If dim < 1
        """
        if dim is None:
            return self.shape
        if dim < 1:
            raise BoundsError(
                f"dimension must be >= 1, got {dim}", index=dim, bounds=(1, None)
            )
        if dim <= 2:
            return self.factors.shape[1]
        return 1

    def supports(self, capability: str) -> bool:
        return capability in ALL_CAPABILITIES

    def _element_index(self, index: Any) -> tuple[int, int]:
        if not (isinstance(index, tuple) and len(index) == 2):
            raise TypeError(
                f"{type(self).__name__} supports only scalar [i, j] indexing, got {index!r}"
            )
        n = self.shape[0]
        resolved = []
        for i in index:
            if not isinstance(i, (int, np.integer)):
                raise TypeError(f"indices must be integers, got {type(i).__name__}")
            if not -n <= i < n:
                raise BoundsError(
                    f"index {tuple(index)} out of bounds for shape {self.shape}",
                    index=tuple(index),
                    bounds=self.shape,
                )
            resolved.append(int(i) % n)
        return resolved[0], resolved[1]

    def __array__(self, dtype=None, copy=None) -> NDArray[Any]:
        dense = self.to_dense()
        return dense if dtype is None else dense.astype(dtype)

    def __str__(self) -> str:
        return f"{self!r}:\n{np.array2string(self.to_dense())}"


class LQPackedQ(_ImplicitOperator):
    """
    Orthogonal/unitary factor Q of an LQ factorization, in packed form.

    Attributes:
        factors: Packed factors (m x n) shared with the factorization
        tau: Reflector scale factors (min(m, n),)
        backend: HouseholderBackend used for apply/expand
    """

    def __init__(
        self,
        factors: NDArray[Any],
        tau: NDArray[Any],
        backend: HouseholderBackend | None = None,
    ):
        self.factors = factors
        self.tau = tau
        self.backend = backend if backend is not None else DEFAULT_BACKEND

    @property
    def H(self) -> 'AdjointLQPackedQ':
        return AdjointLQPackedQ(self)

    def astype(self, dtype: DTypeLike) -> 'LQPackedQ':
        """
        Q with both buffers converted to dtype; self if already that dtype.

        Raises:
            TypeConversionError: If a value cannot be represented in dtype
        """
        if np.dtype(dtype) == self.dtype:
            return self
        return LQPackedQ(
            convert(self.factors, dtype, 'factors'),
            convert(self.tau, dtype, 'tau'),
            self.backend,
        )

    def __getitem__(self, index: tuple[int, int]) -> Any:
        # O(n) per element: applies Q to a unit vector
        i, j = self._element_index(index)
        e = np.zeros(self.shape[1], dtype=self.dtype)
        e[j] = 1
        return self.lmul(e)[i]

    def to_dense(self, mode: str = 'complete') -> NDArray[Any]:
        """
        Explicit Q.

        Args:
            mode: 'complete' for the n x n square form, 'reduced' for the
                  first min(m, n) rows (the truncated form with L @ Q == A)
        """
        if mode not in ('complete', 'reduced'):
            raise ValueError(f"mode must be 'complete' or 'reduced', got {mode!r}")
        Q = self.backend.expand(self.factors.copy(), self.tau)
        if mode == 'reduced':
            return Q[:len(self.tau)].copy()
        return Q

    def det(self) -> Any:
        """
        Determinant of Q.

        Each non-trivial reflector H = I - tau v v^H has determinant
        -tau / conj(tau) (-1 for real tau). Q is the adjoint of the reflector
        product, so the result is conjugated.
        """
        tau = self.tau[self.tau != 0]
        return self.dtype.type(np.conj(np.prod(-tau / np.conj(tau))))

    # --- in-place primitives ------------------------------------------------

    def lmul(self, B: NDArray[Any]) -> NDArray[Any]:
        """
        Overwrite B with Q @ B.

        B must have the dtype of Q and n rows. Returns B.
        """
        _buffer(B, self.dtype, 'B')
        n = self.shape[0]
        if B.shape[0] != n:
            raise DimensionError(
                f"first dimension of B, {B.shape[0]}, must equal the order of Q, {n}",
                actual=B.shape[0],
                expected=n,
            )
        return self.backend.apply('L', 'N', self.factors, self.tau, B)

    def rmul(self, A: NDArray[Any]) -> NDArray[Any]:
        """
        Overwrite A with A @ Q.

        A must have the dtype of Q and n columns (a 1D A is a row). Returns A.
        """
        _buffer(A, self.dtype, 'A')
        n = self.shape[1]
        if A.shape[-1] != n:
            raise DimensionError(
                f"number of columns of A, {A.shape[-1]}, must equal the order of Q, {n}",
                actual=A.shape[-1],
                expected=n,
            )
        return self.backend.apply('R', 'N', self.factors, self.tau, A)

    # --- out-of-place products ----------------------------------------------

    def __matmul__(self, other: Any) -> Any:
        if isinstance(other, _ImplicitOperator):
            return NotImplemented
        if isinstance(other, Adjoint):
            T = promote_types(self.dtype, other.dtype)
            return self.astype(T).lmul(other.materialize(T))
        B = _operand(other, 'B')
        T = promote_types(self.dtype, B.dtype)
        return self.astype(T).lmul(_copy_as(B, T))

    def __rmatmul__(self, other: Any) -> Any:
        if isinstance(other, _ImplicitOperator):
            return NotImplemented
        m, n = self.factors.shape

        if isinstance(other, Adjoint):
            A = other.parent.reshape(other.parent.shape[0], -1)
            T = promote_types(self.dtype, A.dtype)
            if A.shape[0] == n:
                C = other.materialize(T)
            elif A.shape[0] == m and m < n:
                logger.debug("zero-extending adjoint operand from %d to %d columns", m, n)
                C = _zero_extend_columns(other.materialize(T), n, T)
            else:
                _right_application_mismatch("rows", A.shape[0], m, n)
            return self.astype(T).rmul(C)

        A = _operand(other, 'A')
        T = promote_types(self.dtype, A.dtype)
        if A.shape[-1] == n:
            C = _copy_as(A, T)
        elif A.shape[-1] == m and m < n:
            logger.debug("zero-extending operand from %d to %d columns", m, n)
            C = _zero_extend_columns(A, n, T)
        else:
            _right_application_mismatch("columns", A.shape[-1], m, n)
        return self.astype(T).rmul(C)

    def __repr__(self) -> str:
        return f"LQPackedQ(shape={self.shape}, dtype={self.dtype})"


class AdjointLQPackedQ(_ImplicitOperator):
    """
    Adjoint Q^H of an implicit LQ factor. Obtained as Q.H.

    Attributes:
        parent: The LQPackedQ this is the adjoint of
    """

    def __init__(self, parent: LQPackedQ):
        self.parent = parent

    @property
    def factors(self) -> NDArray[Any]:
        return self.parent.factors

    @property
    def tau(self) -> NDArray[Any]:
        return self.parent.tau

    @property
    def backend(self) -> HouseholderBackend:
        return self.parent.backend

    @property
    def H(self) -> LQPackedQ:
        return self.parent

    def astype(self, dtype: DTypeLike) -> 'AdjointLQPackedQ':
        parent = self.parent.astype(dtype)
        return self if parent is self.parent else parent.H

    def __getitem__(self, index: tuple[int, int]) -> Any:
        i, j = self._element_index(index)
        return np.conj(self.parent[j, i])

    def to_dense(self, mode: str = 'complete') -> NDArray[Any]:
        """Explicit Q^H ('reduced': the first min(m, n) columns)."""
        return np.ascontiguousarray(self.parent.to_dense(mode).conj().T)

    def det(self) -> Any:
        return np.conj(self.parent.det())

    # --- in-place primitives ------------------------------------------------

    def lmul(self, B: NDArray[Any]) -> NDArray[Any]:
        """Overwrite B with Q^H @ B (rows(B) == n). Returns B."""
        _buffer(B, self.dtype, 'B')
        n = self.shape[0]
        if B.shape[0] != n:
            raise DimensionError(
                f"first dimension of B, {B.shape[0]}, must equal the order of Q, {n}",
                actual=B.shape[0],
                expected=n,
            )
        trans = adjoint_trans(self.dtype)
        return self.backend.apply('L', trans, self.factors, self.tau, B)

    def rmul(self, A: NDArray[Any]) -> NDArray[Any]:
        """Overwrite A with A @ Q^H (cols(A) == n). Returns A."""
        _buffer(A, self.dtype, 'A')
        n = self.shape[1]
        if A.shape[-1] != n:
            raise DimensionError(
                f"number of columns of A, {A.shape[-1]}, must equal the order of Q, {n}",
                actual=A.shape[-1],
                expected=n,
            )
        trans = adjoint_trans(self.dtype)
        return self.backend.apply('R', trans, self.factors, self.tau, A)

    # --- out-of-place products ----------------------------------------------

    def __matmul__(self, other: Any) -> Any:
        if isinstance(other, _ImplicitOperator):
            return NotImplemented
        if isinstance(other, Adjoint):
            T = promote_types(self.dtype, other.dtype)
            B = other.materialize(T)
        else:
            B = _operand(other, 'B')
            T = promote_types(self.dtype, B.dtype)

        m, n = self.factors.shape
        if B.shape[0] == n:
            C = B if isinstance(other, Adjoint) else _copy_as(B, T)
        elif B.shape[0] == m and m < n:
            logger.debug("zero-extending operand from %d to %d rows", m, n)
            C = _zero_extend_rows(B, n, T)
        elif m < n:
            raise DimensionError(
                f"first dimension of B, {B.shape[0]}, must equal one of the "
                f"dimensions of the factorization, {(m, n)}",
                actual=B.shape[0],
                expected=(n, m),
            )
        else:
            raise DimensionError(
                f"first dimension of B, {B.shape[0]}, must equal the order of Q, {n}",
                actual=B.shape[0],
                expected=n,
            )
        return self.astype(T).lmul(C)

    def __rmatmul__(self, other: Any) -> Any:
        # inner dimension is Q's second dimension: square form only
        if isinstance(other, _ImplicitOperator):
            return NotImplemented
        if isinstance(other, Adjoint):
            T = promote_types(self.dtype, other.dtype)
            return self.astype(T).rmul(other.materialize(T))
        A = _operand(other, 'A')
        T = promote_types(self.dtype, A.dtype)
        return self.astype(T).rmul(_copy_as(A, T))

    def __repr__(self) -> str:
        return f"AdjointLQPackedQ(shape={self.shape}, dtype={self.dtype})"
