"""
LQ factorization record.

LQ bundles the packed output of one factoring call: `factors` (m x n), whose
lower trapezoid is L and whose strictly upper part stores the Householder
reflectors row-wise, and `tau`, the min(m, n) reflector scale factors. L and
Q are derived on access and never cached.

Solving
-------
F.solve(B) computes the minimum-norm solution of A X = B for m <= n:
forward substitution with L on the first m rows, then Q^H applied to the
n-row buffer. F.H.solve(B) solves A^H X = B (least squares when m < n):
Q applied to B, then back substitution with L^H on the first m rows.
"""

from typing import Any, Iterator
import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray

from pylq.core.exceptions import BoundsError, DimensionError
from pylq.core.compute.precision import (
    adjoint_trans,
    complex_dtype,
    convert,
    is_complex,
    lq_dtype,
    promote_types,
)
from pylq.core.protocols import HouseholderBackend
from pylq.core.validation import check_1d, check_2d, check_array
from pylq.lq.adjoint import Adjoint
from pylq.lq.backends import DEFAULT_BACKEND
from pylq.lq.packed_q import LQPackedQ, _buffer, _copy_as, _operand


class LQ:
    """
    LQ factorization A = L Q of an m x n matrix.

    Obtained from pylq.lq(A); can also be rebuilt from stored components
    with LQ(factors, tau). Destructures into its components:

        >>> F = lq(A)
        >>> L, Q = F
        >>> np.allclose(L @ Q, A)
        True

    Attributes:
        factors: Packed factors (m x n)
        tau: Reflector scale factors (min(m, n),)
        backend: HouseholderBackend used for every kernel call
    """

    __array_ufunc__ = None

    def __init__(
        self,
        factors: ArrayLike,
        tau: ArrayLike,
        backend: HouseholderBackend | None = None,
    ):
        """
        Args:
            factors: Packed factors (m x n)
            tau: Reflector scale factors, length min(m, n)
            backend: Kernel provider; defaults to the CPU LAPACK backend

        Raises:
            DimensionError: If len(tau) != min(m, n)
            TypeConversionError: If the buffers cannot share a LAPACK dtype
        """
        factors_arr = check_array(factors, 'factors')
        check_2d(factors_arr, 'factors')
        tau_arr = check_array(tau, 'tau')
        check_1d(tau_arr, 'tau')

        k = min(factors_arr.shape)
        if tau_arr.shape[0] != k:
            raise DimensionError(
                f"tau: expected min{factors_arr.shape} = {k} reflector "
                f"coefficients, got {tau_arr.shape[0]}",
                actual=tau_arr.shape[0],
                expected=k,
            )

        dtype = promote_types(factors_arr.dtype, tau_arr.dtype)
        if factors_arr.dtype != dtype:
            factors_arr = convert(factors_arr, dtype, 'factors')
        if tau_arr.dtype != dtype:
            tau_arr = convert(tau_arr, dtype, 'tau')

        self.factors = factors_arr
        self.tau = tau_arr
        self.backend = backend if backend is not None else DEFAULT_BACKEND

    # --- components ---------------------------------------------------------

    @property
    def L(self) -> NDArray[Any]:
        """Lower-trapezoidal factor (m x min(m, n)), a fresh array."""
        m, n = self.shape
        return np.tril(self.factors[:m, :min(m, n)])

    @property
    def Q(self) -> LQPackedQ:
        """Implicit orthogonal factor sharing this factorization's buffers."""
        return LQPackedQ(self.factors, self.tau, self.backend)

    @property
    def H(self) -> 'AdjointLQ':
        return AdjointLQ(self)

    def __iter__(self) -> Iterator[Any]:
        yield self.L
        yield self.Q

    # --- shape & type -------------------------------------------------------

    @property
    def shape(self) -> tuple[int, int]:
        return self.factors.shape

    @property
    def dtype(self) -> np.dtype:
        return self.factors.dtype

    def size(self, dim: int | None = None) -> Any:
        """
        Shape of the factored matrix, or its extent along a 1-based dimension.

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
            return self.shape[dim - 1]
        return 1

    def copy(self) -> 'LQ':
        """Deep copy of both buffers."""
        return LQ(self.factors.copy(), self.tau.copy(), self.backend)

    __copy__ = copy

    def __deepcopy__(self, memo: dict) -> 'LQ':
        return self.copy()

    def astype(self, dtype: DTypeLike) -> 'LQ':
        """
        Factorization with both buffers converted to dtype.

        Returns self when the dtype already matches.

        Raises:
            TypeConversionError: If a value cannot be represented in dtype
        """
        if np.dtype(dtype) == self.dtype:
            return self
        return LQ(
            convert(self.factors, dtype, 'factors'),
            convert(self.tau, dtype, 'tau'),
            self.backend,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LQ):
            return NotImplemented
        return (
            np.array_equal(self.factors, other.factors)
            and np.array_equal(self.tau, other.tau)
        )

    __hash__ = None

    # --- products -----------------------------------------------------------

    def to_dense(self) -> NDArray[Any]:
        """The factored matrix, L @ Q."""
        return self.L @ self.Q

    def __array__(self, dtype=None, copy=None) -> NDArray[Any]:
        dense = self.to_dense()
        return dense if dtype is None else dense.astype(dtype)

    def lmul(self, B: NDArray[Any]) -> NDArray[Any]:
        """
        Overwrite B with A @ B for m <= n.

        B must have n rows and the factorization's dtype. After the call the
        first m rows hold the product. Returns B.
        """
        m, n = self.shape
        if m > n:
            raise DimensionError(
                f"in-place multiplication needs rows <= columns, factorization is {m} x {n}",
                actual=(m, n),
                expected='rows <= columns',
            )
        self.Q.lmul(B)
        B[:m] = self.L @ B[:m]
        return B

    def __matmul__(self, other: Any) -> Any:
        if isinstance(other, Adjoint):
            T = promote_types(self.dtype, other.dtype)
        else:
            other = _operand(other, 'B')
            T = promote_types(self.dtype, other.dtype)
        F = self.astype(T)
        Y = F.Q @ other
        return F.L @ Y[:min(self.shape)]

    # --- solving ------------------------------------------------------------

    def _check_not_overdetermined(self) -> None:
        m, n = self.shape
        if m > n:
            raise DimensionError(
                "LQ solver does not support overdetermined systems "
                f"(more rows than columns), factorization is {m} x {n}",
                actual=(m, n),
                expected='rows <= columns',
            )

    def solve_inplace(self, B: NDArray[Any]) -> NDArray[Any]:
        """
        Overwrite B with the minimum-norm solution of A X = B[:m].

        B is a caller buffer with n rows and the factorization's dtype; the
        right-hand side occupies its first m rows. Returns B.

        Raises:
            DimensionError: If m > n or B does not have n rows
            SingularMatrixError: If L has a zero on its diagonal
        """
        self._check_not_overdetermined()
        _buffer(B, self.dtype, 'B')
        m, n = self.shape
        if B.shape[0] != n:
            raise DimensionError(
                f"B must have {n} rows (the number of columns of the "
                f"factorization), got {B.shape[0]}",
                actual=B.shape[0],
                expected=n,
            )
        self.backend.solve_triangular(self.L, B[:m], lower=True)
        return self.Q.H.lmul(B)

    def solve(self, B: ArrayLike) -> NDArray[Any]:
        """
        Minimum-norm solution X of A X = B (F \\ B).

        Args:
            B: Right-hand side with m rows (vector or matrix)

        Returns:
            X with n rows, same vector/matrix shape as B

        Raises:
            DimensionError: If m > n or B does not have m rows
            SingularMatrixError: If L has a zero on its diagonal
        """
        self._check_not_overdetermined()
        B_arr = _operand(B, 'B')
        m, n = self.shape
        if B_arr.shape[0] != m:
            raise DimensionError(
                f"B must have {m} rows (the number of rows of the "
                f"factorization), got {B_arr.shape[0]}",
                actual=B_arr.shape[0],
                expected=m,
            )

        if (
            not is_complex(self.dtype)
            and is_complex(B_arr.dtype)
            and lq_dtype(B_arr.dtype) == complex_dtype(self.dtype)
        ):
            return self._solve_complex_rhs(B_arr)

        T = promote_types(self.dtype, B_arr.dtype)
        X = np.zeros((n,) + B_arr.shape[1:], dtype=T)
        X[:m] = B_arr
        return self.astype(T).solve_inplace(X)

    def _solve_complex_rhs(self, B: NDArray[Any]) -> NDArray[Any]:
        # Real factorization, complex right-hand side: solve real and
        # imaginary parts as one real system with twice the columns.
        m, n = self.shape
        B2 = B.reshape(m, -1)
        p = B2.shape[1]

        X = np.zeros((n, 2 * p), dtype=self.dtype)
        X[:m, :p] = B2.real
        X[:m, p:] = B2.imag
        self.solve_inplace(X)

        result = np.empty((n, p), dtype=complex_dtype(self.dtype))
        result.real = X[:, :p]
        result.imag = X[:, p:]
        return result.reshape((n,) + B.shape[1:])

    # --- display ------------------------------------------------------------

    def __repr__(self) -> str:
        return f"LQ(shape={self.shape}, dtype={self.dtype}, backend={self.backend.name!r})"

    def __str__(self) -> str:
        return (
            f"{self!r}\n"
            f"L factor:\n{np.array2string(self.L)}\n"
            f"Q factor:\n{np.array2string(self.Q.to_dense())}"
        )


class AdjointLQ:
    """
    Adjoint A^H of a factored matrix, obtained as F.H.

    Supports solving A^H X = B, which needs the adjoint operator to have at
    least as many rows as columns (m <= n for the factorization).

    Attributes:
        parent: The LQ factorization this is the adjoint of
    """

    __array_ufunc__ = None

    def __init__(self, parent: LQ):
        self.parent = parent

    @property
    def shape(self) -> tuple[int, int]:
        m, n = self.parent.shape
        return n, m

    @property
    def dtype(self) -> np.dtype:
        return self.parent.dtype

    @property
    def H(self) -> LQ:
        return self.parent

    def to_dense(self) -> NDArray[Any]:
        return np.ascontiguousarray(self.parent.to_dense().conj().T)

    def __array__(self, dtype=None, copy=None) -> NDArray[Any]:
        dense = self.to_dense()
        return dense if dtype is None else dense.astype(dtype)

    def __matmul__(self, other: Any) -> Any:
        # A^H B = Q^H (L^H B)
        B = other.materialize() if isinstance(other, Adjoint) else _operand(other, 'B')
        m, n = self.parent.shape
        if B.shape[0] != m:
            raise DimensionError(
                f"first dimension of B, {B.shape[0]}, must equal {m}",
                actual=B.shape[0],
                expected=m,
            )
        T = promote_types(self.dtype, B.dtype)
        F = self.parent.astype(T)
        Y = F.L.conj().T @ B
        return F.Q.H @ Y

    def _check_not_underdetermined(self) -> None:
        m, n = self.parent.shape
        if m > n:
            raise DimensionError(
                "solver does not support underdetermined systems "
                f"(more columns than rows), adjoint operator is {n} x {m}",
                actual=(n, m),
                expected='rows >= columns',
            )

    def solve_inplace(self, B: NDArray[Any]) -> NDArray[Any]:
        """
        Overwrite B so that its first m rows solve A^H X = B.

        B is a caller buffer with n rows and the factorization's dtype.
        Returns B.
        """
        self._check_not_underdetermined()
        F = self.parent
        _buffer(B, F.dtype, 'B')
        m, n = F.shape
        if B.shape[0] != n:
            raise DimensionError(
                f"B must have {n} rows, got {B.shape[0]}",
                actual=B.shape[0],
                expected=n,
            )
        F.Q.lmul(B)
        F.backend.solve_triangular(F.L, B[:m], lower=True, trans=adjoint_trans(F.dtype))
        return B

    def solve(self, B: ArrayLike) -> NDArray[Any]:
        """
        Solution X of A^H X = B (F^H \\ B), least squares when m < n.

        Args:
            B: Right-hand side with n rows

        Returns:
            X with m rows
        """
        self._check_not_underdetermined()
        B_arr = _operand(B, 'B')
        m, n = self.parent.shape
        if B_arr.shape[0] != n:
            raise DimensionError(
                f"B must have {n} rows (the number of rows of the adjoint), "
                f"got {B_arr.shape[0]}",
                actual=B_arr.shape[0],
                expected=n,
            )
        T = promote_types(self.dtype, B_arr.dtype)
        X = _copy_as(B_arr, T)
        self.parent.astype(T).H.solve_inplace(X)
        return X[:m].copy()

    def __repr__(self) -> str:
        return f"AdjointLQ(shape={self.shape}, dtype={self.dtype})"
