"""
Lazy adjoint wrapper for dense operands.

`adjoint(B)` returns an Adjoint view of a dense array instead of computing
B^H right away. Multiplying it against an implicit Q materializes the
conjugate transpose into a fresh buffer of the working dtype, since the
reflector kernels only operate on concrete in-memory buffers.

For factorizations and implicit operators, `adjoint(x)` is `x.H`.
"""

from typing import Any
import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray

from pylq.core.compute.precision import is_complex
from pylq.core.validation import check_array, check_vector_or_matrix


class Adjoint:
    """
    Conjugate transpose of a dense vector or matrix, not yet computed.

    A 1D parent is treated as a column, so its adjoint is a 1 x r row.

    Attributes:
        parent: The wrapped array
    """

    def __init__(self, parent: ArrayLike):
        arr = check_array(parent, 'B')
        check_vector_or_matrix(arr, 'B')
        self.parent = arr

    @property
    def dtype(self) -> np.dtype:
        return self.parent.dtype

    @property
    def shape(self) -> tuple[int, int]:
        if self.parent.ndim == 1:
            return (1, self.parent.shape[0])
        return (self.parent.shape[1], self.parent.shape[0])

    @property
    def H(self) -> NDArray[Any]:
        return self.parent

    def materialize(self, dtype: DTypeLike | None = None) -> NDArray[Any]:
        """Explicit conjugate-transpose copy into a fresh C-ordered buffer."""
        out = np.empty(self.shape, dtype=self.dtype if dtype is None else dtype)
        parent = self.parent.reshape(self.parent.shape[0], -1)
        out[...] = parent.T.conj() if is_complex(parent.dtype) else parent.T
        return out

    to_dense = materialize

    def __array__(self, dtype=None, copy=None) -> NDArray[Any]:
        return self.materialize(dtype)

    def __matmul__(self, other: Any) -> Any:
        if isinstance(other, np.ndarray):
            return self.materialize() @ other
        # implicit operators handle adjoint operands in __rmatmul__
        return NotImplemented

    def __repr__(self) -> str:
        return f"Adjoint(shape={self.shape}, dtype={self.dtype})"


def adjoint(x: Any) -> Any:
    """
    Adjoint of a factorization, an implicit operator or a dense operand.

    Factorizations and operators return their `.H`; arrays are wrapped in a
    lazy Adjoint so that products against Q can materialize them once, in
    the promoted dtype.
    """
    if isinstance(x, Adjoint):
        return x.parent
    if not isinstance(x, np.ndarray) and hasattr(x, 'H'):
        return x.H
    return Adjoint(x)
