"""
PyLQ: LQ factorization with an implicit orthogonal factor.

Computes A = L Q for real or complex matrices and applies Q, in every
left/right and direct/adjoint combination, without forming it. Solves
underdetermined systems (minimum-norm) and adjoint systems (least squares)
through the factorization.

Submodules:
    lq: Factorization, implicit Q, solvers and kernel backends
    core: Exceptions, validation, dtype promotion, compute kernels
"""

__version__ = "0.1.0"

import logging as _logging

from pylq.lq import (
    LQ,
    AdjointLQ,
    LQPackedQ,
    AdjointLQPackedQ,
    Adjoint,
    adjoint,
    lq,
    lq_inplace,
    solve,
)
from pylq.core.exceptions import (
    PyLQError,
    ValidationError,
    DimensionError,
    BoundsError,
    TypeConversionError,
    NumericalError,
    SingularMatrixError,
)

# Users opt in to log output; the library only emits debug records.
_logging.getLogger(__name__).addHandler(_logging.NullHandler())

__all__ = [
    "__version__",
    "lq",
    "lq_inplace",
    "solve",
    "adjoint",
    "LQ",
    "AdjointLQ",
    "LQPackedQ",
    "AdjointLQPackedQ",
    "Adjoint",
    "PyLQError",
    "ValidationError",
    "DimensionError",
    "BoundsError",
    "TypeConversionError",
    "NumericalError",
    "SingularMatrixError",
]
