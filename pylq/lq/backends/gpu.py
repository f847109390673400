"""
GPU backend for the LQ factorization using PyTorch.

Performance path for large problems - validated against the CPU reference.
Requires CUDA: torch.geqrf and torch.ormqr have no MPS implementation.

Buffers stay NumPy arrays on the host. Each kernel call moves its inputs to
the device, runs there, and writes the result back into the caller's
buffer, so the in-place contracts of the CPU backend hold unchanged.
"""

from typing import Any
from numpy.typing import NDArray

from pylq.core.compute.linalg.householder import (
    householder_apply_gpu,
    householder_expand_gpu,
    householder_factor_gpu,
    triangular_solve_gpu,
)


class GPUTorchBackend:
    """
    GPU backend using PyTorch on CUDA.

    Implements the HouseholderBackend protocol. All four LAPACK dtypes are
    supported; float64 is slow on consumer GPUs but exact to the CPU
    reference tolerance.
    """

    def __init__(self, device: str = 'cuda'):
        """
        Initialize GPU backend.

        Args:
            device: CUDA device ('cuda', 'cuda:0', ...)

        Raises:
            RuntimeError: If CUDA is not available
            ValueError: If device is not a CUDA device
        """
        import torch

        if not device.startswith('cuda'):
            raise ValueError(
                f"Unknown GPU device: {device!r}. Householder kernels require 'cuda'."
            )
        if not torch.cuda.is_available():
            raise RuntimeError(
                "CUDA not available. Install PyTorch with CUDA support, "
                "or use backend='cpu'."
            )
        self.device = device
        self.device_name = torch.cuda.get_device_properties(torch.device(device)).name

    @property
    def name(self) -> str:
        return 'gpu_torch'

    def factor(
        self, A: NDArray[Any], overwrite_a: bool = False
    ) -> tuple[NDArray[Any], NDArray[Any]]:
        factors, tau = householder_factor_gpu(A, self.device)
        if overwrite_a:
            A[...] = factors
            return A, tau
        return factors, tau

    def expand(self, factors: NDArray[Any], tau: NDArray[Any]) -> NDArray[Any]:
        return householder_expand_gpu(factors, tau, self.device)

    def apply(
        self,
        side: str,
        trans: str,
        factors: NDArray[Any],
        tau: NDArray[Any],
        C: NDArray[Any],
    ) -> NDArray[Any]:
        return householder_apply_gpu(side, trans, factors, tau, C, self.device)

    def solve_triangular(
        self,
        T: NDArray[Any],
        B: NDArray[Any],
        lower: bool,
        trans: str = 'N',
    ) -> NDArray[Any]:
        return triangular_solve_gpu(T, B, lower, trans, self.device)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(device={self.device!r})"
