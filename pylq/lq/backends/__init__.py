"""
Kernel backends for the LQ factorization.

cpu: LAPACK via SciPy (reference)
gpu: PyTorch on CUDA (imported lazily, torch is optional)
"""

from pylq.lq.backends.cpu import CPULapackBackend, DEFAULT_BACKEND

__all__ = [
    "CPULapackBackend",
    "DEFAULT_BACKEND",
]
