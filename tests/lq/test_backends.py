"""
Tests for backend selection and the backend protocol.

GPU tests compare the PyTorch backend with the LAPACK reference and are
skipped automatically when CUDA is not available.
"""

import pytest
import numpy as np

from pylq import lq
from pylq.core.compute import device
from pylq.core.protocols import HouseholderBackend, OrthogonalOperator
from pylq.lq.backends import CPULapackBackend, DEFAULT_BACKEND
from pylq.lq.solvers import _get_backend


def _cuda_available():
    try:
        import torch
        return torch.cuda.is_available()
    except ImportError:
        return False


class CountingBackend(CPULapackBackend):
    """LAPACK backend that records which kernels were called."""

    def __init__(self):
        self.calls = []

    def expand(self, factors, tau):
        self.calls.append('expand')
        return super().expand(factors, tau)

    def apply(self, side, trans, factors, tau, C):
        self.calls.append(('apply', side, trans))
        return super().apply(side, trans, factors, tau, C)


# =====================================================================
# Selection
# =====================================================================

class TestBackendSelection:

    def test_cpu_aliases(self):
        assert _get_backend('cpu') is DEFAULT_BACKEND
        assert _get_backend('cpu_lapack') is DEFAULT_BACKEND

    def test_instance_passes_through(self):
        backend = CountingBackend()
        assert _get_backend(backend) is backend

    def test_unknown_string(self):
        with pytest.raises(ValueError, match="Unknown backend"):
            _get_backend('fpga')

    def test_non_backend_object(self):
        with pytest.raises(ValueError, match="Unknown backend"):
            _get_backend(42)

    def test_auto_falls_back_to_cpu(self, monkeypatch):
        monkeypatch.setattr(device, 'detect_gpu', lambda: None)
        assert _get_backend('auto') is DEFAULT_BACKEND

    def test_gpu_unavailable(self, monkeypatch):
        monkeypatch.setattr(device, 'detect_gpu', lambda: None)
        with pytest.raises(RuntimeError):
            _get_backend('gpu')

    def test_protocol_conformance(self):
        assert isinstance(DEFAULT_BACKEND, HouseholderBackend)
        assert DEFAULT_BACKEND.name == 'cpu_lapack'


class TestOperatorProtocol:

    def test_Q_and_adjoint_are_operators(self, randmat):
        Q = lq(randmat((3, 4))).Q
        assert isinstance(Q, OrthogonalOperator)
        assert isinstance(Q.H, OrthogonalOperator)


# =====================================================================
# Kernel dispatch
# =====================================================================

class TestKernelDispatch:
    """Products and solves go through apply, never expand."""

    @pytest.fixture
    def counted(self, randmat):
        backend = CountingBackend()
        F = lq(randmat((3, 5)), backend=backend)
        backend.calls.clear()
        return F, backend

    def test_factorization_keeps_backend(self, counted):
        F, backend = counted
        assert F.backend is backend
        assert F.Q.backend is backend
        assert F.copy().backend is backend

    def test_products_do_not_expand(self, counted, randmat):
        F, backend = counted
        F.Q @ randmat((5, 2))
        F.Q.H @ randmat((3, 2))
        randmat((2, 3)) @ F.Q
        randmat((2, 5)) @ F.Q.H
        F.solve(randmat(3))
        F.H.solve(randmat(5))
        assert 'expand' not in backend.calls
        assert backend.calls == [
            ('apply', 'L', 'N'),
            ('apply', 'L', 'T'),
            ('apply', 'R', 'N'),
            ('apply', 'R', 'T'),
            ('apply', 'L', 'T'),
            ('apply', 'L', 'N'),
        ]

    def test_complex_adjoint_uses_conjugate_transpose(self, randmat):
        backend = CountingBackend()
        F = lq(randmat((3, 5), np.complex128), backend=backend)
        backend.calls.clear()
        F.Q.H @ randmat(5, np.complex128)
        assert backend.calls == [('apply', 'L', 'C')]

    def test_dense_form_expands_once(self, counted):
        F, backend = counted
        np.asarray(F.Q)
        assert backend.calls == ['expand']


# =====================================================================
# GPU
# =====================================================================

@pytest.mark.skipif(not _cuda_available(), reason="CUDA not available")
class TestGPUBackend:
    """PyTorch backend against the LAPACK reference."""

    def test_factor_matches_cpu(self, randmat, dtype, shape, assert_close):
        A = randmat(shape, dtype)
        cpu = lq(A)
        gpu = lq(A, backend='gpu')
        assert gpu.backend.name == 'gpu_torch'
        assert_close(gpu.factors, cpu.factors, dtype)
        assert_close(gpu.tau, cpu.tau, dtype)

    def test_products_match_cpu(self, randmat, dtype, assert_close):
        A = randmat((3, 5), dtype)
        cpu, gpu = lq(A), lq(A, backend='gpu')
        B = randmat((5, 2), dtype)
        assert_close(gpu.Q @ B, cpu.Q @ B, dtype)
        assert_close(gpu.Q.H @ B[:3], cpu.Q.H @ B[:3], dtype)
        assert_close(B.T @ gpu.Q.H, B.T @ cpu.Q.H, dtype)
        assert_close(gpu.Q.to_dense(), cpu.Q.to_dense(), dtype)

    def test_solves_match_cpu(self, randmat, dtype, assert_close):
        A = randmat((3, 5), dtype)
        cpu, gpu = lq(A), lq(A, backend='gpu')
        b = randmat(3, dtype)
        c = randmat(5, dtype)
        assert_close(gpu.solve(b), cpu.solve(b), dtype, scale=1000)
        assert_close(gpu.H.solve(c), cpu.H.solve(c), dtype, scale=1000)

    def test_round_trip(self, randmat):
        A = randmat((3, 4))
        F = lq(A, backend='gpu')
        np.testing.assert_allclose(F.to_dense(), A, atol=1e-10)
