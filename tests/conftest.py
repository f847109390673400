"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


LAPACK_DTYPES = [np.float32, np.float64, np.complex64, np.complex128]


def random_matrix(rng, shape, dtype=np.float64):
    """Standard-normal matrix (complex when dtype is complex)."""
    dtype = np.dtype(dtype)
    M = rng.standard_normal(shape)
    if np.issubdtype(dtype, np.complexfloating):
        M = M + 1j * rng.standard_normal(shape)
    return M.astype(dtype)


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture(params=LAPACK_DTYPES, ids=lambda d: np.dtype(d).name)
def dtype(request):
    """Each LAPACK element type."""
    return np.dtype(request.param)


@pytest.fixture(params=[(3, 5), (4, 4), (5, 3)], ids=['wide', 'square', 'tall'])
def shape(request):
    """Wide (m < n), square and tall (m > n) shapes."""
    return request.param


@pytest.fixture
def example_matrix():
    """The 2x2 worked example with known L and Q."""
    return np.array([[5.0, 7.0], [-2.0, -4.0]])


@pytest.fixture
def randmat(rng):
    """Factory for seeded random matrices: randmat(shape, dtype=np.float64)."""
    def make(shape, dtype=np.float64):
        return random_matrix(rng, shape, dtype)
    return make


@pytest.fixture
def assert_close():
    """assert_allclose with the tolerance tier of a dtype, widened for products."""
    from pylq.core.compute.tolerances import select_tolerance

    def check(actual, desired, dtype, scale=100):
        tol = select_tolerance(np.dtype(dtype))
        np.testing.assert_allclose(
            actual, desired, rtol=tol.rtol * scale, atol=tol.atol * scale
        )
    return check
