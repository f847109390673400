"""
Shared compute infrastructure for PyLQ.

Submodules:
    precision: LAPACK dtypes, promotion table, checked conversion
    tolerances: Tolerance tiers per precision
    device: Hardware detection and device selection
    linalg: Householder reflector kernels (CPU and GPU)
"""

from pylq.core.compute.device import (
    DeviceInfo,
    detect_gpu,
    get_cpu_info,
    select_device,
)
from pylq.core.compute.precision import lq_dtype, promote_types
from pylq.core.compute.tolerances import ToleranceTier, select_tolerance

__all__ = [
    # Device detection
    "DeviceInfo",
    "detect_gpu",
    "get_cpu_info",
    "select_device",
    # Precision
    "lq_dtype",
    "promote_types",
    # Tolerances
    "ToleranceTier",
    "select_tolerance",
]
