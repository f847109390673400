"""
Hardware detection and device selection.

The GPU kernels rely on torch.geqrf, torch.ormqr and
torch.linalg.householder_product, which PyTorch implements for CUDA but not
for Apple's MPS backend. Detection therefore reports MPS devices but only
CUDA devices are selected for Householder work.
"""

from dataclasses import dataclass
from typing import Literal
import platform


@dataclass(frozen=True)
class DeviceInfo:
    """
    Information about a compute device.

    Attributes:
        device_type: Type of device ('cpu', 'cuda', 'mps')
        device_index: Device index (None for CPU)
        name: Human-readable device name
        memory_bytes: Total device memory in bytes (None if unknown)
    """
    device_type: Literal['cpu', 'cuda', 'mps']
    device_index: int | None
    name: str
    memory_bytes: int | None

    def __str__(self) -> str:
        if self.device_type == 'cpu':
            return f"CPU ({self.name})"
        mem_str = ""
        if self.memory_bytes is not None:
            mem_gb = self.memory_bytes / (1024**3)
            mem_str = f", {mem_gb:.1f}GB"
        return f"{self.device_type.upper()}:{self.device_index} ({self.name}{mem_str})"

    @property
    def is_gpu(self) -> bool:
        """True if this is a GPU device."""
        return self.device_type in ('cuda', 'mps')

    @property
    def supports_householder(self) -> bool:
        """True if the reflector kernels can run on this device."""
        return self.device_type in ('cpu', 'cuda')

    @property
    def torch_device(self) -> str:
        """Device string understood by torch.device()."""
        if self.device_type == 'cuda':
            return f"cuda:{self.device_index}"
        return self.device_type


def detect_gpu() -> DeviceInfo | None:
    """
    Detect available GPU, if any.

    Returns:
        DeviceInfo for the best available GPU, or None if no GPU available.

    Priority: CUDA > MPS (Apple Silicon)

    Note:
        This function imports torch lazily to avoid import overhead
        when GPU detection isn't needed.
    """
    try:
        import torch
    except ImportError:
        return None

    if torch.cuda.is_available():
        idx = torch.cuda.current_device()
        props = torch.cuda.get_device_properties(idx)
        return DeviceInfo(
            device_type='cuda',
            device_index=idx,
            name=props.name,
            memory_bytes=props.total_memory,
        )

    if hasattr(torch.backends, 'mps') and torch.backends.mps.is_available():
        return DeviceInfo(
            device_type='mps',
            device_index=0,
            name='Apple Silicon GPU',
            memory_bytes=None,
        )

    return None


def get_cpu_info() -> DeviceInfo:
    """DeviceInfo for the CPU."""
    processor = platform.processor()
    if not processor:
        processor = platform.machine() or "Unknown CPU"

    return DeviceInfo(
        device_type='cpu',
        device_index=None,
        name=processor,
        memory_bytes=None,
    )


def select_device(prefer: Literal['cpu', 'gpu', 'auto'] = 'auto') -> DeviceInfo:
    """
    Select compute device for Householder kernels.

    Args:
        prefer: Device preference
            - 'cpu': Always use CPU
            - 'gpu': Require a CUDA GPU (raises if unavailable)
            - 'auto': Use a CUDA GPU if available, else CPU

    Returns:
        DeviceInfo for selected device

    Raises:
        RuntimeError: If 'gpu' requested but no usable GPU available
    """
    if prefer == 'cpu':
        return get_cpu_info()

    gpu = detect_gpu()

    if prefer == 'gpu':
        if gpu is None:
            raise RuntimeError(
                "GPU requested but no GPU available. "
                "Ensure PyTorch is installed with CUDA support."
            )
        if not gpu.supports_householder:
            raise RuntimeError(
                f"{gpu} does not implement Householder kernels "
                f"(geqrf/ormqr). Use backend='cpu'."
            )
        return gpu

    if gpu is not None and gpu.supports_householder:
        return gpu
    return get_cpu_info()
