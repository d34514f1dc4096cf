"""
Accelerator detection for backend dispatch.

torch is imported lazily, so a CPU-only install never touches it.
"""

from dataclasses import dataclass
from typing import Literal


DeviceType = Literal['cpu', 'cuda', 'mps']


@dataclass(frozen=True)
class DeviceInfo:
    """Where a simulation runs. ``name`` is for display only."""
    device_type: DeviceType
    name: str

    @property
    def is_gpu(self) -> bool:
        return self.device_type != 'cpu'

    def __str__(self) -> str:
        return f"{self.device_type} ({self.name})"


CPU = DeviceInfo(device_type='cpu', name='numpy')


def detect_gpu() -> DeviceInfo | None:
    """CUDA if visible, else MPS, else None. Also None without PyTorch."""
    try:
        import torch
    except ImportError:
        return None

    if torch.cuda.is_available():
        name = torch.cuda.get_device_name(torch.cuda.current_device())
        return DeviceInfo(device_type='cuda', name=name)

    mps = getattr(torch.backends, 'mps', None)
    if mps is not None and mps.is_available():
        return DeviceInfo(device_type='mps', name='Apple Silicon GPU')

    return None


def select_device(prefer: Literal['cpu', 'gpu', 'auto'] = 'auto') -> DeviceInfo:
    """
    Resolve a backend preference to a device.

    'cpu' never probes for a GPU; 'auto' falls back to the CPU; 'gpu'
    insists on one.

    Raises:
        ValueError: If prefer is not one of the three choices
        RuntimeError: If 'gpu' requested but no GPU available
    """
    if prefer not in ('cpu', 'gpu', 'auto'):
        raise ValueError(f"Unknown device preference: {prefer!r}")
    if prefer == 'cpu':
        return CPU

    gpu = detect_gpu()
    if gpu is not None:
        return gpu
    if prefer == 'gpu':
        raise RuntimeError(
            "backend='gpu' needs PyTorch with CUDA or MPS support; no GPU was found"
        )
    return CPU
