"""
Shared compute infrastructure for PyDGP.

Domain backends live in {domain}/backends/. This package holds what they
share: device selection, section timing and the QR least-squares kernel.
"""

from pydgp.core.compute.device import CPU, DeviceInfo, detect_gpu, select_device
from pydgp.core.compute.timing import Timer

__all__ = [
    "CPU",
    "DeviceInfo",
    "detect_gpu",
    "select_device",
    "Timer",
]
