"""
Simulation backends.

CPUPoissonDGPBackend is always available. GPUPoissonDGPBackend needs
PyTorch and is imported lazily by the solver.
"""

from pydgp.simulation.backends.cpu import CPUPoissonDGPBackend

__all__ = [
    "CPUPoissonDGPBackend",
]
