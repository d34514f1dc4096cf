"""Recovery backends: IRLS for the reference Poisson fit."""

from pydgp.recovery.backends.cpu_glm import CPUIRLSBackend

__all__ = [
    "CPUIRLSBackend",
]
