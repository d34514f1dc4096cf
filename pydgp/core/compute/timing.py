"""
Wall-clock timing of named sections.

Every backend records a Timer breakdown in Result.timing. GPU backends
pass sync_cuda=True so queued kernels are finished before a clock is read.
"""

import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Total time plus accumulated per-section times.

    Usage:
        timer = Timer()
        timer.start()
        with timer.section('parameters'):
            intercept = rng.normal(np.log(4), 0.1)
        with timer.section('outcomes'):
            outcome = rng.poisson(rate)
        timer.stop()
        timer.result()
        # {'total_seconds': 0.0004, 'parameters': 0.0001, 'outcomes': 0.0002}

    A section entered repeatedly (e.g. once per coverage replicate)
    accumulates.
    """

    def __init__(self, sync_cuda: bool = False):
        self._sync_cuda = sync_cuda
        self._sections: dict[str, float] = {}
        self._t0: float | None = None
        self._total: float | None = None

    def _now(self) -> float:
        if self._sync_cuda:
            import torch
            if torch.cuda.is_available():
                torch.cuda.synchronize()
        return time.perf_counter()

    def start(self) -> None:
        self._t0 = self._now()

    def stop(self) -> None:
        if self._t0 is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = self._now() - self._t0

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        t0 = self._now()
        try:
            yield
        finally:
            self._sections[name] = self._sections.get(name, 0.0) + (self._now() - t0)

    def result(self) -> dict[str, float]:
        """
        Timing breakdown: 'total_seconds' followed by each section.

        Raises:
            RuntimeError: If called before stop()
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")
        return {'total_seconds': self._total, **self._sections}
