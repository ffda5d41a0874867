from __future__ import annotations
import math

MIN_DT_S = 0.001


def _alpha(cutoff_hz: float, dt: float) -> float:
    # smoothing factor from cutoff frequency
    tau = 1.0 / (2.0 * math.pi * cutoff_hz)
    return 1.0 / (1.0 + tau / dt)


class LowPass:
    def __init__(self, x0: float = 0.0, seeded: bool = False):
        self._x0 = x0
        self._seeded = seeded
        self.x = x0
        self.initialized = seeded

    def reset(self):
        self.x = self._x0
        self.initialized = self._seeded

    def apply(self, x: float, a: float) -> float:
        if not self.initialized:
            self.x = x
            self.initialized = True
            return x
        self.x = a * x + (1.0 - a) * self.x
        return self.x


class OneEuro:
    """
    One Euro Filter (Casiez et al. 2012).
    Smooths jitter when slow, low latency when fast.

    Timestamps are in milliseconds. The first call after construction or
    reset() returns the input unchanged and seeds the state.
    """

    def __init__(self, min_cutoff: float = 1.0, beta: float = 0.007, d_cutoff: float = 1.0):
        self.min_cutoff = float(min_cutoff)
        self.beta = float(beta)
        self.d_cutoff = float(d_cutoff)

        self._x = LowPass()
        # derivative estimate starts from rest, not from the first sample
        self._dx = LowPass(0.0, seeded=True)
        self._last_t: float | None = None

    @property
    def initialized(self) -> bool:
        return self._last_t is not None

    def reset(self):
        self._x.reset()
        self._dx.reset()
        self._last_t = None

    def filter(self, x: float, t_ms: float) -> float:
        if self._last_t is None:
            self._last_t = t_ms
            return self._x.apply(x, 1.0)

        dt = max((t_ms - self._last_t) / 1000.0, MIN_DT_S)
        self._last_t = t_ms

        # derivative of signal against the previous filtered value
        dx = (x - self._x.x) / dt
        edx = self._dx.apply(dx, _alpha(self.d_cutoff, dt))

        cutoff = self.min_cutoff + self.beta * abs(edx)
        return self._x.apply(x, _alpha(cutoff, dt))
