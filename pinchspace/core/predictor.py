from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class VelocitySample:
    x: float
    y: float
    vx: float   # units per ms
    vy: float
    dt: float   # ms since previous sample
    t: float


class VelocityPredictor:
    """
    Short position history + recency-weighted velocity.
    Extrapolates a few frames ahead to hide pipeline latency.
    """

    def __init__(self, capacity: int = 5, frame_interval_ms: float = 16.67,
                 default_dt_ms: float = 16.0):
        self.capacity = int(capacity)
        self.frame_interval_ms = float(frame_interval_ms)
        self.default_dt_ms = float(default_dt_ms)
        self._hist: deque[VelocitySample] = deque(maxlen=self.capacity)

    def __len__(self) -> int:
        return len(self._hist)

    @property
    def samples(self) -> Tuple[VelocitySample, ...]:
        return tuple(self._hist)

    def reset(self) -> None:
        self._hist.clear()

    def update(self, x: float, y: float, t_ms: float) -> VelocitySample:
        if not self._hist:
            s = VelocitySample(x=x, y=y, vx=0.0, vy=0.0, dt=self.default_dt_ms, t=t_ms)
        else:
            prev = self._hist[-1]
            dt = t_ms - prev.t
            if dt <= 0:
                dt = self.default_dt_ms
            s = VelocitySample(x=x, y=y, vx=(x - prev.x) / dt, vy=(y - prev.y) / dt, dt=dt, t=t_ms)
        self._hist.append(s)
        return s

    def velocity(self) -> Tuple[float, float]:
        """Linearly weighted average velocity, newest sample weighs most."""
        n = len(self._hist)
        if n == 0:
            return 0.0, 0.0
        total = n * (n + 1) / 2.0
        vx = sum((i + 1) * s.vx for i, s in enumerate(self._hist)) / total
        vy = sum((i + 1) * s.vy for i, s in enumerate(self._hist)) / total
        return vx, vy

    def predict(self, frames_ahead: float) -> Optional[Tuple[float, float]]:
        if not self._hist:
            return None
        last = self._hist[-1]
        if len(self._hist) < 2:
            return last.x, last.y
        vx, vy = self.velocity()
        horizon = frames_ahead * self.frame_interval_ms
        return last.x + vx * horizon, last.y + vy * horizon
