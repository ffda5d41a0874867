from __future__ import annotations


class ScalarKalman:
    """
    1D Kalman filter for a position stream (constant-position model).

    Drop-in alternative to OneEuro: filter() takes an optional timestamp
    so both fit the same smoothing slot. The timestamp is ignored.
    """

    def __init__(self, process_noise: float = 0.05, measurement_noise: float = 2.0,
                 initial_covariance: float = 1.0):
        self.q = float(process_noise)
        self.r = float(measurement_noise)
        self.p0 = float(initial_covariance)

        self.x = 0.0
        self.p = self.p0
        self.initialized = False

    def reset(self):
        self.x = 0.0
        self.p = self.p0
        self.initialized = False

    def filter(self, z: float, t_ms: float | None = None) -> float:
        if not self.initialized:
            self.x = z
            self.initialized = True
            return z

        # predict
        self.p += self.q

        # update
        k = self.p / (self.p + self.r)
        self.x += k * (z - self.x)
        self.p *= (1.0 - k)
        return self.x
