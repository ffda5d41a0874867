from __future__ import annotations

from typing import Protocol

from pinchspace.core.config import SmoothingMethod, SmoothingParams
from pinchspace.core.kalman import ScalarKalman
from pinchspace.core.one_euro import OneEuro


class Smoother(Protocol):
    """One scalar stream. Exactly one per tracked axis per hand slot."""

    @property
    def initialized(self) -> bool: ...

    def filter(self, value: float, t_ms: float) -> float: ...

    def reset(self) -> None: ...


def make_smoother(params: SmoothingParams) -> Smoother:
    if params.method == SmoothingMethod.KALMAN:
        k = params.kalman
        return ScalarKalman(
            process_noise=k.process_noise,
            measurement_noise=k.measurement_noise,
            initial_covariance=k.initial_covariance,
        )
    e = params.one_euro
    return OneEuro(min_cutoff=e.min_cutoff_hz, beta=e.beta, d_cutoff=e.d_cutoff_hz)
