import math

import pytest

from pinchspace.core.config import SmoothingMethod, SmoothingParams
from pinchspace.core.kalman import ScalarKalman
from pinchspace.core.one_euro import OneEuro
from pinchspace.core.smoothing import make_smoother


def test_one_euro_first_call_returns_input():
    f = OneEuro()
    assert f.initialized is False
    assert f.filter(42.0, 1000) == 42.0
    assert f.initialized is True


def test_one_euro_constant_input_converges():
    f = OneEuro(min_cutoff=1.0, beta=0.007)
    t = 0
    out = f.filter(10.0, t)
    for _ in range(200):
        t += 16
        out = f.filter(10.0, t)
    assert out == pytest.approx(10.0)


def test_one_euro_tracks_static_signal_after_step():
    f = OneEuro()
    t = 0
    f.filter(0.0, t)
    for _ in range(600):
        t += 16
        out = f.filter(50.0, t)
    assert out == pytest.approx(50.0, abs=1e-3)


def test_one_euro_smooths_jitter():
    f = OneEuro(min_cutoff=1.0, beta=0.007)
    t = 0
    f.filter(50.0, t)
    outs = []
    for i in range(60):
        t += 16
        outs.append(f.filter(50.0 + (1.0 if i % 2 else -1.0), t))
    # raw swings by 2.0 every frame; filtered swing must be much smaller
    swings = [abs(a - b) for a, b in zip(outs[20:], outs[21:])]
    assert max(swings) < 0.5


def test_one_euro_fast_motion_lags_less_than_slow_filter():
    fast = OneEuro(min_cutoff=1.0, beta=1.0)
    slow = OneEuro(min_cutoff=1.0, beta=0.0)
    t = 0
    fast.filter(0.0, t)
    slow.filter(0.0, t)
    for i in range(1, 10):
        t += 16
        a = fast.filter(i * 5.0, t)
        b = slow.filter(i * 5.0, t)
    assert abs(45.0 - a) < abs(45.0 - b)


def test_one_euro_duplicate_timestamp_is_finite():
    f = OneEuro()
    f.filter(1.0, 500)
    out = f.filter(2.0, 500)
    assert math.isfinite(out)
    assert 1.0 <= out <= 2.0


def test_one_euro_reset_reseeds():
    f = OneEuro()
    t = 0
    for i in range(20):
        f.filter(float(i), t)
        t += 16
    f.reset()
    assert f.initialized is False
    assert f.filter(-7.5, t) == -7.5


def test_kalman_first_call_seeds():
    k = ScalarKalman()
    assert k.filter(3.0) == 3.0
    assert k.initialized


def test_kalman_moves_toward_measurement_by_gain():
    k = ScalarKalman(process_noise=1.0, measurement_noise=1.0, initial_covariance=1.0)
    k.filter(0.0)
    # p = 1 + 1 = 2, gain = 2 / 3
    out = k.filter(3.0)
    assert out == pytest.approx(2.0)
    assert k.p == pytest.approx(2.0 / 3.0)


def test_kalman_constant_input_converges():
    k = ScalarKalman()
    k.filter(0.0)
    for _ in range(300):
        out = k.filter(25.0)
    assert out == pytest.approx(25.0, abs=1e-2)


def test_kalman_reset_restores_covariance():
    k = ScalarKalman(initial_covariance=4.0)
    for v in (1.0, 2.0, 3.0):
        k.filter(v)
    k.reset()
    assert not k.initialized
    assert k.p == 4.0
    assert k.filter(9.0, 1234) == 9.0


def test_make_smoother_picks_method():
    assert isinstance(make_smoother(SmoothingParams()), OneEuro)
    assert isinstance(make_smoother(SmoothingParams(method=SmoothingMethod.KALMAN)), ScalarKalman)
