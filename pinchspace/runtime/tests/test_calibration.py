import pytest

from pinchspace.core.config import DEFAULT_PRESET, apply_profile
from pinchspace.core.geometry import hand_size, pinch_distance
from pinchspace.runtime.calibration import (
    MIN_BAND, CalibResult, Calibrator, load_profile, percentile, save_profile,
)
from pinchspace.sensor.fake import synthetic_hand


def ratio(hand):
    return pinch_distance(hand.landmarks) / hand_size(hand.landmarks)


def test_percentile():
    assert percentile([], 50) is None
    assert percentile([3, 1, 2], 0) == 1
    assert percentile([3, 1, 2], 100) == 3
    assert percentile([1, 2, 3, 4, 5], 50) == 3


def test_wizard_collects_open_then_pinch():
    cal = Calibrator()
    cal.start(0)
    assert "1/2" in cal.instruction()

    open_hand = synthetic_hand(0.5, 0.5, pinch=False)
    pinched = synthetic_hand(0.5, 0.5, pinch=True)
    for t in range(0, 3001, 100):
        cal.update(open_hand, t)
    cal.update(pinched, 3100)   # step boundary, sample dropped
    assert "2/2" in cal.instruction()
    for t in range(3200, 6300, 100):
        cal.update(pinched, t)
    assert cal.done

    r = cal.finalize()
    assert r.samples_open == 31
    assert r.samples_pinch == 30
    lo, hi = ratio(pinched), ratio(open_hand)
    assert r.entry_ratio == pytest.approx(lo + 0.35 * (hi - lo))
    assert r.release_ratio == pytest.approx(lo + 0.60 * (hi - lo))


def test_missing_hand_is_skipped():
    cal = Calibrator()
    cal.start(0)
    cal.update(None, 10)
    assert cal.samples["open"] == []


def test_finalize_defaults_without_samples():
    r = Calibrator().finalize()
    assert (r.entry_ratio, r.release_ratio) == (0.30, 0.40)


def test_finalize_enforces_minimum_band():
    cal = Calibrator()
    cal.samples["open"] = [0.35] * 10
    cal.samples["pinch"] = [0.30] * 10
    r = cal.finalize()
    assert r.entry_ratio == pytest.approx(0.3175)
    assert r.release_ratio == pytest.approx(0.3175 + MIN_BAND)


def test_profile_round_trip_feeds_preset(tmp_path):
    path = tmp_path / "profile.json"
    saved = save_profile(CalibResult(0.22, 0.36, 40, 40), path)
    assert saved == path

    prof = load_profile(path)
    assert prof["entry_ratio"] == 0.22
    preset = apply_profile(DEFAULT_PRESET, prof)
    assert (preset.pinch.entry_ratio, preset.pinch.release_ratio) == (0.22, 0.36)


def test_load_profile_missing_or_corrupt(tmp_path):
    assert load_profile(tmp_path / "nope.json") is None
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    assert load_profile(bad) is None
