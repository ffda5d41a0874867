import pytest

from pinchspace.core.config import (
    DEFAULT_PRESET, PRESETS, DetectorParams, GrabParams, PredictionParams,
    PresetName, SmoothingMethod, apply_profile, load_preset,
)
from pinchspace.core.errors import ConfigError


def test_every_preset_keeps_hysteresis_band():
    for preset in PRESETS.values():
        assert preset.pinch.release_ratio > preset.pinch.entry_ratio
        assert preset.stabilizer.confirm_frames >= preset.stabilizer.release_frames


def test_load_preset_case_insensitive():
    assert load_preset("precision").name == PresetName.PRECISION
    assert load_preset("Chill").smoothing.method == SmoothingMethod.KALMAN


def test_load_preset_unknown():
    with pytest.raises(ConfigError):
        load_preset("turbo")


def test_invalid_params_rejected():
    with pytest.raises(ConfigError):
        DetectorParams(max_hands=0)
    with pytest.raises(ConfigError):
        DetectorParams(min_detection_conf=1.5)
    with pytest.raises(ConfigError):
        GrabParams(clamp_min=95.0, clamp_max=5.0)
    with pytest.raises(ConfigError):
        GrabParams(follow=0.0)
    with pytest.raises(ConfigError):
        PredictionParams(blend=2.0)


def test_apply_profile_overrides_ratios():
    p = apply_profile(DEFAULT_PRESET, {"entry_ratio": 0.2, "release_ratio": 0.35, "mirror": True})
    assert p.pinch.entry_ratio == 0.2
    assert p.pinch.release_ratio == 0.35
    assert p.ui.mirror is True
    # original preset untouched
    assert DEFAULT_PRESET.pinch.entry_ratio == 0.30


def test_apply_profile_ignores_inverted_band():
    p = apply_profile(DEFAULT_PRESET, {"entry_ratio": 0.5, "release_ratio": 0.4})
    assert p.pinch == DEFAULT_PRESET.pinch


def test_apply_empty_profile_is_identity():
    assert apply_profile(DEFAULT_PRESET, None) is DEFAULT_PRESET
    assert apply_profile(DEFAULT_PRESET, {}) is DEFAULT_PRESET


def test_apply_profile_ignores_non_numeric_ratios():
    p = apply_profile(DEFAULT_PRESET, {"entry_ratio": "oops", "mirror": True})
    assert p.pinch == DEFAULT_PRESET.pinch
    assert p.ui.mirror is True
    p = apply_profile(DEFAULT_PRESET, {"entry_ratio": None})
    assert p.pinch == DEFAULT_PRESET.pinch


def test_apply_profile_ignores_non_object_profile():
    assert apply_profile(DEFAULT_PRESET, [1, 2]) is DEFAULT_PRESET
    assert apply_profile(DEFAULT_PRESET, "profile") is DEFAULT_PRESET
