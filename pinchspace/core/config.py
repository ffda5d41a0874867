"""
PinchSpace defaults (presets)

All values are static: loaded once at startup, never mutated mid-session.
A saved calibration profile may override the pinch ratios before the
controller is built (see apply_profile).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

from pinchspace.core.errors import ConfigError
from pinchspace.core.geometry import PinchThresholds
from pinchspace.core.types import DropZone, ObjectSpec

logger = logging.getLogger(__name__)


class PresetName(str, Enum):
    DEFAULT = "Default"
    PRECISION = "Precision"
    CHILL = "Chill"


class SmoothingMethod(str, Enum):
    ONE_EURO = "one_euro"
    KALMAN = "kalman"


@dataclass(frozen=True)
class DetectorParams:
    max_hands: int = 2
    min_detection_conf: float = 0.7
    min_tracking_conf: float = 0.7
    model_complexity: int = 1
    face_enabled: bool = True
    min_face_detection_conf: float = 0.5
    min_face_tracking_conf: float = 0.5

    def __post_init__(self) -> None:
        if self.max_hands < 1:
            raise ConfigError(f"max_hands must be >= 1, got {self.max_hands}")
        for name in ("min_detection_conf", "min_tracking_conf",
                     "min_face_detection_conf", "min_face_tracking_conf"):
            v = getattr(self, name)
            if not 0.0 <= v <= 1.0:
                raise ConfigError(f"{name} must be within [0, 1], got {v}")


@dataclass(frozen=True)
class GrabParams:
    radius_px: float = 90.0
    hand_scale: bool = False            # scale radius by hand_size / reference
    reference_hand_size: float = 0.22
    clamp_min: float = 5.0              # keep objects inside the container
    clamp_max: float = 95.0
    follow: float = 1.0                 # 1.0 snaps to target, lower trails it

    def __post_init__(self) -> None:
        if self.radius_px < 0:
            raise ConfigError(f"radius_px must be >= 0, got {self.radius_px}")
        if self.clamp_min >= self.clamp_max:
            raise ConfigError(f"clamp_min ({self.clamp_min}) must be < clamp_max ({self.clamp_max})")
        if not 0.0 < self.follow <= 1.0:
            raise ConfigError(f"follow must be within (0, 1], got {self.follow}")


@dataclass(frozen=True)
class OneEuroParams:
    min_cutoff_hz: float = 1.0
    beta: float = 0.007
    d_cutoff_hz: float = 1.0


@dataclass(frozen=True)
class KalmanParams:
    process_noise: float = 0.05
    measurement_noise: float = 2.0
    initial_covariance: float = 1.0


@dataclass(frozen=True)
class SmoothingParams:
    method: SmoothingMethod = SmoothingMethod.ONE_EURO
    one_euro: OneEuroParams = OneEuroParams()
    kalman: KalmanParams = KalmanParams()


@dataclass(frozen=True)
class StabilizerParams:
    confirm_frames: int = 3
    release_frames: int = 2
    middle_finger_frames: int = 5

    def __post_init__(self) -> None:
        if min(self.confirm_frames, self.release_frames, self.middle_finger_frames) < 1:
            raise ConfigError("stabilizer frame counts must be >= 1")


@dataclass(frozen=True)
class PredictionParams:
    enabled: bool = True
    frames_ahead: float = 2.0
    blend: float = 0.35        # share of the prediction mixed into the cursor
    capacity: int = 5
    frame_interval_ms: float = 16.67

    def __post_init__(self) -> None:
        if not 0.0 <= self.blend <= 1.0:
            raise ConfigError(f"blend must be within [0, 1], got {self.blend}")
        if self.capacity < 2:
            raise ConfigError(f"capacity must be >= 2, got {self.capacity}")


@dataclass(frozen=True)
class UiParams:
    refresh_ms: int = 80
    mirror: bool = False   # landmarks from a non-flipped frame need mirroring


DEFAULT_OBJECTS: Tuple[ObjectSpec, ...] = (
    ObjectSpec(id="obj-cube", kind="Cube", x=15.0, y=30.0),
    ObjectSpec(id="obj-sphere", kind="Sphere", x=15.0, y=55.0),
    ObjectSpec(id="obj-torus", kind="Torus", x=30.0, y=20.0),
    ObjectSpec(id="obj-pyramid", kind="Pyramid", x=30.0, y=70.0),
)

DEFAULT_DROP_ZONE = DropZone(x=80.0, y=75.0, w=24.0, h=30.0)


@dataclass(frozen=True)
class Preset:
    name: PresetName
    detector: DetectorParams = DetectorParams()
    pinch: PinchThresholds = PinchThresholds()
    grab: GrabParams = GrabParams()
    smoothing: SmoothingParams = SmoothingParams()
    stabilizer: StabilizerParams = StabilizerParams()
    prediction: PredictionParams = PredictionParams()
    ui: UiParams = UiParams()
    objects: Tuple[ObjectSpec, ...] = field(default=DEFAULT_OBJECTS)
    drop_zone: DropZone = DEFAULT_DROP_ZONE


DEFAULT_PRESET = Preset(name=PresetName.DEFAULT)

PRECISION_PRESET = Preset(
    name=PresetName.PRECISION,
    pinch=PinchThresholds(entry_ratio=0.25, release_ratio=0.38),
    grab=GrabParams(radius_px=70.0, follow=0.6),
    smoothing=SmoothingParams(one_euro=OneEuroParams(min_cutoff_hz=0.7, beta=0.005, d_cutoff_hz=1.0)),
    stabilizer=StabilizerParams(confirm_frames=4, release_frames=3),
    prediction=PredictionParams(frames_ahead=1.0, blend=0.2),
)

CHILL_PRESET = Preset(
    name=PresetName.CHILL,
    pinch=PinchThresholds(entry_ratio=0.34, release_ratio=0.46),
    grab=GrabParams(radius_px=110.0, hand_scale=True),
    smoothing=SmoothingParams(method=SmoothingMethod.KALMAN),
    stabilizer=StabilizerParams(confirm_frames=2, release_frames=2),
    prediction=PredictionParams(frames_ahead=3.0, blend=0.4),
)

PRESETS = {
    PresetName.DEFAULT: DEFAULT_PRESET,
    PresetName.PRECISION: PRECISION_PRESET,
    PresetName.CHILL: CHILL_PRESET,
}


def load_preset(name: str) -> Preset:
    for key, preset in PRESETS.items():
        if key.value.lower() == name.lower():
            return preset
    raise ConfigError(f"unknown preset {name!r} (expected one of {[k.value for k in PRESETS]})")


def apply_profile(preset: Preset, profile: Optional[dict]) -> Preset:
    """
    Merge a calibration profile into a preset.
    Only pinch ratios and mirroring are taken from the profile.
    """
    if not profile:
        return preset
    if not isinstance(profile, dict):
        logger.warning("Ignoring calibration profile: expected an object, got %s", type(profile).__name__)
        return preset

    try:
        entry = float(profile.get("entry_ratio", preset.pinch.entry_ratio))
        release = float(profile.get("release_ratio", preset.pinch.release_ratio))
        pinch = PinchThresholds(entry_ratio=entry, release_ratio=release)
    except (ConfigError, TypeError, ValueError) as e:
        logger.warning("Ignoring calibration profile pinch ratios: %s", e)
        pinch = preset.pinch

    ui = preset.ui
    if profile.get("mirror") is not None:
        ui = replace(ui, mirror=bool(profile["mirror"]))

    return replace(preset, pinch=pinch, ui=ui)
