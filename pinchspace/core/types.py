"""
PinchSpace core contracts.

Detector → Controller: DetectionFrame (normalized landmarks per frame).
Controller → Presentation: InteractionEvent list + InteractionSnapshot.

Landmark indices are a fixed contract with the upstream detector
and are never reordered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


# ============================================================
# Detector → Controller
# ============================================================

HAND_LANDMARK_COUNT = 21
FULL_FACE_MESH_POINTS = 300

WRIST = 0
THUMB_TIP = 4
INDEX_MCP = 5
INDEX_TIP = 8
MIDDLE_MCP = 9
MIDDLE_TIP = 12
RING_MCP = 13
RING_TIP = 16
PINKY_MCP = 17
PINKY_TIP = 20


@dataclass(frozen=True)
class Landmark:
    """Normalized [0, 1] image point. z is relative depth (0.0 when absent)."""
    x: float
    y: float
    z: float = 0.0


@dataclass(frozen=True)
class HandDetection:
    """One detected hand: 21 ordered landmarks plus classification."""
    landmarks: Tuple[Landmark, ...]
    handedness: str = "unknown"     # "left" | "right" | "unknown"
    score: float = 1.0

    def __post_init__(self) -> None:
        if len(self.landmarks) != HAND_LANDMARK_COUNT:
            raise ValueError(
                f"hand needs {HAND_LANDMARK_COUNT} landmarks, got {len(self.landmarks)}"
            )


@dataclass(frozen=True)
class FaceDetection:
    landmarks: Tuple[Landmark, ...]

    @property
    def full_mesh(self) -> bool:
        # coarse detections only allow coarse features to be drawn
        return len(self.landmarks) >= FULL_FACE_MESH_POINTS


@dataclass(frozen=True)
class DetectionFrame:
    """A timestamped snapshot from the detector. Hands are in detector order."""
    t_ms: int
    hands: Tuple[HandDetection, ...] = ()
    face: Optional[FaceDetection] = None


# ============================================================
# Scene
# ============================================================

@dataclass(frozen=True)
class ObjectSpec:
    """Spawn description of a draggable object (percentage units)."""
    id: str
    kind: str
    x: float
    y: float


@dataclass
class SpatialObject:
    id: str
    kind: str
    x: float
    y: float
    origin_x: float
    origin_y: float
    grabbed: bool = False
    in_zone: bool = False

    @classmethod
    def from_spec(cls, spec: ObjectSpec) -> "SpatialObject":
        return cls(id=spec.id, kind=spec.kind, x=spec.x, y=spec.y,
                   origin_x=spec.x, origin_y=spec.y)

    def restore(self) -> None:
        self.x = self.origin_x
        self.y = self.origin_y
        self.grabbed = False
        self.in_zone = False


@dataclass(frozen=True)
class DropZone:
    """Rectangular zone: center (x, y) and size (w, h), percentage units."""
    x: float
    y: float
    w: float
    h: float

    def contains(self, x: float, y: float) -> bool:
        # strict bounds: a zero-size zone can never be entered
        hw = self.w / 2.0
        hh = self.h / 2.0
        return (self.x - hw < x < self.x + hw) and (self.y - hh < y < self.y + hh)

    @classmethod
    def from_pixels(cls, rect: Tuple[float, float, float, float],
                    container: Tuple[float, float]) -> "DropZone":
        """rect = (left, top, width, height) in container pixels."""
        left, top, width, height = rect
        cw, ch = container
        if cw <= 0 or ch <= 0:
            return cls(x=0.0, y=0.0, w=0.0, h=0.0)
        return cls(
            x=(left + width / 2.0) / cw * 100.0,
            y=(top + height / 2.0) / ch * 100.0,
            w=width / cw * 100.0,
            h=height / ch * 100.0,
        )


# ============================================================
# Controller → Presentation
# ============================================================

class Mode(str, Enum):
    IDLE = "IDLE"
    HOVERING = "HOVERING"
    PINCHING = "PINCHING"
    HOLDING = "HOLDING"
    LOST = "LOST"


class EventType(str, Enum):
    MODE = "MODE"
    GRAB = "GRAB"
    RELEASE = "RELEASE"
    STORE = "STORE"
    ZONE_ENTER = "ZONE_ENTER"
    ZONE_LEAVE = "ZONE_LEAVE"
    HAND_LOST = "HAND_LOST"
    RESET = "RESET"


@dataclass(frozen=True)
class InteractionEvent:
    """
    A single state transition emitted by the controller.
    Payload fields are filled depending on `type`.
    """
    t_ms: int
    type: EventType
    hand: int = 0
    object_id: Optional[str] = None
    mode: Optional[Mode] = None
    stored_count: Optional[int] = None


Point = Tuple[float, float]


@dataclass(frozen=True)
class HandSnapshot:
    slot: int
    handedness: str
    raw_cursor: Point
    cursor: Point
    pinch_distance: float
    hand_size: float
    pinch_percent: float
    pinching: bool
    mode: Mode


@dataclass(frozen=True)
class InteractionSnapshot:
    """Read-only view handed to the presentation layer after each update."""
    t_ms: int
    hands: Tuple[HandSnapshot, ...] = ()
    grabbed_id: Optional[str] = None
    nearest_id: Optional[str] = None
    over_zone: bool = False
    stored_count: int = 0
    fps: int = 0
    face_present: bool = False
    face_full_mesh: bool = False
    middle_finger: bool = False
    middle_finger_zoom: float = 0.0
    objects: Tuple[SpatialObject, ...] = field(default_factory=tuple)

    @property
    def primary(self) -> Optional[HandSnapshot]:
        for h in self.hands:
            if h.slot == 0:
                return h
        return None

    @property
    def gesture_label(self) -> str:
        if self.middle_finger:
            return "Middle finger"
        if self.grabbed_id is not None:
            return "Holding"
        p = self.primary
        if p is not None and p.pinching:
            return "Pinching"
        if self.nearest_id is not None:
            return "Hover"
        return "Ready"


def clamp(x: float, lo: float, hi: float) -> float:
    if x < lo:
        return lo
    if x > hi:
        return hi
    return x
