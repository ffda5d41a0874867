from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Tuple

from pinchspace.core.config import Preset
from pinchspace.core.errors import ConfigError
from pinchspace.core.geometry import (
    PinchThresholds, hand_size, pinch_distance, pinch_percent,
    index_cursor, is_middle_finger,
)
from pinchspace.core.predictor import VelocityPredictor
from pinchspace.core.smoothing import make_smoother
from pinchspace.core.stabilizer import GestureStabilizer
from pinchspace.core.types import (
    DetectionFrame, HandDetection, DropZone, ObjectSpec, SpatialObject,
    InteractionEvent, InteractionSnapshot, HandSnapshot, EventType, Mode,
    Point, clamp,
)

logger = logging.getLogger(__name__)

ZOOM_IN_STEP = 0.08
ZOOM_OUT_STEP = 0.05


@dataclass
class _FpsCounter:
    """Frames counted per elapsed second of frame timestamps."""
    fps: int = 0
    _count: int = 0
    _window_start: int | None = None

    def tick(self, t_ms: int) -> int:
        if self._window_start is None:
            self._window_start = t_ms
        self._count += 1
        if t_ms - self._window_start >= 1000:
            self.fps = self._count
            self._count = 0
            self._window_start = t_ms
        return self.fps

    def reset(self) -> None:
        self.fps = 0
        self._count = 0
        self._window_start = None


class _HandTrack:
    """
    Per-slot pipeline: geometry -> smoothing -> velocity history -> pinch debounce.
    Owns its own filter instances; nothing is shared between slots.
    """

    def __init__(self, slot: int, preset: Preset) -> None:
        self.slot = slot
        self.fx = make_smoother(preset.smoothing)
        self.fy = make_smoother(preset.smoothing)
        st = preset.stabilizer
        self.pinch = GestureStabilizer(confirm_frames=st.confirm_frames, release_frames=st.release_frames)
        pp = preset.prediction
        self.predictor = VelocityPredictor(capacity=pp.capacity, frame_interval_ms=pp.frame_interval_ms)

        self.present = False
        self.handedness = "unknown"
        self.raw_cursor: Point = (0.0, 0.0)
        self.cursor: Point = (0.0, 0.0)
        self.pinch_distance = 0.0
        self.hand_size = 0.0
        self.pinching = False
        self.was_pinching = False
        self.mode = Mode.IDLE

    def reset(self) -> None:
        self.fx.reset()
        self.fy.reset()
        self.pinch.reset()
        self.predictor.reset()
        self.present = False
        self.pinching = False
        self.was_pinching = False

    def process(self, hand: HandDetection, t_ms: int, thresholds: PinchThresholds, mirror: bool) -> None:
        lm = hand.landmarks
        self.present = True
        self.handedness = hand.handedness
        self.hand_size = hand_size(lm)
        self.pinch_distance = pinch_distance(lm)

        rx, ry = index_cursor(lm, mirror=mirror)
        self.raw_cursor = (rx, ry)
        self.cursor = (self.fx.filter(rx, t_ms), self.fy.filter(ry, t_ms))
        self.predictor.update(self.cursor[0], self.cursor[1], t_ms)

        raw = thresholds.is_pinch(self.pinch_distance, self.hand_size, self.pinching)
        self.was_pinching = self.pinching
        self.pinching = self.pinch.update(raw)

    def snapshot(self) -> HandSnapshot:
        return HandSnapshot(
            slot=self.slot,
            handedness=self.handedness,
            raw_cursor=self.raw_cursor,
            cursor=self.cursor,
            pinch_distance=self.pinch_distance,
            hand_size=self.hand_size,
            pinch_percent=pinch_percent(self.pinch_distance, self.hand_size),
            pinching=self.pinching,
            mode=self.mode,
        )


class InteractionController:
    """
    Drives cursor, nearest-object discovery, grab/move/release and the
    drop zone from one DetectionFrame per video frame.

    Slot 0 (first detected hand) is the primary hand and the only one that
    can hold objects. Other slots get the same cursor/pinch pipeline.
    """

    def __init__(self, preset: Preset,
                 objects: Optional[Iterable[ObjectSpec]] = None,
                 drop_zone: Optional[DropZone] = None,
                 container_size: Tuple[float, float] = (640.0, 480.0)) -> None:
        self.preset = preset
        specs = tuple(objects) if objects is not None else preset.objects
        ids = [s.id for s in specs]
        if len(set(ids)) != len(ids):
            raise ConfigError(f"object ids must be unique: {ids}")

        self.objects: List[SpatialObject] = [SpatialObject.from_spec(s) for s in specs]
        self.drop_zone = drop_zone if drop_zone is not None else preset.drop_zone
        self.container_w, self.container_h = container_size

        self.grabbed: Optional[SpatialObject] = None
        self.nearest: Optional[SpatialObject] = None
        self._grab_offset: Point = (0.0, 0.0)
        self.over_zone = False
        self.stored_count = 0

        self._tracks = [_HandTrack(i, preset) for i in range(preset.detector.max_hands)]
        self._middle = GestureStabilizer(confirm_frames=preset.stabilizer.middle_finger_frames)
        self.middle_finger = False
        self.middle_finger_zoom = 0.0

        self.face_present = False
        self.face_full_mesh = False
        self._fps = _FpsCounter()
        self._last_t = 0

    # ---------------------- public API ----------------------

    @property
    def fps(self) -> int:
        return self._fps.fps

    @property
    def primary(self) -> _HandTrack:
        return self._tracks[0]

    def filters_initialized(self) -> bool:
        """True if any slot still carries smoothing state."""
        return any(t.fx.initialized or t.fy.initialized for t in self._tracks)

    def resize(self, width: float, height: float) -> None:
        self.container_w = width
        self.container_h = height

    def set_drop_zone(self, zone: DropZone) -> None:
        self.drop_zone = zone

    def check_drop_zone(self, x: float, y: float) -> bool:
        return self.drop_zone.contains(x, y)

    def update(self, frame: DetectionFrame) -> list[InteractionEvent]:
        t_ms = frame.t_ms
        events: list[InteractionEvent] = []

        self._fps.tick(t_ms)
        self.face_present = frame.face is not None
        self.face_full_mesh = bool(frame.face is not None and frame.face.full_mesh)

        hands = frame.hands[:len(self._tracks)]
        if not hands:
            events.extend(self._hand_lost(t_ms))
        else:
            thresholds = self.preset.pinch
            mirror = self.preset.ui.mirror
            for i, track in enumerate(self._tracks):
                if i < len(hands):
                    track.process(hands[i], t_ms, thresholds, mirror)
                elif track.present:
                    # slot went empty: next hand in this slot starts clean
                    track.reset()
                    events.extend(self._set_mode(track, Mode.IDLE, t_ms))

            events.extend(self._drive_primary(t_ms))
            for track in self._tracks[1:]:
                if track.present:
                    events.extend(self._set_mode(track, Mode.PINCHING if track.pinching else Mode.IDLE, t_ms))

        self._update_middle_finger(hands)
        self._last_t = t_ms
        return events

    def suspend(self, t_ms: Optional[int] = None) -> list[InteractionEvent]:
        """
        Tracking paused: treat every hand as lost so nothing stays held
        and the next hand after resume starts from fresh filters.
        """
        t = self._last_t if t_ms is None else t_ms
        events = self._hand_lost(t)
        self._last_t = t
        return events

    def find_nearest(self, cursor: Point, size: float = 0.0) -> Optional[SpatialObject]:
        """Closest free object strictly inside the grab radius (pixels)."""
        w, h = self.container_w, self.container_h
        cx = cursor[0] / 100.0 * w
        cy = cursor[1] / 100.0 * h

        nearest = None
        min_dist = self.grab_radius(size)
        for obj in self.objects:
            if obj.in_zone or obj.grabbed:
                continue
            d = math.hypot(cx - obj.x / 100.0 * w, cy - obj.y / 100.0 * h)
            if d < min_dist:
                min_dist = d
                nearest = obj
        return nearest

    def grab_radius(self, size: float = 0.0) -> float:
        g = self.preset.grab
        r = g.radius_px
        if g.hand_scale and size > 0.0 and g.reference_hand_size > 0.0:
            r *= size / g.reference_hand_size
        return r

    def reset_objects(self, t_ms: Optional[int] = None) -> list[InteractionEvent]:
        t = self._last_t if t_ms is None else t_ms
        for obj in self.objects:
            obj.restore()
        self.grabbed = None
        self.nearest = None
        self._grab_offset = (0.0, 0.0)
        self.over_zone = False
        self.stored_count = 0
        for track in self._tracks:
            track.reset()
            track.mode = Mode.IDLE
        logger.info("Objects reset to origin")
        return [InteractionEvent(t_ms=t, type=EventType.RESET, stored_count=0)]

    def snapshot(self) -> InteractionSnapshot:
        return InteractionSnapshot(
            t_ms=self._last_t,
            hands=tuple(t.snapshot() for t in self._tracks if t.present),
            grabbed_id=self.grabbed.id if self.grabbed else None,
            nearest_id=self.nearest.id if self.nearest else None,
            over_zone=self.over_zone,
            stored_count=self.stored_count,
            fps=self._fps.fps,
            face_present=self.face_present,
            face_full_mesh=self.face_full_mesh,
            middle_finger=self.middle_finger,
            middle_finger_zoom=self.middle_finger_zoom,
            objects=tuple(replace(o) for o in self.objects),
        )

    # ---------------------- primary hand ----------------------

    def _drive_primary(self, t_ms: int) -> list[InteractionEvent]:
        tr = self.primary
        events: list[InteractionEvent] = []

        if self.grabbed is None:
            self.nearest = self.find_nearest(tr.cursor, tr.hand_size)

        if tr.pinching and not tr.was_pinching:
            events.extend(self._grab(tr, t_ms))
        elif not tr.pinching and tr.was_pinching:
            events.extend(self._release(t_ms))

        if self.grabbed is not None:
            self._move_grabbed(tr)
            events.extend(self._update_zone(t_ms))

        if self.grabbed is not None:
            mode = Mode.HOLDING
        elif tr.pinching:
            mode = Mode.PINCHING
        elif self.nearest is not None:
            mode = Mode.HOVERING
        else:
            mode = Mode.IDLE
        events.extend(self._set_mode(tr, mode, t_ms))
        return events

    def _move_cursor(self, tr: _HandTrack) -> Point:
        # latency compensation only matters while something is held
        pp = self.preset.prediction
        x, y = tr.cursor
        if not pp.enabled or pp.blend <= 0.0:
            return x, y
        pred = tr.predictor.predict(pp.frames_ahead)
        if pred is None:
            return x, y
        return x + pp.blend * (pred[0] - x), y + pp.blend * (pred[1] - y)

    def _grab(self, tr: _HandTrack, t_ms: int) -> list[InteractionEvent]:
        obj = self.nearest
        if obj is None or obj.in_zone:
            return []
        mx, my = self._move_cursor(tr)
        obj.grabbed = True
        self.grabbed = obj
        self._grab_offset = (obj.x - mx, obj.y - my)
        self.nearest = None
        logger.debug("Grabbed %s at (%.1f, %.1f)", obj.id, obj.x, obj.y)
        return [InteractionEvent(t_ms=t_ms, type=EventType.GRAB, object_id=obj.id)]

    def _move_grabbed(self, tr: _HandTrack) -> None:
        obj = self.grabbed
        g = self.preset.grab
        mx, my = self._move_cursor(tr)
        tx = clamp(mx + self._grab_offset[0], g.clamp_min, g.clamp_max)
        ty = clamp(my + self._grab_offset[1], g.clamp_min, g.clamp_max)
        if g.follow >= 1.0:
            obj.x, obj.y = tx, ty
        else:
            obj.x += (tx - obj.x) * g.follow
            obj.y += (ty - obj.y) * g.follow

    def _update_zone(self, t_ms: int) -> list[InteractionEvent]:
        obj = self.grabbed
        over = self.check_drop_zone(obj.x, obj.y)
        if over == self.over_zone:
            return []
        self.over_zone = over
        return [InteractionEvent(
            t_ms=t_ms,
            type=EventType.ZONE_ENTER if over else EventType.ZONE_LEAVE,
            object_id=obj.id,
        )]

    def _release(self, t_ms: int) -> list[InteractionEvent]:
        obj = self.grabbed
        if obj is None:
            return []

        if self.over_zone and not obj.in_zone:
            obj.in_zone = True
            obj.grabbed = False
            obj.x = self.drop_zone.x
            obj.y = self.drop_zone.y
            self.stored_count += 1
            logger.debug("Stored %s (%d in zone)", obj.id, self.stored_count)
            ev = InteractionEvent(t_ms=t_ms, type=EventType.STORE, object_id=obj.id,
                                  stored_count=self.stored_count)
        else:
            obj.grabbed = False
            logger.debug("Released %s at (%.1f, %.1f)", obj.id, obj.x, obj.y)
            ev = InteractionEvent(t_ms=t_ms, type=EventType.RELEASE, object_id=obj.id)

        self.grabbed = None
        self.over_zone = False
        return [ev]

    def _hand_lost(self, t_ms: int) -> list[InteractionEvent]:
        events: list[InteractionEvent] = []
        # fail-safe: never leave an object stuck to an invisible hand
        if self.grabbed is not None:
            events.extend(self._release(t_ms))

        if self.primary.present:
            events.append(InteractionEvent(t_ms=t_ms, type=EventType.HAND_LOST))
        self.nearest = None

        for track in self._tracks:
            if track.present:
                events.extend(self._set_mode(track, Mode.LOST, t_ms))
            track.reset()
            events.extend(self._set_mode(track, Mode.IDLE, t_ms))
        return events

    def _set_mode(self, track: _HandTrack, mode: Mode, t_ms: int) -> list[InteractionEvent]:
        if track.mode == mode:
            return []
        track.mode = mode
        return [InteractionEvent(t_ms=t_ms, type=EventType.MODE, hand=track.slot, mode=mode)]

    # ---------------------- middle finger ----------------------

    def _update_middle_finger(self, hands: Sequence[HandDetection]) -> None:
        found = any(is_middle_finger(h.landmarks) for h in hands)
        self.middle_finger = self._middle.update(found)
        if self.middle_finger:
            self.middle_finger_zoom = min(1.0, self.middle_finger_zoom + ZOOM_IN_STEP)
        else:
            self.middle_finger_zoom = max(0.0, self.middle_finger_zoom - ZOOM_OUT_STEP)
