from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import cv2

from pinchspace.core.geometry import HAND_CONNECTIONS
from pinchspace.core.types import DetectionFrame, DropZone, InteractionSnapshot

# BGR
BONE_COLORS = [(0, 149, 255), (250, 200, 90), (242, 90, 191), (95, 55, 255), (88, 209, 48)]
WHITE = (255, 255, 255)
CYAN = (255, 220, 60)
AMBER = (0, 180, 255)
GREEN = (90, 210, 60)
GREY = (160, 160, 160)


def _px(x_pct: float, y_pct: float, w: int, h: int):
    return int(x_pct / 100.0 * w), int(y_pct / 100.0 * h)


@dataclass
class OverlayRenderer:
    """
    Presentation only: turns a snapshot into pixels on the camera frame.
    The status text is rebuilt at most every refresh_ms.
    """
    refresh_ms: int = 80
    _lines: List[str] = field(default_factory=list)
    _last_refresh: Optional[int] = None

    def draw(self, frame, snap: InteractionSnapshot, zone: DropZone,
             detections: Optional[DetectionFrame] = None) -> None:
        h, w = frame.shape[:2]
        self._draw_zone(frame, snap, zone, w, h)
        if detections is not None:
            for i, hand in enumerate(detections.hands):
                self._draw_skeleton(frame, hand.landmarks, w, h, i)
        self._draw_objects(frame, snap, w, h)
        self._draw_cursors(frame, snap, w, h)
        if snap.middle_finger_zoom > 0.01:
            self._draw_middle_finger(frame, snap, w, h)
        self._draw_panel(frame, snap)

    def _draw_zone(self, frame, snap, zone, w, h) -> None:
        x0, y0 = _px(zone.x - zone.w / 2.0, zone.y - zone.h / 2.0, w, h)
        x1, y1 = _px(zone.x + zone.w / 2.0, zone.y + zone.h / 2.0, w, h)
        color = GREEN if snap.over_zone else GREY
        cv2.rectangle(frame, (x0, y0), (x1, y1), color, 2, cv2.LINE_AA)
        label = f"{snap.stored_count} item{'s' if snap.stored_count != 1 else ''}"
        cv2.putText(frame, label, (x0 + 6, y1 - 8), cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1, cv2.LINE_AA)

    def _draw_skeleton(self, frame, lm, w, h, hand_index: int) -> None:
        color = BONE_COLORS[hand_index % len(BONE_COLORS)]
        pts = [(int(p.x * w), int(p.y * h)) for p in lm]
        for a, b in HAND_CONNECTIONS:
            cv2.line(frame, pts[a], pts[b], color, 2, cv2.LINE_AA)
        for pt in pts:
            cv2.circle(frame, pt, 4, WHITE, -1, cv2.LINE_AA)

    def _draw_objects(self, frame, snap, w, h) -> None:
        for obj in snap.objects:
            center = _px(obj.x, obj.y, w, h)
            if obj.in_zone:
                color, radius = GREEN, 16
            elif obj.grabbed:
                color, radius = CYAN, 26
            elif obj.id == snap.nearest_id:
                color, radius = AMBER, 24
            else:
                color, radius = WHITE, 22
            cv2.circle(frame, center, radius, color, 2, cv2.LINE_AA)
            cv2.putText(frame, obj.kind, (center[0] - radius, center[1] + radius + 14),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.45, color, 1, cv2.LINE_AA)

    def _draw_cursors(self, frame, snap, w, h) -> None:
        for hand in snap.hands:
            center = _px(hand.cursor[0], hand.cursor[1], w, h)
            color = CYAN if hand.pinching else WHITE
            cv2.circle(frame, center, 9 if hand.pinching else 6, color, -1, cv2.LINE_AA)

    def _draw_middle_finger(self, frame, snap, w, h) -> None:
        tint = frame.copy()
        cv2.rectangle(tint, (0, 0), (w, h), (30, 30, 200), -1)
        alpha = 0.35 * snap.middle_finger_zoom
        cv2.addWeighted(tint, alpha, frame, 1.0 - alpha, 0, dst=frame)
        scale = 0.8 + 0.4 * snap.middle_finger_zoom
        cv2.putText(frame, "Rude!", (w // 2 - 60, h // 2), cv2.FONT_HERSHEY_SIMPLEX,
                    1.4 * scale, WHITE, 3, cv2.LINE_AA)

    def _status_lines(self, snap: InteractionSnapshot) -> List[str]:
        p = snap.primary
        cursor = f"{round(p.cursor[0])}, {round(p.cursor[1])}" if p else "-"
        pinch = f"{round(p.pinch_percent)}%" if p else "-"
        holding = "None"
        if snap.grabbed_id is not None:
            holding = next((o.kind for o in snap.objects if o.id == snap.grabbed_id), snap.grabbed_id)
        face = "mesh" if snap.face_full_mesh else ("yes" if snap.face_present else "no")
        return [
            f"FPS {snap.fps}  Hands {len(snap.hands)}  Face {face}  {snap.gesture_label}",
            f"cursor {cursor}  pinch {pinch}  holding {holding}",
        ]

    def _draw_panel(self, frame, snap: InteractionSnapshot) -> None:
        if self._last_refresh is None or snap.t_ms - self._last_refresh >= self.refresh_ms:
            self._lines = self._status_lines(snap)
            self._last_refresh = snap.t_ms
        cv2.rectangle(frame, (8, 8), (470, 20 + 24 * len(self._lines)), (0, 0, 0), -1)
        for i, line in enumerate(self._lines):
            cv2.putText(frame, line, (16, 30 + 24 * i), cv2.FONT_HERSHEY_SIMPLEX, 0.55,
                        WHITE, 1, cv2.LINE_AA)
