from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from pinchspace.core.types import DetectionFrame, FaceDetection, HandDetection, Landmark


def synthetic_hand(x: float, y: float, pinch: bool = False, scale: float = 0.2,
                   handedness: str = "right", pinch_gap: float | None = None) -> HandDetection:
    """
    Upright open hand with the index tip at (x, y), normalized units.

    scale is roughly the wrist → middle-tip length. The thumb tip sits next
    to the index tip when pinching, well away from it otherwise. pinch_gap
    overrides the thumb/index distance (as a fraction of scale).
    """
    s = scale
    # index tip is the anchor; the wrist sits below it
    wx, wy = x + 0.05 * s, y + 0.85 * s

    def p(dx: float, dy: float) -> Landmark:
        return Landmark(wx + dx * s, wy + dy * s, 0.0)

    if pinch_gap is None:
        gap = 0.05 if pinch else 0.6
    else:
        gap = pinch_gap

    pts = [
        p(0.0, 0.0),                                  # 0 wrist
        p(-0.20, -0.10), p(-0.32, -0.25), p(-0.40, -0.40),
        None,                                         # 4 thumb tip, set below
        p(-0.12, -0.45), p(-0.10, -0.60), p(-0.07, -0.72), p(-0.05, -0.85),
        p(0.00, -0.48), p(0.00, -0.66), p(0.00, -0.82), p(0.00, -1.00),
        p(0.10, -0.45), p(0.11, -0.60), p(0.12, -0.72), p(0.13, -0.84),
        p(0.20, -0.40), p(0.22, -0.52), p(0.24, -0.62), p(0.25, -0.72),
    ]
    index_tip = pts[8]
    pts[4] = Landmark(index_tip.x - gap * s, index_tip.y, 0.0)
    return HandDetection(landmarks=tuple(pts), handedness=handedness, score=0.95)


def synthetic_face(points: int = 468) -> FaceDetection:
    return FaceDetection(landmarks=tuple(Landmark(0.5, 0.3) for _ in range(points)))


@dataclass
class FakeSource:
    """
    Deterministic fake hand source to validate runtime wiring.
    Sweeps toward the first default object, pinches, drags it into the
    drop zone and lets go, then pauses with no hand in view.
    """
    start_ms: int
    path: Tuple[Tuple[float, float], Tuple[float, float]] = ((0.15, 0.30), (0.80, 0.75))

    def frame(self, t_ms: int) -> DetectionFrame:
        dt = (t_ms - self.start_ms) / 1000.0
        phase = dt % 5.0
        (x0, y0), (x1, y1) = self.path

        if phase < 1.0:
            # hover over the object
            h = synthetic_hand(x0, y0, pinch=False)
        elif phase < 3.0:
            # pinch and drag toward the zone
            k = min(1.0, (phase - 1.0) / 1.5)
            h = synthetic_hand(x0 + (x1 - x0) * k, y0 + (y1 - y0) * k, pinch=True)
        elif phase < 4.0:
            h = synthetic_hand(x1, y1, pinch=False)
        else:
            return DetectionFrame(t_ms=t_ms, hands=())
        return DetectionFrame(t_ms=t_ms, hands=(h,))
