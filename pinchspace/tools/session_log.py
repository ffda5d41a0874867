"""
PinchSpace session log.
JSONL, one line per processed frame: detections + emitted events + snapshot.
A recording can be replayed through a fresh controller for offline tuning.
"""

from __future__ import annotations

import json
import time
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import IO, Iterator, List, Optional

from pinchspace.core.types import (
    DetectionFrame, FaceDetection, HandDetection, InteractionEvent,
    InteractionSnapshot, Landmark,
)
from pinchspace.interaction.controller import InteractionController


def _ser(x):
    if isinstance(x, Enum):
        return x.value
    raise TypeError(f"not JSON serializable: {type(x).__name__}")


def default_log_path() -> Path:
    outdir = Path.home() / ".cache" / "pinchspace" / "sessions"
    outdir.mkdir(parents=True, exist_ok=True)
    ts = time.strftime("%Y%m%d_%H%M%S")
    return outdir / f"session_{ts}.jsonl"


def frame_to_dict(frame: DetectionFrame) -> dict:
    return {
        "t_ms": frame.t_ms,
        "hands": [
            {"handedness": h.handedness, "score": h.score,
             "landmarks": [[p.x, p.y, p.z] for p in h.landmarks]}
            for h in frame.hands
        ],
        # only the point count matters downstream
        "face_points": len(frame.face.landmarks) if frame.face is not None else 0,
    }


def frame_from_dict(d: dict) -> DetectionFrame:
    hands = tuple(
        HandDetection(
            landmarks=tuple(Landmark(*p) for p in h["landmarks"]),
            handedness=h.get("handedness", "unknown"),
            score=float(h.get("score", 1.0)),
        )
        for h in d.get("hands", ())
    )
    face = None
    n = int(d.get("face_points", 0))
    if n > 0:
        face = FaceDetection(landmarks=tuple(Landmark(0.0, 0.0) for _ in range(n)))
    return DetectionFrame(t_ms=int(d["t_ms"]), hands=hands, face=face)


class SessionLog:
    def __init__(self, path: Path):
        self.path = Path(path).expanduser()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._f: Optional[IO[str]] = open(self.path, "a", buffering=1)

    def write(self, frame: DetectionFrame, events: List[InteractionEvent],
              snap: InteractionSnapshot) -> None:
        rec = {
            "frame": frame_to_dict(frame),
            "events": [asdict(e) for e in events],
            "snapshot": {
                "grabbed": snap.grabbed_id,
                "nearest": snap.nearest_id,
                "over_zone": snap.over_zone,
                "stored": snap.stored_count,
                "fps": snap.fps,
                "gesture": snap.gesture_label,
                "hands": [asdict(h) for h in snap.hands],
            },
        }
        self._f.write(json.dumps(rec, default=_ser) + "\n")

    def close(self) -> None:
        if self._f is not None:
            self._f.close()
            self._f = None

    def __enter__(self) -> "SessionLog":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def read_frames(path: Path) -> Iterator[DetectionFrame]:
    with open(Path(path).expanduser()) as f:
        for line in f:
            line = line.strip()
            if line:
                yield frame_from_dict(json.loads(line)["frame"])


def replay(path: Path, controller: InteractionController) -> List[InteractionEvent]:
    """Feed a recording through `controller`; returns every emitted event."""
    out: List[InteractionEvent] = []
    for frame in read_frames(path):
        out.extend(controller.update(frame))
    return out


if __name__ == "__main__":
    import argparse
    from collections import Counter

    from pinchspace.core.config import load_preset

    ap = argparse.ArgumentParser(description="Replay a PinchSpace session log")
    ap.add_argument("path")
    ap.add_argument("--preset", default="Default")
    args = ap.parse_args()

    ctl = InteractionController(load_preset(args.preset))
    events = replay(Path(args.path), ctl)
    counts = Counter(e.type.value for e in events)
    print(f"[Replay] {args.path}: {sum(counts.values())} events")
    for name, n in sorted(counts.items()):
        print(f"  {name:<10} {n}")
    print(f"  stored     {ctl.stored_count}")
