from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from pinchspace.core.geometry import hand_size, pinch_distance

logger = logging.getLogger(__name__)

MIN_BAND = 0.06   # smallest allowed release - entry gap


@dataclass
class CalibResult:
    entry_ratio: float
    release_ratio: float
    samples_open: int
    samples_pinch: int


def _profile_path() -> Path:
    p = Path.home() / ".config" / "pinchspace"
    p.mkdir(parents=True, exist_ok=True)
    return p / "profile.json"


def save_profile(r: CalibResult, path: Optional[Path] = None) -> Path:
    path = path or _profile_path()
    path.write_text(json.dumps(asdict(r), indent=2))
    return path


def load_profile(path: Optional[Path] = None) -> Optional[dict]:
    path = path or _profile_path()
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text())
    except (OSError, ValueError) as e:
        logger.warning("Unreadable calibration profile %s: %s", path, e)
        return None


def percentile(xs, q):
    if not xs:
        return None
    xs = sorted(xs)
    k = int(round((q / 100.0) * (len(xs) - 1)))
    return xs[max(0, min(len(xs) - 1, k))]


class Calibrator:
    """
    Two-step wizard:
    - hold the hand open, then pinch repeatedly
    - collects pinch_distance / hand_size per frame
    - derives entry/release ratios from percentiles
    """
    STEP_MS = 3000

    def __init__(self):
        self.step = 0
        self.step_start: Optional[int] = None
        self.samples = {"open": [], "pinch": []}
        self.done = False

    def start(self, t_ms: Optional[int] = None):
        self.step = 0
        self.step_start = t_ms
        self.done = False
        for k in self.samples:
            self.samples[k].clear()

    def instruction(self) -> str:
        steps = [
            "Calibration 1/2: Hold your hand open, thumb away from index.",
            "Calibration 2/2: Pinch thumb and index together several times.",
        ]
        return steps[self.step] if self.step < len(steps) else "Calibration complete."

    def update(self, hand, t_ms: int):
        if self.done:
            return

        if self.step_start is None:
            self.step_start = t_ms

        if (t_ms - self.step_start) > self.STEP_MS:
            self.step += 1
            self.step_start = t_ms
            if self.step >= 2:
                self.done = True
            return

        if hand is None:
            return

        size = hand_size(hand.landmarks)
        if size <= 0.0:
            return
        ratio = pinch_distance(hand.landmarks) / size
        self.samples["open" if self.step == 0 else "pinch"].append(ratio)

    def finalize(self) -> CalibResult:
        # closed pinches sit low, open hands high; place the band in between
        pinched = percentile(self.samples["pinch"], 30)
        opened = percentile(self.samples["open"], 10)

        entry = 0.30
        release = 0.40
        if pinched is not None and opened is not None and opened > pinched:
            entry = pinched + (opened - pinched) * 0.35
            release = pinched + (opened - pinched) * 0.60
        release = max(release, entry + MIN_BAND)

        return CalibResult(
            entry_ratio=float(entry),
            release_ratio=float(release),
            samples_open=len(self.samples["open"]),
            samples_pinch=len(self.samples["pinch"]),
        )
