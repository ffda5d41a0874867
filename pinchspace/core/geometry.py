"""
Hand geometry: scale reference, pinch distance and scale-invariant thresholds.
All inputs are the detector's 21 normalized landmarks.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from pinchspace.core.errors import ConfigError
from pinchspace.core.types import (
    Landmark, clamp,
    WRIST, THUMB_TIP, INDEX_MCP, INDEX_TIP, MIDDLE_MCP, MIDDLE_TIP,
    RING_MCP, RING_TIP, PINKY_MCP, PINKY_TIP,
)

# (a, b) bone pairs for the skeleton overlay
HAND_CONNECTIONS: Tuple[Tuple[int, int], ...] = (
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (0, 9), (9, 10), (10, 11), (11, 12),
    (0, 13), (13, 14), (14, 15), (15, 16),
    (0, 17), (17, 18), (18, 19), (19, 20),
    (5, 9), (9, 13), (13, 17),
)


def dist2d(a: Landmark, b: Landmark) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def dist3d(a: Landmark, b: Landmark) -> float:
    dx = a.x - b.x
    dy = a.y - b.y
    dz = a.z - b.z
    return (dx*dx + dy*dy + dz*dz) ** 0.5


def hand_size(lm: Sequence[Landmark]) -> float:
    """Average of wrist→middle MCP and wrist→middle tip."""
    palm = dist2d(lm[WRIST], lm[MIDDLE_MCP])
    reach = dist2d(lm[WRIST], lm[MIDDLE_TIP])
    return (palm + reach) / 2.0


def pinch_distance(lm: Sequence[Landmark]) -> float:
    return dist3d(lm[THUMB_TIP], lm[INDEX_TIP])


def pinch_percent(distance: float, size: float) -> float:
    """Display-only closeness in [0, 100], relative to hand size."""
    if size <= 0.0:
        return 0.0
    return clamp(1.0 - distance / size, 0.0, 1.0) * 100.0


def index_cursor(lm: Sequence[Landmark], mirror: bool = False) -> Tuple[float, float]:
    """Index fingertip in percentage-of-container units."""
    tip = lm[INDEX_TIP]
    x = (1.0 - tip.x) if mirror else tip.x
    return x * 100.0, tip.y * 100.0


@dataclass(frozen=True)
class PinchThresholds:
    """
    Hand-size scaled pinch thresholds with a hysteresis band.
    release_ratio must be strictly greater than entry_ratio.
    """
    entry_ratio: float = 0.30
    release_ratio: float = 0.40

    def __post_init__(self) -> None:
        if self.entry_ratio <= 0.0:
            raise ConfigError(f"entry_ratio must be > 0, got {self.entry_ratio}")
        if self.release_ratio <= self.entry_ratio:
            raise ConfigError(
                f"release_ratio ({self.release_ratio}) must be greater than "
                f"entry_ratio ({self.entry_ratio})"
            )

    def entry(self, size: float) -> float:
        return max(0.0, size) * self.entry_ratio

    def release(self, size: float) -> float:
        return max(0.0, size) * self.release_ratio

    def for_state(self, size: float, pinching: bool) -> float:
        # keyed off the confirmed state, not the raw signal
        return self.release(size) if pinching else self.entry(size)

    def is_pinch(self, distance: float, size: float, pinching: bool) -> bool:
        return distance < self.for_state(size, pinching)


def is_middle_finger(lm: Sequence[Landmark]) -> bool:
    """Middle finger extended while index, ring and pinky are curled."""
    wrist = lm[WRIST]

    def reach(tip: int, mcp: int) -> float:
        base = dist2d(lm[mcp], wrist)
        if base <= 0.0:
            return 0.0
        return dist2d(lm[tip], wrist) / base

    middle_extended = reach(MIDDLE_TIP, MIDDLE_MCP) > 1.5
    index_curled = reach(INDEX_TIP, INDEX_MCP) < 1.4
    ring_curled = reach(RING_TIP, RING_MCP) < 1.4
    pinky_curled = reach(PINKY_TIP, PINKY_MCP) < 1.4
    return middle_extended and index_curled and ring_curled and pinky_curled
