from __future__ import annotations

from dataclasses import dataclass

from pinchspace.core.errors import ConfigError


@dataclass
class GestureStabilizer:
    """
    Frame-count debouncer for a boolean gesture signal.

    The confirmed state flips only after the raw signal has held the new
    value for `confirm_frames` (becoming True) or `release_frames`
    (becoming False) consecutive updates.
    """
    confirm_frames: int = 3
    release_frames: int | None = None

    state: bool = False
    _pending: bool = False
    _count: int = 0

    def __post_init__(self) -> None:
        if self.release_frames is None:
            self.release_frames = self.confirm_frames
        if self.confirm_frames < 1 or self.release_frames < 1:
            raise ConfigError(
                f"stabilizer frame counts must be >= 1 "
                f"(confirm={self.confirm_frames}, release={self.release_frames})"
            )

    @property
    def pending(self) -> bool:
        return self._pending

    @property
    def count(self) -> int:
        return self._count

    def update(self, raw: bool) -> bool:
        raw = bool(raw)
        if raw != self._pending:
            self._pending = raw
            self._count = 1
        else:
            self._count += 1

        gate = self.confirm_frames if self._pending else self.release_frames
        if self._count >= gate and self._pending != self.state:
            self.state = self._pending
        return self.state

    def reset(self) -> None:
        self.state = False
        self._pending = False
        self._count = 0
