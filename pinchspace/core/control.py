from __future__ import annotations
from dataclasses import dataclass, field
from threading import Lock


@dataclass
class ControlState:
    """
    Shared control plane between the frame loop and hotkeys / tray.

    Other threads only flip flags here. Object state is touched solely by
    the frame loop, which consumes a reset request on its next frame.
    """
    _enabled: bool = True
    _reset_requested: bool = False
    _stop: bool = False
    _lock: Lock = field(default_factory=Lock)

    def is_enabled(self) -> bool:
        with self._lock:
            return self._enabled

    def set_enabled(self, value: bool) -> None:
        with self._lock:
            self._enabled = value

    def toggle(self) -> bool:
        with self._lock:
            self._enabled = not self._enabled
            return self._enabled

    def request_reset(self) -> None:
        with self._lock:
            self._reset_requested = True

    def take_reset(self) -> bool:
        """Return True once per request."""
        with self._lock:
            pending = self._reset_requested
            self._reset_requested = False
            return pending

    def request_stop(self) -> None:
        with self._lock:
            self._stop = True

    def should_stop(self) -> bool:
        with self._lock:
            return self._stop
