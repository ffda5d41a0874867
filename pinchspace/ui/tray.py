from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

import pystray
from PIL import Image, ImageDraw

from pinchspace.core.control import ControlState

logger = logging.getLogger(__name__)

POLL_S = 0.2


def tray_image(enabled: bool, size: int = 64) -> Image.Image:
    """Two fingertips: touching while tracking, spread apart while paused."""
    img = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    c = size // 2
    r = size // 8
    spread = r // 3 if enabled else r * 2
    color = (120, 220, 255, 255) if enabled else (200, 200, 200, 110)

    draw.rounded_rectangle((4, 4, size - 4, size - 4), radius=size // 5,
                           outline=(255, 255, 255, 200), width=2)
    draw.ellipse((c - spread - 2 * r, c - r, c - spread, c + r), fill=color)
    draw.ellipse((c + spread, c - r, c + spread + 2 * r, c + r), fill=color)
    return img


class TrayController:
    """
    System tray front-end over ControlState.
    status() may supply extra text for the tooltip (e.g. stored count).
    """

    def __init__(self, state: ControlState, status: Optional[Callable[[], str]] = None):
        self.state = state
        self.status = status
        self.icon = pystray.Icon("PinchSpace", tray_image(state.is_enabled()), "PinchSpace", self._menu())

    def _menu(self) -> pystray.Menu:
        return pystray.Menu(
            pystray.MenuItem(
                "Tracking",
                self._on_toggle,
                checked=lambda _item: self.state.is_enabled(),
            ),
            pystray.MenuItem("Reset objects", self._on_reset),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem("Quit", self._on_quit),
        )

    def refresh(self) -> None:
        enabled = self.state.is_enabled()
        self.icon.icon = tray_image(enabled)
        title = "PinchSpace: " + ("tracking" if enabled else "paused")
        if self.status is not None:
            title += f" | {self.status()}"
        self.icon.title = title

    def _on_toggle(self, _icon, _item) -> None:
        self.state.toggle()
        self.refresh()

    def _on_reset(self, _icon, _item) -> None:
        self.state.request_reset()

    def _on_quit(self, _icon, _item) -> None:
        self.state.request_stop()
        self.icon.stop()

    def _watch(self) -> None:
        # hotkeys flip the same state; mirror it into the icon
        seen = None
        while not self.state.should_stop():
            now = self.state.is_enabled()
            if now != seen:
                self.refresh()
                seen = now
            time.sleep(POLL_S)
        self.icon.stop()

    def run(self) -> None:
        threading.Thread(target=self._watch, name="tray-watch", daemon=True).start()
        try:
            self.icon.run()
        except Exception:
            # a broken tray backend must not take the tracker down
            logger.exception("Tray backend crashed; continuing without tray")


def run_tray(state: ControlState, status: Optional[Callable[[], str]] = None) -> None:
    """Blocking. Run from a daemon thread; Quit requests a stop."""
    TrayController(state, status).run()
