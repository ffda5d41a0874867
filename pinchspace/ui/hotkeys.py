from __future__ import annotations

import logging

from pynput import keyboard

from pinchspace.core.control import ControlState

logger = logging.getLogger(__name__)


def start_hotkeys(state: ControlState) -> keyboard.Listener:
    """
    Global hotkeys (X11):
    - Ctrl+Alt+Space: Pause / resume tracking
    - Ctrl+Alt+R:     Reset objects to origin
    - Ctrl+Alt+Esc:   Stop
    Returns the running listener (daemon thread).
    """

    pressed = set()

    CTRL_KEYS = {keyboard.Key.ctrl, keyboard.Key.ctrl_l, keyboard.Key.ctrl_r}
    ALT_KEYS  = {keyboard.Key.alt, keyboard.Key.alt_l, keyboard.Key.alt_r}

    def is_ctrl():
        return any(k in pressed for k in CTRL_KEYS)

    def is_alt():
        return any(k in pressed for k in ALT_KEYS)

    def on_press(k):
        pressed.add(k)
        if not (is_ctrl() and is_alt()):
            return

        if k == keyboard.Key.space:
            enabled = state.toggle()
            print(f"[PinchSpace] tracking {'resumed' if enabled else 'paused'} (Ctrl+Alt+Space)")
        elif k == keyboard.Key.esc:
            state.request_stop()
            print("[PinchSpace] stopping (Ctrl+Alt+Esc)")
        elif getattr(k, "char", None) in ("r", "R", "\x12"):  # \x12 = Ctrl+R on some backends
            state.request_reset()
            print("[PinchSpace] reset requested (Ctrl+Alt+R)")

    def on_release(k):
        pressed.discard(k)

    listener = keyboard.Listener(on_press=on_press, on_release=on_release)
    listener.daemon = True
    listener.start()
    logger.debug("Global hotkeys listening")
    return listener
