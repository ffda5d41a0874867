from __future__ import annotations

import time

from pinchspace.core.config import DEFAULT_PRESET
from pinchspace.core.types import EventType
from pinchspace.interaction.controller import InteractionController
from pinchspace.runtime.log import setup_logging
from pinchspace.sensor.fake import FakeSource


def run(duration_s: float | None = None):
    """Scripted hand, no camera. Prints controller events at ~60Hz."""
    setup_logging("INFO")
    ctl = InteractionController(DEFAULT_PRESET)
    src = FakeSource(start_ms=int(time.monotonic() * 1000))

    print("[PinchSpace] Runtime loop (FAKE SOURCE). Ctrl+C to exit.")

    start = time.monotonic()
    try:
        while True:
            if duration_s is not None and time.monotonic() - start >= duration_s:
                break
            t_ms = int(time.monotonic() * 1000)
            for ev in ctl.update(src.frame(t_ms)):
                if ev.type == EventType.MODE:
                    print(f"[{ev.t_ms}] hand{ev.hand} -> {ev.mode.value}")
                else:
                    print(f"[{ev.t_ms}] {ev.type.value} {ev.object_id or ''}")
                if ev.type == EventType.STORE and ev.stored_count == len(ctl.objects):
                    ctl.reset_objects(t_ms)

            time.sleep(0.016)  # ~60Hz loop
    except KeyboardInterrupt:
        print("\n[PinchSpace] exiting")
    finally:
        snap = ctl.snapshot()
        print(f"[PinchSpace] stored={snap.stored_count} fps={snap.fps}")


if __name__ == "__main__":
    run()
