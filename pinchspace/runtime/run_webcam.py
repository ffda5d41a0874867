from __future__ import annotations

import argparse
import logging
import os
import threading
import time
from dataclasses import replace
from pathlib import Path

import cv2

from pinchspace.core.config import apply_profile, load_preset
from pinchspace.core.control import ControlState
from pinchspace.core.errors import CameraUnavailableError, DetectorInitError
from pinchspace.interaction.controller import InteractionController
from pinchspace.runtime.calibration import Calibrator, load_profile, save_profile
from pinchspace.runtime.log import setup_logging
from pinchspace.sensor.webcam_mp import WebcamMPSrc
from pinchspace.tools.session_log import SessionLog, default_log_path
from pinchspace.ui.hotkeys import start_hotkeys
from pinchspace.ui.overlay import OverlayRenderer

logger = logging.getLogger(__name__)

WINDOW = "PinchSpace"


def _parse_args(argv=None):
    ap = argparse.ArgumentParser(description="PinchSpace webcam demo")
    ap.add_argument("--preset", default="Default", help="Default | Precision | Chill")
    ap.add_argument("--camera", type=int, default=0)
    ap.add_argument("--no-face", action="store_true", help="skip face mesh detection")
    ap.add_argument("--log", nargs="?", const="", default=os.environ.get("SESSION_LOG_PATH"),
                    help="write a JSONL session log (optional path)")
    ap.add_argument("--tray", action="store_true", help="show a system tray icon")
    ap.add_argument("--log-level", default="INFO")
    return ap.parse_args(argv)


def _open_source(preset, camera: int) -> WebcamMPSrc | None:
    """Camera failures are recoverable: let the user retry."""
    while True:
        try:
            return WebcamMPSrc(params=preset.detector, cam_index=camera, mirror=True)
        except CameraUnavailableError as e:
            print(f"[PinchSpace] {e}")
            answer = input("Fix camera access and press Enter to retry, or type q to quit: ")
            if answer.strip().lower() == "q":
                return None


def main(argv=None):
    args = _parse_args(argv)
    setup_logging(args.log_level)

    preset = load_preset(args.preset)
    if args.no_face:
        preset = replace(preset, detector=replace(preset.detector, face_enabled=False))
    preset = apply_profile(preset, load_profile())

    try:
        src = _open_source(preset, args.camera)
    except DetectorInitError as e:
        logger.error("Detector unavailable: %s", e)
        raise SystemExit(1)
    if src is None:
        return

    ctl = InteractionController(preset, container_size=(src.width, src.height))

    state = ControlState()
    start_hotkeys(state)
    if args.tray:
        from pinchspace.ui.tray import run_tray
        threading.Thread(
            target=run_tray,
            args=(state, lambda: f"{ctl.stored_count} stored"),
            name="tray",
            daemon=True,
        ).start()

    overlay = OverlayRenderer(refresh_ms=preset.ui.refresh_ms)
    cal = Calibrator()
    calibrating = False

    session = None
    if args.log is not None:
        session = SessionLog(Path(args.log) if args.log else default_log_path())
        print(f"[SessionLog] writing {session.path}")

    print(f"[PinchSpace] preset={preset.name.value}. ESC quits, R resets, C calibrates.")
    print("  - Ctrl+Alt+Space pauses tracking")
    print("  - Ctrl+Alt+R resets objects, Ctrl+Alt+Esc stops")

    was_enabled = state.is_enabled()
    try:
        while not state.should_stop():
            if state.take_reset():
                ctl.reset_objects()

            enabled = state.is_enabled()
            if was_enabled and not enabled:
                # paused: drop whatever is held, it can't be tracked until resume
                for ev in ctl.suspend():
                    logger.debug("%s", ev)
                logger.info("Tracking paused")
            was_enabled = enabled

            frame, bgr = src.read()
            if bgr is None:
                # no camera frame this tick
                time.sleep(0.005)
                continue

            h, w = bgr.shape[:2]
            if (w, h) != (ctl.container_w, ctl.container_h):
                ctl.resize(w, h)

            if enabled and frame is not None:
                events = ctl.update(frame)
                for ev in events:
                    logger.debug("%s", ev)
                if session is not None:
                    session.write(frame, events, ctl.snapshot())

                if calibrating:
                    cal.update(frame.hands[0] if frame.hands else None, frame.t_ms)
                    cv2.putText(bgr, cal.instruction(), (12, h - 16), cv2.FONT_HERSHEY_SIMPLEX,
                                0.6, (200, 200, 200), 2, cv2.LINE_AA)
                    if cal.done:
                        r = cal.finalize()
                        path = save_profile(r)
                        print(f"[Calibration] saved {path}: entry={r.entry_ratio:.3f} "
                              f"release={r.release_ratio:.3f} (applies next start)")
                        calibrating = False

            overlay.draw(bgr, ctl.snapshot(), ctl.drop_zone, frame)
            cv2.imshow(WINDOW, bgr)
            key = cv2.waitKey(1) & 0xFF
            if key == 27:  # ESC
                break
            if key in (ord('r'), ord('R')):
                ctl.reset_objects()
            if key in (ord('c'), ord('C')) and not calibrating:
                calibrating = True
                cal.start(frame.t_ms if frame is not None else None)
    except KeyboardInterrupt:
        print("\n[PinchSpace] exiting")
    finally:
        if session is not None:
            session.close()
        src.close()
        cv2.destroyAllWindows()


if __name__ == "__main__":
    main()
