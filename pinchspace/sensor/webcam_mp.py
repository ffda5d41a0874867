from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

import cv2
import mediapipe as mp

from pinchspace.core.config import DetectorParams
from pinchspace.core.errors import CameraUnavailableError, DetectorInitError
from pinchspace.core.types import DetectionFrame, FaceDetection, HandDetection, Landmark

logger = logging.getLogger(__name__)


def _landmarks(lms) -> Tuple[Landmark, ...]:
    return tuple(Landmark(float(p.x), float(p.y), float(p.z)) for p in lms.landmark)


@dataclass
class WebcamMPSrc:
    """
    OpenCV capture + mediapipe Hands / FaceMesh.

    read() is synchronous: detection for a frame completes before the
    controller sees it. A frame that cannot be read is skipped (None).
    """
    params: DetectorParams = field(default_factory=DetectorParams)
    cam_index: int = 0
    mirror: bool = True
    width: int = 640
    height: int = 480

    def __post_init__(self) -> None:
        self.cap = cv2.VideoCapture(self.cam_index)
        if not self.cap.isOpened():
            self.cap.release()
            raise CameraUnavailableError(
                f"camera {self.cam_index} could not be opened (missing device or permission denied)"
            )
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)

        p = self.params
        try:
            self.hands = mp.solutions.hands.Hands(
                static_image_mode=False,
                max_num_hands=p.max_hands,
                model_complexity=p.model_complexity,
                min_detection_confidence=p.min_detection_conf,
                min_tracking_confidence=p.min_tracking_conf,
            )
            self.face = None
            if p.face_enabled:
                self.face = mp.solutions.face_mesh.FaceMesh(
                    static_image_mode=False,
                    max_num_faces=1,
                    min_detection_confidence=p.min_face_detection_conf,
                    min_tracking_confidence=p.min_face_tracking_conf,
                )
        except Exception as e:
            self.cap.release()
            raise DetectorInitError(f"mediapipe landmark models failed to load: {e}") from e

        logger.info("Detector ready: camera=%d max_hands=%d face=%s",
                    self.cam_index, p.max_hands, p.face_enabled)

    def read(self) -> Tuple[Optional[DetectionFrame], Optional[Any]]:
        ok, frame = self.cap.read()
        if not ok:
            return None, None

        # flipped before detection, so landmarks are already in display space
        if self.mirror:
            frame = cv2.flip(frame, 1)

        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        t_ms = int(time.monotonic() * 1000)

        res = self.hands.process(rgb)
        hands = []
        for i, hand_lm in enumerate(res.multi_hand_landmarks or ()):
            label, score = "unknown", 1.0
            if res.multi_handedness and i < len(res.multi_handedness):
                cls = res.multi_handedness[i].classification[0]
                label, score = cls.label.lower(), float(cls.score)
            hands.append(HandDetection(landmarks=_landmarks(hand_lm), handedness=label, score=score))

        face = None
        if self.face is not None:
            fres = self.face.process(rgb)
            if fres.multi_face_landmarks:
                face = FaceDetection(landmarks=_landmarks(fres.multi_face_landmarks[0]))

        return DetectionFrame(t_ms=t_ms, hands=tuple(hands), face=face), frame

    def close(self) -> None:
        for res in (self.hands, self.face):
            if res is None:
                continue
            try:
                res.close()
            except Exception as e:
                logger.debug("detector close failed: %s", e)
        self.cap.release()
