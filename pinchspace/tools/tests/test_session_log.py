import json

from pinchspace.core.config import DEFAULT_PRESET
from pinchspace.core.types import DetectionFrame, EventType
from pinchspace.interaction.controller import InteractionController
from pinchspace.sensor.fake import FakeSource, synthetic_face, synthetic_hand
from pinchspace.tools.session_log import SessionLog, frame_from_dict, frame_to_dict, read_frames, replay


def record(path, n_frames=320):
    ctl = InteractionController(DEFAULT_PRESET)
    src = FakeSource(start_ms=0)
    events = []
    with SessionLog(path) as log:
        for i in range(n_frames):
            frame = src.frame(i * 16)
            ev = ctl.update(frame)
            log.write(frame, ev, ctl.snapshot())
            events.extend(ev)
    return ctl, events


def test_frame_dict_keeps_landmarks_and_face_size():
    frame = DetectionFrame(t_ms=42, hands=(synthetic_hand(0.3, 0.4, pinch=True),), face=synthetic_face(468))
    back = frame_from_dict(json.loads(json.dumps(frame_to_dict(frame))))
    assert back.t_ms == 42
    assert back.hands[0].landmarks == frame.hands[0].landmarks
    assert back.hands[0].handedness == "right"
    assert back.face is not None and back.face.full_mesh


def test_log_has_one_line_per_frame(tmp_path):
    path = tmp_path / "session.jsonl"
    record(path, n_frames=50)
    lines = path.read_text().splitlines()
    assert len(lines) == 50
    rec = json.loads(lines[0])
    assert set(rec) == {"frame", "events", "snapshot"}
    assert rec["snapshot"]["stored"] == 0


def test_replay_reproduces_events(tmp_path):
    path = tmp_path / "session.jsonl"
    ctl, events = record(path)
    assert any(e.type == EventType.STORE for e in events)

    fresh = InteractionController(DEFAULT_PRESET)
    replayed = replay(path, fresh)
    assert [(e.type, e.object_id) for e in replayed] == [(e.type, e.object_id) for e in events]
    assert fresh.stored_count == ctl.stored_count


def test_read_frames_skips_blank_lines(tmp_path):
    path = tmp_path / "session.jsonl"
    record(path, n_frames=5)
    with open(path, "a") as f:
        f.write("\n")
    assert len(list(read_frames(path))) == 5
