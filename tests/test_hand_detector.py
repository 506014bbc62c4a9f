"""
Tests for Tracker Output Conversion and Frame Replay
=====================================================
"""

import json
import pytest
import sys
from pathlib import Path
from types import SimpleNamespace

# Add project root and tests to path
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from media_gestures.cli import main, replay
from media_gestures.core.engine import GestureEngine
from media_gestures.core.events import EventBus
from media_gestures.core.types import Hand, MalformedObservationError
from media_gestures.modules.control.media_target import SimulatedMediaTarget
from media_gestures.modules.detection.hand_detector import (
    MAX_HANDS, snapshot_from_dict, snapshot_from_mediapipe, snapshot_from_results,
)
from media_gestures.modules.utils.config import Config, EngineConfig
from hand_factory import fist, landmarks_as_lists, open_hand


def mediapipe_hand(observation):
    """Mimic a MediaPipe NormalizedLandmarkList."""
    points = [SimpleNamespace(x=x, y=y, z=z) for x, y, z in landmarks_as_lists(observation)]
    return SimpleNamespace(landmark=points)


def mediapipe_handedness(label):
    """Mimic a MediaPipe ClassificationList."""
    return SimpleNamespace(classification=[SimpleNamespace(label=label, score=0.98)])


@pytest.fixture(autouse=True)
def clean_singletons():
    EventBus().reset()
    Config.reset()
    yield
    EventBus().reset()
    Config.reset()


class TestSnapshotConversion:
    """Test suite for building DetectionSnapshots from tracker output."""

    def test_mediapipe_results(self):
        results = SimpleNamespace(
            multi_hand_landmarks=[mediapipe_hand(open_hand(Hand.LEFT)), mediapipe_hand(fist(Hand.RIGHT))],
            multi_handedness=[mediapipe_handedness("Left"), mediapipe_handedness("Right")],
        )
        snapshot = snapshot_from_mediapipe(results, 1280, 720)

        assert snapshot.hand_count == 2
        assert [h.hand for h in snapshot.hands] == [Hand.LEFT, Hand.RIGHT]
        assert snapshot.image_width == 1280
        assert snapshot.mirrored is False

    def test_no_hands(self):
        snapshot = snapshot_from_mediapipe(SimpleNamespace(multi_hand_landmarks=None))
        assert snapshot.is_empty

    def test_missing_handedness_defaults_right(self):
        snapshot = snapshot_from_results([landmarks_as_lists(fist())], None)
        assert snapshot.hands[0].hand is Hand.RIGHT

    def test_malformed_hand_dropped(self):
        snapshot = snapshot_from_results(
            [landmarks_as_lists(fist())[:10], landmarks_as_lists(fist())],
            ["Left", "Right"],
        )
        assert [h.hand for h in snapshot.hands] == [Hand.RIGHT]

    def test_unknown_label_dropped(self):
        snapshot = snapshot_from_results([landmarks_as_lists(fist())], ["Middle"])
        assert snapshot.is_empty

    def test_extra_hands_truncated(self):
        lm = landmarks_as_lists(fist())
        snapshot = snapshot_from_results([lm, lm, lm], ["Left", "Right", "Left"])
        assert snapshot.hand_count == MAX_HANDS

    @pytest.mark.parametrize("entry", [
        "Left",
        {"label": "Left"},
        {"categoryName": "Left"},
        [{"label": "Left", "score": 0.9}],
        SimpleNamespace(label="Left"),
    ])
    def test_handedness_shapes(self, entry):
        snapshot = snapshot_from_results([landmarks_as_lists(fist())], [entry])
        assert snapshot.hands[0].hand is Hand.LEFT

    def test_non_object_hand_entries_dropped(self):
        frame = {"hands": [
            ["not", "a", "dict"],
            {"handedness": "Right", "landmarks": landmarks_as_lists(fist(Hand.RIGHT))},
        ]}
        snapshot = snapshot_from_dict(frame)
        assert [h.hand for h in snapshot.hands] == [Hand.RIGHT]

    @pytest.mark.parametrize("width,height", [
        (None, None), ("wide", 480), (0, -1), (float("inf"), 480),
    ])
    def test_unusable_surface_size_falls_back(self, width, height):
        snapshot = snapshot_from_dict({"width": width, "height": height, "hands": []})
        assert (snapshot.image_width, snapshot.image_height) == (640, 480)

    @pytest.mark.parametrize("frame", [[1, 2], {"hands": "Left"}, {"hands": 3}])
    def test_unreadable_frame_raises(self, frame):
        with pytest.raises(MalformedObservationError):
            snapshot_from_dict(frame)

    def test_recorded_frame(self):
        frame = {
            "width": 320, "height": 240,
            "hands": [{"handedness": "Left", "landmarks": landmarks_as_lists(open_hand(Hand.LEFT))}],
        }
        snapshot = snapshot_from_dict(frame)
        assert snapshot.image_width == 320
        assert snapshot.hands[0].hand is Hand.LEFT


def _frame(t, *hands):
    return json.dumps({
        "t": t, "width": 640, "height": 480,
        "hands": [{"handedness": h.hand.value, "landmarks": landmarks_as_lists(h)} for h in hands],
    })


class TestReplay:
    """Test suite for replaying recorded frames."""

    def test_replay_stream(self):
        target = SimulatedMediaTarget(paused=True)
        engine = GestureEngine(config=EngineConfig(mirror_input=False), target=target)
        lines = [
            _frame(10000, fist(Hand.LEFT), fist(Hand.RIGHT)),
            "not json",
            "",
            "[1, 2]",
            _frame(12000, open_hand(Hand.RIGHT)),
        ]
        total = replay(engine, lines)

        assert total == 2
        assert target.call_names() == ["play", "pause"]
        assert engine.frame_count == 2

    def test_malformed_frames_do_not_stop_replay(self):
        target = SimulatedMediaTarget(paused=True)
        engine = GestureEngine(config=EngineConfig(mirror_input=False), target=target)
        lines = [
            '{"t": 9000, "hands": [["not", "a", "dict"]]}',
            '{"t": 9100, "width": null, "hands": []}',
            '{"t": 9200, "hands": "Left"}',
            '{"t": "soon", "hands": []}',
            _frame(10000, open_hand(Hand.LEFT)),
        ]
        assert replay(engine, lines) == 1
        assert target.call_names() == ["play"]
        assert engine.frame_count == 3

    def test_main_with_file(self, tmp_path):
        path = tmp_path / "frames.jsonl"
        path.write_text(_frame(10000, open_hand(Hand.LEFT)) + "\n")
        assert main([str(path), "--no-mirror", "--log-level", "WARNING"]) == 0

    def test_main_missing_file(self, tmp_path):
        assert main([str(tmp_path / "absent.jsonl"), "--log-level", "WARNING"]) == 1

    def test_main_unknown_profile(self, tmp_path):
        path = tmp_path / "frames.jsonl"
        path.write_text("")
        assert main([str(path), "--profile", "vimeo", "--log-level", "WARNING"]) == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
