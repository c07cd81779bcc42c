from formcoach.keypoints import JOINT_INDICES, KeypointFrame, normalize_name


def test_filters_by_confidence():
    frame = KeypointFrame.from_raw(
        [
            {"name": "left_hip", "x": 0.1, "y": 0.2, "score": 0.9},
            {"name": "left_knee", "x": 0.1, "y": 0.4, "score": 0.5},
            {"name": "left_ankle", "x": 0.1, "y": 0.6, "score": 0.51},
        ]
    )
    assert frame.get("left_hip").x == 0.1
    assert frame.get("left_knee") is None
    assert frame.get("left_ankle") is not None
    assert len(frame) == 2


def test_missing_landmark_is_not_found():
    frame = KeypointFrame.from_raw([{"name": "nose", "x": 0.5, "y": 0.1, "score": 0.99}])
    assert frame.get("left_hip") is None
    assert "left_hip" not in frame
    assert not frame.has_all(["nose", "left_hip"])


def test_custom_threshold():
    raw = [{"name": "nose", "x": 0.5, "y": 0.1, "score": 0.7}]
    assert KeypointFrame.from_raw(raw, min_confidence=0.8).get("nose") is None
    assert KeypointFrame.from_raw(raw, min_confidence=0.3).get("nose") is not None


def test_names_are_normalized():
    frame = KeypointFrame.from_raw([{"name": "Left Hip", "x": 0, "y": 0, "score": 1.0}])
    assert frame.get("left_hip") is not None
    assert frame.get("LEFT_HIP") is not None
    assert normalize_name("right-foot_index") == "right_foot_index"


def test_unnamed_landmarks_use_index_order():
    raw = [{"x": i / 100, "y": 0.5, "visibility": 0.9} for i in range(33)]
    frame = KeypointFrame.from_raw(raw)
    assert frame.get("left_knee").x == JOINT_INDICES["left_knee"] / 100

    explicit = KeypointFrame.from_raw([{"index": 25, "x": 0.3, "y": 0.3, "score": 0.9}])
    assert explicit.get("left_knee").x == 0.3


def test_unusable_entries_are_dropped():
    frame = KeypointFrame.from_raw(
        [
            "not a landmark",
            {"name": "left_hip", "y": 0.2, "score": 0.9},
            {"name": "left_knee", "x": "abc", "y": 0.2, "score": 0.9},
            {"name": "left_ankle", "x": float("nan"), "y": 0.2, "score": 0.9},
            {"name": "left_shoulder", "x": 0.1, "y": 0.2},
            {"name": "nose", "x": 0.1, "y": 0.2, "score": 0.9},
        ]
    )
    assert list(frame) == ["nose"]


def test_points_snapshot():
    frame = KeypointFrame.from_raw([{"name": "nose", "x": 0.5, "y": 0.1, "score": 0.9}])
    assert frame.points() == {"nose": (0.5, 0.1)}


def test_boolean_index_is_not_a_position():
    frame = KeypointFrame.from_raw([{"index": True, "x": 0.3, "y": 0.3, "score": 0.9}])
    assert len(frame) == 0
    assert frame.get("left_eye_inner") is None


def test_blank_name_falls_back_to_index():
    frame = KeypointFrame.from_raw(
        [
            {"name": "--", "index": 25, "x": 0.3, "y": 0.3, "score": 0.9},
            {"name": "   ", "index": 26, "x": 0.4, "y": 0.3, "score": 0.9},
        ]
    )
    assert sorted(frame) == ["left_knee", "right_knee"]
    assert "" not in frame.points()
