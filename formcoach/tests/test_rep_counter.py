import pytest

from formcoach.coaches.feedback_arbiter import FeedbackArbiter
from formcoach.keypoints import KeypointFrame
from formcoach.rep_counter import AngleRepCounter, RepCounterBridge
from formcoach.session import SessionState

from poses import GOOD_SQUAT, STANDING, landmarks


@pytest.fixture
def state():
    return SessionState(exercise_id="squat")


@pytest.fixture
def bridge(state, speech, overlay):
    return RepCounterBridge(state, FeedbackArbiter(state, speech, overlay))


def test_count_sequence_with_regression(bridge, state, speech):
    increases = [bridge.update(count, now=i * 5000) for i, count in enumerate([0, 1, 1, 2, 1, 2])]

    assert increases == [False, True, False, True, False, True]
    assert speech.spoken == ["Good rep!"] * 3
    assert state.rep_count == 3
    assert state.last_reported_count == 2


def test_reset_to_zero_is_silent(bridge, state, speech):
    bridge.update(4, now=0)
    speech.calls.clear()

    assert not bridge.update(0, now=10000)
    assert speech.calls == []
    assert state.rep_count == 4
    assert state.last_reported_count == 0


def test_jump_counts_all_reps_with_one_message(bridge, state, speech):
    assert bridge.update(3, now=0)
    assert state.rep_count == 3
    assert speech.spoken == ["Good rep!"]


def test_reps_inside_cooldown_still_count(bridge, state, speech):
    bridge.update(1, now=0)
    bridge.update(2, now=500)
    assert state.rep_count == 2
    assert speech.spoken == ["Good rep!"]


def frame(points):
    return KeypointFrame.from_raw(landmarks(points))


def test_angle_rep_counter_squat():
    counter = AngleRepCounter.for_exercise("squat")
    assert counter.update(frame(GOOD_SQUAT)) == 0  # not armed until standing
    assert counter.update(frame(STANDING)) == 0
    assert counter.update(frame(GOOD_SQUAT)) == 1
    assert counter.update(frame(GOOD_SQUAT)) == 1
    assert counter.update(frame(STANDING)) == 1
    assert counter.update(frame(GOOD_SQUAT)) == 2


def test_angle_rep_counter_ignores_missing_landmarks():
    counter = AngleRepCounter.for_exercise("squat")
    counter.update(frame(STANDING))
    partial = {k: v for k, v in GOOD_SQUAT.items() if k != "left_ankle"}
    assert counter.update(frame(partial)) == 0
    assert counter.armed


def test_angle_rep_counter_unknown_exercise():
    assert AngleRepCounter.for_exercise("plank") is None
    assert AngleRepCounter.for_exercise(None) is None
