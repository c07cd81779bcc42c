import pytest

from formcoach.coaches.feedback_arbiter import FeedbackArbiter, FeedbackCandidate
from formcoach.config import AFFIRMING, CORRECTIVE, CoachConfig
from formcoach.session import SessionState


@pytest.fixture
def state():
    return SessionState(exercise_id="squat")


@pytest.fixture
def arbiter(state, speech, overlay):
    return FeedbackArbiter(state, speech, overlay)


def test_affirming_inside_cooldown_is_discarded(arbiter, state, speech, overlay):
    assert arbiter.submit(FeedbackCandidate.affirming("Good rep!", 1000))
    before = (state.last_affirming_at, state.displayed_message, overlay.as_tuple(), list(speech.calls))

    assert not arbiter.submit(FeedbackCandidate.affirming("Great job!", 3999))
    after = (state.last_affirming_at, state.displayed_message, overlay.as_tuple(), list(speech.calls))
    assert before == after
    assert speech.spoken == ["Good rep!"]


def test_affirming_after_cooldown_is_emitted(arbiter, speech):
    arbiter.submit(FeedbackCandidate.affirming("Good rep!", 0))
    assert arbiter.submit(FeedbackCandidate.affirming("Good rep!", 3000))
    assert speech.spoken == ["Good rep!", "Good rep!"]


def test_corrective_cooldown(arbiter, speech):
    assert arbiter.submit(FeedbackCandidate.corrective("Keep your back straight", 0))
    assert not arbiter.submit(FeedbackCandidate.corrective("Go deeper into the squat", 3999))
    assert arbiter.submit(FeedbackCandidate.corrective("Go deeper into the squat", 4000))
    assert speech.spoken == ["Keep your back straight", "Go deeper into the squat"]


def test_classes_have_independent_cooldowns(arbiter, state, speech, overlay):
    assert arbiter.submit(FeedbackCandidate.corrective("Keep your back straight", 0))
    assert arbiter.submit(FeedbackCandidate.affirming("Good rep!", 10))

    assert speech.spoken == ["Keep your back straight", "Good rep!"]
    assert state.last_corrective_at == 0
    assert state.last_affirming_at == 10
    assert (state.displayed_message, state.displayed_class) == ("Good rep!", AFFIRMING)
    assert overlay.as_tuple() == ("Good rep!", AFFIRMING)


def test_corrective_interrupts_speech_first(arbiter, speech):
    arbiter.submit(FeedbackCandidate.corrective("Keep your back straight", 0))
    assert speech.calls == [("stop",), ("speak", "Keep your back straight")]


def test_affirming_does_not_interrupt_speech(arbiter, speech):
    arbiter.submit(FeedbackCandidate.affirming("Good rep!", 0))
    assert speech.stop_count == 0


def test_overlay_tracks_latest_emission(arbiter, overlay):
    arbiter.submit(FeedbackCandidate.affirming("Good rep!", 0))
    arbiter.submit(FeedbackCandidate.corrective("Keep your back straight", 5))
    assert overlay.as_tuple() == ("Keep your back straight", CORRECTIVE)


def test_blank_message_is_discarded(arbiter, state, speech):
    assert not arbiter.submit(FeedbackCandidate.corrective("   ", 0))
    assert state.last_corrective_at is None
    assert speech.calls == []


def test_custom_cooldowns(state, speech, overlay):
    arbiter = FeedbackArbiter(state, speech, overlay, CoachConfig(affirming_cooldown_ms=100))
    arbiter.submit(FeedbackCandidate.affirming("Good rep!", 0))
    assert arbiter.submit(FeedbackCandidate.affirming("Good rep!", 100))


def test_unknown_feedback_class_is_rejected():
    with pytest.raises(ValueError):
        FeedbackCandidate("neutral", "hello", 0)
