"""
Live coaching session for FormCoach.

A session follows one selected exercise at a time:

    UNINITIALIZED -> INITIALIZING -> READY -> TERMINATED

Every inbound message from the pose source goes through
SessionController.handle_message(), which is the only place session state
changes. Selecting an exercise (again) or ending the session resets all
transient state and cancels speech before anything else happens.

Example:
    controller = SessionController(speech=my_tts, overlay=my_overlay)
    controller.select_exercise("squat")
    controller.handle_message({"type": "initialization", "ready": True})
    controller.handle_message({"type": "keypoints", "data": [...]})
    controller.end_session()
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from .coaches.feedback_arbiter import FeedbackArbiter, FeedbackCandidate
from .coaches.posture_rules import PostureRuleRegistry, get_default_registry, normalize_exercise_id
from .collaborators import Overlay, OverlayState, SpeechEngine
from .config import CoachConfig
from .keypoints import KeypointFrame
from .kinematics import landmarks_moved
from .messages import (
    CounterMessage,
    FeedbackMessage,
    InitializationMessage,
    KeypointsMessage,
    parse_message,
)
from .rep_counter import AngleRepCounter, RepCounterBridge

logger = logging.getLogger(__name__)


class SessionPhase(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    TERMINATED = "terminated"


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass
class SessionState:
    """Transient state of the active exercise. Timestamps are in milliseconds."""

    exercise_id: Optional[str] = None
    ready: bool = False
    rep_count: int = 0
    last_affirming_at: Optional[float] = None
    last_corrective_at: Optional[float] = None
    displayed_message: Optional[str] = None
    displayed_class: Optional[str] = None
    # Last cumulative count reported by the pose source (regressions move it down)
    last_reported_count: int = 0
    # Landmarks of the last keypoint frame, for jitter detection only
    previous_landmarks: Optional[Dict[str, Tuple[float, float]]] = field(default=None, repr=False)

    def reset(self, exercise_id: Optional[str] = None):
        """Return every field to its initial value, in place."""
        self.exercise_id = exercise_id
        self.ready = False
        self.rep_count = 0
        self.last_affirming_at = None
        self.last_corrective_at = None
        self.displayed_message = None
        self.displayed_class = None
        self.last_reported_count = 0
        self.previous_landmarks = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exercise": self.exercise_id,
            "ready": self.ready,
            "rep_count": self.rep_count,
            "displayed_message": self.displayed_message,
            "displayed_class": self.displayed_class,
        }


class SessionController:
    """
    Owns the SessionState and routes pose-source messages through the
    frame adapter, the posture rules, the rep counter bridge and the
    feedback arbiter.

    Messages must be handled one at a time; hosts with several threads
    have to funnel them through a single queue.
    """

    def __init__(
        self,
        speech: SpeechEngine,
        overlay: Optional[Overlay] = None,
        registry: Optional[PostureRuleRegistry] = None,
        config: Optional[CoachConfig] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.config = config or CoachConfig()
        self.speech = speech
        self.overlay = overlay if overlay is not None else OverlayState()
        self.registry = registry if registry is not None else get_default_registry()
        self.clock = clock or _monotonic_ms

        self.state = SessionState()
        self.phase = SessionPhase.UNINITIALIZED
        self.arbiter = FeedbackArbiter(self.state, self.speech, self.overlay, self.config)
        self.rep_bridge = RepCounterBridge(self.state, self.arbiter, self.config)
        self.local_counter: Optional[AngleRepCounter] = None

    def _reset(self, exercise_id: Optional[str]):
        self.speech.stop()
        self.state.reset(exercise_id)
        self.overlay.render(None, None)
        self.local_counter = None
        if exercise_id and self.config.local_rep_counting:
            self.local_counter = AngleRepCounter.for_exercise(exercise_id)

    def select_exercise(self, exercise_id: str):
        """Start (or restart) coaching for an exercise. Always a full reset."""
        exercise_id = normalize_exercise_id(exercise_id)
        if exercise_id not in self.registry:
            logger.info("No posture rules for exercise '%s'; only reps will be tracked", exercise_id)
        self._reset(exercise_id)
        self.phase = SessionPhase.INITIALIZING
        logger.debug("Session initializing for '%s'", exercise_id)

    def end_session(self):
        """Cancel speech, clear all state and stop emitting feedback."""
        if self.phase == SessionPhase.TERMINATED:
            return
        self._reset(None)
        self.phase = SessionPhase.TERMINATED
        logger.debug("Session terminated")

    def handle_message(self, raw: Any, now: Optional[float] = None) -> bool:
        """
        Process one inbound message from the pose source.

        Args:
            raw: JSON text or decoded dict.
            now: Arrival time in ms; defaults to the controller clock.

        Returns:
            True if the message was acted upon, False if it was discarded
            (malformed, or not applicable in the current phase).
        """
        message = parse_message(raw)
        if message is None:
            return False
        if now is None:
            now = self.clock()

        if isinstance(message, InitializationMessage):
            return self._on_initialization(message)

        if self.phase != SessionPhase.READY:
            logger.debug("Ignoring '%s' message while %s", message.type, self.phase.value)
            return False

        if isinstance(message, KeypointsMessage):
            frame = KeypointFrame.from_raw(message.data, self.config.min_confidence)
            self.process_frame(frame, now)
            return True
        if isinstance(message, CounterMessage):
            if self.local_counter is not None:
                logger.debug("Ignoring reported rep count, counting locally")
                return False
            self.rep_bridge.update(message.current_count, now)
            return True
        if isinstance(message, FeedbackMessage):
            text = message.message.strip()
            if not text:
                return False
            self.arbiter.submit(FeedbackCandidate.corrective(text, now))
            return True
        return False

    def _on_initialization(self, message: InitializationMessage) -> bool:
        if self.phase == SessionPhase.INITIALIZING and message.ready:
            self.state.ready = True
            self.phase = SessionPhase.READY
            logger.debug("Pose source ready, coaching '%s'", self.state.exercise_id)
            return True
        if self.phase == SessionPhase.READY and not message.ready:
            # Tracking lost: wait for the next ready signal, keep counts and cooldowns
            self.state.ready = False
            self.phase = SessionPhase.INITIALIZING
            return True
        return False

    def process_frame(self, frame: KeypointFrame, now: float) -> Optional[str]:
        """
        Evaluate one keypoint frame.

        Returns:
            The corrective message produced for this frame (whether or not the
            arbiter let it through), or None.
        """
        points = frame.points()
        jittery = self.config.jitter_threshold is not None and landmarks_moved(
            self.state.previous_landmarks, points, self.config.jitter_threshold
        )
        self.state.previous_landmarks = points

        if self.local_counter is not None:
            self.rep_bridge.update(self.local_counter.update(frame), now)

        if jittery:
            logger.debug("Skipping posture check on unstable frame")
            return None

        message = self.registry.evaluate(self.state.exercise_id, frame)
        if message:
            self.arbiter.submit(FeedbackCandidate.corrective(message, now))
        return message

    def get_status(self) -> Dict[str, Any]:
        """Current session status for UI display."""
        status = self.state.to_dict()
        status["phase"] = self.phase.value
        return status
