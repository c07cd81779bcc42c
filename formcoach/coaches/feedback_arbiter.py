"""
Feedback Arbiter - Rate limiting and dispatch of realtime coaching feedback.

Two feedback classes flow through here:
1. Affirming - positive reinforcement after a counted rep ("Good rep!")
2. Corrective - posture corrections and coach messages from the pose source

Each class has its own cooldown window, measured against the timestamp of
the last emitted candidate of that class. A candidate inside its window is
dropped without touching any state. Accepted candidates update the overlay
and are spoken; corrective ones interrupt whatever is being spoken first.

There are no timers: cooldowns are only compared when a candidate arrives.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..collaborators import Overlay, SpeechEngine
from ..config import AFFIRMING, CORRECTIVE, FEEDBACK_CLASSES, CoachConfig

if TYPE_CHECKING:
    from ..session import SessionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedbackCandidate:
    """A feedback message proposed to the arbiter at `generated_at` (ms)."""

    feedback_class: str
    message: str
    generated_at: float

    def __post_init__(self):
        if self.feedback_class not in FEEDBACK_CLASSES:
            raise ValueError(f"Unknown feedback class '{self.feedback_class}'")

    @classmethod
    def affirming(cls, message: str, generated_at: float) -> "FeedbackCandidate":
        return cls(AFFIRMING, message, generated_at)

    @classmethod
    def corrective(cls, message: str, generated_at: float) -> "FeedbackCandidate":
        return cls(CORRECTIVE, message, generated_at)


class FeedbackArbiter:
    """
    Decides whether a feedback candidate is emitted or suppressed.

    Usage:
        arbiter = FeedbackArbiter(state, speech, overlay)
        arbiter.submit(FeedbackCandidate.corrective("Keep your back straight", now_ms))
    """

    def __init__(
        self,
        state: "SessionState",
        speech: SpeechEngine,
        overlay: Overlay,
        config: Optional[CoachConfig] = None,
    ):
        self.state = state
        self.speech = speech
        self.overlay = overlay
        self.config = config or CoachConfig()

    def _last_emitted_at(self, feedback_class: str) -> Optional[float]:
        if feedback_class == AFFIRMING:
            return self.state.last_affirming_at
        return self.state.last_corrective_at

    def is_cooling_down(self, feedback_class: str, now: float) -> bool:
        """True if a candidate of this class at `now` would be suppressed."""
        last = self._last_emitted_at(feedback_class)
        if last is None:
            return False
        return (now - last) < self.config.cooldown_ms(feedback_class)

    def submit(self, candidate: FeedbackCandidate) -> bool:
        """
        Emit the candidate unless its class is cooling down.

        Returns:
            True if the candidate was emitted, False if it was discarded.
        """
        message = candidate.message.strip() if candidate.message else ""
        if not message:
            return False

        if self.is_cooling_down(candidate.feedback_class, candidate.generated_at):
            logger.debug(
                "Suppressed %s feedback %r (cooldown)", candidate.feedback_class, message
            )
            return False

        if candidate.feedback_class == AFFIRMING:
            self.state.last_affirming_at = candidate.generated_at
        else:
            self.state.last_corrective_at = candidate.generated_at
        self.state.displayed_message = message
        self.state.displayed_class = candidate.feedback_class

        self.overlay.render(message, candidate.feedback_class)
        if candidate.feedback_class == CORRECTIVE:
            # A stale correction must not keep playing over a newer one
            self.speech.stop()
        self.speech.speak(message, rate=self.config.speech_rate, pitch=self.config.speech_pitch)

        logger.debug("Emitted %s feedback %r", candidate.feedback_class, message)
        return True
